"""Command line interface for taskboard management."""
