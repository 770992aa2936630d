"""Click command groups registered on the ``taskboard`` CLI."""
