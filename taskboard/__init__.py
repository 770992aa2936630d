"""Taskboard: task management service with queued assignment notifications."""

__version__ = "1.0.0"
