"""Read-only queue views plus administrative retry and flush."""
