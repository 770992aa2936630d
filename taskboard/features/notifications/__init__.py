"""Task assignment notifications: dispatch, delivery, retry policy and fallback."""
