"""Users: the people tasks are assigned to."""
