"""Tasks: assignable work items that trigger email notifications."""
