"""Status channel."""
