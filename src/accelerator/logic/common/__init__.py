"""Services shared by every business service."""
