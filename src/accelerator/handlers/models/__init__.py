"""Typed environment of the Lambda handlers."""
