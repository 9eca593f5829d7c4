"""Observability, error and REST helpers shared by every handler."""
