"""Audit logging for custom order changes."""
