"""Persistent template storage."""
