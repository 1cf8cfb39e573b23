"""Fill execution against live page elements."""
