"""Core data contracts and error kinds."""
