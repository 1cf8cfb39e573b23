"""Interactive inspect sessions for re-targeting a fill or importing a template."""
