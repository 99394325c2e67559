"""Use cases grouped by entity."""
