"""Domain layer - entities, errors, and capability protocols."""
