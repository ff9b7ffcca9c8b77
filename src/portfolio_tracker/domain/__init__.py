"""Domain layer: persisted models and derived views."""
