"""Domain layer: models and services grouped by bounded context."""
