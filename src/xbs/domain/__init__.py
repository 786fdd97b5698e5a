"""Domain layer - sync entities, errors and services."""
