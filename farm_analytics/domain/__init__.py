"""Domain layer: entities, repository interfaces, calculations and use cases."""
