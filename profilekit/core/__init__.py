"""Core layer: models, configuration, services and orchestration."""
