"""Infrastructure layer - stores, providers, telemetry, middleware."""
