"""Error model, configuration and logging."""
