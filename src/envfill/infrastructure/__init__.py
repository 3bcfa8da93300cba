"""Infrastructure layer: access to the process environment."""
