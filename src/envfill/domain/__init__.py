"""Domain layer: kinds, shape introspection, and value coercion.

This layer depends only on stdlib, pydantic, and ruamel.yaml.
It must never import from services, infrastructure, or config.
"""
