"""Service layer: the load operation and its result envelope.

Services may import from domain, infrastructure, and config.models.
"""
