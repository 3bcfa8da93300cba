"""Configuration: load options, logging, and the pydantic-settings source."""
