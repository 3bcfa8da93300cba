"""pydantic-settings integration: feed envfill's coercion into BaseSettings.

``PrefixedEnvSettingsSource`` replaces (or complements) the stock
``EnvSettingsSource`` with envfill's naming rule (``PREFIX_FIELD`` and
``PREFIX_NESTED_FIELD``) and its strict, YAML-lite coercion.

Usage::

    class AppSettings(BaseSettings):
        port: int = 8000
        hosts: list[str] = []

        @classmethod
        def settings_customise_sources(cls, settings_cls, init_settings, *_):
            return (init_settings, PrefixedEnvSettingsSource(settings_cls, "app"))
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from envfill.config.models import LoadOptions
from envfill.services.loader import EnvLoader


class PrefixedEnvSettingsSource(PydanticBaseSettingsSource):
    """Read settings values from ``PREFIX_*`` environment variables.

    The environment is snapshotted and coerced once, at construction;
    coercion errors surface immediately as envfill errors.
    """

    def __init__(
        self,
        settings_cls: type[BaseSettings],
        prefix: str,
        *,
        environ: Mapping[str, str] | None = None,
        options: LoadOptions | None = None,
    ) -> None:
        super().__init__(settings_cls)
        self._loader = EnvLoader(prefix, environ=environ, options=options)
        self._data: dict[str, Any] = self._loader.collect(settings_cls)

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, isinstance(val, dict | list)

    def __call__(self) -> dict[str, Any]:
        """Return the coerced overrides for Pydantic to merge."""
        return self._data
