"""Shared pytest fixtures and record models for envfill tests."""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path

import pytest
from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Record models
# ---------------------------------------------------------------------------


class Flat(BaseModel):
    a: int = 0
    b: int = 0
    c: int = 0


class Leaf(BaseModel):
    a: int = 0
    b: int = 0
    c: int = 0


class Middle(BaseModel):
    a: int = 0
    b: Leaf = Field(default_factory=Leaf)
    c: int = 0


class Outer(BaseModel):
    a: int = 0
    b: int = 0
    c: Middle = Field(default_factory=Middle)


class Color(StrEnum):
    RED = "red"
    GREEN = "green"


class Mixed(BaseModel):
    """One field per supported kind."""

    flag: bool = False
    count: int = 1
    ratio: float = 0.5
    name: str = "hello"
    color: Color = Color.RED
    path: Path = Path("/tmp/default")
    nickname: str | None = "nick"
    limit: int | None = None
    ports: list[int] = Field(default_factory=list)
    tags: set[str] = Field(default_factory=set)
    pair: tuple[int, bool] = (0, False)
    labels: dict[str, int] = Field(default_factory=dict)


class Service(BaseModel):
    model_config = {"frozen": True}

    host: str = "localhost"
    port: int = Field(default=8000, ge=1, le=65535)
    replicas: list[int] = Field(default_factory=lambda: [1])


class App(BaseModel):
    model_config = {"frozen": True}

    debug: bool = False
    name: str = "app"
    service: Service = Field(default_factory=Service)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def app() -> App:
    return App()


@pytest.fixture
def mixed() -> Mixed:
    return Mixed()


@pytest.fixture
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove any PFX_/APP_ variables inherited from the outer shell."""
    import os

    for key in list(os.environ):
        if key.upper().startswith(("PFX_", "APP_")):
            monkeypatch.delenv(key, raising=False)
