"""Pydantic configuration models with code-baked defaults."""

from __future__ import annotations

from pydantic import BaseModel, Field


class LoadOptions(BaseModel):
    """Knobs for a load call, frozen after construction.

    Attributes:
        separator: Joins the prefix and each field name in a key.
        empty_as_none: An empty value sets an optional field to None.
        case_insensitive: Fold environment keys to upper case before lookup.
    """

    model_config = {"frozen": True}

    separator: str = Field(default="_", min_length=1)
    empty_as_none: bool = True
    case_insensitive: bool = True
