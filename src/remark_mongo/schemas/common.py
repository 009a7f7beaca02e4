"""Shared Pydantic building blocks for RPC parameters."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, model_validator


class PositionalParams(BaseModel):
    """Parameters that may also arrive positionally.

    The Remark42 RPC client sends a single argument as the bare JSON value and
    several arguments as a JSON array. Both forms are mapped onto the model's
    fields in declaration order, so handlers always receive named fields.
    """

    @model_validator(mode="before")
    @classmethod
    def _from_positional(cls, data: Any) -> Any:
        names = list(cls.model_fields)
        if isinstance(data, list | tuple):
            if len(data) > len(names):
                raise ValueError(f"expected at most {len(names)} parameters, got {len(data)}")
            return dict(zip(names, data, strict=False))
        if not isinstance(data, dict) and len(names) == 1:
            return {names[0]: data}
        return data


def blank_to_none(value: Any) -> Any:
    """Treat empty strings as missing values; Go sends zero values for unset fields."""
    if isinstance(value, str) and not value.strip():
        return None
    return value
