"""
Success envelopes.

Every successful response is ``{"status": "success", "data": {...}}``;
deletions answer ``{"status": "success", "message": ...}`` instead.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


def _jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    return value


def success(**data: Any) -> dict[str, Any]:
    return {"status": "success", "data": {key: _jsonable(value) for key, value in data.items()}}


def deleted(message: str) -> dict[str, Any]:
    return {"status": "success", "message": message}
