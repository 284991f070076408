"""
Ownership checks for mutations on owned records.

This runs inside the handler rather than as middleware because the record
has to be fetched before its owner is known. Existence is checked first,
so a missing record is a 404 for every caller and a foreign one is a 403.
"""

from __future__ import annotations

from typing import Awaitable, Callable, TypeVar

from scribe.auth.context import AuthContext
from scribe.core.errors import ForbiddenError, NotFoundError


T = TypeVar("T")


async def ensure_owner(
    fetch: Callable[[int], Awaitable[T | None]],
    resource_id: int,
    ctx: AuthContext,
    *,
    owner_of: Callable[[T], int] = lambda record: record.owner_id,
    label: str = "Post",
    action: str = "modify",
) -> T:
    """
    Re-read a record and confirm the caller owns it.

    Returns the fresh record so the caller mutates what it just checked.

    Raises:
        NotFoundError: no record with this id
        ForbiddenError: the record belongs to someone else
    """
    record = await fetch(resource_id)
    if record is None:
        raise NotFoundError(f"{label} not found")
    if not ctx.owns(owner_of(record)):
        raise ForbiddenError(f"Not authorized to {action} this {label.lower()}")
    return record
