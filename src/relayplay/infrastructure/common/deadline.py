"""Deadline helper shared by every network call on a decision path.

``asyncio.wait_for`` cancels the awaited task when the deadline passes,
which unwinds the underlying httpx request and releases its connection.
httpx's own ``timeout=`` only bounds each phase (connect, read, ...),
not the whole call.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

import structlog

log = structlog.get_logger(__name__)

T = TypeVar("T")


async def with_deadline(aw: Awaitable[T], seconds: float, *, label: str) -> T:
    """Await *aw*, cancelling it if *seconds* elapse first.

    Raises ``asyncio.TimeoutError`` on expiry, after the operation has
    been cancelled.
    """
    try:
        return await asyncio.wait_for(aw, timeout=seconds)
    except asyncio.TimeoutError:
        log.debug("deadline_expired", label=label, seconds=seconds)
        raise
