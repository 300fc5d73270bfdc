"""Shared helpers."""

import logging
from collections.abc import Iterator, Sequence
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def chunked(items: Sequence[T], size: int, label: str = "items") -> Iterator[list[T]]:
    """Yield consecutive slices of at most ``size`` items.

    Args:
        items: Items to split up.
        size: Maximum slice length, at least 1.
        label: What the items are, for debug logging (e.g. "imported words").
    """
    if size < 1:
        raise ValueError("size must be at least 1")
    for start in range(0, len(items), size):
        chunk = list(items[start : start + size])
        logger.debug("Writing %s %d-%d of %d", label, start + 1, start + len(chunk), len(items))
        yield chunk
