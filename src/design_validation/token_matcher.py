"""Nearest design token lookup.

Both lookups are first-minimum: when two candidates are equally close the
one that comes first in iteration order wins, so callers must pass tokens
in a stable order for reproducible results.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Generic, TypeVar

import structlog

from .color import ColorParseError, color_distance, parse_color
from .models import DesignColor

logger = structlog.get_logger()

T = TypeVar("T")


@dataclass(frozen=True)
class TokenMatch(Generic[T]):
    """Closest token to an actual value and how far off the value is."""

    token: T
    expected: float | str
    deviation: float


def nearest(
    actual: float,
    candidates: Iterable[T],
    key: Callable[[T], float],
) -> TokenMatch[T] | None:
    """Find the candidate whose ``key`` is closest to ``actual``.

    Returns None for an empty collection.
    """
    best: TokenMatch[T] | None = None
    for candidate in candidates:
        value = key(candidate)
        diff = abs(actual - value)
        if best is None or diff < best.deviation:
            best = TokenMatch(token=candidate, expected=value, deviation=diff)
    return best


def find_nearest_value(
    actual: float,
    candidates: Iterable[T],
    key: Callable[[T], float],
    tolerance: float,
) -> TokenMatch[T] | None:
    """Nearest numeric token, or None when within tolerance (or no candidates)."""
    match = nearest(actual, candidates, key)
    if match is None or match.deviation <= tolerance:
        return None
    return match


def find_nearest_color(
    actual: str,
    tokens: Iterable[DesignColor],
    tolerance: float,
) -> TokenMatch[DesignColor] | None:
    """Nearest color token by CIEDE2000, or None when within tolerance.

    An unparseable actual color yields None; unparseable token colors are
    skipped.
    """
    try:
        parse_color(actual)
    except ColorParseError:
        logger.debug("Skipping unparseable color", color=actual)
        return None

    best: TokenMatch[DesignColor] | None = None
    for token in tokens:
        try:
            distance = color_distance(actual, token.hex)
        except ColorParseError:
            logger.debug("Skipping unparseable color token", token=token.name, hex=token.hex)
            continue
        if best is None or distance < best.deviation:
            best = TokenMatch(token=token, expected=token.hex, deviation=distance)

    if best is None or best.deviation <= tolerance:
        return None
    return best
