"""Hit count to decision mapping, with optional graded values."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Union

Number = Union[int, float]


@dataclass(frozen=True)
class Decision:
    """Outcome for one level.

    Attributes:
        allow: Whether the level lets the action through.
        value: Graded value for tiered levels, None in plain boolean mode.
    """

    allow: bool
    value: Number | None = None


def resolve_tier(
    count: int,
    limit: int | None,
    default_value: Number | None,
    tiers: Sequence[tuple[int, Number]],
) -> Decision:
    """Resolve a level's decision from the hits already counted.

    Without tiers the level allows while ``count < limit``.

    With tiers, the value bound to the highest threshold not above ``count``
    applies, and ``default_value`` applies below the lowest threshold. A
    level without a default value is bounded on both sides: it denies below
    the lowest threshold and once ``count`` reaches ``limit`` (the highest
    threshold unless configured otherwise).

    Args:
        count: Hits recorded in the current window before this one.
        limit: Configured level limit, None for tier-only levels.
        default_value: Value below the lowest threshold, if any.
        tiers: ``(threshold, value)`` pairs in ascending threshold order.
    """
    if not tiers:
        return Decision(allow=limit is not None and count < limit)

    bound = tiers[-1][0] if limit is None else limit
    if default_value is None and count >= bound:
        return Decision(allow=False)

    last_match = default_value
    for threshold, value in tiers:
        if threshold > count:
            break
        last_match = value

    if last_match is None:
        return Decision(allow=False)
    return Decision(allow=True, value=last_match)
