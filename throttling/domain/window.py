"""Fixed-window arithmetic and storage key naming."""

from __future__ import annotations

import math
from dataclasses import dataclass

KEY_PREFIX = "throttle"


@dataclass(frozen=True)
class Window:
    """Counter location for one level of one check.

    Attributes:
        key: Storage key, unique per policy/identity/level/window.
        bucket: Index of the fixed window containing ``now``.
        expires_in: Seconds until that window ends (1..period).
    """

    key: str
    bucket: int
    expires_in: int


def compute_window(
    policy_name: str,
    check_type: str,
    value: object,
    level_label: str,
    now: float,
    period: int,
) -> Window:
    """Locate the counter for ``now`` within a window of ``period`` seconds.

    >>> compute_window("foo", "ip", "127.0.0.1", "global", 1334261569, 86400)
    Window(key='throttle:foo:ip:127.0.0.1:global:15442', bucket=15442, expires_in=13631)
    """
    seconds = math.floor(now)
    bucket = seconds // period
    key = ":".join([KEY_PREFIX, policy_name, check_type, str(value), level_label, str(bucket)])
    return Window(key=key, bucket=bucket, expires_in=period - seconds % period)
