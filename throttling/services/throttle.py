"""Check engine deciding whether an identity may act under a policy.

A ThrottleContext owns everything a check needs (limits mapping, counter
store, clock, on/off switch). Tests and applications build their own context
instead of mutating module-level state; replacing the whole limits mapping
between checks is supported through ``replace_limits``.

For each counted level (one with a limit or a tier table), in ascending
period order, a check:
- locates the counter for the current window,
- fetches the hits counted so far,
- resolves the level decision (boolean or graded value),
- stops at the first denial, otherwise records the hit unless the level has
  reached its configured limit.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Mapping

from throttling.adapters.storage.base import AbstractCounterStore
from throttling.adapters.storage.factory import create_counter_store
from throttling.core.config import Settings, settings as default_settings
from throttling.core.errors import ConfigurationError
from throttling.core.limits_loader import load_limits
from throttling.core.logging import hash_identity
from throttling.domain.policy import Policy, normalize_policy
from throttling.domain.tiers import Number, resolve_tier
from throttling.domain.window import compute_window

logger = logging.getLogger(__name__)


class ThrottleContext:
    """Limits, counter store and clock shared by all checks."""

    def __init__(
        self,
        limits: Mapping[str, Any],
        store: AbstractCounterStore,
        *,
        clock: Callable[[], float] = time.time,
        enabled: bool = True,
    ) -> None:
        """Initialize the context.

        Args:
            limits: Mapping of policy name to raw policy configuration.
            store: Counter store backend.
            clock: Time source function returning UNIX time in seconds.
            enabled: When False every check passes without storage access.
        """
        self._limits: Mapping[str, Any] = dict(limits)
        self.store = store
        self.clock = clock
        self.enabled = enabled

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "ThrottleContext":
        """Build a context from THROTTLE_* / REDIS_* settings."""
        cfg = settings or default_settings
        limits = load_limits(cfg.throttle.limits_file) if cfg.throttle.limits_file else {}
        return cls(limits, create_counter_store(cfg), enabled=cfg.throttle.enabled)

    @property
    def limits(self) -> Mapping[str, Any]:
        return self._limits

    def replace_limits(self, limits: Mapping[str, Any]) -> None:
        """Swap the whole limits mapping; checks in flight keep the old one."""
        self._limits = dict(limits)
        logger.info("throttle.limits_replaced", extra={"policies": sorted(self._limits)})

    def policy(self, name: str) -> Policy:
        """Normalize the named policy from the current limits.

        Raises:
            ConfigurationError: If the policy is unknown or invalid.
        """
        limits = self._limits
        if name not in limits:
            raise ConfigurationError(
                code="unknown_policy",
                message=f"No limits configured for policy '{name}'",
                details={"policy": name},
            )
        return normalize_policy(name, limits[name])

    def for_policy(self, name: str) -> "Throttle":
        return Throttle(name, self)


class Throttle:
    """Checks identities against one named policy."""

    def __init__(self, name: str, context: ThrottleContext) -> None:
        self.name = name
        self.context = context

    def check(self, check_type: str, value: object) -> bool | Number:
        """Record a hit for ``value`` and decide whether it may proceed.

        Args:
            check_type: Identity kind, e.g. ``ip`` or ``user_id``.
            value: Identity value; None always passes.

        Returns:
            False when any level denies. Otherwise the graded value of the
            last tiered level, or True when no level is tiered.

        Raises:
            ConfigurationError: If the policy is unknown or invalid.
            StorageError: If the counter store fails.
        """
        ctx = self.context
        if not ctx.enabled or value is None:
            return True

        policy = ctx.policy(self.name)
        now = ctx.clock()
        result: Number | None = None

        for level in policy.levels:
            if not level.counted:
                continue

            window = compute_window(policy.name, check_type, value, level.label, now, level.period)
            count = ctx.store.fetch(window.key, expires_in=window.expires_in)
            decision = resolve_tier(count, level.limit, level.default_value, level.tiers)

            if not decision.allow:
                logger.info(
                    "throttle.denied",
                    extra={
                        "policy": policy.name,
                        "level": level.label,
                        "check_type": check_type,
                        "identity_hash": hash_identity(value),
                        "count": count,
                        "limit": level.limit,
                        "period_s": level.period,
                    },
                )
                return False

            if level.limit is None or count < level.limit:
                ctx.store.increment(window.key)
            if decision.value is not None:
                result = decision.value

        logger.debug(
            "throttle.allowed",
            extra={
                "policy": policy.name,
                "check_type": check_type,
                "identity_hash": hash_identity(value),
                "value": result,
            },
        )
        return True if result is None else result

    def check_ip(self, ip: str | None) -> bool | Number:
        return self.check("ip", ip)

    def check_user_id(self, user_id: object) -> bool | Number:
        return self.check("user_id", user_id)
