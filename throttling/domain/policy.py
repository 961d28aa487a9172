"""Policy model: raw limits configuration normalized into ordered levels.

A policy entry is either flat::

    {"limit": 5, "period": 2}

or nested, one sub-config per level label::

    {"daily": {"limit": 100, "period": 86400}, "burst": {"limit": 5, "period": 2}}

Tiered levels add ``values`` (threshold -> value) and an optional
``default_value``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from throttling.core.errors import ConfigurationError
from throttling.domain.tiers import Number

DEFAULT_LEVEL_LABEL = "global"

_FLAT_KEYS = frozenset({"limit", "period", "values", "default_value"})


@dataclass(frozen=True)
class Level:
    """One fixed-window counter of a policy.

    A level is counted when it has a ``limit`` or a tier table; a tier table
    alone is enough, and its highest threshold then bounds levels without a
    ``default_value``. A level with neither always passes and never touches
    storage.
    """

    label: str
    limit: int | None
    period: int | None
    default_value: Number | None = None
    tiers: tuple[tuple[int, Number], ...] = field(default=())

    @property
    def counted(self) -> bool:
        return self.limit is not None or bool(self.tiers)


@dataclass(frozen=True)
class Policy:
    name: str
    levels: tuple[Level, ...]


def _as_int(raw: Any) -> int | None:
    """Coerce ints, integral floats and integer strings; None otherwise."""
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float) and raw.is_integer():
        return int(raw)
    if isinstance(raw, str):
        try:
            return int(raw.strip())
        except ValueError:
            return None
    return None


def _as_number(raw: Any) -> Number | None:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return None
    return raw


def _invalid(policy: str, label: str, field_name: str, actual: Any, message: str) -> ConfigurationError:
    return ConfigurationError(
        code="invalid_limits",
        message=f"Policy '{policy}', level '{label}': {message}",
        details={"policy": policy, "level": label, "field": field_name, "actual_value": actual},
    )


def _parse_tiers(policy: str, label: str, raw: Any) -> tuple[tuple[int, Number], ...]:
    if raw is None:
        return ()
    if not isinstance(raw, Mapping):
        raise _invalid(policy, label, "values", raw, "values must map thresholds to numbers")

    pairs: list[tuple[int, Number]] = []
    for raw_threshold, raw_value in raw.items():
        threshold = _as_int(raw_threshold)
        if threshold is None or threshold < 0:
            raise _invalid(policy, label, "values", raw_threshold, "tier threshold must be a non-negative integer")
        value = _as_number(raw_value)
        if value is None:
            raise _invalid(policy, label, "values", raw_value, "tier value must be a number")
        pairs.append((threshold, value))

    pairs.sort(key=lambda pair: pair[0])
    for (previous, _), (current, _) in zip(pairs, pairs[1:]):
        if previous == current:
            raise _invalid(policy, label, "values", current, "tier thresholds must be unique")
    return tuple(pairs)


def _build_level(policy: str, label: str, raw: Any) -> Level:
    if not isinstance(raw, Mapping):
        raise _invalid(policy, label, "level", raw, "level configuration must be a mapping")

    tiers = _parse_tiers(policy, label, raw.get("values"))

    default_value = None
    if raw.get("default_value") is not None:
        default_value = _as_number(raw["default_value"])
        if default_value is None:
            raise _invalid(policy, label, "default_value", raw["default_value"], "default_value must be a number")

    limit = None
    if raw.get("limit") is not None:
        limit = _as_int(raw["limit"])
        if limit is None or limit < 0:
            raise _invalid(policy, label, "limit", raw["limit"], "limit must be a non-negative integer")

    period = None
    if limit is not None or tiers:
        period = _as_int(raw.get("period"))
        if period is None or period <= 0:
            raise _invalid(policy, label, "period", raw.get("period"), "period must be a positive integer")

    return Level(label=label, limit=limit, period=period, default_value=default_value, tiers=tiers)


def normalize_policy(name: str, raw: Mapping[str, Any]) -> Policy:
    """Build a validated Policy from its raw configuration.

    Levels come out sorted by ascending period; declaration order breaks ties.

    Raises:
        ConfigurationError: If any level is malformed, or a limited level has
            a missing, non-positive or non-numeric period.
    """
    if not isinstance(raw, Mapping):
        raise ConfigurationError(
            code="invalid_limits",
            message=f"Policy '{name}' configuration must be a mapping",
            details={"policy": name, "actual_value": raw},
        )

    if _FLAT_KEYS.intersection(raw):
        levels = [_build_level(name, DEFAULT_LEVEL_LABEL, raw)]
    else:
        levels = [_build_level(name, str(label), sub) for label, sub in raw.items()]

    levels.sort(key=lambda level: level.period or 0)
    return Policy(name=name, levels=tuple(levels))
