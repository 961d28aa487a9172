"""Load the policy limits mapping from a JSON or YAML file.

The file maps policy names to raw policy configuration, for example::

    request_priority:
      period: 86400
      default_value: 10
      values:
        5: 15
        15: 20
        100: 25

Policies are only validated when checked, so a file with one broken policy
still serves the others.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from throttling.core.errors import ConfigurationError

logger = logging.getLogger(__name__)

_YAML_SUFFIXES = {".yaml", ".yml"}


def load_limits(path: str | Path) -> dict[str, Any]:
    """Read a limits file.

    Args:
        path: Location of a ``.json``, ``.yaml`` or ``.yml`` file.

    Returns:
        Mapping of policy name to raw policy configuration.

    Raises:
        ConfigurationError: If the file is missing, unparsable, of an
            unknown type, or not a mapping at the top level.
    """
    file_path = Path(path)
    suffix = file_path.suffix.lower()
    if suffix != ".json" and suffix not in _YAML_SUFFIXES:
        raise ConfigurationError(
            code="limits_file_unsupported",
            message=f"Unsupported limits file type '{suffix}' (use .json, .yaml or .yml)",
            details={"path": str(file_path)},
        )

    try:
        with file_path.open("r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) if suffix in _YAML_SUFFIXES else json.load(f)
    except OSError as exc:
        raise ConfigurationError(
            code="limits_file_unreadable",
            message=f"Cannot read limits file: {exc}",
            details={"path": str(file_path)},
        ) from exc
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise ConfigurationError(
            code="limits_file_invalid",
            message=f"Cannot parse limits file: {exc}",
            details={"path": str(file_path)},
        ) from exc

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigurationError(
            code="limits_file_invalid",
            message="Limits file must contain a mapping of policy names",
            details={"path": str(file_path)},
        )

    limits = {str(name): config for name, config in raw.items()}
    logger.info("limits.loaded", extra={"path": str(file_path), "policies": sorted(limits)})
    return limits
