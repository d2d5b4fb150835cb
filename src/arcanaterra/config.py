from __future__ import annotations

import logging
from importlib.resources import files as resource_files
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from .combat.constants import CombatConstants
from .errors import ArcanaTerraError, ConfigError

logger = logging.getLogger(__name__)

DEFAULT_RESOURCE = "combat.yaml"


def _read_yaml(path: Optional[Union[str, Path]]) -> Dict[str, Any]:
    if path is None:
        text = resource_files("arcanaterra.resources").joinpath(DEFAULT_RESOURCE).read_text(encoding="utf-8")
        source = f"<bundled {DEFAULT_RESOURCE}>"
    else:
        p = Path(path)
        if not p.exists():
            raise ConfigError(f"Config file not found: {p}")
        text = p.read_text(encoding="utf-8")
        source = str(p)
    try:
        raw = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Malformed YAML in {source}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"{source} must contain a mapping at the top level")
    # Constants may sit under a 'combat' section or at the top level
    section = raw.get("combat", raw)
    if not isinstance(section, dict):
        raise ConfigError(f"{source}: 'combat' must be a mapping")
    logger.debug("Loaded combat config from %s", source)
    return dict(section)


def load_combat_constants(
    path: Optional[Union[str, Path]] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> CombatConstants:
    """Build the read-only CombatConstants for this process.

    Values come from ``path`` (or the bundled defaults) with ``overrides``
    layered on top. Keys missing from both fall back to the dataclass defaults.

    Raises:
        ConfigError: unreadable file, unknown keys, or out-of-range values.
    """
    values = _read_yaml(path)
    if overrides:
        values.update(overrides)

    unknown = sorted(set(values) - CombatConstants.field_names())
    if unknown:
        raise ConfigError(f"Unknown combat config keys: {', '.join(unknown)}")
    try:
        constants = CombatConstants(**values)
    except (ArcanaTerraError, TypeError, ValueError) as e:
        raise ConfigError(f"Invalid combat config: {e}") from e
    logger.info(
        "Combat constants: crit x%.2f @ %.0f%%, max targets %d",
        constants.crit_multiplier,
        constants.base_crit_chance * 100,
        constants.max_skill_targets,
    )
    return constants


__all__ = ["load_combat_constants", "DEFAULT_RESOURCE"]
