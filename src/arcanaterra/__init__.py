"""Arcana Terra: rules and static data for a turn-based party RPG."""

from .config import load_combat_constants
from .errors import (
    ArcanaTerraError,
    CombatError,
    ConfigError,
    DataValidationError,
    InvalidArgument,
    InvalidPhaseTransition,
    SkillOnCooldown,
)
from .rng import RNG

__version__ = "0.1.0"

__all__ = [
    "load_combat_constants",
    "ArcanaTerraError",
    "CombatError",
    "ConfigError",
    "DataValidationError",
    "InvalidArgument",
    "InvalidPhaseTransition",
    "SkillOnCooldown",
    "RNG",
    "__version__",
]
