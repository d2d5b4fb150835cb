"""Combat constants and the closed tag sets shared by the combat core.

Everything here is read-only. ``CombatConstants`` is built once (see
:func:`arcanaterra.config.load_combat_constants`) and handed to the calculator,
targeting and status functions by reference; ``DEFAULTS`` is the stock value.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Dict

from ..errors import InvalidArgument

# Damage defaults
CRITICAL_DAMAGE_MULTIPLIER: float = 1.5
BASE_CRIT_CHANCE: float = 0.05
PHYSICAL_DEFENSE_REDUCTION: float = 0.10
MAGICAL_DEFENSE_REDUCTION: float = 0.05
MINIMUM_DAMAGE: int = 1
MAX_SKILL_TARGETS: int = 5

# Skills
BASIC_ATTACK_COOLDOWN: int = 0
DEFAULT_ACTIVE_COOLDOWN: int = 3
MAX_SKILL_COUNT: int = 10

# Status effect durations, in turns
DEFAULT_BURN_DURATION: int = 2
DEFAULT_POISON_DURATION: int = 3
DEFAULT_STUN_DURATION: int = 1
DEFAULT_SHIELD_DURATION: int = 2
DEFAULT_BLEED_DURATION: int = 3
DEFAULT_SLOW_DURATION: int = 2
BLEED_MAX_STACKS: int = 3


class SkillType(str, Enum):
    BASIC = "basic"  # no cooldown
    ACTIVE = "active"


class SkillTargetType(str, Enum):
    SINGLE_ENEMY = "single_enemy"
    SINGLE_ALLY = "single_ally"
    ALL_ENEMIES = "all_enemies"
    ALL_ALLIES = "all_allies"
    SELF = "self"
    SINGLE_ANY = "single_any"
    ALL_ANY = "all_any"

    @property
    def is_multi(self) -> bool:
        return self in (SkillTargetType.ALL_ENEMIES, SkillTargetType.ALL_ALLIES, SkillTargetType.ALL_ANY)


class DamageType(str, Enum):
    PHYSICAL = "physical"
    MAGICAL = "magical"
    TRUE = "true"  # ignores defense


class PrimaryStat(str, Enum):
    STRENGTH = "strength"  # warriors
    AGILITY = "agility"  # rogues, rangers
    INTELLIGENCE = "intelligence"  # mages, clerics


class CombatPhase(str, Enum):
    """Lifecycle of a fight, in order. VICTORY and DEFEAT are terminal."""

    PREPARATION = "preparation"
    TURN_START = "turn_start"
    ACTION = "action"
    EXECUTION = "execution"
    TURN_END = "turn_end"
    VICTORY = "victory"
    DEFEAT = "defeat"

    @property
    def is_terminal(self) -> bool:
        return self in (CombatPhase.VICTORY, CombatPhase.DEFEAT)


class RowPosition(str, Enum):
    FRONT = "front"
    BACK = "back"


class SkillReach(str, Enum):
    """Row eligibility for a skill, applied on top of its SkillTargetType."""

    ADJACENT_ONLY = "adjacent_only"  # same row as the caster
    MELEE_FRONT_ONLY = "melee_front_only"
    MELEE_FRONT_THEN_BACK = "melee_front_then_back"
    RANGED_ANY = "ranged_any"
    ALLY_SELF = "ally_self"
    ALLY_ANY = "ally_any"


_INT_FIELDS = frozenset(
    {
        "minimum_damage",
        "max_skill_targets",
        "basic_attack_cooldown",
        "default_active_cooldown",
        "max_skill_count",
        "burn_duration",
        "poison_duration",
        "stun_duration",
        "shield_duration",
        "bleed_duration",
        "slow_duration",
        "bleed_max_stacks",
    }
)


@dataclass(frozen=True)
class CombatConstants:
    """Immutable tuning values for one process (or one simulation).

    Validated on construction; an instance is always internally consistent.
    """

    crit_multiplier: float = CRITICAL_DAMAGE_MULTIPLIER
    base_crit_chance: float = BASE_CRIT_CHANCE
    physical_defense_reduction: float = PHYSICAL_DEFENSE_REDUCTION
    magical_defense_reduction: float = MAGICAL_DEFENSE_REDUCTION
    minimum_damage: int = MINIMUM_DAMAGE
    max_skill_targets: int = MAX_SKILL_TARGETS
    basic_attack_cooldown: int = BASIC_ATTACK_COOLDOWN
    default_active_cooldown: int = DEFAULT_ACTIVE_COOLDOWN
    max_skill_count: int = MAX_SKILL_COUNT
    burn_duration: int = DEFAULT_BURN_DURATION
    poison_duration: int = DEFAULT_POISON_DURATION
    stun_duration: int = DEFAULT_STUN_DURATION
    shield_duration: int = DEFAULT_SHIELD_DURATION
    bleed_duration: int = DEFAULT_BLEED_DURATION
    slow_duration: int = DEFAULT_SLOW_DURATION
    bleed_max_stacks: int = BLEED_MAX_STACKS

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool):
                raise InvalidArgument(f"{f.name} must be a number (got {value!r})")
            if f.name in _INT_FIELDS:
                if not isinstance(value, int):
                    raise InvalidArgument(f"{f.name} must be an integer (got {value!r})")
            elif not isinstance(value, (int, float)):
                raise InvalidArgument(f"{f.name} must be a number (got {value!r})")

        for name in ("crit_multiplier", "physical_defense_reduction", "magical_defense_reduction"):
            value = getattr(self, name)
            if not math.isfinite(value) or value < 0:
                raise InvalidArgument(f"{name} must be a finite, non-negative number (got {value!r})")
        if not math.isfinite(self.base_crit_chance) or not (0.0 <= self.base_crit_chance <= 1.0):
            raise InvalidArgument(f"base_crit_chance must be within [0, 1] (got {self.base_crit_chance!r})")
        if self.minimum_damage < 0:
            raise InvalidArgument("minimum_damage cannot be negative")
        if self.max_skill_targets < 1:
            raise InvalidArgument("max_skill_targets must be at least 1")
        if self.max_skill_count < 1:
            raise InvalidArgument("max_skill_count must be at least 1")
        if self.bleed_max_stacks < 1:
            raise InvalidArgument("bleed_max_stacks must be at least 1")
        for name in (
            "basic_attack_cooldown",
            "default_active_cooldown",
            "burn_duration",
            "poison_duration",
            "stun_duration",
            "shield_duration",
            "bleed_duration",
            "slow_duration",
        ):
            if getattr(self, name) < 0:
                raise InvalidArgument(f"{name} cannot be negative")

    @classmethod
    def field_names(cls) -> frozenset:
        return frozenset(f.name for f in fields(cls))

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


DEFAULTS = CombatConstants()


__all__ = [
    "SkillType",
    "SkillTargetType",
    "DamageType",
    "PrimaryStat",
    "CombatPhase",
    "RowPosition",
    "SkillReach",
    "CombatConstants",
    "DEFAULTS",
]
