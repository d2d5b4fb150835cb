from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

from ..errors import InvalidArgument
from ..rng import RandomSource
from .constants import CRITICAL_DAMAGE_MULTIPLIER, DEFAULTS, CombatConstants, DamageType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CriticalRoll:
    """Outcome of a single crit roll.

    Attributes:
        damage: Final damage after the roll (critical or unchanged base).
        is_critical: Whether the roll landed a critical hit.
        roll: The raw uniform sample drawn from the random source.
    """

    damage: int
    is_critical: bool
    roll: float


def round_half_away(value: float) -> int:
    """Round to the nearest integer with ties away from zero (2.5 -> 3, -2.5 -> -3).

    Python's built-in ``round`` uses banker's rounding, which would turn a
    7.5 damage hit into 8 but a 6.5 hit into 6.
    """
    # Adding 0.5 before flooring can round up in floating point, so compare
    # the fractional part instead
    magnitude = abs(value)
    whole = math.floor(magnitude)
    if magnitude - whole >= 0.5:
        whole += 1
    return int(whole) if value >= 0 else -int(whole)


def _check_stat(name: str, value: int) -> int:
    if value is None:
        raise InvalidArgument(f"{name} must be provided")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidArgument(f"{name} must be an integer (got {value!r})")
    if isinstance(value, float) and not (math.isfinite(value) and value.is_integer()):
        raise InvalidArgument(f"{name} must be a whole number (got {value!r})")
    if value < 0:
        raise InvalidArgument(f"{name} cannot be negative (got {value!r})")
    return value


def _check_multiplier(name: str, value: float) -> float:
    if value is None or not math.isfinite(value):
        raise InvalidArgument(f"{name} must be a finite number (got {value!r})")
    if value < 0:
        raise InvalidArgument(f"{name} cannot be negative (got {value!r})")
    return float(value)


def mitigation_ratio(damage_type: DamageType, constants: CombatConstants = DEFAULTS) -> float:
    """Fraction of the target's defense subtracted from raw damage."""
    if damage_type is DamageType.PHYSICAL:
        return constants.physical_defense_reduction
    if damage_type is DamageType.MAGICAL:
        return constants.magical_defense_reduction
    if damage_type is DamageType.TRUE:
        return 0.0
    raise InvalidArgument(f"Unsupported damage type: {damage_type!r}")


def _mitigated(
    damage_type: DamageType,
    attacker_stat: int,
    target_defense: int,
    multiplier: float,
    constants: CombatConstants,
) -> int:
    _check_stat("attacker_stat", attacker_stat)
    _check_stat("target_defense", target_defense)
    multiplier = _check_multiplier("multiplier", multiplier)

    base = attacker_stat * multiplier
    reduction = target_defense * mitigation_ratio(damage_type, constants)
    final = max(constants.minimum_damage, round_half_away(base - reduction))
    logger.debug(
        "%s damage: stat=%s x%.3f def=%s -> base=%.3f reduction=%.3f final=%d",
        damage_type.value,
        attacker_stat,
        multiplier,
        target_defense,
        base,
        reduction,
        final,
    )
    return final


def compute_physical_damage(
    attacker_stat: int,
    target_defense: int,
    multiplier: float = 1.0,
    constants: CombatConstants = DEFAULTS,
) -> int:
    """Physical hit: ``max(floor, round(stat * multiplier - defense * 0.10))``.

    Args:
        attacker_stat: Attacker's scaling stat (STR or AGI), non-negative.
        target_defense: Target's defense, non-negative.
        multiplier: Skill scaling; 1.0 means no scaling.
        constants: Tuning values (reduction ratio and damage floor).

    Returns:
        Integer damage, never below ``constants.minimum_damage``.

    Raises:
        InvalidArgument: on negative stats or a negative/non-finite multiplier.
    """
    return _mitigated(DamageType.PHYSICAL, attacker_stat, target_defense, multiplier, constants)


def compute_magical_damage(
    attacker_int: int,
    target_defense: int,
    multiplier: float = 1.0,
    constants: CombatConstants = DEFAULTS,
) -> int:
    """Magical hit; same shape as physical with the magical reduction ratio (0.05)."""
    return _mitigated(DamageType.MAGICAL, attacker_int, target_defense, multiplier, constants)


def compute_true_damage(
    attacker_stat: int,
    multiplier: float = 1.0,
    constants: CombatConstants = DEFAULTS,
) -> int:
    """True damage ignores defense entirely but still respects the damage floor."""
    return _mitigated(DamageType.TRUE, attacker_stat, 0, multiplier, constants)


def compute_damage(
    damage_type: DamageType,
    attacker_stat: int,
    target_defense: int,
    multiplier: float = 1.0,
    constants: CombatConstants = DEFAULTS,
) -> int:
    """Dispatch to the formula matching ``damage_type``."""
    if damage_type is DamageType.TRUE:
        # Defense still has to be a valid stat even though it is ignored
        _check_stat("target_defense", target_defense)
        return compute_true_damage(attacker_stat, multiplier, constants)
    return _mitigated(damage_type, attacker_stat, target_defense, multiplier, constants)


def compute_healing(healer_int: int, multiplier: float = 1.0) -> int:
    """Healing scales off INT with no floor; a healer with 0 INT heals 0."""
    _check_stat("healer_int", healer_int)
    multiplier = _check_multiplier("multiplier", multiplier)
    return round_half_away(healer_int * multiplier)


def compute_critical_damage(base_damage: int, crit_multiplier: float = CRITICAL_DAMAGE_MULTIPLIER) -> int:
    _check_stat("base_damage", base_damage)
    crit_multiplier = _check_multiplier("crit_multiplier", crit_multiplier)
    return round_half_away(base_damage * crit_multiplier)


def roll_critical_hit(
    base_damage: int,
    crit_chance: float,
    rng: RandomSource,
    crit_multiplier: float = CRITICAL_DAMAGE_MULTIPLIER,
) -> CriticalRoll:
    """Draw one sample from ``rng`` and decide whether ``base_damage`` crits.

    A hit is critical when ``sample <= crit_chance``. A chance of 0 never
    crits (even on a 0.0 sample) and a chance of 1 always does. Exactly one
    sample is consumed either way so seeded sequences stay aligned.
    """
    _check_stat("base_damage", base_damage)
    if crit_chance is None or not math.isfinite(crit_chance) or not (0.0 <= crit_chance <= 1.0):
        raise InvalidArgument(f"crit_chance must be within [0, 1] (got {crit_chance!r})")
    crit_multiplier = _check_multiplier("crit_multiplier", crit_multiplier)
    if rng is None:
        raise InvalidArgument("A random source is required for crit rolls")

    roll = rng.random()
    is_critical = crit_chance > 0.0 and roll <= crit_chance
    damage = compute_critical_damage(base_damage, crit_multiplier) if is_critical else int(base_damage)
    logger.debug(
        "Crit roll %.6f vs chance %.3f -> %s (%d -> %d)",
        roll,
        crit_chance,
        "CRIT" if is_critical else "normal",
        base_damage,
        damage,
    )
    return CriticalRoll(damage=damage, is_critical=is_critical, roll=roll)


def roll_for_critical(
    base_damage: int,
    crit_chance: float,
    crit_multiplier: float = CRITICAL_DAMAGE_MULTIPLIER,
    rng: Optional[RandomSource] = None,
) -> int:
    """Return critical damage on a successful roll, otherwise ``base_damage`` unchanged."""
    return roll_critical_hit(base_damage, crit_chance, rng, crit_multiplier).damage


__all__ = [
    "CriticalRoll",
    "round_half_away",
    "mitigation_ratio",
    "compute_physical_damage",
    "compute_magical_damage",
    "compute_true_damage",
    "compute_damage",
    "compute_healing",
    "compute_critical_damage",
    "roll_critical_hit",
    "roll_for_critical",
]
