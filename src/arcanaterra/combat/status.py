"""Status effects and the per-combatant tracker that owns them.

Effects snapshot the caster's relevant stat when applied, so a burn keeps
ticking for the same amount even if the caster is later buffed or defeated.

Turn lifecycle for a combatant's tracker:

- ``tick()`` at the start of its turn returns the damage-over-time to apply.
- ``is_stunned`` tells the driver to skip straight to TURN_END.
- ``end_turn()`` counts durations down and drops what expired. An expiring
  stun leaves Stun Immunity behind for one turn.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, List, Optional

from ..errors import InvalidArgument
from .constants import DEFAULTS, CombatConstants
from .damage import round_half_away

logger = logging.getLogger(__name__)

BURN_INT_RATIO = 0.25
POISON_AGI_RATIO = 0.15
BLEED_AGI_RATIO = 0.20
POISON_HEALING_REDUCTION = 0.25
SLOW_AGI_REDUCTION = 0.10
MINIMUM_SHIELD = 5
STUN_IMMUNITY_DURATION = 1


class StatusKind(str, Enum):
    BURN = "burn"
    POISON = "poison"
    BLEED = "bleed"
    STUN = "stun"
    STUN_IMMUNITY = "stun_immunity"
    SLOW = "slow"
    SHIELD = "shield"

    @property
    def deals_damage(self) -> bool:
        return self in (StatusKind.BURN, StatusKind.POISON, StatusKind.BLEED)


def burn_tick_damage(caster_int: int) -> int:
    return max(1, round_half_away(caster_int * BURN_INT_RATIO))


def poison_tick_damage(caster_agi: int) -> int:
    return max(1, round_half_away(caster_agi * POISON_AGI_RATIO))


def bleed_tick_damage(caster_agi: int, stacks: int) -> int:
    """Bleed scales with stacks; each stack is worth at least 1 damage."""
    return max(stacks, round_half_away(caster_agi * BLEED_AGI_RATIO * stacks))


def shield_amount(caster_int: int, multiplier: float = 1.0) -> int:
    return max(MINIMUM_SHIELD, round_half_away(caster_int * multiplier))


def slowed_agility(agility: int) -> int:
    """Agility under Slow: 10% lower (rounded), never below 1."""
    return max(1, agility - round_half_away(agility * SLOW_AGI_REDUCTION))


@dataclass
class StatusEffect:
    """One active effect on a combatant.

    Attributes:
        kind: Which effect this is.
        remaining: Turns left before it expires.
        source_stat: Caster stat snapshot driving tick damage (INT for burn, AGI for poison/bleed).
        stacks: Bleed stack level; 1 for everything else.
        shield_points: Absorb pool left on a shield; 0 otherwise.
    """

    kind: StatusKind
    remaining: int
    source_stat: int = 0
    stacks: int = 1
    shield_points: int = 0

    def __post_init__(self) -> None:
        self.kind = StatusKind(self.kind)
        if self.remaining < 0:
            raise InvalidArgument("remaining duration cannot be negative")
        if self.source_stat < 0:
            raise InvalidArgument("source_stat cannot be negative")
        if self.stacks < 1:
            raise InvalidArgument("stacks must be at least 1")
        if self.shield_points < 0:
            raise InvalidArgument("shield_points cannot be negative")

    # Builders using the default durations
    @classmethod
    def burn(cls, caster_int: int, constants: CombatConstants = DEFAULTS, duration: Optional[int] = None) -> "StatusEffect":
        return cls(StatusKind.BURN, _duration(duration, constants.burn_duration), source_stat=caster_int)

    @classmethod
    def poison(cls, caster_agi: int, constants: CombatConstants = DEFAULTS, duration: Optional[int] = None) -> "StatusEffect":
        return cls(StatusKind.POISON, _duration(duration, constants.poison_duration), source_stat=caster_agi)

    @classmethod
    def bleed(cls, caster_agi: int, constants: CombatConstants = DEFAULTS, duration: Optional[int] = None) -> "StatusEffect":
        return cls(StatusKind.BLEED, _duration(duration, constants.bleed_duration), source_stat=caster_agi)

    @classmethod
    def stun(cls, constants: CombatConstants = DEFAULTS, duration: Optional[int] = None) -> "StatusEffect":
        return cls(StatusKind.STUN, _duration(duration, constants.stun_duration))

    @classmethod
    def slow(cls, constants: CombatConstants = DEFAULTS, duration: Optional[int] = None) -> "StatusEffect":
        return cls(StatusKind.SLOW, _duration(duration, constants.slow_duration))

    @classmethod
    def shield(
        cls,
        caster_int: int,
        multiplier: float = 1.0,
        constants: CombatConstants = DEFAULTS,
        duration: Optional[int] = None,
    ) -> "StatusEffect":
        return cls(
            StatusKind.SHIELD,
            _duration(duration, constants.shield_duration),
            source_stat=caster_int,
            shield_points=shield_amount(caster_int, multiplier),
        )

    @classmethod
    def flat_shield(cls, points: int, constants: CombatConstants = DEFAULTS, duration: Optional[int] = None) -> "StatusEffect":
        if points <= 0:
            raise InvalidArgument("shield points must be positive")
        return cls(StatusKind.SHIELD, _duration(duration, constants.shield_duration), shield_points=points)

    @property
    def expired(self) -> bool:
        if self.kind is StatusKind.SHIELD and self.shield_points <= 0:
            return True
        return self.remaining <= 0

    def tick_damage(self) -> int:
        if self.kind is StatusKind.BURN:
            return burn_tick_damage(self.source_stat)
        if self.kind is StatusKind.POISON:
            return poison_tick_damage(self.source_stat)
        if self.kind is StatusKind.BLEED:
            return bleed_tick_damage(self.source_stat, self.stacks)
        return 0

    def __str__(self) -> str:
        if self.kind is StatusKind.BLEED:
            return f"Bleed x{self.stacks} ({self.remaining} turns)"
        if self.kind is StatusKind.SHIELD:
            return f"Shield {self.shield_points} ({self.remaining} turns)"
        return f"{self.kind.value.replace('_', ' ').title()} ({self.remaining} turns)"


def _duration(value: Optional[int], default: int) -> int:
    return default if value is None else value


class StatusEffectTracker:
    """Holds the active effects of one combatant, at most one per kind.

    Application rules:
    - Burn, Poison and Slow do not stack; re-application is rejected.
    - Bleed stacks up to ``bleed_max_stacks`` and refreshes its duration.
    - Stun is rejected while stunned or while Stun Immunity is active.
    - Shield replaces the current one only if it holds more points.
    """

    def __init__(self, owner: str = "combatant", constants: CombatConstants = DEFAULTS) -> None:
        self.owner = owner
        self.constants = constants
        self._effects: Dict[StatusKind, StatusEffect] = {}

    # --------------- Queries ---------------

    def __contains__(self, kind: object) -> bool:
        return kind in self._effects

    def __iter__(self) -> Iterator[StatusEffect]:
        return iter(list(self._effects.values()))

    def __len__(self) -> int:
        return len(self._effects)

    def get(self, kind: StatusKind) -> Optional[StatusEffect]:
        return self._effects.get(kind)

    @property
    def is_stunned(self) -> bool:
        return StatusKind.STUN in self._effects

    @property
    def shield_points(self) -> int:
        shield = self._effects.get(StatusKind.SHIELD)
        return shield.shield_points if shield else 0

    # --------------- Mutations ---------------

    def apply(self, effect: StatusEffect) -> bool:
        """Try to add ``effect``. Returns False when the rules reject it."""
        kind = effect.kind
        if effect.expired:
            logger.warning("%s: ignoring already-expired %s", self.owner, kind.value)
            return False
        current = self._effects.get(kind)

        if kind is StatusKind.STUN and StatusKind.STUN_IMMUNITY in self._effects:
            logger.warning("%s is immune to stun; effect not applied", self.owner)
            return False

        if kind is StatusKind.BLEED and current is not None:
            if current.stacks >= self.constants.bleed_max_stacks:
                logger.debug("%s: bleed already at max stacks; refreshing", self.owner)
            else:
                current.stacks += 1
                logger.debug("%s: bleed stacked to %d", self.owner, current.stacks)
            current.remaining = max(current.remaining, effect.remaining)
            current.source_stat = max(current.source_stat, effect.source_stat)
            return True

        if kind is StatusKind.SHIELD and current is not None:
            if effect.shield_points <= current.shield_points:
                logger.warning(
                    "%s keeps existing shield (%d >= %d)", self.owner, current.shield_points, effect.shield_points
                )
                return False
            logger.debug(
                "%s: replacing shield %d with %d", self.owner, current.shield_points, effect.shield_points
            )

        elif current is not None:
            logger.warning("%s already has %s; effect not applied (no stacking)", self.owner, kind.value)
            return False

        if kind is StatusKind.BLEED:
            effect.stacks = min(effect.stacks, self.constants.bleed_max_stacks)
        self._effects[kind] = effect
        logger.debug("%s gains %s", self.owner, effect)
        return True

    def tick(self) -> int:
        """Start-of-turn processing. Returns the total damage-over-time due."""
        total = 0
        for effect in self._effects.values():
            if effect.kind.deals_damage and not effect.expired:
                dmg = effect.tick_damage()
                logger.debug("%s takes %d %s damage (%d turns left)", self.owner, dmg, effect.kind.value, effect.remaining)
                total += dmg
        return total

    def end_turn(self) -> List[StatusKind]:
        """Count every duration down by one turn and drop expired effects.

        Returns:
            The kinds that expired this turn, in application order.
        """
        expired: List[StatusKind] = []
        for kind, effect in list(self._effects.items()):
            if effect.remaining > 0:
                effect.remaining -= 1
            if effect.expired:
                del self._effects[kind]
                expired.append(kind)
                logger.debug("%s's %s wears off", self.owner, kind.value)
        if StatusKind.STUN in expired:
            self._effects[StatusKind.STUN_IMMUNITY] = StatusEffect(StatusKind.STUN_IMMUNITY, STUN_IMMUNITY_DURATION)
            logger.debug("%s is immune to stun for %d turn(s)", self.owner, STUN_IMMUNITY_DURATION)
        return expired

    def absorb(self, damage: int) -> int:
        """Run incoming damage through the shield; returns what gets through."""
        if damage < 0:
            raise InvalidArgument("damage cannot be negative")
        shield = self._effects.get(StatusKind.SHIELD)
        if shield is None or damage == 0:
            return damage
        absorbed = min(shield.shield_points, damage)
        shield.shield_points -= absorbed
        logger.debug("%s's shield absorbs %d damage (%d left)", self.owner, absorbed, shield.shield_points)
        if shield.expired:
            del self._effects[StatusKind.SHIELD]
            logger.debug("%s's shield is depleted", self.owner)
        return damage - absorbed

    def modify_healing(self, amount: int) -> int:
        """Poison cuts healing received by 25%."""
        if amount < 0:
            raise InvalidArgument("healing cannot be negative")
        if StatusKind.POISON not in self._effects:
            return amount
        reduced = round_half_away(amount * (1.0 - POISON_HEALING_REDUCTION))
        logger.debug("%s's healing reduced from %d to %d (poison)", self.owner, amount, reduced)
        return reduced

    def agility_modifier(self, base_agility: int) -> int:
        """Signed change to ``base_agility`` from active effects (0 or negative)."""
        if StatusKind.SLOW not in self._effects:
            return 0
        return slowed_agility(base_agility) - base_agility

    def effective_agility(self, base_agility: int) -> int:
        return base_agility + self.agility_modifier(base_agility)

    def clear(self) -> None:
        if self._effects:
            logger.debug("%s: clearing %d effect(s)", self.owner, len(self._effects))
        self._effects.clear()


__all__ = [
    "StatusKind",
    "StatusEffect",
    "StatusEffectTracker",
    "burn_tick_damage",
    "poison_tick_damage",
    "bleed_tick_damage",
    "shield_amount",
    "slowed_agility",
]
