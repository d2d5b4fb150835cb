from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union

from ..errors import InvalidArgument
from .constants import PrimaryStat, RowPosition
from .damage import round_half_away

logger = logging.getLogger(__name__)


class Team(str, Enum):
    """Side tag. Targeting treats every team other than the caster's as opposing."""

    PARTY = "party"
    ENEMY = "enemy"


@dataclass(frozen=True)
class StatBlock:
    """The numbers the combat core reads from a combatant.

    Attributes:
        strength: Physical scaling stat (warriors).
        agility: Physical scaling stat (rogues, rangers); also drives turn order.
        intelligence: Magical scaling stat; also drives healing, burn and shields.
        defense: Mitigates incoming physical and magical damage.
        max_health: Hit point ceiling; must be positive.
    """

    strength: int = 10
    agility: int = 10
    intelligence: int = 10
    defense: int = 5
    max_health: int = 100

    def __post_init__(self) -> None:
        for name in ("strength", "agility", "intelligence", "defense"):
            if getattr(self, name) < 0:
                raise InvalidArgument(f"{name} cannot be negative")
        if self.max_health <= 0:
            raise InvalidArgument("max_health must be positive")

    def get(self, stat: PrimaryStat) -> int:
        if stat is PrimaryStat.STRENGTH:
            return self.strength
        if stat is PrimaryStat.AGILITY:
            return self.agility
        if stat is PrimaryStat.INTELLIGENCE:
            return self.intelligence
        raise InvalidArgument(f"Unknown primary stat: {stat!r}")


@dataclass(eq=False)
class Combatant:
    """
    A participant in an encounter.

    Only ``id``, ``team``, ``row``, ``slot``, ``is_alive`` and ``stats`` are read
    by targeting. The modifier fields are neutral by default and are set by
    traits (see :mod:`arcanaterra.combat.traits`); skill resolution and the
    turn queue read them. ``hp`` is owned by whoever drives the
    fight; ``take_damage``/``heal`` are the single-writer helpers for it.

    Attributes:
        id: Stable identifier; also the turn-order tie breaker.
        name: Display name.
        team: Which side this combatant fights on.
        stats: Base stats.
        row: Front or back row placement.
        slot: Formation slot index within the row layout (0-based).
        hp: Current hit points; defaults to ``stats.max_health``.
        traits: Names of the traits this combatant carries.
        damage_modifier: Multiplies outgoing skill damage.
        defense_modifier: Multiplies defense when this combatant is hit.
        crit_modifier: Multiplies the crit chance of this combatant's skills.
        aoe_damage_bonus: Extra fraction of damage on multi-target skills.
        always_acts_last: Sorts after every normal actor in turn order.
    """

    id: Union[str, int]
    name: str
    team: Team
    stats: StatBlock = field(default_factory=StatBlock)
    row: RowPosition = RowPosition.FRONT
    slot: int = 0
    hp: Optional[int] = None
    traits: Tuple[str, ...] = ()
    damage_modifier: float = 1.0
    defense_modifier: float = 1.0
    crit_modifier: float = 1.0
    aoe_damage_bonus: float = 0.0
    always_acts_last: bool = False

    def __post_init__(self) -> None:
        if self.slot < 0:
            raise InvalidArgument("slot cannot be negative")
        if self.hp is None:
            self.hp = self.stats.max_health
        if not (0 <= self.hp <= self.stats.max_health):
            raise InvalidArgument(f"hp must be within [0, {self.stats.max_health}]")
        self.traits = tuple(self.traits)
        for name in ("damage_modifier", "defense_modifier", "crit_modifier", "aoe_damage_bonus"):
            value = getattr(self, name)
            if not math.isfinite(value) or value < 0:
                raise InvalidArgument(f"{name} must be a finite, non-negative number (got {value!r})")

    @property
    def is_alive(self) -> bool:
        return self.hp > 0

    @property
    def agility(self) -> int:
        return self.stats.agility

    @property
    def defense(self) -> int:
        return self.stats.defense

    @property
    def effective_defense(self) -> int:
        """Defense after ``defense_modifier``, rounded half away from zero."""
        return round_half_away(self.stats.defense * self.defense_modifier)

    def reset_modifiers(self) -> None:
        self.damage_modifier = 1.0
        self.defense_modifier = 1.0
        self.crit_modifier = 1.0
        self.aoe_damage_bonus = 0.0
        self.always_acts_last = False

    def stat(self, stat: PrimaryStat) -> int:
        return self.stats.get(stat)

    def take_damage(self, amount: int) -> int:
        """Apply incoming damage and return the amount actually removed."""
        if amount < 0:
            raise InvalidArgument("Damage amount cannot be negative.")
        if not self.is_alive:
            logger.debug("%s is already down. Incoming damage ignored.", self.name)
            return 0
        prev = self.hp
        self.hp = max(0, self.hp - amount)
        logger.debug("%s takes %d damage (HP: %d/%d)", self.name, amount, self.hp, self.stats.max_health)
        return prev - self.hp

    def heal(self, amount: int) -> int:
        """Heal up to max HP. Returns the actual healed amount; the defeated cannot be healed."""
        if amount < 0:
            raise InvalidArgument("Heal amount cannot be negative.")
        if not self.is_alive:
            return 0
        prev = self.hp
        self.hp = min(self.stats.max_health, self.hp + amount)
        healed = self.hp - prev
        if healed:
            logger.debug("%s heals %d HP (HP: %d/%d)", self.name, healed, self.hp, self.stats.max_health)
        return healed

    def __repr__(self) -> str:  # pragma: no cover - cosmetic
        return (
            f"Combatant(id={self.id!r}, team={self.team.value}, row={self.row.value}, "
            f"slot={self.slot}, hp={self.hp})"
        )


__all__ = ["Team", "StatBlock", "Combatant"]
