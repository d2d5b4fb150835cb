"""Static game data: classes, characters, enemy parties and dungeons.

These are immutable records. Documents are validated against JSON Schema by
:mod:`arcanaterra.data.loader` before they reach the ``from_dict`` parsers
here; the parsers still check the invariants a schema cannot express (unique
spawn slots, known class references).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from ..combat.combatant import Combatant, StatBlock, Team
from ..combat.constants import PrimaryStat, RowPosition
from ..errors import InvalidArgument

logger = logging.getLogger(__name__)

MAX_ENEMY_SLOTS = 5  # spawn slots 0..4


@dataclass(frozen=True)
class CharacterClassDefinition:
    """A playable archetype: base stats, focus and starting skills.

    ``skills`` lists skill names from the skill catalog; the first is the
    class's basic attack. Vitality is carried for completeness but the combat
    core does not read it.
    """

    name: str
    base_health: int = 100
    base_strength: int = 10
    base_agility: int = 10
    base_intelligence: int = 10
    base_defense: int = 5
    base_vitality: int = 10
    primary_stat: PrimaryStat = PrimaryStat.STRENGTH
    secondary_stat: str = ""
    role: str = ""
    description: str = ""
    skills: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.name:
            raise InvalidArgument("class name must be non-empty")
        object.__setattr__(self, "primary_stat", PrimaryStat(self.primary_stat))
        object.__setattr__(self, "skills", tuple(self.skills))
        if self.base_health <= 0:
            raise InvalidArgument(f"{self.name}: base_health must be positive")
        for f in ("base_strength", "base_agility", "base_intelligence", "base_defense", "base_vitality"):
            if getattr(self, f) < 0:
                raise InvalidArgument(f"{self.name}: {f} cannot be negative")

    def stat_block(self, max_health: Optional[int] = None) -> StatBlock:
        return StatBlock(
            strength=self.base_strength,
            agility=self.base_agility,
            intelligence=self.base_intelligence,
            defense=self.base_defense,
            max_health=max_health if max_health is not None else self.base_health,
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CharacterClassDefinition":
        base = data.get("base", {}) or {}
        return cls(
            name=data["name"],
            base_health=int(base.get("health", 100)),
            base_strength=int(base.get("strength", 10)),
            base_agility=int(base.get("agility", 10)),
            base_intelligence=int(base.get("intelligence", 10)),
            base_defense=int(base.get("defense", 5)),
            base_vitality=int(base.get("vitality", 10)),
            primary_stat=data.get("primary_stat", PrimaryStat.STRENGTH),
            secondary_stat=str(data.get("secondary_stat", "")),
            role=str(data.get("role", "")),
            description=str(data.get("description", "")),
            skills=tuple(data.get("skills", ())),
        )


@dataclass(frozen=True)
class CharacterDefinition:
    """A named character built on a class.

    Attributes:
        name: Display name.
        class_name: Name of the CharacterClassDefinition it uses.
        max_health: Overrides the class's base health when set.
        level: Character level (1+).
        traits: Trait names known to :data:`arcanaterra.combat.traits.registry`.
        skills: Skill names; empty means the class's skills.
    """

    name: str
    class_name: str
    max_health: Optional[int] = None
    level: int = 1
    traits: Tuple[str, ...] = ()
    skills: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.name:
            raise InvalidArgument("character name must be non-empty")
        if not self.class_name:
            raise InvalidArgument(f"{self.name}: class reference must be non-empty")
        if self.max_health is not None and self.max_health <= 0:
            raise InvalidArgument(f"{self.name}: max_health must be positive")
        if self.level < 1:
            raise InvalidArgument(f"{self.name}: level must be at least 1")
        object.__setattr__(self, "traits", tuple(self.traits))
        object.__setattr__(self, "skills", tuple(self.skills))

    def skill_names(self, cls: CharacterClassDefinition) -> Tuple[str, ...]:
        return self.skills or cls.skills

    def to_combatant(
        self,
        cls: CharacterClassDefinition,
        *,
        id: Union[str, int],
        team: Team,
        row: RowPosition = RowPosition.FRONT,
        slot: int = 0,
    ) -> Combatant:
        if cls.name != self.class_name:
            raise InvalidArgument(f"{self.name} uses class {self.class_name!r}, not {cls.name!r}")
        return Combatant(
            id=id,
            name=self.name,
            team=team,
            stats=cls.stat_block(self.max_health),
            row=row,
            slot=slot,
            traits=self.traits,
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CharacterDefinition":
        max_health = data.get("max_health")
        return cls(
            name=data["name"],
            class_name=data["class"],
            max_health=int(max_health) if max_health is not None else None,
            level=int(data.get("level", 1)),
            traits=tuple(data.get("traits", ())),
            skills=tuple(data.get("skills", ())),
        )


@dataclass(frozen=True)
class EnemyDefinition:
    character: CharacterDefinition
    slot: int
    row: RowPosition = RowPosition.FRONT

    def __post_init__(self) -> None:
        if not (0 <= self.slot < MAX_ENEMY_SLOTS):
            raise InvalidArgument(f"spawn slot must be within 0..{MAX_ENEMY_SLOTS - 1} (got {self.slot})")
        object.__setattr__(self, "row", RowPosition(self.row))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EnemyDefinition":
        return cls(
            character=CharacterDefinition.from_dict(data["character"]),
            slot=int(data["slot"]),
            row=data.get("row", RowPosition.FRONT),
        )


@dataclass(frozen=True)
class EnemyPartyDefinition:
    """One encounter: up to five enemies, each on its own spawn slot."""

    name: str
    enemies: Tuple[EnemyDefinition, ...]
    is_boss: bool = False

    def __post_init__(self) -> None:
        if not self.name:
            raise InvalidArgument("encounter name must be non-empty")
        object.__setattr__(self, "enemies", tuple(self.enemies))
        if not self.enemies:
            raise InvalidArgument(f"Encounter '{self.name}' has no enemies")
        seen = set()
        for e in self.enemies:
            if e.slot in seen:
                raise InvalidArgument(f"Encounter '{self.name}' uses spawn slot {e.slot} twice")
            seen.add(e.slot)

    def spawn(self, classes: Mapping[str, CharacterClassDefinition]) -> List[Combatant]:
        """Instantiate the enemies as ENEMY-team combatants in slot order."""
        out: List[Combatant] = []
        for e in sorted(self.enemies, key=lambda e: e.slot):
            cls = classes.get(e.character.class_name)
            if cls is None:
                raise InvalidArgument(
                    f"Encounter '{self.name}' references unknown class '{e.character.class_name}'"
                )
            out.append(
                e.character.to_combatant(
                    cls, id=f"{self.name}:{e.slot}", team=Team.ENEMY, row=e.row, slot=e.slot
                )
            )
        logger.debug("Spawned encounter %s: %s", self.name, [c.name for c in out])
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EnemyPartyDefinition":
        return cls(
            name=data["name"],
            enemies=tuple(EnemyDefinition.from_dict(e) for e in data.get("enemies", ())),
            is_boss=bool(data.get("boss", False)),
        )


@dataclass(frozen=True)
class DungeonDefinition:
    name: str
    encounters: Tuple[EnemyPartyDefinition, ...]

    def __post_init__(self) -> None:
        if not self.name:
            raise InvalidArgument("dungeon name must be non-empty")
        object.__setattr__(self, "encounters", tuple(self.encounters))

    @property
    def boss_encounters(self) -> List[EnemyPartyDefinition]:
        return [e for e in self.encounters if e.is_boss]

    def encounter(self, name: str) -> EnemyPartyDefinition:
        for e in self.encounters:
            if e.name == name:
                return e
        raise KeyError(name)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DungeonDefinition":
        return cls(
            name=data["name"],
            encounters=tuple(EnemyPartyDefinition.from_dict(e) for e in data.get("encounters", ())),
        )


def index_by_name(items: Iterable[Any]) -> Dict[str, Any]:
    """Map records by ``name``; duplicate names are an error."""
    out: Dict[str, Any] = {}
    for item in items:
        if item.name in out:
            raise InvalidArgument(f"Duplicate definition name: {item.name}")
        out[item.name] = item
    return out


__all__ = [
    "MAX_ENEMY_SLOTS",
    "CharacterClassDefinition",
    "CharacterDefinition",
    "EnemyDefinition",
    "EnemyPartyDefinition",
    "DungeonDefinition",
    "index_by_name",
]
