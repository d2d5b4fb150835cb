"""IRL traits: personality quirks that bend a combatant's numbers.

A trait never touches hp. It only sets the modifier fields on
:class:`~arcanaterra.combat.combatant.Combatant`, which ``resolve_skill`` and
``TurnQueue`` read. The driver calls the hooks through :class:`PartyTraits`:

- ``on_combat_start`` once, before the first turn
- ``on_turn_start`` at the start of each of the member's turns
- ``on_skill_used`` when the member picks a skill, before it resolves
  (``None`` when the member skips the turn)
- ``on_combat_end`` once the fight is over
"""
from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable, List, Optional

from .combatant import Combatant
from .constants import SkillTargetType
from .skills import SkillDefinition

logger = logging.getLogger(__name__)

GLASS_CANNON_DEFENSE_MODIFIER = 0.75
GLASS_CANNON_DAMAGE_MODIFIER = 1.25
GLASS_CANNON_ALL_ENEMIES_BONUS = 0.10
GLASS_CANNON_PARTY_AOE_BONUS = 0.10
AFK_FARMER_RESTED_DAMAGE_MODIFIER = 1.3
DRAMA_QUEEN_PARTY_CRIT_BONUS = 0.05


class Trait:
    """Base trait; every hook is a no-op."""

    name: str = ""
    description: str = ""
    # Party-wide contributions, summed over every member carrying the trait
    party_aoe_bonus: float = 0.0
    party_crit_bonus: float = 0.0

    def apply_pre_combat(self, combatant: Combatant) -> None:
        pass

    def on_turn_start(self, combatant: Combatant) -> None:
        pass

    def on_skill_used(self, combatant: Combatant, skill: Optional[SkillDefinition]) -> None:
        pass

    def __repr__(self) -> str:  # pragma: no cover - cosmetic
        return f"{type(self).__name__}()"


class GlassCannonMain(Trait):
    """-25% defense; +25% damage on every skill, +35% on ALL_ENEMIES skills."""

    name = "Glass Cannon Main"
    description = "Hits hard, folds fast. The party's area attacks hit harder too."
    party_aoe_bonus = GLASS_CANNON_PARTY_AOE_BONUS

    def apply_pre_combat(self, combatant: Combatant) -> None:
        combatant.defense_modifier = GLASS_CANNON_DEFENSE_MODIFIER

    def on_skill_used(self, combatant: Combatant, skill: Optional[SkillDefinition]) -> None:
        if skill is None:
            return
        bonus = GLASS_CANNON_DAMAGE_MODIFIER
        if skill.target_type is SkillTargetType.ALL_ENEMIES:
            bonus += GLASS_CANNON_ALL_ENEMIES_BONUS
        combatant.damage_modifier = bonus


class AFKFarmer(Trait):
    """Always acts last; after skipping a turn the next one deals +30% damage."""

    name = "AFK Farmer"
    description = "Shows up late, but comes back rested."

    def __init__(self) -> None:
        self.skipped_last_turn = False

    def apply_pre_combat(self, combatant: Combatant) -> None:
        combatant.always_acts_last = True

    def on_turn_start(self, combatant: Combatant) -> None:
        if self.skipped_last_turn:
            combatant.damage_modifier = AFK_FARMER_RESTED_DAMAGE_MODIFIER
            self.skipped_last_turn = False
        else:
            combatant.damage_modifier = 1.0

    def on_skill_used(self, combatant: Combatant, skill: Optional[SkillDefinition]) -> None:
        if skill is None:
            self.skipped_last_turn = True


class DramaQueen(Trait):
    """Raises the whole party's crit chance by 5% (multiplicative) per carrier."""

    name = "Drama Queen"
    description = "Everyone plays to the crowd."
    party_crit_bonus = DRAMA_QUEEN_PARTY_CRIT_BONUS


TraitFactory = Callable[[], Trait]


class TraitRegistry:
    def __init__(self) -> None:
        self._factories: Dict[str, TraitFactory] = {}

    def register(self, name: str, factory: TraitFactory) -> None:
        self._factories[name] = factory

    def create(self, name: str) -> Trait:
        if name not in self._factories:
            raise KeyError(f"Unknown trait: {name}")
        return self._factories[name]()

    def names(self) -> List[str]:
        return sorted(self._factories)

    def __contains__(self, name: object) -> bool:
        return name in self._factories


registry = TraitRegistry()
registry.register(GlassCannonMain.name, GlassCannonMain)
registry.register(AFKFarmer.name, AFKFarmer)
registry.register(DramaQueen.name, DramaQueen)


class PartyTraits:
    """Owns the trait instances of one side and applies party-wide bonuses.

    Each member gets fresh trait instances built from ``Combatant.traits``, so
    per-fight state such as AFK Farmer's skipped turn never leaks between
    members or fights.

    Raises:
        KeyError: if a member names a trait the registry does not know.
    """

    def __init__(self, members: Iterable[Combatant], trait_registry: TraitRegistry = registry) -> None:
        self._members: List[Combatant] = list(members)
        self._traits: Dict[int, List[Trait]] = {
            id(m): [trait_registry.create(name) for name in m.traits] for m in self._members
        }
        self.aoe_damage_bonus = 0.0
        self.crit_bonus = 0.0

    @property
    def members(self) -> List[Combatant]:
        return list(self._members)

    def traits_of(self, member: Combatant) -> List[Trait]:
        return list(self._traits.get(id(member), ()))

    def on_combat_start(self) -> None:
        self.aoe_damage_bonus = 0.0
        self.crit_bonus = 0.0
        for member in self._members:
            member.reset_modifiers()
            for trait in self._traits[id(member)]:
                trait.apply_pre_combat(member)
                self.aoe_damage_bonus += trait.party_aoe_bonus
                self.crit_bonus += trait.party_crit_bonus
        for member in self._members:
            member.crit_modifier = 1.0 + self.crit_bonus
            member.aoe_damage_bonus = self.aoe_damage_bonus
        logger.debug(
            "Party traits applied: aoe bonus %.2f, crit modifier %.2f",
            self.aoe_damage_bonus,
            1.0 + self.crit_bonus,
        )

    def on_combat_end(self) -> None:
        for member in self._members:
            member.reset_modifiers()
        self.aoe_damage_bonus = 0.0
        self.crit_bonus = 0.0

    def on_turn_start(self, member: Combatant) -> None:
        for trait in self._traits.get(id(member), ()):
            trait.on_turn_start(member)

    def on_skill_used(self, member: Combatant, skill: Optional[SkillDefinition]) -> None:
        for trait in self._traits.get(id(member), ()):
            trait.on_skill_used(member, skill)


__all__ = [
    "Trait",
    "GlassCannonMain",
    "AFKFarmer",
    "DramaQueen",
    "TraitRegistry",
    "registry",
    "PartyTraits",
]
