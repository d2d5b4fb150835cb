from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..errors import InvalidArgument, SkillOnCooldown
from ..rng import RandomSource
from .combatant import Combatant
from .constants import (
    BASE_CRIT_CHANCE,
    BASIC_ATTACK_COOLDOWN,
    CRITICAL_DAMAGE_MULTIPLIER,
    DEFAULT_ACTIVE_COOLDOWN,
    DEFAULTS,
    CombatConstants,
    DamageType,
    PrimaryStat,
    SkillReach,
    SkillTargetType,
    SkillType,
)
from .damage import compute_damage, compute_healing, roll_critical_hit, round_half_away
from .status import StatusEffect, StatusKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatusApplication:
    """A status effect a skill tries to inflict on each target it hits.

    Attributes:
        kind: Which effect to apply.
        chance: Probability in [0, 1]; 1.0 always applies without a roll.
        duration: Turns; None means the default from CombatConstants.
        shield_multiplier: INT scaling for shields.
    """

    kind: StatusKind
    chance: float = 1.0
    duration: Optional[int] = None
    shield_multiplier: float = 1.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", StatusKind(self.kind))
        if self.kind is StatusKind.STUN_IMMUNITY:
            raise InvalidArgument("stun immunity is granted by stuns expiring, not by skills")
        if not math.isfinite(self.chance) or not (0.0 <= self.chance <= 1.0):
            raise InvalidArgument(f"status chance must be within [0, 1] (got {self.chance!r})")
        if self.duration is not None and self.duration < 1:
            raise InvalidArgument("status duration must be at least 1 turn")
        if not math.isfinite(self.shield_multiplier) or self.shield_multiplier < 0:
            raise InvalidArgument("shield_multiplier must be a finite, non-negative number")

    def build(self, caster: Combatant, constants: CombatConstants = DEFAULTS) -> StatusEffect:
        """Create the effect, snapshotting the caster stat it scales with."""
        k = self.kind
        if k is StatusKind.BURN:
            return StatusEffect.burn(caster.stats.intelligence, constants, self.duration)
        if k is StatusKind.POISON:
            return StatusEffect.poison(caster.stats.agility, constants, self.duration)
        if k is StatusKind.BLEED:
            return StatusEffect.bleed(caster.stats.agility, constants, self.duration)
        if k is StatusKind.STUN:
            return StatusEffect.stun(constants, self.duration)
        if k is StatusKind.SLOW:
            return StatusEffect.slow(constants, self.duration)
        return StatusEffect.shield(caster.stats.intelligence, self.shield_multiplier, constants, self.duration)


@dataclass(frozen=True)
class SkillDefinition:
    """Immutable description of a skill.

    Damage skills deal ``calculator(damage_type, caster stat * scaling) + power``
    per target, then roll for a critical hit. Skills with no ``damage_type``
    heal for ``round(caster stat * scaling) + power`` instead; a heal with
    zero scaling and power is a pure status skill.

    Leaving ``cooldown`` unset gives basic skills no cooldown and active skills
    the stock ``DEFAULT_ACTIVE_COOLDOWN``; ``from_dict`` uses the configured
    ``default_active_cooldown`` instead.
    """

    name: str
    skill_type: SkillType = SkillType.ACTIVE
    target_type: SkillTargetType = SkillTargetType.SINGLE_ENEMY
    reach: SkillReach = SkillReach.MELEE_FRONT_THEN_BACK
    damage_type: Optional[DamageType] = DamageType.PHYSICAL
    scaling_stat: PrimaryStat = PrimaryStat.STRENGTH
    scaling: float = 1.0
    power: float = 0.0
    crit_chance: float = BASE_CRIT_CHANCE
    crit_multiplier: float = CRITICAL_DAMAGE_MULTIPLIER
    cooldown: Optional[int] = None
    status: Optional[StatusApplication] = None
    description: str = ""

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise InvalidArgument("skill name must be non-empty")
        # Coerce plain strings from data files into their enums
        object.__setattr__(self, "skill_type", SkillType(self.skill_type))
        if self.cooldown is None:
            default = BASIC_ATTACK_COOLDOWN if self.skill_type is SkillType.BASIC else DEFAULT_ACTIVE_COOLDOWN
            object.__setattr__(self, "cooldown", default)
        object.__setattr__(self, "target_type", SkillTargetType(self.target_type))
        object.__setattr__(self, "reach", SkillReach(self.reach))
        object.__setattr__(self, "scaling_stat", PrimaryStat(self.scaling_stat))
        if self.damage_type is not None:
            object.__setattr__(self, "damage_type", DamageType(self.damage_type))

        for name in ("scaling", "power", "crit_multiplier"):
            value = getattr(self, name)
            if not math.isfinite(value) or value < 0:
                raise InvalidArgument(f"{self.name}: {name} must be a finite, non-negative number")
        if not math.isfinite(self.crit_chance) or not (0.0 <= self.crit_chance <= 1.0):
            raise InvalidArgument(f"{self.name}: crit_chance must be within [0, 1]")
        if isinstance(self.cooldown, bool) or not isinstance(self.cooldown, int):
            raise InvalidArgument(f"{self.name}: cooldown must be an integer")
        if self.cooldown < 0:
            raise InvalidArgument(f"{self.name}: cooldown cannot be negative")
        if self.skill_type is SkillType.BASIC and self.cooldown != BASIC_ATTACK_COOLDOWN:
            raise InvalidArgument(f"{self.name}: basic skills have no cooldown")

    @property
    def is_heal(self) -> bool:
        return self.damage_type is None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], constants: CombatConstants = DEFAULTS) -> "SkillDefinition":
        """Build from a loaded data record (keys match the field names).

        Active skills without an explicit cooldown get ``default_active_cooldown``.
        """
        payload: Dict[str, Any] = dict(data)
        skill_type = SkillType(payload.get("skill_type", SkillType.ACTIVE))
        payload["skill_type"] = skill_type
        if "cooldown" not in payload:
            payload["cooldown"] = (
                constants.basic_attack_cooldown if skill_type is SkillType.BASIC else constants.default_active_cooldown
            )
        status = payload.get("status")
        if isinstance(status, Mapping):
            payload["status"] = StatusApplication(**status)
        try:
            return cls(**payload)
        except TypeError as e:
            raise InvalidArgument(f"Invalid skill record {payload.get('name')!r}: {e}") from e


class SkillSet:
    """A combatant's skills with their cooldown state.

    The first skill is conventionally the basic attack. Using a skill puts it on
    its full cooldown; ``reduce_cooldowns`` is called once per owner turn.
    """

    def __init__(self, skills: Iterable[SkillDefinition] = (), constants: CombatConstants = DEFAULTS) -> None:
        self.constants = constants
        self._skills: List[SkillDefinition] = []
        self._cooldowns: Dict[str, int] = {}
        for s in skills:
            self.add(s)

    def __len__(self) -> int:
        return len(self._skills)

    def __iter__(self):
        return iter(list(self._skills))

    def __contains__(self, name: object) -> bool:
        return name in self._cooldowns

    @property
    def skills(self) -> List[SkillDefinition]:
        return list(self._skills)

    def add(self, skill: SkillDefinition) -> None:
        if skill.name in self._cooldowns:
            raise InvalidArgument(f"Duplicate skill: {skill.name}")
        if len(self._skills) >= self.constants.max_skill_count:
            raise InvalidArgument(f"A skill set holds at most {self.constants.max_skill_count} skills")
        self._skills.append(skill)
        self._cooldowns[skill.name] = 0

    def get(self, name: str) -> SkillDefinition:
        for s in self._skills:
            if s.name == name:
                return s
        raise KeyError(name)

    def basic_attack(self) -> Optional[SkillDefinition]:
        for s in self._skills:
            if s.skill_type is SkillType.BASIC:
                return s
        return None

    def remaining_cooldown(self, name: str) -> int:
        if name not in self._cooldowns:
            raise KeyError(name)
        return self._cooldowns[name]

    def is_ready(self, name: str) -> bool:
        return self.remaining_cooldown(name) == 0

    def ready_skills(self) -> List[SkillDefinition]:
        return [s for s in self._skills if self._cooldowns[s.name] == 0]

    def use(self, name: str) -> SkillDefinition:
        """Mark ``name`` as used and start its cooldown.

        Raises:
            KeyError: if the skill is not in this set.
            SkillOnCooldown: if the skill is still cooling down.
        """
        skill = self.get(name)
        left = self._cooldowns[name]
        if left > 0:
            raise SkillOnCooldown(f"{name} is on cooldown for {left} more turn(s)")
        self._cooldowns[name] = skill.cooldown
        logger.debug("Used %s (cooldown %d)", name, skill.cooldown)
        return skill

    def reduce_cooldowns(self) -> List[str]:
        """Tick every cooldown down by one turn; returns skills that became ready."""
        ready: List[str] = []
        for name, left in self._cooldowns.items():
            if left > 0:
                self._cooldowns[name] = left - 1
                if left == 1:
                    ready.append(name)
        if ready:
            logger.debug("Skills ready again: %s", ready)
        return ready

    def reset(self) -> None:
        for name in self._cooldowns:
            self._cooldowns[name] = 0

    def cooldowns(self) -> Dict[str, int]:
        return dict(self._cooldowns)


@dataclass(frozen=True)
class SkillOutcome:
    """What one skill use does to one target. Nothing is applied yet."""

    target: Combatant
    damage: int = 0
    healing: int = 0
    is_critical: bool = False
    status: Optional[StatusEffect] = None


def _status_for(
    skill: SkillDefinition, caster: Combatant, rng: RandomSource, constants: CombatConstants
) -> Optional[StatusEffect]:
    app = skill.status
    if app is None:
        return None
    if app.chance < 1.0:
        roll = rng.random()
        if app.chance <= 0.0 or roll >= app.chance:
            logger.debug("%s: %s did not proc (roll %.4f vs %.2f)", skill.name, app.kind.value, roll, app.chance)
            return None
    return app.build(caster, constants)


def resolve_skill(
    skill: SkillDefinition,
    caster: Combatant,
    targets: Sequence[Combatant],
    rng: RandomSource,
    constants: CombatConstants = DEFAULTS,
) -> Tuple[SkillOutcome, ...]:
    """Compute per-target outcomes for one use of ``skill``.

    Combatants are not mutated; the caller applies damage, healing and status.
    Random draws happen in target order: one crit roll per damaged target, then
    one status roll when the skill's status chance is below 1. An empty target
    list resolves to an empty tuple.

    Trait modifiers are read, never written: the caster's ``damage_modifier``
    (times ``1 + aoe_damage_bonus`` for multi-target skills) scales damage
    after mitigation, ``crit_modifier`` scales the crit chance (capped at 1)
    and each target's ``defense_modifier`` scales its defense.
    """
    if rng is None:
        raise InvalidArgument("A random source is required to resolve skills")
    stat = caster.stat(skill.scaling_stat)
    flat = round_half_away(skill.power)
    damage_scale = caster.damage_modifier
    if skill.target_type.is_multi:
        damage_scale *= 1.0 + caster.aoe_damage_bonus
    crit_chance = min(1.0, skill.crit_chance * caster.crit_modifier)
    outcomes: List[SkillOutcome] = []
    for target in targets:
        if skill.is_heal:
            healing = compute_healing(stat, skill.scaling) + flat
            outcome = SkillOutcome(target=target, healing=healing, status=_status_for(skill, caster, rng, constants))
        else:
            base = compute_damage(skill.damage_type, stat, target.effective_defense, skill.scaling, constants) + flat
            if damage_scale != 1.0:
                base = max(constants.minimum_damage, round_half_away(base * damage_scale))
            crit = roll_critical_hit(base, crit_chance, rng, skill.crit_multiplier)
            outcome = SkillOutcome(
                target=target,
                damage=crit.damage,
                is_critical=crit.is_critical,
                status=_status_for(skill, caster, rng, constants),
            )
        logger.debug(
            "%s uses %s on %s: damage=%d healing=%d crit=%s status=%s",
            caster.name,
            skill.name,
            target.name,
            outcome.damage,
            outcome.healing,
            outcome.is_critical,
            outcome.status.kind.value if outcome.status else None,
        )
        outcomes.append(outcome)
    if not outcomes:
        logger.debug("%s uses %s with no targets; it fizzles", caster.name, skill.name)
    return tuple(outcomes)


__all__ = [
    "StatusApplication",
    "SkillDefinition",
    "SkillSet",
    "SkillOutcome",
    "resolve_skill",
]
