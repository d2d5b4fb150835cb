"""Combat resolution core: formulas, targeting, statuses, skills and turn order."""

from .combatant import Combatant, StatBlock, Team
from .constants import (
    DEFAULTS,
    CombatConstants,
    CombatPhase,
    DamageType,
    PrimaryStat,
    RowPosition,
    SkillReach,
    SkillTargetType,
    SkillType,
)
from .damage import (
    CriticalRoll,
    compute_critical_damage,
    compute_damage,
    compute_healing,
    compute_magical_damage,
    compute_physical_damage,
    compute_true_damage,
    mitigation_ratio,
    roll_critical_hit,
    roll_for_critical,
    round_half_away,
)
from .phases import PhaseTracker
from .skills import SkillDefinition, SkillOutcome, SkillSet, StatusApplication, resolve_skill
from .status import StatusEffect, StatusEffectTracker, StatusKind
from .targeting import eligible_targets, select_targets
from .traits import PartyTraits, Trait, TraitRegistry
from .turn_queue import TurnQueue

__all__ = [
    "Combatant",
    "StatBlock",
    "Team",
    "DEFAULTS",
    "CombatConstants",
    "CombatPhase",
    "DamageType",
    "PrimaryStat",
    "RowPosition",
    "SkillReach",
    "SkillTargetType",
    "SkillType",
    "CriticalRoll",
    "compute_critical_damage",
    "compute_damage",
    "compute_healing",
    "compute_magical_damage",
    "compute_physical_damage",
    "compute_true_damage",
    "mitigation_ratio",
    "roll_critical_hit",
    "roll_for_critical",
    "round_half_away",
    "PhaseTracker",
    "SkillDefinition",
    "SkillOutcome",
    "SkillSet",
    "StatusApplication",
    "resolve_skill",
    "StatusEffect",
    "StatusEffectTracker",
    "StatusKind",
    "eligible_targets",
    "select_targets",
    "PartyTraits",
    "Trait",
    "TraitRegistry",
    "TurnQueue",
]
