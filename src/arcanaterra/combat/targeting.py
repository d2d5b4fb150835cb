"""Skill target selection.

A skill's ``SkillTargetType`` decides which side(s) and how many combatants it
can touch; its ``SkillReach`` then filters those candidates by row. The two
compose: side/cardinality ∩ row eligibility = final candidate set.

Priority order, used both for display and for truncating oversized
multi-target sets to ``max_skill_targets``:

1. opposing side before the caster's side
2. front row before back row
3. ascending slot index
4. battlefield order (the order combatants were passed in)

An empty result is a fizzle, not an error.
"""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Protocol, Sequence, Tuple, Union

from ..errors import InvalidArgument
from .constants import DEFAULTS, CombatConstants, RowPosition, SkillReach, SkillTargetType

logger = logging.getLogger(__name__)


class Targetable(Protocol):
    """What targeting reads from a combatant; :class:`Combatant` satisfies it."""

    id: Union[str, int]
    team: object
    row: RowPosition
    slot: int

    @property
    def is_alive(self) -> bool:  # pragma: no cover - protocol
        ...


_ROW_ORDER = {RowPosition.FRONT: 0, RowPosition.BACK: 1}

_ENEMY_TYPES = (SkillTargetType.SINGLE_ENEMY, SkillTargetType.ALL_ENEMIES)
_ALLY_TYPES = (SkillTargetType.SINGLE_ALLY, SkillTargetType.ALL_ALLIES)
_ANY_TYPES = (SkillTargetType.SINGLE_ANY, SkillTargetType.ALL_ANY)


def _is_alive(c: Targetable) -> bool:
    val = getattr(c, "is_alive")
    return val() if callable(val) else bool(val)


def is_opponent(caster: Targetable, other: Targetable) -> bool:
    return other.team != caster.team


def _with_caster(caster: Targetable, pool: List[Targetable]) -> List[Targetable]:
    # The caster counts as an ally even when the battlefield omits it
    if _is_alive(caster) and not any(c is caster for c in pool):
        pool.append(caster)
    return pool


def _candidates_for_type(
    caster: Targetable, target_type: SkillTargetType, battlefield: Sequence[Targetable]
) -> List[Targetable]:
    living = [c for c in battlefield if _is_alive(c)]
    if target_type is SkillTargetType.SELF:
        return [caster] if _is_alive(caster) else []
    if target_type in _ENEMY_TYPES:
        return [c for c in living if is_opponent(caster, c)]
    if target_type in _ALLY_TYPES:
        return _with_caster(caster, [c for c in living if not is_opponent(caster, c)])
    if target_type in _ANY_TYPES:
        return _with_caster(caster, living)
    raise InvalidArgument(f"Unsupported target type: {target_type!r}")


def _front_then_back(opponents: List[Targetable]) -> List[Targetable]:
    front = [c for c in opponents if c.row is RowPosition.FRONT]
    if front:
        return front
    return [c for c in opponents if c.row is RowPosition.BACK]


def _apply_reach(
    caster: Targetable, reach: SkillReach, candidates: List[Targetable]
) -> List[Targetable]:
    if reach is SkillReach.RANGED_ANY:
        return candidates
    if reach is SkillReach.ALLY_SELF:
        return [c for c in candidates if c is caster]
    if reach is SkillReach.ALLY_ANY:
        return [c for c in candidates if not is_opponent(caster, c)]
    if reach is SkillReach.ADJACENT_ONLY:
        return [c for c in candidates if c.row is caster.row]

    # Melee reaches only restrict the opposing side; allies pass through
    opponents = [c for c in candidates if is_opponent(caster, c)]
    if reach is SkillReach.MELEE_FRONT_ONLY:
        eligible = [c for c in opponents if c.row is RowPosition.FRONT]
    elif reach is SkillReach.MELEE_FRONT_THEN_BACK:
        eligible = _front_then_back(opponents)
    else:
        raise InvalidArgument(f"Unsupported reach: {reach!r}")
    keep = {id(c) for c in eligible}
    return [c for c in candidates if not is_opponent(caster, c) or id(c) in keep]


def priority_order(caster: Targetable, combatants: Iterable[Targetable]) -> List[Targetable]:
    """Sort combatants by targeting priority (see module docstring). Stable."""
    indexed = list(enumerate(combatants))

    def key(item: Tuple[int, Targetable]):
        index, c = item
        side = 0 if is_opponent(caster, c) else 1
        return (side, _ROW_ORDER[c.row], c.slot, index)

    return [c for _, c in sorted(indexed, key=key)]


def eligible_targets(
    caster: Targetable,
    target_type: SkillTargetType,
    reach: SkillReach,
    battlefield: Sequence[Targetable],
    constants: CombatConstants = DEFAULTS,
) -> Tuple[Targetable, ...]:
    """Return every combatant the skill may legally hit, in priority order.

    Multi-target types (``ALL_*``) are capped at ``constants.max_skill_targets``.
    Single-target types return the full pool to choose from.

    Args:
        caster: The combatant using the skill.
        target_type: Side and cardinality filter.
        reach: Row eligibility filter.
        battlefield: Every combatant in the encounter, both sides, in formation order.
        constants: Supplies the target cap.

    Returns:
        A tuple of eligible combatants; empty when the skill would fizzle.
    """
    candidates = _candidates_for_type(caster, target_type, battlefield)
    filtered = _apply_reach(caster, reach, candidates)
    ordered = priority_order(caster, filtered)
    if target_type.is_multi and len(ordered) > constants.max_skill_targets:
        logger.debug(
            "Truncating %d eligible targets to %d for %s",
            len(ordered),
            constants.max_skill_targets,
            target_type.value,
        )
        ordered = ordered[: constants.max_skill_targets]
    if not ordered:
        logger.debug(
            "No valid targets for %r (%s, %s); skill fizzles", caster.id, target_type.value, reach.value
        )
    else:
        logger.debug(
            "Eligible targets for %r (%s, %s): %s",
            caster.id,
            target_type.value,
            reach.value,
            [c.id for c in ordered],
        )
    return tuple(ordered)


def select_targets(
    caster: Targetable,
    target_type: SkillTargetType,
    reach: SkillReach,
    battlefield: Sequence[Targetable],
    chosen: Optional[Targetable] = None,
    constants: CombatConstants = DEFAULTS,
) -> Tuple[Targetable, ...]:
    """Resolve the final target list for one skill use.

    ``ALL_*`` types hit every eligible target. Single-target types and ``SELF``
    hit ``chosen`` when given (it must be eligible) or the highest-priority
    eligible combatant otherwise.

    Raises:
        InvalidArgument: if ``chosen`` is not an eligible target, or is given
            for a multi-target skill.
    """
    pool = eligible_targets(caster, target_type, reach, battlefield, constants)
    if target_type.is_multi:
        if chosen is not None:
            raise InvalidArgument(f"{target_type.value} skills do not take an explicit target")
        return pool
    if chosen is None:
        return pool[:1]
    if not any(c is chosen for c in pool):
        raise InvalidArgument(f"{chosen.id!r} is not a valid target for this skill")
    return (chosen,)


__all__ = [
    "Targetable",
    "is_opponent",
    "priority_order",
    "eligible_targets",
    "select_targets",
]
