from __future__ import annotations

import logging
from typing import Dict, FrozenSet, List

from ..errors import InvalidPhaseTransition
from .constants import CombatPhase

logger = logging.getLogger(__name__)

_P = CombatPhase

ALLOWED_TRANSITIONS: Dict[CombatPhase, FrozenSet[CombatPhase]] = {
    _P.PREPARATION: frozenset({_P.TURN_START}),
    # TURN_END directly when the active combatant is stunned
    _P.TURN_START: frozenset({_P.ACTION, _P.TURN_END}),
    _P.ACTION: frozenset({_P.EXECUTION}),
    _P.EXECUTION: frozenset({_P.TURN_END, _P.VICTORY, _P.DEFEAT}),
    _P.TURN_END: frozenset({_P.TURN_START, _P.VICTORY, _P.DEFEAT}),
    _P.VICTORY: frozenset(),
    _P.DEFEAT: frozenset(),
}


def can_transition(current: CombatPhase, to: CombatPhase) -> bool:
    return to in ALLOWED_TRANSITIONS[current]


class PhaseTracker:
    """Enforces the combat phase order for a turn driver.

    Starts in PREPARATION. Every entry into TURN_START counts as a new turn.
    VICTORY and DEFEAT are absorbing: advancing into the phase already held is
    a no-op, anything else raises.

    Usage:
        phases = PhaseTracker()
        phases.advance(CombatPhase.TURN_START)
        phases.advance(CombatPhase.ACTION)
    """

    def __init__(self) -> None:
        self._phase: CombatPhase = CombatPhase.PREPARATION
        self._history: List[CombatPhase] = [CombatPhase.PREPARATION]
        self.turn: int = 0

    @property
    def phase(self) -> CombatPhase:
        return self._phase

    @property
    def history(self) -> List[CombatPhase]:
        return list(self._history)

    @property
    def is_terminal(self) -> bool:
        return self._phase.is_terminal

    def advance(self, to: CombatPhase) -> CombatPhase:
        """Move to ``to`` and return it.

        Raises:
            InvalidPhaseTransition: if ``to`` is not reachable from the current phase.
        """
        to = CombatPhase(to)
        if self._phase.is_terminal and to is self._phase:
            logger.debug("Combat already ended in %s; ignoring re-entry", to.value)
            return to
        if not can_transition(self._phase, to):
            raise InvalidPhaseTransition(f"Cannot move from {self._phase.value} to {to.value}")
        if to is CombatPhase.TURN_START:
            self.turn += 1
        logger.debug("Phase %s -> %s (turn %d)", self._phase.value, to.value, self.turn)
        self._phase = to
        self._history.append(to)
        return to


__all__ = ["ALLOWED_TRANSITIONS", "can_transition", "PhaseTracker"]
