from __future__ import annotations

import logging
from typing import Callable, Iterable, List, Optional, Protocol, Union

logger = logging.getLogger(__name__)


class SupportsTurnActor(Protocol):
    """What the queue reads from a combatant.

    - agility: higher acts earlier
    - is_alive: property or method; dead actors never act
    - id: stable identifier used to break agility ties
    """

    id: Union[str, int]
    agility: int

    @property
    def is_alive(self) -> bool:  # pragma: no cover - protocol
        ...


AgilityLookup = Callable[[SupportsTurnActor], Union[int, float]]


class TurnQueue:
    """Deterministic agility-based turn order.

    - Orders living actors by agility descending at the start of every round,
      so Slow and other agility changes take effect on the next round.
    - Ties go to the lower id; integer ids sort before string ids.
    - Actors flagged ``always_acts_last`` (the AFK Farmer trait) go after
      everyone else, ordered among themselves the same way.
    - Actors that die mid-round are skipped when their turn comes up.

    Usage:
        tq = TurnQueue(combatants)
        actor = tq.next_actor()  # None once nobody is alive

    ``agility_of`` lets the driver fold in status modifiers, e.g.
    ``lambda c: trackers[c.id].effective_agility(c.agility)``.
    """

    def __init__(
        self,
        actors: Iterable[SupportsTurnActor],
        *,
        agility_of: Optional[AgilityLookup] = None,
    ) -> None:
        self._actors: List[SupportsTurnActor] = list(actors)
        self._agility_of: AgilityLookup = agility_of or (lambda a: a.agility)
        self._queue: List[SupportsTurnActor] = []
        self.round_number: int = 0

    @property
    def actors(self) -> List[SupportsTurnActor]:
        return list(self._actors)

    def add_actor(self, actor: SupportsTurnActor) -> None:
        """Add an actor; it joins from the next round."""
        self._actors.append(actor)
        logger.debug("Added actor %r. Roster size now %d", actor.id, len(self._actors))

    def remove_actor(self, actor: SupportsTurnActor) -> None:
        if actor in self._actors:
            self._actors.remove(actor)
            logger.debug("Removed actor %r. Roster size now %d", actor.id, len(self._actors))
        else:
            logger.debug("Attempted to remove actor %r but it was not in roster", actor.id)

    def preview(self) -> List[SupportsTurnActor]:
        """Remaining order for the current round, without consuming it."""
        return [a for a in self._queue if self._is_alive(a)]

    def next_actor(self) -> Optional[SupportsTurnActor]:
        """Return the next living actor, starting a new round when needed."""
        while True:
            if not any(self._is_alive(a) for a in self._actors):
                logger.debug("No alive actors. next_actor() -> None")
                return None
            if not self._queue:
                self._rebuild_for_new_round()
            while self._queue:
                nxt = self._queue.pop(0)
                if self._is_alive(nxt):
                    logger.debug("Round %d: next actor is %r", self.round_number, nxt.id)
                    return nxt
                logger.debug("Skipped dead actor %r during round %d", nxt.id, self.round_number)

    def _rebuild_for_new_round(self) -> None:
        alive = [a for a in self._actors if self._is_alive(a)]
        self._queue = sorted(alive, key=self._sort_key)
        self.round_number += 1
        logger.debug("Built round %d: %s", self.round_number, [a.id for a in self._queue])

    def _sort_key(self, actor: SupportsTurnActor):
        ident = actor.id
        tie = (0, ident, "") if isinstance(ident, int) else (1, 0, str(ident))
        last = 1 if getattr(actor, "always_acts_last", False) else 0
        return (last, -float(self._agility_of(actor)), tie)

    @staticmethod
    def _is_alive(actor: SupportsTurnActor) -> bool:
        val = getattr(actor, "is_alive")
        return val() if callable(val) else bool(val)


__all__ = ["SupportsTurnActor", "TurnQueue"]
