from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

logger = logging.getLogger(__name__)


class RandomSource(Protocol):
    """Anything that can produce a uniform float in [0.0, 1.0).

    ``random.Random`` instances satisfy this, as does :class:`RNG`.
    """

    def random(self) -> float:  # pragma: no cover - protocol
        ...


@dataclass
class RNG:
    """
    Deterministic-friendly RNG wrapper around random.Random.

    Each combat simulation owns its own instance so crit rolls stay
    reproducible under a fixed seed and parallel simulations never share
    state. Nothing in the package touches the global ``random`` generator.
    """

    seed: Optional[int] = None

    def __post_init__(self) -> None:
        self._rng = random.Random(self.seed)
        if self.seed is not None:
            logger.debug("Initialized RNG with deterministic seed=%s", self.seed)
        else:
            logger.debug("Initialized RNG with non-deterministic seed")

    def random(self) -> float:
        """Return the next random float in the range [0.0, 1.0)."""
        return self._rng.random()

    def spawn(self) -> "RNG":
        """Derive an independent child RNG, e.g. for a what-if simulation."""
        return RNG(seed=self._rng.getrandbits(32))

    def state(self):
        """Return the internal PRNG state for debugging or persistence."""
        return self._rng.getstate()

    def set_state(self, state) -> None:
        """Restore the internal PRNG state."""
        self._rng.setstate(state)


class FixedRolls:
    """Replays a fixed sequence of rolls; handy for scripted encounters and tests."""

    def __init__(self, rolls: Sequence[float]) -> None:
        if not rolls:
            raise ValueError("FixedRolls requires at least one roll")
        for r in rolls:
            if not (0.0 <= r < 1.0):
                raise ValueError(f"Roll {r!r} outside [0.0, 1.0)")
        self._rolls = list(rolls)
        self._index = 0

    def random(self) -> float:
        value = self._rolls[self._index % len(self._rolls)]
        self._index += 1
        return value


__all__ = ["RandomSource", "RNG", "FixedRolls"]
