from __future__ import annotations

from typing import Optional


class ArcanaTerraError(Exception):
    """Base error for Arcana Terra domain exceptions."""


class InvalidArgument(ArcanaTerraError, ValueError):
    """Raised when a caller passes a negative stat, a non-finite multiplier or similar."""


class CombatError(ArcanaTerraError):
    """Raised for combat related errors."""


class InvalidPhaseTransition(CombatError):
    """Raised when a combat phase change breaks the turn order."""


class SkillOnCooldown(CombatError):
    """Raised when a skill is used before its cooldown has elapsed."""


class ConfigError(ArcanaTerraError):
    """Raised when combat configuration cannot be loaded or is malformed."""


class DataValidationError(ArcanaTerraError):
    """Raised when a definition file fails schema validation."""

    def __init__(self, message: str, errors: Optional[list] = None):
        super().__init__(message)
        self.errors = errors or []

    def to_human(self) -> str:
        parts = [str(self)]
        for e in self.errors:
            path = "/".join(str(p) for p in e.path) or "<root>"
            parts.append(f" - at {path}: {e.message}")
        return "\n".join(parts)
