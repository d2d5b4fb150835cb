import logging
import math

import pytest

from arcanaterra.combat.constants import (
    DEFAULTS,
    CombatConstants,
    CombatPhase,
    DamageType,
    RowPosition,
    SkillReach,
    SkillTargetType,
)
from arcanaterra.errors import (
    ArcanaTerraError,
    CombatError,
    ConfigError,
    DataValidationError,
    InvalidArgument,
    InvalidPhaseTransition,
    SkillOnCooldown,
)
from arcanaterra.logging_config import configure_logging


def test_default_values():
    assert DEFAULTS.crit_multiplier == 1.5
    assert DEFAULTS.base_crit_chance == 0.05
    assert DEFAULTS.physical_defense_reduction == 0.10
    assert DEFAULTS.magical_defense_reduction == 0.05
    assert DEFAULTS.minimum_damage == 1
    assert DEFAULTS.max_skill_targets == 5
    assert DEFAULTS.default_active_cooldown == 3
    assert DEFAULTS.max_skill_count == 10
    assert (DEFAULTS.burn_duration, DEFAULTS.poison_duration, DEFAULTS.stun_duration) == (2, 3, 1)
    assert (DEFAULTS.shield_duration, DEFAULTS.bleed_duration, DEFAULTS.slow_duration) == (2, 3, 2)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"crit_multiplier": -1.0},
        {"physical_defense_reduction": math.inf},
        {"base_crit_chance": 1.01},
        {"minimum_damage": -1},
        {"max_skill_targets": 0},
        {"bleed_max_stacks": 0},
        {"stun_duration": -1},
    ],
)
def test_out_of_range_constants_rejected(kwargs):
    with pytest.raises(InvalidArgument):
        CombatConstants(**kwargs)


def test_to_dict_round_trips_field_names():
    d = DEFAULTS.to_dict()
    assert set(d) == CombatConstants.field_names()
    assert CombatConstants(**d) == DEFAULTS


def test_enums_are_closed_sets():
    with pytest.raises(ValueError):
        DamageType("holy")
    with pytest.raises(ValueError):
        SkillReach("anywhere")
    assert RowPosition("back") is RowPosition.BACK
    assert len(CombatPhase) == 7
    assert len(SkillReach) == 6


def test_multi_and_terminal_flags():
    multi = {t for t in SkillTargetType if t.is_multi}
    assert multi == {SkillTargetType.ALL_ENEMIES, SkillTargetType.ALL_ALLIES, SkillTargetType.ALL_ANY}
    assert {p for p in CombatPhase if p.is_terminal} == {CombatPhase.VICTORY, CombatPhase.DEFEAT}


def test_error_hierarchy():
    assert issubclass(InvalidArgument, ArcanaTerraError)
    assert issubclass(InvalidArgument, ValueError)
    assert issubclass(InvalidPhaseTransition, CombatError)
    assert issubclass(SkillOnCooldown, CombatError)
    assert issubclass(ConfigError, ArcanaTerraError)
    assert issubclass(DataValidationError, ArcanaTerraError)
    assert DataValidationError("boom").to_human() == "boom"


def test_configure_logging_honours_env(monkeypatch):
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        monkeypatch.setenv("ARCANA_LOG_LEVEL", "debug")
        configure_logging()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1

        monkeypatch.setenv("ARCANA_LOG_LEVEL", "not-a-level")
        configure_logging(default_level=logging.WARNING)
        assert root.level == logging.WARNING
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
        for h in saved_handlers:
            root.addHandler(h)
        root.setLevel(saved_level)
