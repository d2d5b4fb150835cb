import pytest

from arcanaterra.combat.combatant import Combatant, StatBlock, Team
from arcanaterra.combat.constants import (
    CombatConstants,
    DamageType,
    PrimaryStat,
    SkillReach,
    SkillTargetType,
    SkillType,
)
from arcanaterra.combat.skills import SkillDefinition, SkillSet, StatusApplication, resolve_skill
from arcanaterra.combat.status import StatusKind
from arcanaterra.errors import InvalidArgument, SkillOnCooldown
from arcanaterra.rng import RNG, FixedRolls


@pytest.fixture
def warrior():
    return Combatant(
        id="warrior",
        name="Warrior",
        team=Team.PARTY,
        stats=StatBlock(strength=15, agility=10, intelligence=5, defense=12, max_health=100),
    )


@pytest.fixture
def mage():
    return Combatant(
        id="mage",
        name="Mage",
        team=Team.PARTY,
        stats=StatBlock(strength=5, agility=8, intelligence=18, defense=6, max_health=70),
    )


@pytest.fixture
def target():
    return Combatant(
        id="ogre",
        name="Ogre",
        team=Team.ENEMY,
        stats=StatBlock(strength=20, agility=5, intelligence=2, defense=12, max_health=200),
    )


SLASH = SkillDefinition(
    name="Slash",
    skill_type=SkillType.BASIC,
    damage_type=DamageType.PHYSICAL,
    scaling_stat=PrimaryStat.STRENGTH,
    scaling=1.0,
    power=10,
)


def test_damage_skill_adds_power_after_mitigation(warrior, target):
    # 15 - 12 * 0.10 = 13.8 -> 14, plus 10 power
    (outcome,) = resolve_skill(SLASH, warrior, [target], FixedRolls([0.9]))
    assert outcome.damage == 24
    assert outcome.is_critical is False
    assert outcome.healing == 0
    assert outcome.status is None


def test_damage_skill_can_crit(warrior, target):
    (outcome,) = resolve_skill(SLASH, warrior, [target], FixedRolls([0.01]))
    assert outcome.is_critical is True
    assert outcome.damage == 36


def test_resolve_does_not_mutate_combatants(warrior, target):
    resolve_skill(SLASH, warrior, [target], RNG(seed=3))
    assert target.hp == 200
    assert warrior.hp == 100


def test_heal_skill(mage, warrior):
    heal = SkillDefinition(
        name="Heal",
        target_type=SkillTargetType.SINGLE_ALLY,
        reach=SkillReach.ALLY_ANY,
        damage_type=None,
        scaling_stat=PrimaryStat.INTELLIGENCE,
        scaling=1.5,
        power=30,
        cooldown=3,
    )
    rolls = FixedRolls([0.0])
    (outcome,) = resolve_skill(heal, mage, [warrior], rolls)
    assert heal.is_heal
    assert outcome.healing == 57
    assert outcome.damage == 0
    assert outcome.is_critical is False


def test_skill_builds_status_from_caster_stats(mage, target):
    fireball = SkillDefinition(
        name="Fireball",
        damage_type=DamageType.MAGICAL,
        scaling_stat=PrimaryStat.INTELLIGENCE,
        scaling=1.2,
        power=25,
        reach=SkillReach.RANGED_ANY,
        cooldown=2,
        status=StatusApplication(StatusKind.BURN),
    )
    (outcome,) = resolve_skill(fireball, mage, [target], FixedRolls([0.9]))
    assert outcome.status is not None
    assert outcome.status.kind is StatusKind.BURN
    assert outcome.status.source_stat == 18
    assert outcome.status.remaining == 2


def test_status_chance_consumes_one_roll_after_crit(warrior, target):
    skill = SkillDefinition(
        name="Rend",
        power=1,
        cooldown=1,
        status=StatusApplication(StatusKind.BLEED, chance=0.5),
    )
    (hit,) = resolve_skill(skill, warrior, [target], FixedRolls([0.9, 0.4]))
    assert hit.status is not None and hit.status.kind is StatusKind.BLEED
    (miss,) = resolve_skill(skill, warrior, [target], FixedRolls([0.9, 0.6]))
    assert miss.status is None


def test_multi_target_outcomes_follow_target_order(warrior, target):
    other = Combatant(id="imp", name="Imp", team=Team.ENEMY, stats=StatBlock(defense=0))
    cleave = SkillDefinition(name="Cleave", target_type=SkillTargetType.ALL_ENEMIES, scaling=0.6, power=20, cooldown=4)
    outcomes = resolve_skill(cleave, warrior, [target, other], FixedRolls([0.9]))
    assert [o.target.id for o in outcomes] == ["ogre", "imp"]
    # 9 - 1.2 = 7.8 -> 8 (+20) and 9 - 0 = 9 (+20)
    assert [o.damage for o in outcomes] == [28, 29]


def test_no_targets_fizzles(warrior):
    assert resolve_skill(SLASH, warrior, [], RNG(seed=1)) == ()


def test_resolve_requires_rng(warrior, target):
    with pytest.raises(InvalidArgument):
        resolve_skill(SLASH, warrior, [target], None)


def test_definition_validation():
    with pytest.raises(InvalidArgument):
        SkillDefinition(name="Bad", skill_type=SkillType.BASIC, cooldown=2)
    with pytest.raises(InvalidArgument):
        SkillDefinition(name="Bad", power=-1)
    with pytest.raises(InvalidArgument):
        SkillDefinition(name="Bad", crit_chance=1.2)
    with pytest.raises(InvalidArgument):
        SkillDefinition(name="")
    with pytest.raises(ValueError):
        SkillDefinition(name="Bad", reach="teleport")
    with pytest.raises(InvalidArgument):
        StatusApplication(StatusKind.STUN_IMMUNITY)


def test_from_dict_coerces_and_applies_default_cooldown():
    skill = SkillDefinition.from_dict(
        {
            "name": "Poison Dart",
            "target_type": "single_enemy",
            "reach": "ranged_any",
            "damage_type": "physical",
            "scaling_stat": "agility",
            "scaling": 0.5,
            "power": 5,
            "status": {"kind": "poison"},
        }
    )
    assert skill.skill_type is SkillType.ACTIVE
    assert skill.cooldown == 3
    assert skill.reach is SkillReach.RANGED_ANY
    assert skill.status.kind is StatusKind.POISON

    basic = SkillDefinition.from_dict({"name": "Jab", "skill_type": "basic"})
    assert basic.cooldown == 0


def test_unset_cooldown_defaults_by_skill_type():
    assert SkillDefinition(name="Taunt").cooldown == 3
    assert SkillDefinition(name="Jab", skill_type=SkillType.BASIC).cooldown == 0
    assert SkillDefinition(name="Quick Cast", cooldown=0).cooldown == 0
    # Data records follow the configured default
    slow = SkillDefinition.from_dict({"name": "Taunt"}, CombatConstants(default_active_cooldown=5))
    assert slow.cooldown == 5
    with pytest.raises(InvalidArgument):
        SkillDefinition(name="Bad", cooldown=1.5)


def test_skill_set_cooldowns():
    bash = SkillDefinition(name="Shield Bash", cooldown=2)
    skills = SkillSet([SLASH, bash])

    assert skills.basic_attack() is SLASH
    skills.use("Shield Bash")
    assert not skills.is_ready("Shield Bash")
    with pytest.raises(SkillOnCooldown):
        skills.use("Shield Bash")

    # Basic attacks never go on cooldown
    skills.use("Slash")
    skills.use("Slash")

    assert skills.reduce_cooldowns() == []
    assert skills.remaining_cooldown("Shield Bash") == 1
    assert skills.reduce_cooldowns() == ["Shield Bash"]
    assert skills.is_ready("Shield Bash")

    skills.use("Shield Bash")
    skills.reset()
    assert skills.cooldowns() == {"Slash": 0, "Shield Bash": 0}


def test_skill_set_limits():
    constants = CombatConstants(max_skill_count=2)
    skills = SkillSet([SLASH], constants=constants)
    with pytest.raises(InvalidArgument):
        skills.add(SLASH)
    skills.add(SkillDefinition(name="Cleave", cooldown=4))
    with pytest.raises(InvalidArgument):
        skills.add(SkillDefinition(name="Taunt", cooldown=2))
    with pytest.raises(KeyError):
        skills.use("Fireball")
    assert [s.name for s in skills.ready_skills()] == ["Slash", "Cleave"]
