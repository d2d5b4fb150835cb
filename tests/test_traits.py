import pytest

from arcanaterra.combat.combatant import Combatant, StatBlock, Team
from arcanaterra.combat.constants import SkillTargetType, SkillType
from arcanaterra.combat.skills import SkillDefinition, resolve_skill
from arcanaterra.combat.traits import AFKFarmer, PartyTraits, registry
from arcanaterra.combat.turn_queue import TurnQueue
from arcanaterra.errors import InvalidArgument
from arcanaterra.rng import FixedRolls

STRIKE = SkillDefinition(name="Strike", skill_type=SkillType.BASIC, crit_chance=0.0)
SWEEP = SkillDefinition(name="Sweep", target_type=SkillTargetType.ALL_ENEMIES, crit_chance=0.0, cooldown=2)


def member(id, traits=(), agility=10, defense=12):
    return Combatant(
        id=id,
        name=id,
        team=Team.PARTY,
        stats=StatBlock(strength=20, agility=agility, intelligence=5, defense=defense, max_health=100),
        traits=traits,
    )


def ogre(defense=10):
    return Combatant(id="ogre", name="Ogre", team=Team.ENEMY, stats=StatBlock(defense=defense))


def damage(skill, caster, target):
    (outcome,) = resolve_skill(skill, caster, [target], FixedRolls([0.9]))
    return outcome.damage


def test_registry_knows_the_bundled_traits():
    assert registry.names() == ["AFK Farmer", "Drama Queen", "Glass Cannon Main"]
    assert isinstance(registry.create("AFK Farmer"), AFKFarmer)
    with pytest.raises(KeyError):
        registry.create("Speedrunner")
    with pytest.raises(KeyError):
        PartyTraits([member("zed", traits=("Speedrunner",))])


def test_glass_cannon_trades_defense_for_damage():
    hero = member("hero", traits=("Glass Cannon Main",))
    party = PartyTraits([hero])
    party.on_combat_start()

    assert hero.defense_modifier == 0.75
    assert hero.effective_defense == 9
    assert hero.aoe_damage_bonus == pytest.approx(0.10)

    # 20 - 10 * 0.10 = 19 before the skill is chosen
    assert damage(STRIKE, hero, ogre()) == 19
    party.on_skill_used(hero, STRIKE)
    # 19 * 1.25 = 23.75
    assert damage(STRIKE, hero, ogre()) == 24
    party.on_skill_used(hero, SWEEP)
    # 19 * 1.35 * 1.10 (party AoE bonus) = 28.2
    assert damage(SWEEP, hero, ogre()) == 28


def test_glass_cannon_target_takes_more_damage():
    attacker = member("attacker")
    plain = member("plain", defense=20)
    fragile = member("fragile", traits=("Glass Cannon Main",), defense=20)
    PartyTraits([plain, fragile]).on_combat_start()
    # 20 - 20 * 0.10 = 18 against 20 - 15 * 0.10 = 18.5
    assert damage(STRIKE, attacker, plain) == 18
    assert damage(STRIKE, attacker, fragile) == 19


def test_afk_farmer_acts_last_and_hits_harder_after_skipping():
    afk = member("afk", traits=("AFK Farmer",), agility=50)
    quick = member("quick", agility=10)
    party = PartyTraits([afk, quick])
    party.on_combat_start()

    queue = TurnQueue([afk, quick])
    assert [queue.next_actor().id for _ in range(2)] == ["quick", "afk"]

    party.on_turn_start(afk)
    party.on_skill_used(afk, None)
    party.on_turn_start(afk)
    assert afk.damage_modifier == 1.3
    # 19 * 1.3 = 24.7
    assert damage(STRIKE, afk, ogre()) == 25
    party.on_skill_used(afk, STRIKE)
    party.on_turn_start(afk)
    assert afk.damage_modifier == 1.0


def test_drama_queen_raises_party_crit_chance():
    queen = member("queen", traits=("Drama Queen",))
    friend = member("friend")
    outsider = member("outsider")
    PartyTraits([queen, friend]).on_combat_start()
    assert friend.crit_modifier == pytest.approx(1.05)

    skill = SkillDefinition(name="Jab", skill_type=SkillType.BASIC, crit_chance=0.5)
    # 0.52 misses a 50% chance but lands under 52.5%
    (boosted,) = resolve_skill(skill, friend, [ogre()], FixedRolls([0.52]))
    (plain,) = resolve_skill(skill, outsider, [ogre()], FixedRolls([0.52]))
    assert boosted.is_critical
    assert not plain.is_critical


def test_combat_end_restores_neutral_modifiers():
    hero = member("hero", traits=("Glass Cannon Main", "AFK Farmer"))
    party = PartyTraits([hero])
    party.on_combat_start()
    assert hero.always_acts_last
    party.on_combat_end()
    assert (hero.damage_modifier, hero.defense_modifier, hero.crit_modifier) == (1.0, 1.0, 1.0)
    assert hero.aoe_damage_bonus == 0.0
    assert not hero.always_acts_last


def test_modifiers_are_validated():
    with pytest.raises(InvalidArgument):
        Combatant(id="x", name="x", team=Team.PARTY, damage_modifier=-1.0)
    with pytest.raises(InvalidArgument):
        Combatant(id="x", name="x", team=Team.PARTY, crit_modifier=float("nan"))
