from arcanaterra.combat.combatant import Combatant, StatBlock, Team
from arcanaterra.combat.status import StatusEffect, StatusEffectTracker
from arcanaterra.combat.turn_queue import TurnQueue


def actor(id, agility, hp=10, team=Team.PARTY):
    return Combatant(id=id, name=str(id), team=team, stats=StatBlock(agility=agility, max_health=10), hp=hp)


def test_agility_descending_order_recalculated_each_round():
    a = actor("A", 10)
    b = actor("B", 20)
    c = actor("C", 15)
    agility = {"A": 10, "B": 20, "C": 15}

    tq = TurnQueue([a, b, c], agility_of=lambda x: agility[x.id])

    first_round = [tq.next_actor().id for _ in range(3)]
    assert first_round == ["B", "C", "A"]
    assert tq.round_number == 1

    # Agility change before the next round starts is picked up
    agility["A"] = 25

    second_round = [tq.next_actor().id for _ in range(3)]
    assert second_round == ["A", "B", "C"]
    assert tq.round_number == 2


def test_dead_actors_skipped_mid_round_and_excluded_next_round():
    a = actor("A", 20)
    b = actor("B", 15)
    c = actor("C", 10)

    tq = TurnQueue([a, b, c])

    assert tq.next_actor().id == "A"
    b.take_damage(10)
    assert tq.next_actor().id == "C"

    assert [tq.next_actor().id, tq.next_actor().id] == ["A", "C"]


def test_ties_are_deterministic_by_id():
    a = actor("2", 10)
    b = actor("1", 10)

    tq = TurnQueue([a, b])

    assert [tq.next_actor().id, tq.next_actor().id] == ["1", "2"]
    assert [tq.next_actor().id, tq.next_actor().id] == ["1", "2"]


def test_integer_ids_tie_break_numerically():
    tq = TurnQueue([actor(10, 5), actor(9, 5), actor(2, 5)])
    assert [tq.next_actor().id for _ in range(3)] == [2, 9, 10]


def test_no_alive_actors_returns_none():
    tq = TurnQueue([actor("A", 5, hp=0), actor("B", 7, hp=0)])
    assert tq.next_actor() is None
    assert tq.next_actor() is None


def test_everyone_dies_mid_round():
    a = actor("A", 10)
    b = actor("B", 5)
    tq = TurnQueue([a, b])
    assert tq.next_actor() is a
    a.take_damage(10)
    b.take_damage(10)
    assert tq.next_actor() is None


def test_adding_and_removing_actors_affects_future_rounds():
    a = actor("A", 10)
    b = actor("B", 20)
    tq = TurnQueue([a, b])

    assert tq.next_actor() is b
    c = actor("C", 30)
    tq.add_actor(c)
    tq.remove_actor(a)
    # A was already queued for this round and still acts
    assert tq.next_actor() is a
    assert [tq.next_actor().id, tq.next_actor().id] == ["C", "B"]


def test_preview_does_not_consume():
    tq = TurnQueue([actor("A", 10), actor("B", 20)])
    first = tq.next_actor()
    assert first.id == "B"
    assert [x.id for x in tq.preview()] == ["A"]
    assert tq.next_actor().id == "A"


def test_slow_changes_order_through_status_tracker():
    a = actor("a", 10)
    b = actor("b", 11)
    trackers = {"a": StatusEffectTracker("a"), "b": StatusEffectTracker("b")}
    tq = TurnQueue([a, b], agility_of=lambda c: trackers[c.id].effective_agility(c.agility))

    assert [tq.next_actor().id for _ in range(2)] == ["b", "a"]
    # 11 - round(1.1) = 10; the tie goes to the lower id
    trackers["b"].apply(StatusEffect.slow())
    assert [tq.next_actor().id for _ in range(2)] == ["a", "b"]
