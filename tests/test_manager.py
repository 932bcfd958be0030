import json

import pytest

from buildcalc.calc_calculator import Calculator
from buildcalc.calc_errors import MathError
from buildcalc.calc_manager import CalculatorsManager, DataManager


def test_fresh_manager_is_clean(manager: CalculatorsManager) -> None:
    assert not manager.dirty
    assert isinstance(manager.get_global_data(), Calculator)
    assert manager.get_global_data().manager is manager
    assert manager.player_data == {}


def test_base_manager_needs_default_data() -> None:
    with pytest.raises(NotImplementedError):
        DataManager()


def test_player_data_created_once(manager: CalculatorsManager) -> None:
    alice = manager.get_or_create_player_data("alice")
    assert manager.dirty
    assert manager.get_or_create_player_data("alice") is alice
    assert alice is not manager.get_global_data()
    assert alice.manager is manager


def test_calculator_changes_mark_dirty(manager: CalculatorsManager) -> None:
    calc = manager.get_global_data()
    calc.evaluate("1 + 1")
    assert not manager.dirty
    calc.evaluate("x = 1")
    assert manager.dirty

    manager.save()
    assert not manager.dirty
    calc.evaluate("f(a) = a")
    assert manager.dirty

    manager.save()
    calc.evaluate("del x")
    assert manager.dirty

    manager.save()
    calc.reset()
    assert manager.dirty


def test_failed_statement_does_not_mark_dirty(manager: CalculatorsManager) -> None:
    calc = manager.get_global_data()
    with pytest.raises(MathError):
        calc.evaluate("x = 1 / 0")
    assert not manager.dirty


def test_save_layout(manager: CalculatorsManager) -> None:
    manager.get_global_data().evaluate("g = 1")
    manager.get_or_create_player_data("bob").evaluate("b = 2")
    manager.get_or_create_player_data("alice").evaluate("a = 3")
    tag = manager.save()
    assert tag["GlobalData"]["Variables"] == [{"Name": "g", "Value": 1.0}]
    assert [p["UUID"] for p in tag["PlayersData"]] == ["alice", "bob"]
    assert tag["PlayersData"][1]["PlayerData"]["Variables"] == [
        {"Name": "b", "Value": 2.0}
    ]
    # The tag is plain JSON data
    assert json.loads(json.dumps(tag)) == tag


def test_load_round_trip(manager: CalculatorsManager) -> None:
    manager.get_global_data().evaluate("sq(x) = x * x")
    manager.get_or_create_player_data("alice").evaluate("a = 4")
    tag = manager.save()

    restored = CalculatorsManager.from_tag(tag)
    assert not restored.dirty
    assert restored.get_global_data().evaluate("sq(3)").value == 9
    alice = restored.get_or_create_player_data("alice")
    assert not restored.dirty
    assert alice.evaluate("a").value == 4
    assert alice.manager is restored

    alice.evaluate("a = 5")
    assert restored.dirty


def test_load_malformed_leaves_manager_unchanged(manager: CalculatorsManager) -> None:
    manager.get_global_data().evaluate("x = 1")
    with pytest.raises(KeyError):
        manager.load({"PlayersData": [{"UUID": "p"}]})
    assert manager.get_global_data().get_variables() == {"x": 1.0}


def test_calculator_options_are_applied() -> None:
    manager = CalculatorsManager(max_definitions=2, max_call_depth=5)
    calc = manager.get_or_create_player_data("p")
    assert calc.max_definitions == 2
    assert calc.max_call_depth == 5
