import logging

import pytest

from tilematch.components.engine_state import EngineMode
from tilematch.constants import ANIM_RESHUFFLE
from tilematch.events.bus import (
    EVENT_HINT_AVAILABLE,
    EVENT_HINT_CLEARED,
    EVENT_NO_MOVE_FOUND,
    EVENT_RESHUFFLE_COMPLETE,
    EVENT_TILES_RESHUFFLED,
)
from tilematch.exceptions import Busy
from tilematch.systems.board_ops import get_board, kind_grid
from tilematch.systems.hints import find_hint
from tilematch.systems.match_detection import find_match_groups
from tilematch.systems.reshuffle import reshuffle_board
from tilematch.utils.engine_state import set_engine_mode
from tests.helpers import make_engine, record

KINDS = ['A', 'B', 'C', 'D']
SMALL = [
    ['A', 'A', 'B'],
    ['C', 'D', 'A'],
    ['A', 'A', 'B'],
]
IDLE_EVENTS = (
    EVENT_HINT_AVAILABLE,
    EVENT_HINT_CLEARED,
    EVENT_NO_MOVE_FOUND,
    EVENT_TILES_RESHUFFLED,
    EVENT_RESHUFFLE_COMPLETE,
)


def stripes(rows, cols):
    return [['ABC'[(r + c) % 3] for c in range(cols)] for r in range(rows)]


def entity_grid(world):
    board = get_board(world)
    return [[board.get(r, c) for c in range(board.cols)] for r in range(board.rows)]


def test_idle_timer_offers_hint_after_delay():
    engine, _ = make_engine(SMALL, hint_delay=1.0)
    log = record(engine.event_bus, *IDLE_EVENTS)
    engine.tick(0.6)
    assert log == []
    engine.tick(0.6)
    assert [name for name, _ in log] == [EVENT_HINT_AVAILABLE]
    assert (log[0][1]['src'], log[0][1]['dst']) == ((0, 2), (1, 2))
    assert engine.state.mode == EngineMode.SUGGESTING_HINT
    engine.tick(5.0)
    assert len(log) == 1


def test_swap_clears_the_shown_hint():
    engine, driver = make_engine(SMALL, hint_delay=1.0)
    log = record(engine.event_bus, *IDLE_EVENTS)
    engine.tick(1.0)
    engine.request_swap((0, 2), (1, 2))
    assert [name for name, _ in log] == [EVENT_HINT_AVAILABLE, EVENT_HINT_CLEARED]
    assert engine.hint_system.current is None


def test_timer_does_not_run_while_busy():
    engine, driver = make_engine(SMALL, hint_delay=1.0)
    log = record(engine.event_bus, *IDLE_EVENTS)
    engine.request_swap((0, 0), (1, 0))
    engine.tick(10.0)
    assert log == []
    driver.drain()
    engine.tick(0.5)
    assert log == []


def test_deadlocked_board_is_reshuffled():
    engine, driver = make_engine(stripes(5, 5), kinds=KINDS, hint_delay=1.0)
    world = engine.world
    tiles_before = entity_grid(world)
    log = record(engine.event_bus, *IDLE_EVENTS)

    engine.tick(1.0)
    # The reshuffle starts from inside the no-move notification.
    assert {name for name, _ in log} == {EVENT_NO_MOVE_FOUND, EVENT_TILES_RESHUFFLED}
    assert engine.state.mode == EngineMode.RESHUFFLING
    assert entity_grid(world) == tiles_before
    assert find_match_groups(world) == []

    driver.drain()
    assert driver.played == [ANIM_RESHUFFLE]
    assert log[-1][0] == EVENT_RESHUFFLE_COMPLETE
    assert engine.state.mode == EngineMode.IDLE


def test_reshuffle_keeps_tiles_and_removes_matches():
    for seed in range(10):
        engine, driver = make_engine(seed=seed)
        world = engine.world
        tiles_before = entity_grid(world)
        result = engine.reshuffle_system.reshuffle()
        assert not result.fallback
        assert entity_grid(world) == tiles_before
        assert find_match_groups(world) == []
        assert find_hint(world) is not None
        driver.drain()
        assert engine.state.mode == EngineMode.IDLE


def test_reshuffle_falls_back_to_stripes(caplog):
    engine, _ = make_engine(stripes(5, 5), kinds=KINDS, max_reshuffle_attempts=0)
    with caplog.at_level(logging.WARNING, logger="tilematch"):
        result = reshuffle_board(engine.world)
    assert result.fallback
    assert kind_grid(engine.world) == [[KINDS[(r + c) % 4] for c in range(5)] for r in range(5)]
    assert find_match_groups(engine.world) == []
    assert any("fell back" in entry.getMessage() for entry in caplog.records)


def test_reshuffle_refused_while_busy():
    engine, _ = make_engine(stripes(5, 5), kinds=KINDS)
    set_engine_mode(engine.world, engine.event_bus, EngineMode.CASCADING)
    with pytest.raises(Busy):
        engine.reshuffle_system.reshuffle()
    assert kind_grid(engine.world) == stripes(5, 5)


def test_teardown_stops_idle_work():
    engine, driver = make_engine(stripes(5, 5), kinds=KINDS, hint_delay=1.0)
    log = record(engine.event_bus, *IDLE_EVENTS)
    engine.teardown()
    engine.tick(10.0)
    assert log == []
    assert get_board(engine.world).occupied_positions() == []
    assert engine.state.torn_down


def test_teardown_during_animation_ignores_late_acknowledgements():
    engine, driver = make_engine(SMALL)
    engine.request_swap((0, 2), (1, 2))
    engine.teardown()
    driver.drain()
    assert get_board(engine.world).occupied_positions() == []
