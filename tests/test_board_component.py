import pytest

from tilematch.components.board import Board
from tilematch.components.board_position import BoardPosition
from tilematch.exceptions import OutOfBounds
from tilematch.systems.board_ops import (
    get_board,
    kind_grid,
    place_tile,
    remove_tile,
    spawn_tile,
    swap_tiles,
)
from tests.helpers import make_engine

GRID = [
    ['A', 'B', 'C'],
    ['B', 'C', 'A'],
    ['C', 'A', 'B'],
]


def test_board_starts_empty_and_is_bounds_checked():
    board = Board(rows=3, cols=4)
    assert board.occupied_positions() == []
    assert board.in_bounds(2, 3)
    assert not board.in_bounds(3, 0)
    assert not board.in_bounds(0, -1)
    with pytest.raises(OutOfBounds):
        board.get(3, 0)
    with pytest.raises(OutOfBounds):
        board.set(0, 4, 7)
    # OutOfBounds doubles as an IndexError for callers that only know builtins.
    with pytest.raises(IndexError):
        board.get(-1, 0)


def test_occupied_positions_are_row_major():
    board = Board(rows=2, cols=2)
    board.set(1, 0, 5)
    board.set(0, 1, 6)
    assert board.occupied_positions() == [(0, 1), (1, 0)]
    assert board.empty_positions() == [(0, 0), (1, 1)]


def test_load_places_one_tile_per_slot():
    engine, _ = make_engine(GRID)
    board = get_board(engine.world)
    entities = [board.get(r, c) for r, c in board.positions()]
    assert None not in entities
    assert len(set(entities)) == 9
    assert kind_grid(engine.world) == GRID


def test_remove_tile_is_idempotent():
    engine, _ = make_engine(GRID)
    world = engine.world
    entity = get_board(world).get(1, 1)
    assert remove_tile(world, entity) == (1, 1)
    assert remove_tile(world, entity) is None
    assert get_board(world).get(1, 1) is None
    assert kind_grid(world)[1] == ['B', None, 'A']


def test_spawn_into_occupied_slot_is_rejected():
    engine, _ = make_engine(GRID)
    with pytest.raises(ValueError):
        spawn_tile(engine.world, (0, 0), 'A')


def test_place_and_swap_keep_positions_in_sync():
    engine, _ = make_engine(GRID)
    world = engine.world
    board = get_board(world)
    a = board.get(0, 0)
    b = board.get(0, 1)
    swap_tiles(world, (0, 0), (0, 1))
    assert board.get(0, 0) == b and board.get(0, 1) == a
    pos_a = world.component_for_entity(a, BoardPosition)
    pos_b = world.component_for_entity(b, BoardPosition)
    assert (pos_a.row, pos_a.col) == (0, 1)
    assert (pos_b.row, pos_b.col) == (0, 0)
    with pytest.raises(OutOfBounds):
        place_tile(world, (5, 5), a)
