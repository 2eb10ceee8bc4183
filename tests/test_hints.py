from tilematch.systems.board_ops import get_board, kind_grid, snapshot, swap_tiles
from tilematch.systems.hints import find_hint
from tilematch.systems.swap import try_swap
from tests.helpers import make_engine

SMALL = [
    ['A', 'A', 'B'],
    ['C', 'D', 'A'],
    ['A', 'A', 'B'],
]


def stripes(rows, cols, kinds=('A', 'B', 'C')):
    return [[kinds[(r + c) % len(kinds)] for c in range(cols)] for r in range(rows)]


def adjacent_pairs(rows, cols):
    for r in range(rows):
        for c in range(cols):
            if c + 1 < cols:
                yield (r, c), (r, c + 1)
            if r + 1 < rows:
                yield (r, c), (r + 1, c)


def test_hint_is_first_move_in_row_major_order():
    engine, _ = make_engine(SMALL)
    hint = find_hint(engine.world)
    assert (hint.src, hint.dst) == ((0, 2), (1, 2))
    assert hint.group.positions == ((0, 0), (0, 1), (0, 2))


def test_hint_search_does_not_touch_the_board():
    engine, _ = make_engine(SMALL)
    before = snapshot(engine.world)
    find_hint(engine.world)
    assert snapshot(engine.world) == before


def test_hint_agrees_with_exhaustive_search():
    for seed in range(30):
        engine, _ = make_engine(seed=seed, rows=6, cols=7)
        world = engine.world
        board = get_board(world)
        matching = []
        for src, dst in adjacent_pairs(board.rows, board.cols):
            outcome = try_swap(world, src, dst)
            if outcome.matched:
                matching.append(frozenset((src, dst)))
                swap_tiles(world, src, dst)
        hint = find_hint(world)
        assert hint is not None
        assert frozenset((hint.src, hint.dst)) in matching


def test_hint_group_matches_the_swap_result():
    engine, _ = make_engine(seed=11)
    world = engine.world
    hint = find_hint(world)
    outcome = try_swap(world, hint.src, hint.dst)
    assert outcome.matched
    assert outcome.groups[0] == hint.group


def test_striped_board_has_no_move():
    engine, _ = make_engine(stripes(5, 5))
    world = engine.world
    assert find_hint(world) is None
    for src, dst in adjacent_pairs(5, 5):
        assert not try_swap(world, src, dst).matched
    assert kind_grid(world) == stripes(5, 5)
