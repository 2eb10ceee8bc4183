from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from esper import World

from tilematch.components.board import Board
from tilematch.components.board_position import BoardPosition
from tilematch.components.tile import SpecialState, Tile
from tilematch.utils.engine_state import get_level_config

Position = Tuple[int, int]
# Position -> (tile entity, kind). Only occupied slots appear.
Snapshot = Dict[Position, Tuple[int, str]]


@dataclass(slots=True)
class GravityMove:
    source: Position
    target: Position
    tile_id: int

    def as_payload(self) -> dict:
        return {'from': self.source, 'to': self.target, 'tile_id': self.tile_id}


@dataclass(slots=True)
class TileCreation:
    position: Position
    kind: str
    tile_id: int

    def as_payload(self) -> dict:
        return {'position': self.position, 'kind': self.kind, 'tile_id': self.tile_id}


def get_board(world: World) -> Board:
    for _, board in world.get_component(Board):
        return board
    raise RuntimeError("Board not found")


def board_dimensions(world: World) -> Tuple[int, int]:
    board = get_board(world)
    return board.rows, board.cols


def get_entity_at(world: World, row: int, col: int) -> int | None:
    return get_board(world).get(row, col)


def tile_at(world: World, row: int, col: int) -> Tile | None:
    entity = get_entity_at(world, row, col)
    if entity is None:
        return None
    return world.component_for_entity(entity, Tile)


def place_tile(world: World, pos: Position, entity: int | None) -> None:
    """Write ``entity`` into the slot at ``pos`` and sync its BoardPosition.

    This is the single write path into the grid; callers are responsible for
    vacating the entity's previous slot when moving it.
    """
    row, col = pos
    board = get_board(world)
    board.set(row, col, entity)
    if entity is None:
        return
    position = world.try_component(entity, BoardPosition)
    if position is None:
        world.add_component(entity, BoardPosition(row=row, col=col))
    else:
        position.row = row
        position.col = col


def spawn_tile(world: World, pos: Position, kind: str, special: SpecialState = SpecialState.NONE) -> int:
    """Create a tile entity in an empty slot and return its id."""
    if get_entity_at(world, *pos) is not None:
        raise ValueError(f"slot {pos} already holds a tile")
    entity = world.create_entity(Tile(kind=kind, special=special))
    place_tile(world, pos, entity)
    return entity


def remove_tile(world: World, entity: int) -> Position | None:
    """Destroy a tile and empty its slot.

    Removing a tile that is already gone is a no-op returning ``None``, so a
    tile referenced by two match groups can be removed once per group.
    """
    if not world.entity_exists(entity):
        return None
    position = world.try_component(entity, BoardPosition)
    pos: Position | None = None
    if position is not None:
        pos = (position.row, position.col)
        board = get_board(world)
        if board.get(*pos) == entity:
            board.set(pos[0], pos[1], None)
    world.delete_entity(entity, immediate=True)
    return pos


def clear_board(world: World) -> None:
    board = get_board(world)
    for pos in board.occupied_positions():
        entity = board.get(*pos)
        if entity is not None:
            remove_tile(world, entity)


def swap_tiles(world: World, a: Position, b: Position) -> None:
    """Exchange the slot assignment of two tiles. Identity is preserved."""
    board = get_board(world)
    ent_a = board.get(*a)
    ent_b = board.get(*b)
    place_tile(world, a, ent_b)
    place_tile(world, b, ent_a)


def snapshot(world: World) -> Snapshot:
    board = get_board(world)
    result: Snapshot = {}
    for pos in board.occupied_positions():
        entity = board.get(*pos)
        tile: Tile = world.component_for_entity(entity, Tile)
        result[pos] = (entity, tile.kind)
    return result


def kind_grid(world: World) -> List[List[Optional[str]]]:
    """Row-major kinds per slot, ``None`` for empty slots."""
    board = get_board(world)
    grid: List[List[Optional[str]]] = []
    for row in range(board.rows):
        values: List[Optional[str]] = []
        for col in range(board.cols):
            entity = board.get(row, col)
            values.append(None if entity is None else world.component_for_entity(entity, Tile).kind)
        grid.append(values)
    return grid


def load_kinds(world: World, layout: Sequence[Sequence[Optional[str]]]) -> Dict[Position, int]:
    """Replace every tile with a fresh one per ``layout`` (``None`` leaves a slot empty)."""
    board = get_board(world)
    if len(layout) != board.rows or any(len(row) != board.cols for row in layout):
        raise ValueError(f"layout must be {board.rows}x{board.cols}")
    clear_board(world)
    placed: Dict[Position, int] = {}
    for row, values in enumerate(layout):
        for col, kind in enumerate(values):
            if kind is None:
                continue
            placed[(row, col)] = spawn_tile(world, (row, col), kind)
    return placed


def is_adjacent(a: Position, b: Position) -> bool:
    ar, ac = a
    br, bc = b
    return abs(ar - br) + abs(ac - bc) == 1


def compute_gravity_moves(world: World) -> List[GravityMove]:
    """Per column, slide surviving tiles down so empties collect at the top.

    Relative order inside a column is preserved.
    """
    board = get_board(world)
    moves: List[GravityMove] = []
    for col in range(board.cols):
        target_row = board.rows - 1
        for row in range(board.rows - 1, -1, -1):
            entity = board.get(row, col)
            if entity is None:
                continue
            if row != target_row:
                moves.append(GravityMove(source=(row, col), target=(target_row, col), tile_id=entity))
            target_row -= 1
    return moves


def apply_gravity_moves(world: World, moves: Iterable[GravityMove]) -> None:
    moves = list(moves)
    board = get_board(world)
    # Vacate every source first so no target write lands on a tile still in transit.
    for move in moves:
        board.set(move.source[0], move.source[1], None)
    for move in moves:
        place_tile(world, move.target, move.tile_id)


def random_kind(world: World, rng: random.Random | None = None) -> str:
    config = get_level_config(world)
    rng = rng or _world_rng(world)
    return rng.choice(config.kinds)


def refill_empty_slots(world: World, rng: random.Random | None = None) -> List[TileCreation]:
    """Spawn a uniformly random tile in every empty slot, row-major."""
    rng = rng or _world_rng(world)
    created: List[TileCreation] = []
    for pos in get_board(world).empty_positions():
        kind = random_kind(world, rng)
        entity = spawn_tile(world, pos, kind)
        created.append(TileCreation(position=pos, kind=kind, tile_id=entity))
    return created


def row_positions(world: World, row: int) -> List[Position]:
    board = get_board(world)
    return [(row, col) for col in range(board.cols)]


def col_positions(world: World, col: int) -> List[Position]:
    board = get_board(world)
    return [(row, col) for row in range(board.rows)]


def _world_rng(world: World) -> random.Random:
    candidate = getattr(world, "random", None)
    if isinstance(candidate, random.Random):
        return candidate
    return random.Random()
