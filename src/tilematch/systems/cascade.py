from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Set, Tuple

from esper import World

from tilematch.components.board_position import BoardPosition
from tilematch.components.engine_state import CascadePhase, EngineMode
from tilematch.components.tile import SpecialState, Tile
from tilematch.constants import ANIM_CREATE, ANIM_MOVE, ANIM_REMOVE
from tilematch.events.bus import (
    EventBus,
    EVENT_ANIMATION_COMPLETE,
    EVENT_CASCADE_COMPLETE,
    EVENT_CASCADE_START,
    EVENT_MATCH_RESOLVED,
    EVENT_SPECIAL_CREATED,
    EVENT_SPECIAL_DETONATED,
    EVENT_TILES_CREATED,
    EVENT_TILES_MOVED,
    EVENT_TILES_REMOVED,
)
from tilematch.exceptions import Busy
from tilematch.systems.board_ops import (
    GravityMove,
    Position,
    TileCreation,
    apply_gravity_moves,
    col_positions,
    compute_gravity_moves,
    get_entity_at,
    refill_empty_slots,
    remove_tile,
    row_positions,
)
from tilematch.systems.match_detection import MatchGroup, Orientation, find_match_groups
from tilematch.utils.engine_state import (
    get_level_config,
    get_or_create_engine_state,
    reset_idle_timer,
    set_engine_mode,
)
from tilematch.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(slots=True)
class Detonation:
    tile_id: int
    position: Position
    special: SpecialState
    positions: List[Position]


@dataclass(slots=True)
class RemovalResult:
    removed: List[Position] = field(default_factory=list)
    score_delta: int = 0
    # (tile_id, position, special) for every anchor promoted this step.
    specials: List[Tuple[int, Position, SpecialState]] = field(default_factory=list)
    detonations: List[Detonation] = field(default_factory=list)


def special_for(group: MatchGroup) -> SpecialState:
    if group.size >= 5:
        return SpecialState.EXPLOSIVE
    if group.size == 4:
        if group.orientation == Orientation.HORIZONTAL:
            return SpecialState.ROW_CLEAR
        return SpecialState.COL_CLEAR
    return SpecialState.NONE


def _anchor_order(size: int) -> List[int]:
    """Group indices ordered by distance from the midpoint, midpoint first."""
    mid = size // 2
    return sorted(range(size), key=lambda idx: (abs(idx - mid), idx))


def _pick_anchor(world: World, group: MatchGroup, taken: Set[int]) -> Optional[int]:
    for idx in _anchor_order(group.size):
        entity = group.tiles[idx]
        if entity in taken or not world.entity_exists(entity):
            continue
        tile: Tile = world.component_for_entity(entity, Tile)
        if tile.special != SpecialState.NONE:
            continue
        return entity
    return None


def _blast_positions(world: World, pos: Position, special: SpecialState) -> List[Position]:
    row, col = pos
    if special == SpecialState.ROW_CLEAR:
        return row_positions(world, row)
    if special == SpecialState.COL_CLEAR:
        return col_positions(world, col)
    if special == SpecialState.EXPLOSIVE:
        cross = row_positions(world, row)
        cross.extend(p for p in col_positions(world, col) if p != pos)
        return cross
    return []


def resolve_groups(world: World, groups: Sequence[MatchGroup]) -> RemovalResult:
    """Promote anchors, destroy the rest of every group and score the step.

    A group of four or more keeps its anchor (the tile nearest the midpoint
    that carries no special yet) and gives it the size-derived special state.
    Special tiles caught in the removal detonate and may chain. Anchors
    promoted in this step survive the step.
    """
    config = get_level_config(world)
    result = RemovalResult()
    protected: Set[int] = set()
    for group in groups:
        result.score_delta += config.score_for(group.size)
        special = special_for(group)
        if special == SpecialState.NONE:
            continue
        anchor = _pick_anchor(world, group, protected)
        if anchor is None:
            continue
        tile: Tile = world.component_for_entity(anchor, Tile)
        tile.special = special
        protected.add(anchor)
        position = world.component_for_entity(anchor, BoardPosition)
        result.specials.append((anchor, (position.row, position.col), special))

    queue: List[int] = [entity for group in groups for entity in group.tiles if entity not in protected]
    seen: Set[int] = set()
    while queue:
        entity = queue.pop(0)
        if entity in seen or not world.entity_exists(entity):
            continue
        seen.add(entity)
        tile = world.component_for_entity(entity, Tile)
        if tile.special != SpecialState.NONE:
            position = world.component_for_entity(entity, BoardPosition)
            origin = (position.row, position.col)
            blast = _blast_positions(world, origin, tile.special)
            result.detonations.append(Detonation(entity, origin, tile.special, blast))
            for pos in blast:
                target = get_entity_at(world, *pos)
                if target is not None and target not in protected and target not in seen:
                    queue.append(target)
        pos = remove_tile(world, entity)
        if pos is not None:
            result.removed.append(pos)
    result.removed.sort()
    return result


def compact(world: World) -> List[GravityMove]:
    moves = compute_gravity_moves(world)
    if moves:
        apply_gravity_moves(world, moves)
    return moves


def refill(world: World, rng: random.Random | None = None) -> List[TileCreation]:
    return refill_empty_slots(world, rng)


def resolve_until_stable(world: World, groups: Sequence[MatchGroup] | None = None,
                         rng: random.Random | None = None) -> Tuple[int, int]:
    """Run remove/compact/refill/rescan synchronously until no match remains.

    Returns ``(steps, score)``. Used by headless simulations and tests; the
    event-driven ``CascadeSystem`` walks the same steps one animation at a time.
    """
    steps = 0
    score = 0
    current = list(groups) if groups is not None else find_match_groups(world)
    while current:
        steps += 1
        result = resolve_groups(world, current)
        score += result.score_delta
        compact(world)
        refill(world, rng)
        current = find_match_groups(world)
    return steps, score


class CascadeSystem:
    """Drives the cascade state machine, one phase per acknowledged animation."""

    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus
        self.last_result: RemovalResult | None = None
        event_bus.subscribe(EVENT_CASCADE_START, self.on_cascade_start)
        event_bus.subscribe(EVENT_ANIMATION_COMPLETE, self.on_animation_complete)

    def on_cascade_start(self, sender, **kwargs):
        self.begin(kwargs.get('groups'), reason=kwargs.get('reason', 'board_changed'))

    def begin(self, groups: Sequence[MatchGroup] | None = None, *, reason: str = 'board_changed') -> None:
        state = get_or_create_engine_state(self.world)
        if state.mode == EngineMode.CASCADING:
            raise Busy("cascade already in progress")
        if groups is None:
            groups = find_match_groups(self.world)
        set_engine_mode(self.world, self.event_bus, EngineMode.CASCADING)
        state.cascade_depth = 0
        state.awaiting = None
        logger.debug("Cascade started (%s) with %d group(s)", reason, len(groups))
        if groups:
            self._enter_removing(list(groups))
        else:
            self._finish()

    def on_animation_complete(self, sender, **kwargs):
        kind = kwargs.get('kind')
        state = get_or_create_engine_state(self.world)
        if state.mode != EngineMode.CASCADING or state.awaiting is None or state.awaiting != kind:
            return
        state.awaiting = None
        if state.cascade_phase == CascadePhase.REMOVING:
            self._enter_compacting()
        elif state.cascade_phase == CascadePhase.COMPACTING:
            self._enter_refilling()
        elif state.cascade_phase == CascadePhase.REFILLING:
            self._enter_rescanning()

    def _enter_removing(self, groups: List[MatchGroup]) -> None:
        state = get_or_create_engine_state(self.world)
        state.cascade_phase = CascadePhase.REMOVING
        state.cascade_depth += 1
        result = resolve_groups(self.world, groups)
        self.last_result = result
        logger.debug(
            "Cascade depth %d: %d group(s), %d tile(s) removed, +%d",
            state.cascade_depth, len(groups), len(result.removed), result.score_delta,
        )
        self.event_bus.emit(
            EVENT_MATCH_RESOLVED,
            groups=groups,
            score_delta=result.score_delta,
            depth=state.cascade_depth,
        )
        for tile_id, position, special in result.specials:
            self.event_bus.emit(EVENT_SPECIAL_CREATED, tile_id=tile_id, position=position, special=special)
        for blast in result.detonations:
            self.event_bus.emit(
                EVENT_SPECIAL_DETONATED,
                tile_id=blast.tile_id,
                position=blast.position,
                special=blast.special,
                positions=blast.positions,
            )
        self._await(ANIM_REMOVE)
        self.event_bus.emit(EVENT_TILES_REMOVED, positions=result.removed)

    def _enter_compacting(self) -> None:
        state = get_or_create_engine_state(self.world)
        state.cascade_phase = CascadePhase.COMPACTING
        moves = compact(self.world)
        if not moves:
            self._enter_refilling()
            return
        self._await(ANIM_MOVE)
        self.event_bus.emit(EVENT_TILES_MOVED, moves=[move.as_payload() for move in moves])

    def _enter_refilling(self) -> None:
        state = get_or_create_engine_state(self.world)
        state.cascade_phase = CascadePhase.REFILLING
        created = refill(self.world)
        if not created:
            self._enter_rescanning()
            return
        self._await(ANIM_CREATE)
        self.event_bus.emit(EVENT_TILES_CREATED, creations=[item.as_payload() for item in created])

    def _enter_rescanning(self) -> None:
        state = get_or_create_engine_state(self.world)
        state.cascade_phase = CascadePhase.RESCANNING
        groups = find_match_groups(self.world)
        if groups:
            self._enter_removing(groups)
        else:
            self._finish()

    def _await(self, kind: str) -> None:
        get_or_create_engine_state(self.world).awaiting = kind

    def _finish(self) -> None:
        state = get_or_create_engine_state(self.world)
        depth = state.cascade_depth
        state.awaiting = None
        set_engine_mode(self.world, self.event_bus, EngineMode.IDLE)
        reset_idle_timer(self.world)
        logger.info("Cascade complete at depth %d", depth)
        self.event_bus.emit(EVENT_CASCADE_COMPLETE, depth=depth)
