from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from esper import World

from tilematch.components.engine_state import EngineMode
from tilematch.components.level_config import LevelConfig
from tilematch.components.tile import Tile
from tilematch.constants import ANIM_RESHUFFLE
from tilematch.events.bus import (
    EventBus,
    EVENT_ANIMATION_COMPLETE,
    EVENT_CASCADE_START,
    EVENT_HINT_CLEARED,
    EVENT_NO_MOVE_FOUND,
    EVENT_RESHUFFLE_COMPLETE,
    EVENT_RESHUFFLE_REQUEST,
    EVENT_TILES_RESHUFFLED,
)
from tilematch.exceptions import Busy, ReshuffleExhausted
from tilematch.systems.board_ops import Position, Snapshot, board_dimensions, snapshot
from tilematch.systems.hints import find_hint_in
from tilematch.systems.match_detection import find_match_groups, has_match
from tilematch.utils.engine_state import (
    ensure_not_busy,
    get_level_config,
    get_or_create_engine_state,
    reset_idle_timer,
    set_engine_mode,
)
from tilematch.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(slots=True)
class ReshuffleResult:
    layout: Dict[Position, str]
    attempts: int
    fallback: bool


def random_layout(
    cells: Snapshot,
    rows: int,
    cols: int,
    config: LevelConfig,
    rng: random.Random,
) -> Tuple[Dict[Position, str], int]:
    """Re-roll every occupied slot until the board holds no match.

    While ``config.require_move`` is set a candidate must also leave at least
    one legal swap. Raises ``ReshuffleExhausted`` once
    ``max_reshuffle_attempts`` candidates have been rejected.
    """
    positions = sorted(cells)
    for attempt in range(1, config.max_reshuffle_attempts + 1):
        layout = {pos: rng.choice(config.kinds) for pos in positions}
        candidate: Snapshot = {pos: (cells[pos][0], layout[pos]) for pos in positions}
        if has_match(candidate, rows, cols):
            continue
        if config.require_move and find_hint_in(candidate, rows, cols) is None:
            continue
        return layout, attempt
    raise ReshuffleExhausted(
        f"no match-free layout after {config.max_reshuffle_attempts} attempt(s)"
    )


def fallback_layout(cells: Snapshot, kinds: List[str]) -> Dict[Position, str]:
    """Diagonal stripes: neighbours along any row or column always differ."""
    return {(row, col): kinds[(row + col) % len(kinds)] for row, col in cells}


def reshuffle_board(world: World, rng: Optional[random.Random] = None) -> ReshuffleResult:
    """Re-roll the kind of every occupied tile in place; tile entities are kept."""
    config = get_level_config(world)
    rows, cols = board_dimensions(world)
    rng = rng or getattr(world, "random", None) or random.Random()
    cells = snapshot(world)
    try:
        layout, attempts = random_layout(cells, rows, cols, config, rng)
        fallback = False
    except ReshuffleExhausted as exc:
        logger.warning("Reshuffle fell back to a fixed pattern: %s", exc)
        layout = fallback_layout(cells, config.kinds)
        attempts = config.max_reshuffle_attempts
        fallback = True
    for pos, kind in layout.items():
        entity = cells[pos][0]
        world.component_for_entity(entity, Tile).kind = kind
    return ReshuffleResult(layout=layout, attempts=attempts, fallback=fallback)


class ReshuffleSystem:
    """Regenerates the board when no move is left or a level milestone is reached."""

    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus
        self.last_result: Optional[ReshuffleResult] = None
        event_bus.subscribe(EVENT_NO_MOVE_FOUND, self.on_reshuffle_request)
        event_bus.subscribe(EVENT_RESHUFFLE_REQUEST, self.on_reshuffle_request)
        event_bus.subscribe(EVENT_ANIMATION_COMPLETE, self.on_animation_complete)

    def on_reshuffle_request(self, sender, **kwargs):
        state = get_or_create_engine_state(self.world)
        if state.torn_down:
            return
        try:
            self.reshuffle()
        except Busy as exc:
            logger.debug("Reshuffle skipped: %s", exc)

    def reshuffle(self) -> ReshuffleResult:
        state = ensure_not_busy(self.world, 'reshuffle')
        if state.torn_down:
            raise Busy("board has been torn down")
        if state.mode == EngineMode.SUGGESTING_HINT:
            self.event_bus.emit(EVENT_HINT_CLEARED, reason='reshuffle')
        set_engine_mode(self.world, self.event_bus, EngineMode.RESHUFFLING)
        result = reshuffle_board(self.world)
        self.last_result = result
        logger.info("Board reshuffled after %d attempt(s)%s", result.attempts,
                    " using fallback" if result.fallback else "")
        cells = snapshot(self.world)
        changes = [
            {'position': pos, 'kind': kind, 'tile_id': cells[pos][0]}
            for pos, kind in sorted(result.layout.items())
        ]
        state.awaiting = ANIM_RESHUFFLE
        self.event_bus.emit(EVENT_TILES_RESHUFFLED, changes=changes, fallback=result.fallback)
        return result

    def on_animation_complete(self, sender, **kwargs):
        if kwargs.get('kind') != ANIM_RESHUFFLE:
            return
        state = get_or_create_engine_state(self.world)
        if state.mode != EngineMode.RESHUFFLING or state.awaiting != ANIM_RESHUFFLE:
            return
        state.awaiting = None
        result = self.last_result
        groups = find_match_groups(self.world)
        if groups:
            # Only reachable if tiles were edited while the animation played.
            self.event_bus.emit(EVENT_CASCADE_START, groups=groups, reason='reshuffle')
            return
        set_engine_mode(self.world, self.event_bus, EngineMode.IDLE)
        reset_idle_timer(self.world)
        self.event_bus.emit(
            EVENT_RESHUFFLE_COMPLETE,
            attempts=result.attempts if result else 0,
            fallback=result.fallback if result else False,
        )
