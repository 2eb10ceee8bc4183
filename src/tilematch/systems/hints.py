from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from esper import World

from tilematch.components.engine_state import EngineMode
from tilematch.events.bus import (
    EventBus,
    EVENT_BOARD_TEARDOWN,
    EVENT_CASCADE_COMPLETE,
    EVENT_HINT_AVAILABLE,
    EVENT_HINT_CLEARED,
    EVENT_NO_MOVE_FOUND,
    EVENT_RESHUFFLE_COMPLETE,
    EVENT_TICK,
)
from tilematch.systems.board_ops import Position, Snapshot, board_dimensions, snapshot
from tilematch.systems.match_detection import MatchGroup, scan_groups
from tilematch.utils.engine_state import (
    get_level_config,
    get_or_create_engine_state,
    get_or_create_idle_timer,
    reset_idle_timer,
    set_engine_mode,
)
from tilematch.utils.logger import get_logger

logger = get_logger(__name__)

# Neighbour order tried for every slot: right, left, down, up.
NEIGHBOR_OFFSETS = ((0, 1), (0, -1), (1, 0), (-1, 0))


@dataclass(frozen=True, slots=True)
class Hint:
    src: Position
    dst: Position
    group: MatchGroup


def _candidate_swaps(cells: Snapshot, rows: int, cols: int):
    """Yield each adjacent occupied pair once, in row-major/neighbour order."""
    tried: set[frozenset] = set()
    for row in range(rows):
        for col in range(cols):
            src = (row, col)
            if src not in cells:
                continue
            for dr, dc in NEIGHBOR_OFFSETS:
                dst = (row + dr, col + dc)
                if dst not in cells:
                    continue
                key = frozenset((src, dst))
                if key in tried:
                    continue
                tried.add(key)
                yield src, dst


def _speculative_groups(cells: Snapshot, rows: int, cols: int, src: Position, dst: Position) -> List[MatchGroup]:
    """Swap ``src``/``dst`` in ``cells``, scan, and always swap back."""
    cells[src], cells[dst] = cells[dst], cells[src]
    try:
        return scan_groups(cells, rows, cols)
    finally:
        cells[src], cells[dst] = cells[dst], cells[src]


def find_hint_in(cells: Snapshot, rows: int, cols: int) -> Optional[Hint]:
    working = dict(cells)
    for src, dst in _candidate_swaps(working, rows, cols):
        groups = _speculative_groups(working, rows, cols, src, dst)
        if groups:
            return Hint(src=src, dst=dst, group=groups[0])
    return None


def find_hint(world: World) -> Optional[Hint]:
    """Return the first adjacent swap that creates a match, or ``None`` on deadlock."""
    rows, cols = board_dimensions(world)
    return find_hint_in(snapshot(world), rows, cols)


class HintSystem:
    """Runs the hint search after the player has been idle for ``hint_delay`` seconds."""

    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus
        self.current: Optional[Hint] = None
        event_bus.subscribe(EVENT_TICK, self.on_tick)
        event_bus.subscribe(EVENT_CASCADE_COMPLETE, self.on_board_settled)
        event_bus.subscribe(EVENT_RESHUFFLE_COMPLETE, self.on_board_settled)
        event_bus.subscribe(EVENT_HINT_CLEARED, self.on_hint_cleared)
        event_bus.subscribe(EVENT_BOARD_TEARDOWN, self.on_teardown)

    def on_tick(self, sender, **kwargs):
        dt = kwargs.get('dt', 1/60)
        state = get_or_create_engine_state(self.world)
        if state.torn_down or state.mode != EngineMode.IDLE:
            return
        timer = get_or_create_idle_timer(self.world)
        if timer.fired:
            return
        timer.elapsed += dt
        if timer.elapsed >= get_level_config(self.world).hint_delay:
            timer.fired = True
            self.suggest()

    def on_board_settled(self, sender, **kwargs):
        self.current = None
        reset_idle_timer(self.world)

    def on_hint_cleared(self, sender, **kwargs):
        self.current = None

    def on_teardown(self, sender, **kwargs):
        self.current = None

    def suggest(self) -> Optional[Hint]:
        """Search for a move now; emits either a hint or the deadlock signal."""
        state = get_or_create_engine_state(self.world)
        if state.torn_down or state.busy:
            return None
        hint = find_hint(self.world)
        self.current = hint
        if hint is None:
            logger.info("No legal move left on the board")
            self.event_bus.emit(EVENT_NO_MOVE_FOUND)
            return None
        logger.debug("Hint %s <-> %s (%s x%d)", hint.src, hint.dst, hint.group.kind, hint.group.size)
        set_engine_mode(self.world, self.event_bus, EngineMode.SUGGESTING_HINT)
        self.event_bus.emit(EVENT_HINT_AVAILABLE, src=hint.src, dst=hint.dst, group=hint.group)
        return hint


