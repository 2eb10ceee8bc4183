from typing import Tuple

from esper import World

from tilematch.components.engine_state import EngineMode
from tilematch.components.selection import SelectionState
from tilematch.events.bus import (
    EventBus,
    EVENT_BOARD_TEARDOWN,
    EVENT_ENGINE_MODE_CHANGED,
    EVENT_HINT_CLEARED,
    EVENT_SWAP_REJECTED,
    EVENT_SWAP_REQUEST,
    EVENT_TILE_CLICK,
    EVENT_TILE_DESELECTED,
    EVENT_TILE_SELECTED,
)
from tilematch.systems.board_ops import get_board, is_adjacent
from tilematch.utils.engine_state import (
    get_or_create_engine_state,
    get_or_create_selection,
    reset_idle_timer,
    set_engine_mode,
)


class SelectionSystem:
    """Turns tile clicks into swap requests.

    NO_SELECTION -> ONE_SELECTED on the first click; a click on an adjacent
    tile moves to RESOLVING and requests the swap; the selection returns to
    NO_SELECTION once the engine is idle again or the swap is rejected.
    """

    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus
        self.event_bus.subscribe(EVENT_TILE_CLICK, self.on_tile_click)
        self.event_bus.subscribe(EVENT_SWAP_REJECTED, self.on_swap_rejected)
        self.event_bus.subscribe(EVENT_ENGINE_MODE_CHANGED, self.on_mode_changed)
        self.event_bus.subscribe(EVENT_BOARD_TEARDOWN, self.on_teardown)

    @property
    def selected(self):
        return get_or_create_selection(self.world).selected

    @property
    def state(self) -> SelectionState:
        return get_or_create_selection(self.world).state

    def on_tile_click(self, sender, **kwargs):
        row = kwargs.get('row')
        col = kwargs.get('col')
        if row is None or col is None:
            return
        engine = get_or_create_engine_state(self.world)
        if engine.busy or engine.torn_down:
            return
        if not get_board(self.world).in_bounds(row, col):
            return
        selection = get_or_create_selection(self.world)
        pos = (row, col)
        if selection.state == SelectionState.RESOLVING:
            return
        # Any accepted click counts as player activity.
        reset_idle_timer(self.world)
        if engine.mode == EngineMode.SUGGESTING_HINT:
            self.event_bus.emit(EVENT_HINT_CLEARED, reason='click')
            set_engine_mode(self.world, self.event_bus, EngineMode.IDLE)
        if selection.state == SelectionState.NO_SELECTION or selection.selected is None:
            self._select(pos)
            return
        if selection.selected == pos:
            self._deselect(reason='toggle')
            return
        if is_adjacent(selection.selected, pos):
            src = selection.selected
            selection.state = SelectionState.RESOLVING
            selection.selected = None
            self.event_bus.emit(EVENT_TILE_DESELECTED, reason='swap', prev_row=src[0], prev_col=src[1])
            self.event_bus.emit(EVENT_SWAP_REQUEST, src=src, dst=pos)
            return
        # Change selection to new tile
        self._select(pos)

    def on_swap_rejected(self, sender, **kwargs):
        selection = get_or_create_selection(self.world)
        if selection.state == SelectionState.RESOLVING:
            self._reset()

    def on_mode_changed(self, sender, **kwargs):
        if kwargs.get('new_mode') != EngineMode.IDLE:
            return
        selection = get_or_create_selection(self.world)
        if selection.state == SelectionState.RESOLVING:
            self._reset()

    def on_teardown(self, sender, **kwargs):
        self._deselect(reason='teardown')

    def _select(self, pos: Tuple[int, int]) -> None:
        selection = get_or_create_selection(self.world)
        selection.state = SelectionState.ONE_SELECTED
        selection.selected = pos
        self.event_bus.emit(EVENT_TILE_SELECTED, row=pos[0], col=pos[1])

    def _deselect(self, reason: str) -> None:
        selection = get_or_create_selection(self.world)
        prev = selection.selected
        selection.state = SelectionState.NO_SELECTION
        selection.selected = None
        if prev is not None:
            self.event_bus.emit(EVENT_TILE_DESELECTED, reason=reason, prev_row=prev[0], prev_col=prev[1])

    def _reset(self) -> None:
        selection = get_or_create_selection(self.world)
        selection.state = SelectionState.NO_SELECTION
        selection.selected = None
