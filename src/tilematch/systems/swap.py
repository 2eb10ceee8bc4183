from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from esper import World

from tilematch.components.engine_state import EngineMode
from tilematch.constants import ANIM_SWAP
from tilematch.events.bus import (
    EventBus,
    EVENT_ANIMATION_COMPLETE,
    EVENT_CASCADE_START,
    EVENT_HINT_CLEARED,
    EVENT_SWAP_APPLIED,
    EVENT_SWAP_REJECTED,
    EVENT_SWAP_REQUEST,
    EVENT_SWAP_REVERTED,
)
from tilematch.exceptions import Busy, InvalidMove
from tilematch.systems.board_ops import Position, get_board, is_adjacent, swap_tiles
from tilematch.systems.match_detection import MatchGroup, find_match_groups
from tilematch.utils.engine_state import (
    ensure_not_busy,
    get_or_create_engine_state,
    reset_idle_timer,
    set_engine_mode,
)
from tilematch.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(slots=True)
class MoveOutcome:
    src: Position
    dst: Position
    groups: List[MatchGroup] = field(default_factory=list)

    @property
    def matched(self) -> bool:
        return bool(self.groups)


def validate_swap(world: World, src: Tuple[int, int], dst: Tuple[int, int]) -> None:
    board = get_board(world)
    if not (board.in_bounds(*src) and board.in_bounds(*dst)):
        raise InvalidMove(f"swap {src} <-> {dst} leaves the board")
    if not is_adjacent(src, dst):
        raise InvalidMove(f"{src} and {dst} are not orthogonally adjacent")
    if board.get(*src) is None or board.get(*dst) is None:
        raise InvalidMove(f"swap {src} <-> {dst} involves an empty slot")


def try_swap(world: World, src: Position, dst: Position) -> MoveOutcome:
    """Swap two adjacent tiles and keep the swap only if it forms a match.

    Raises ``InvalidMove`` before touching the grid when the pair is not
    adjacent. A swap that forms no match is reverted so the grid ends up
    exactly as it started.
    """
    validate_swap(world, src, dst)
    swap_tiles(world, src, dst)
    groups = find_match_groups(world)
    if not groups:
        swap_tiles(world, src, dst)
    return MoveOutcome(src=src, dst=dst, groups=groups)


class SwapSystem:
    """Handles player swap requests and waits for the swap animation to finish."""

    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus
        self.pending: Optional[MoveOutcome] = None
        event_bus.subscribe(EVENT_SWAP_REQUEST, self.on_swap_request)
        event_bus.subscribe(EVENT_ANIMATION_COMPLETE, self.on_animation_complete)

    def on_swap_request(self, sender, **kwargs):
        src = kwargs.get('src')
        dst = kwargs.get('dst')
        if not src or not dst:
            return
        try:
            self.request_swap(tuple(src), tuple(dst))
        except Busy as exc:
            logger.debug("Swap %s <-> %s rejected: %s", src, dst, exc)
            self.event_bus.emit(EVENT_SWAP_REJECTED, src=src, dst=dst, reason='busy')
        except InvalidMove as exc:
            logger.debug("Swap %s <-> %s rejected: %s", src, dst, exc)
            self.event_bus.emit(EVENT_SWAP_REJECTED, src=src, dst=dst, reason='invalid')

    def request_swap(self, src: Position, dst: Position) -> MoveOutcome:
        """Top-level swap: validates, swaps, then blocks until the view acknowledges."""
        state = ensure_not_busy(self.world, 'swap')
        if state.torn_down:
            raise Busy("board has been torn down")
        outcome = try_swap(self.world, src, dst)
        if state.mode == EngineMode.SUGGESTING_HINT:
            self.event_bus.emit(EVENT_HINT_CLEARED, reason='swap')
        reset_idle_timer(self.world)
        self.pending = outcome
        set_engine_mode(self.world, self.event_bus, EngineMode.AWAITING_SWAP_ANIMATION)
        state.awaiting = ANIM_SWAP
        if outcome.matched:
            logger.debug("Swap %s <-> %s formed %d group(s)", src, dst, len(outcome.groups))
            self.event_bus.emit(EVENT_SWAP_APPLIED, src=src, dst=dst, groups=outcome.groups)
        else:
            self.event_bus.emit(EVENT_SWAP_REVERTED, src=src, dst=dst)
        return outcome

    def on_animation_complete(self, sender, **kwargs):
        if kwargs.get('kind') != ANIM_SWAP:
            return
        state = get_or_create_engine_state(self.world)
        if state.mode != EngineMode.AWAITING_SWAP_ANIMATION or state.awaiting != ANIM_SWAP:
            return
        state.awaiting = None
        outcome = self.pending
        self.pending = None
        if outcome is not None and outcome.matched:
            self.event_bus.emit(EVENT_CASCADE_START, groups=outcome.groups, reason='swap')
        else:
            set_engine_mode(self.world, self.event_bus, EngineMode.IDLE)
            reset_idle_timer(self.world)
