import random
from typing import Dict, List, Optional, Sequence

from esper import World

from tilematch.events.bus import EventBus, EVENT_BOARD_TEARDOWN
from tilematch.systems.board_ops import (
    Position,
    clear_board,
    get_board,
    load_kinds,
    snapshot,
)
from tilematch.systems.hints import find_hint_in
from tilematch.utils.engine_state import get_level_config, get_or_create_engine_state
from tilematch.utils.logger import get_logger

logger = get_logger(__name__)


def generate_layout(rows: int, cols: int, kinds: Sequence[str], rng: random.Random) -> List[List[str]]:
    """Random layout with no run of three along any row or column."""
    layout: List[List[str]] = []
    for row in range(rows):
        row_values: List[str] = []
        for col in range(cols):
            available = list(kinds)
            # Prevent horizontal triple: if last two cells same kind, exclude that kind.
            if col >= 2:
                left1 = row_values[col - 1]
                left2 = row_values[col - 2]
                if left1 == left2 and left1 in available:
                    available = [k for k in available if k != left1]
            # Prevent vertical triple: if the two cells above match, exclude that kind.
            if row >= 2:
                up1 = layout[row - 1][col]
                up2 = layout[row - 2][col]
                if up1 == up2 and up1 in available:
                    available = [k for k in available if k != up1]
            row_values.append(rng.choice(available))
        layout.append(row_values)
    return layout


class BoardSystem:
    """Owns the board lifecycle: initial population and teardown."""

    def __init__(self, world: World, event_bus: EventBus, *, populate: bool = True):
        self.world = world
        self.event_bus = event_bus
        self.event_bus.subscribe(EVENT_BOARD_TEARDOWN, self.on_teardown)
        if populate:
            self.populate()

    def populate(self, rng: Optional[random.Random] = None) -> Dict[Position, int]:
        """Fill the board with a match-free layout that offers at least one move."""
        config = get_level_config(self.world)
        board = get_board(self.world)
        rng = rng or getattr(self.world, "random", None) or random.Random()
        placed: Dict[Position, int] = {}
        for attempt in range(1, config.max_fill_attempts + 1):
            layout = generate_layout(board.rows, board.cols, config.kinds, rng)
            placed = load_kinds(self.world, layout)
            if find_hint_in(snapshot(self.world), board.rows, board.cols) is not None:
                logger.debug("Initial board ready after %d attempt(s)", attempt)
                return placed
        # The idle hint search will reshuffle a board without moves.
        logger.warning("Initial board has no legal move after %d attempt(s)", config.max_fill_attempts)
        return placed

    def load(self, layout: Sequence[Sequence[Optional[str]]]) -> Dict[Position, int]:
        """Replace the board with an explicit layout of kinds."""
        return load_kinds(self.world, layout)

    def on_teardown(self, sender, **kwargs):
        state = get_or_create_engine_state(self.world)
        state.torn_down = True
        state.awaiting = None
        clear_board(self.world)
        logger.info("Board torn down")
