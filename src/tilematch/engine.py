"""Headless wiring of the engine: world, event bus and every core system."""
import random
from typing import List, Optional

from tilematch.components.level_config import LevelConfig
from tilematch.events.bus import (
    EventBus,
    EVENT_ANIMATION_COMPLETE,
    EVENT_BOARD_TEARDOWN,
    EVENT_SWAP_REQUEST,
    EVENT_TICK,
)
from tilematch.systems.board import BoardSystem
from tilematch.systems.board_ops import kind_grid
from tilematch.systems.cascade import CascadeSystem
from tilematch.systems.hints import HintSystem
from tilematch.systems.reshuffle import ReshuffleSystem
from tilematch.systems.score import ScoreSystem
from tilematch.systems.selection import SelectionSystem
from tilematch.systems.swap import SwapSystem
from tilematch.utils.engine_state import get_or_create_engine_state
from tilematch.world import create_world


class MatchEngine:
    """Owns one game session. The view layer talks to it through the event bus."""

    def __init__(
        self,
        config: Optional[LevelConfig] = None,
        *,
        event_bus: Optional[EventBus] = None,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
        populate: bool = True,
    ):
        self.event_bus = event_bus or EventBus()
        self.world = create_world(self.event_bus, config, rng=rng, seed=seed)

        # Board and input systems
        self.board_system = BoardSystem(self.world, self.event_bus, populate=populate)
        self.selection_system = SelectionSystem(self.world, self.event_bus)
        self.swap_system = SwapSystem(self.world, self.event_bus)

        # Resolution systems
        self.cascade_system = CascadeSystem(self.world, self.event_bus)
        self.score_system = ScoreSystem(self.world, self.event_bus)

        # Idle systems
        self.hint_system = HintSystem(self.world, self.event_bus)
        self.reshuffle_system = ReshuffleSystem(self.world, self.event_bus)

    @property
    def state(self):
        return get_or_create_engine_state(self.world)

    def request_swap(self, src, dst) -> None:
        self.event_bus.emit(EVENT_SWAP_REQUEST, src=src, dst=dst)

    def animation_complete(self, kind: str) -> None:
        self.event_bus.emit(EVENT_ANIMATION_COMPLETE, kind=kind)

    def tick(self, dt: float) -> None:
        self.event_bus.emit(EVENT_TICK, dt=dt)

    def teardown(self) -> None:
        self.event_bus.emit(EVENT_BOARD_TEARDOWN)

    def kinds(self) -> List[List[Optional[str]]]:
        return kind_grid(self.world)
