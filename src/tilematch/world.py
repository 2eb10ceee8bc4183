import random

from esper import World
from tilematch.events.bus import EventBus
from tilematch.components.board import Board
from tilematch.components.engine_state import EngineState
from tilematch.components.idle_timer import IdleTimer
from tilematch.components.level_config import LevelConfig
from tilematch.components.score import Score
from tilematch.components.selection import Selection


def create_world(
    event_bus: EventBus,
    config: LevelConfig | None = None,
    *,
    rng: random.Random | None = None,
    seed: int | None = None,
) -> World:
    """Create the ECS world with its singleton resources and an empty board.

    Tiles are spawned later by ``BoardSystem``; this only lays out the grid,
    the level configuration and the engine/score/selection state.
    """
    config = config or LevelConfig()
    config.validate()
    world = World()
    if rng is None:
        rng = random.Random(seed)
    setattr(world, "random", rng)

    # Register the global engine state resources.
    world.create_entity(EngineState(), IdleTimer(), Score(), Selection())

    # Single config entity, shared by every system that spawns tiles.
    world.create_entity(config)

    world.create_entity(Board(rows=config.rows, cols=config.cols))
    return world
