from __future__ import annotations

from esper import World

from tilematch.components.engine_state import CascadePhase, EngineMode, EngineState
from tilematch.components.idle_timer import IdleTimer
from tilematch.components.level_config import LevelConfig
from tilematch.components.score import Score
from tilematch.components.selection import Selection
from tilematch.events.bus import EVENT_ENGINE_MODE_CHANGED, EventBus
from tilematch.exceptions import Busy


def get_or_create_engine_state(world: World) -> EngineState:
    """Return the shared EngineState component, creating it if absent."""
    existing = list(world.get_component(EngineState))
    if existing:
        return existing[0][1]
    world.create_entity(EngineState())
    return list(world.get_component(EngineState))[0][1]


def set_engine_mode(world: World, event_bus: EventBus, mode: EngineMode) -> None:
    """Update the engine mode and emit a change event when it differs."""

    state = get_or_create_engine_state(world)
    previous_mode = state.mode
    if previous_mode == mode:
        return
    state.mode = mode
    if mode != EngineMode.CASCADING:
        state.cascade_phase = CascadePhase.IDLE
    event_bus.emit(EVENT_ENGINE_MODE_CHANGED, previous_mode=previous_mode, new_mode=mode)


def ensure_not_busy(world: World, operation: str) -> EngineState:
    state = get_or_create_engine_state(world)
    if state.busy:
        raise Busy(f"cannot start {operation} while {state.mode.name.lower()}")
    return state


def get_level_config(world: World) -> LevelConfig:
    for _, config in world.get_component(LevelConfig):
        return config
    raise RuntimeError("LevelConfig not found")


def get_or_create_score(world: World) -> Score:
    existing = list(world.get_component(Score))
    if existing:
        return existing[0][1]
    world.create_entity(Score())
    return list(world.get_component(Score))[0][1]


def get_or_create_selection(world: World) -> Selection:
    existing = list(world.get_component(Selection))
    if existing:
        return existing[0][1]
    world.create_entity(Selection())
    return list(world.get_component(Selection))[0][1]


def get_or_create_idle_timer(world: World) -> IdleTimer:
    existing = list(world.get_component(IdleTimer))
    if existing:
        return existing[0][1]
    world.create_entity(IdleTimer())
    return list(world.get_component(IdleTimer))[0][1]


def reset_idle_timer(world: World) -> None:
    timer = get_or_create_idle_timer(world)
    timer.elapsed = 0.0
    timer.fired = False
