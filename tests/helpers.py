from __future__ import annotations

from typing import List, Optional, Sequence

from tilematch.components.level_config import LevelConfig
from tilematch.constants import ANIM_CREATE, ANIM_MOVE, ANIM_REMOVE, ANIM_RESHUFFLE, ANIM_SWAP
from tilematch.engine import MatchEngine
from tilematch.events.bus import (
    EVENT_ANIMATION_COMPLETE,
    EVENT_SWAP_APPLIED,
    EVENT_SWAP_REVERTED,
    EVENT_TILES_CREATED,
    EVENT_TILES_MOVED,
    EVENT_TILES_REMOVED,
    EVENT_TILES_RESHUFFLED,
    EventBus,
)


class AnimationDriver:
    """Stands in for the view layer: queues every animation the engine asks for.

    ``drain`` acknowledges the queue in order, the way a view would once each
    animation finished playing.
    """

    def __init__(self, bus: EventBus):
        self.bus = bus
        self.pending: List[str] = []
        self.played: List[str] = []
        bus.subscribe(EVENT_SWAP_APPLIED, lambda s, **k: self.pending.append(ANIM_SWAP))
        bus.subscribe(EVENT_SWAP_REVERTED, lambda s, **k: self.pending.append(ANIM_SWAP))
        bus.subscribe(EVENT_TILES_REMOVED, lambda s, **k: self.pending.append(ANIM_REMOVE))
        bus.subscribe(EVENT_TILES_MOVED, lambda s, **k: self.pending.append(ANIM_MOVE))
        bus.subscribe(EVENT_TILES_CREATED, lambda s, **k: self.pending.append(ANIM_CREATE))
        bus.subscribe(EVENT_TILES_RESHUFFLED, lambda s, **k: self.pending.append(ANIM_RESHUFFLE))

    def step(self) -> Optional[str]:
        if not self.pending:
            return None
        kind = self.pending.pop(0)
        self.played.append(kind)
        self.bus.emit(EVENT_ANIMATION_COMPLETE, kind=kind)
        return kind

    def drain(self, limit: int = 10_000) -> int:
        count = 0
        while self.pending and count < limit:
            self.step()
            count += 1
        return count


def make_engine(
    layout: Optional[Sequence[Sequence[Optional[str]]]] = None,
    *,
    kinds: Optional[Sequence[str]] = None,
    seed: int = 1234,
    **config_kwargs,
) -> tuple[MatchEngine, AnimationDriver]:
    """Build an engine, optionally loading an explicit layout of kinds."""

    if layout is not None:
        config_kwargs.setdefault('rows', len(layout))
        config_kwargs.setdefault('cols', len(layout[0]))
        if kinds is None:
            seen: list[str] = []
            for row in layout:
                for kind in row:
                    if kind is not None and kind not in seen:
                        seen.append(kind)
            kinds = seen
    if kinds is not None:
        extra = [k for k in ('red', 'green', 'blue') if k not in kinds]
        config_kwargs['kinds'] = list(kinds) + extra[:max(0, 3 - len(kinds))]
    config = LevelConfig(**config_kwargs)
    engine = MatchEngine(config, seed=seed, populate=layout is None)
    if layout is not None:
        engine.board_system.load(layout)
    driver = AnimationDriver(engine.event_bus)
    return engine, driver


def record(bus: EventBus, *events: str) -> List[tuple]:
    """Collect ``(event, kwargs)`` pairs for the given events in emission order."""
    log: List[tuple] = []
    for event in events:
        bus.subscribe(event, lambda sender, _event=event, **kwargs: log.append((_event, kwargs)))
    return log
