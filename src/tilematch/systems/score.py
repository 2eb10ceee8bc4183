from esper import World

from tilematch.events.bus import (
    EventBus,
    EVENT_CASCADE_COMPLETE,
    EVENT_LEVEL_UP,
    EVENT_MATCH_RESOLVED,
    EVENT_RESHUFFLE_REQUEST,
    EVENT_SCORE_CHANGED,
)
from tilematch.utils.engine_state import get_level_config, get_or_create_score
from tilematch.utils.logger import get_logger

logger = get_logger(__name__)


class ScoreSystem:
    """Accumulates match scores and advances the level at each milestone.

    A level-up schedules a reshuffle that runs once the current cascade has
    settled.
    """

    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus
        event_bus.subscribe(EVENT_MATCH_RESOLVED, self.on_match_resolved)
        event_bus.subscribe(EVENT_CASCADE_COMPLETE, self.on_cascade_complete)

    @property
    def total(self) -> int:
        return get_or_create_score(self.world).total

    @property
    def level(self) -> int:
        return get_or_create_score(self.world).level

    def on_match_resolved(self, sender, **kwargs):
        delta = int(kwargs.get('score_delta', 0) or 0)
        if delta <= 0:
            return
        score = get_or_create_score(self.world)
        score.total += delta
        self.event_bus.emit(EVENT_SCORE_CHANGED, total=score.total, delta=delta)
        milestone = get_level_config(self.world).milestone
        while score.total >= score.level * milestone:
            score.level += 1
            score.reshuffle_pending = True
            logger.info("Level %d reached at %d points", score.level, score.total)
            self.event_bus.emit(EVENT_LEVEL_UP, level=score.level, total=score.total)

    def on_cascade_complete(self, sender, **kwargs):
        score = get_or_create_score(self.world)
        if not score.reshuffle_pending:
            return
        score.reshuffle_pending = False
        self.event_bus.emit(EVENT_RESHUFFLE_REQUEST, reason='level_up')
