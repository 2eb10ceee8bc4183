"""Entry point for the headless match-three engine.

Plays a short game in the terminal: every idle stretch the hint system
suggests a move, the demo applies it, and a stand-in view acknowledges each
animation immediately.
"""
import logging
import sys

from tilematch.constants import ANIM_CREATE, ANIM_MOVE, ANIM_REMOVE, ANIM_RESHUFFLE, ANIM_SWAP
from tilematch.engine import MatchEngine
from tilematch.events.bus import (
    EVENT_CASCADE_COMPLETE,
    EVENT_HINT_AVAILABLE,
    EVENT_SCORE_CHANGED,
    EVENT_SWAP_APPLIED,
    EVENT_SWAP_REVERTED,
    EVENT_TILES_CREATED,
    EVENT_TILES_MOVED,
    EVENT_TILES_REMOVED,
    EVENT_TILES_RESHUFFLED,
)
from tilematch.utils.logger import configure_logging


class ConsoleView:
    """Acknowledges every animation request on the next frame."""

    def __init__(self, engine: MatchEngine):
        self.engine = engine
        self.pending: list[str] = []
        self.hints: list[tuple] = []
        bus = engine.event_bus
        bus.subscribe(EVENT_SWAP_APPLIED, lambda s, **k: self.pending.append(ANIM_SWAP))
        bus.subscribe(EVENT_SWAP_REVERTED, lambda s, **k: self.pending.append(ANIM_SWAP))
        bus.subscribe(EVENT_TILES_REMOVED, lambda s, **k: self.pending.append(ANIM_REMOVE))
        bus.subscribe(EVENT_TILES_MOVED, lambda s, **k: self.pending.append(ANIM_MOVE))
        bus.subscribe(EVENT_TILES_CREATED, lambda s, **k: self.pending.append(ANIM_CREATE))
        bus.subscribe(EVENT_TILES_RESHUFFLED, lambda s, **k: self.pending.append(ANIM_RESHUFFLE))
        bus.subscribe(EVENT_HINT_AVAILABLE, lambda s, **k: self.hints.append((k['src'], k['dst'])))
        bus.subscribe(EVENT_SCORE_CHANGED, lambda s, **k: print(f"score {k['total']} (+{k['delta']})"))
        bus.subscribe(EVENT_CASCADE_COMPLETE, lambda s, **k: self.render())

    def frame(self, dt: float) -> None:
        self.engine.tick(dt)
        while self.pending:
            self.engine.animation_complete(self.pending.pop(0))

    def render(self) -> None:
        for row in self.engine.kinds():
            print(" ".join((kind or '.')[:1].upper() for kind in row))
        print()


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    seed = int(argv[0]) if argv else 7
    moves = int(argv[1]) if len(argv) > 1 else 10
    configure_logging(logging.INFO)
    engine = MatchEngine(seed=seed)
    view = ConsoleView(engine)
    view.render()
    played = 0
    while played < moves:
        view.frame(0.5)
        if view.hints:
            src, dst = view.hints.pop(0)
            engine.request_swap(src, dst)
            played += 1
    engine.teardown()


if __name__ == "__main__":
    main()
