from blinker import Signal
from typing import Dict

class EventBus:
    """Simple event bus leveraging blinker Signal objects."""
    def __init__(self):
        self._signals: Dict[str, Signal] = {}

    def subscribe(self, name: str, fn):
        sig = self._signals.setdefault(name, Signal(name))
        # Use weak=False to retain strong reference to bound methods so systems not kept in a variable still receive events.
        sig.connect(fn, weak=False)

    def unsubscribe(self, name: str, fn):
        sig = self._signals.get(name)
        if sig:
            sig.disconnect(fn)

    def emit(self, name: str, **payload):
        sig = self._signals.get(name)
        if sig:
            sig.send(self, **payload)


# ============================================================================
# SYSTEM & TIMING
# ============================================================================
EVENT_TICK = "tick"                        # payload: dt=float
EVENT_BOARD_TEARDOWN = "board_teardown"    # payload: None


# ============================================================================
# INPUT & SELECTION
# ============================================================================
EVENT_TILE_CLICK = "tile_click"            # payload: row, col
EVENT_TILE_SELECTED = "tile_selected"      # payload: row, col
EVENT_TILE_DESELECTED = "tile_deselected"  # payload: reason=str, prev_row, prev_col


# ============================================================================
# SWAPS
# ============================================================================
EVENT_SWAP_REQUEST = "swap_request"        # payload: src=(r,c), dst=(r,c)
EVENT_SWAP_APPLIED = "swap_applied"        # payload: src, dst, groups=list[MatchGroup]
EVENT_SWAP_REVERTED = "swap_reverted"      # payload: src, dst
EVENT_SWAP_REJECTED = "swap_rejected"      # payload: src, dst, reason=str


# ============================================================================
# CASCADE
# ============================================================================
EVENT_MATCH_RESOLVED = "match_resolved"        # payload: groups=list[MatchGroup], score_delta=int, depth=int
EVENT_SPECIAL_CREATED = "special_created"      # payload: tile_id=int, position=(r,c), special=SpecialState
EVENT_SPECIAL_DETONATED = "special_detonated"  # payload: tile_id=int, position=(r,c), special=SpecialState, positions=list
EVENT_TILES_REMOVED = "tiles_removed"          # payload: positions=[(r,c),...]
EVENT_TILES_MOVED = "tiles_moved"              # payload: moves=[{'from','to','tile_id'}]
EVENT_TILES_CREATED = "tiles_created"          # payload: creations=[{'position','kind','tile_id'}]
EVENT_CASCADE_COMPLETE = "cascade_complete"    # payload: depth=int


# ============================================================================
# ANIMATION (view layer acknowledgements)
# ============================================================================
EVENT_ANIMATION_COMPLETE = "animation_complete"  # payload: kind=str


# ============================================================================
# HINTS & RESHUFFLE
# ============================================================================
EVENT_HINT_AVAILABLE = "hint_available"            # payload: src=(r,c), dst=(r,c), group=MatchGroup
EVENT_HINT_CLEARED = "hint_cleared"                # payload: reason=str
EVENT_NO_MOVE_FOUND = "no_move_found"              # payload: None
EVENT_TILES_RESHUFFLED = "tiles_reshuffled"        # payload: changes=[{'position','kind','tile_id'}], fallback=bool
EVENT_RESHUFFLE_COMPLETE = "reshuffle_complete"    # payload: attempts=int, fallback=bool


# ============================================================================
# SCORE & PROGRESSION
# ============================================================================
EVENT_SCORE_CHANGED = "score_changed"      # payload: total=int, delta=int
EVENT_LEVEL_UP = "level_up"                # payload: level=int, total=int


# ============================================================================
# ENGINE STATE
# ============================================================================
EVENT_ENGINE_MODE_CHANGED = "engine_mode_changed"  # payload: previous_mode=EngineMode, new_mode=EngineMode
EVENT_CASCADE_START = "cascade_start"              # payload: groups=list[MatchGroup]|None, reason=str
EVENT_RESHUFFLE_REQUEST = "reshuffle_request"      # payload: reason=str
