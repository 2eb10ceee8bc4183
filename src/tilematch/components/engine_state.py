"""Engine state resource describing what the board is currently doing."""
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


class EngineMode(Enum):
    """Top-level engine modes. Only one mutating operation runs at a time."""
    IDLE = auto()
    AWAITING_SWAP_ANIMATION = auto()
    CASCADING = auto()
    RESHUFFLING = auto()
    SUGGESTING_HINT = auto()


class CascadePhase(Enum):
    IDLE = auto()
    REMOVING = auto()
    COMPACTING = auto()
    REFILLING = auto()
    RESCANNING = auto()


BUSY_MODES = frozenset({
    EngineMode.AWAITING_SWAP_ANIMATION,
    EngineMode.CASCADING,
    EngineMode.RESHUFFLING,
})


@dataclass(slots=True)
class EngineState:
    """Singleton component storing the engine mode and cascade progress."""
    mode: EngineMode = EngineMode.IDLE
    cascade_phase: CascadePhase = CascadePhase.IDLE
    cascade_depth: int = 0
    # Animation kind the engine is blocked on, if any.
    awaiting: Optional[str] = None
    torn_down: bool = False

    @property
    def busy(self) -> bool:
        return self.mode in BUSY_MODES
