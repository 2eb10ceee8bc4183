from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Tuple


class SelectionState(Enum):
    NO_SELECTION = auto()
    ONE_SELECTED = auto()
    RESOLVING = auto()


@dataclass(slots=True)
class Selection:
    """Player input state: which tile (if any) is picked for the next swap."""
    state: SelectionState = SelectionState.NO_SELECTION
    selected: Optional[Tuple[int, int]] = None
