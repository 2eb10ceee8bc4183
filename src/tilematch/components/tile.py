from dataclasses import dataclass
from enum import Enum, auto


class SpecialState(Enum):
    """Bonus effect a tile carries after anchoring a match of four or more."""
    NONE = auto()
    ROW_CLEAR = auto()
    COL_CLEAR = auto()
    EXPLOSIVE = auto()


@dataclass(slots=True)
class Tile:
    """Per-tile kind assignment plus its special state.

    Stores only the semantic kind; presentation (sprites, glow) is looked up by
    the view layer from ``kind`` and ``special``.
    """
    kind: str
    special: SpecialState = SpecialState.NONE
