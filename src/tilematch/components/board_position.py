from dataclasses import dataclass

@dataclass(slots=True)
class BoardPosition:
    """Current slot of a tile entity. Mutable; identity lives in the entity id."""
    row: int
    col: int
