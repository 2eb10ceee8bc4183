"""Exception hierarchy for the tile-matching engine."""


class TileMatchError(Exception):
    """Base exception for engine failures."""


class OutOfBounds(TileMatchError, IndexError):
    """Raised when a row/col pair falls outside the board."""

    def __init__(self, row: int, col: int, rows: int, cols: int):
        super().__init__(f"({row}, {col}) outside board of {rows}x{cols}")
        self.row = row
        self.col = col


class InvalidMove(TileMatchError, ValueError):
    """Raised when a swap request is malformed (non-adjacent or off-board)."""


class Busy(TileMatchError, RuntimeError):
    """Raised when a top-level operation starts while another is in flight."""


class ReshuffleExhausted(TileMatchError):
    """Raised internally when random reshuffles keep producing matches."""


class ConfigError(TileMatchError, ValueError):
    """Raised when a level configuration cannot drive a playable board."""
