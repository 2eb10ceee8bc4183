from dataclasses import dataclass, field
from typing import Dict, List

from tilematch.constants import (
    DEFAULT_KINDS,
    GRID_COLS,
    GRID_ROWS,
    HINT_DELAY,
    MATCH_SCORES,
    MAX_FILL_ATTEMPTS,
    MAX_RESHUFFLE_ATTEMPTS,
    MILESTONE,
    MIN_MATCH,
)
from tilematch.exceptions import ConfigError


@dataclass(slots=True)
class LevelConfig:
    """Per-level settings stored on the singleton config entity.

    ``kinds`` is the fixed set used for every random generation (initial fill,
    refill, reshuffle). ``match_scores`` maps group size to points.
    """
    rows: int = GRID_ROWS
    cols: int = GRID_COLS
    kinds: List[str] = field(default_factory=lambda: list(DEFAULT_KINDS))
    match_scores: Dict[int, int] = field(default_factory=lambda: dict(MATCH_SCORES))
    milestone: int = MILESTONE
    hint_delay: float = HINT_DELAY
    max_reshuffle_attempts: int = MAX_RESHUFFLE_ATTEMPTS
    max_fill_attempts: int = MAX_FILL_ATTEMPTS
    # Random reshuffles must also leave at least one legal move.
    require_move: bool = True

    def __post_init__(self) -> None:
        # Preserve order while dropping duplicates.
        seen: set[str] = set()
        filtered: List[str] = []
        for name in self.kinds:
            if name not in seen:
                filtered.append(name)
                seen.add(name)
        self.kinds = filtered

    def validate(self) -> None:
        if self.rows < MIN_MATCH or self.cols < MIN_MATCH:
            raise ConfigError(f"board must be at least {MIN_MATCH}x{MIN_MATCH}, got {self.rows}x{self.cols}")
        if len(self.kinds) < 3:
            raise ConfigError(f"need at least 3 token kinds, got {len(self.kinds)}")
        if not self.match_scores:
            raise ConfigError("match score table is empty")
        if self.milestone <= 0:
            raise ConfigError("milestone must be positive")
        if self.max_reshuffle_attempts < 0:
            raise ConfigError("max_reshuffle_attempts must not be negative")
        if self.max_fill_attempts < 1:
            raise ConfigError("max_fill_attempts must be at least 1")
        if self.hint_delay < 0:
            raise ConfigError("hint_delay must not be negative")

    def score_for(self, size: int) -> int:
        """Points for a group of ``size`` tiles; oversize groups use the top entry."""
        if size in self.match_scores:
            return self.match_scores[size]
        known = [k for k in self.match_scores if k <= size]
        if not known:
            return 0
        return self.match_scores[max(known)]
