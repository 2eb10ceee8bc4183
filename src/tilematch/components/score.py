from dataclasses import dataclass


@dataclass(slots=True)
class Score:
    total: int = 0
    level: int = 1
    # Set when a level-up should reshuffle the board once the cascade settles.
    reshuffle_pending: bool = False
