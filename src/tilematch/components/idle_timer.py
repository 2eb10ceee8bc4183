from dataclasses import dataclass


@dataclass(slots=True)
class IdleTimer:
    """Seconds since the last player-initiated operation or board settle."""
    elapsed: float = 0.0
    # Hint search already ran for this idle stretch.
    fired: bool = False
