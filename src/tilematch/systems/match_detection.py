"""Run detection over a full-board snapshot.

Rows are scanned left to right (row-major), then columns top to bottom
(column-major), so the same board always yields groups in the same order.
A sliding window of three equal kinds opens or extends the current group; a
window whose first cell is not already in the open group closes it. Rows and
columns are scanned independently, so a tile at the crossing of a horizontal
and a vertical run is reported in both groups.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import List, Optional, Sequence, Tuple

from esper import World

from tilematch.constants import MIN_MATCH
from tilematch.systems.board_ops import Position, Snapshot, board_dimensions, snapshot


class Orientation(Enum):
    HORIZONTAL = auto()
    VERTICAL = auto()


@dataclass(frozen=True, slots=True)
class MatchGroup:
    """Ordered, deduplicated run of same-kind tiles along one row or column."""
    kind: str
    orientation: Orientation
    tiles: Tuple[int, ...]
    positions: Tuple[Position, ...]

    @property
    def size(self) -> int:
        return len(self.tiles)

    @property
    def anchor_index(self) -> int:
        return self.size // 2

    def contains(self, entity: int) -> bool:
        return entity in self.tiles


def scan_groups(cells: Snapshot, rows: int, cols: int) -> List[MatchGroup]:
    groups: List[MatchGroup] = []
    for row in range(rows):
        line = [(row, col) for col in range(cols)]
        groups.extend(_scan_line(cells, line, Orientation.HORIZONTAL))
    for col in range(cols):
        line = [(row, col) for row in range(rows)]
        groups.extend(_scan_line(cells, line, Orientation.VERTICAL))
    return groups


def _scan_line(cells: Snapshot, line: Sequence[Position], orientation: Orientation) -> List[MatchGroup]:
    found: List[MatchGroup] = []
    members: List[Position] = []
    kind: Optional[str] = None
    for start in range(len(line) - MIN_MATCH + 1):
        window = line[start:start + MIN_MATCH]
        entries = [cells.get(pos) for pos in window]
        if any(entry is None for entry in entries):
            continue
        if len({entry[1] for entry in entries}) != 1:
            continue
        if members and window[0] not in members:
            found.append(_close_group(cells, members, kind, orientation))
            members = []
        kind = entries[0][1]
        for pos in window:
            if pos not in members:
                members.append(pos)
    if members:
        found.append(_close_group(cells, members, kind, orientation))
    return found


def _close_group(cells: Snapshot, members: List[Position], kind: str, orientation: Orientation) -> MatchGroup:
    return MatchGroup(
        kind=kind,
        orientation=orientation,
        tiles=tuple(cells[pos][0] for pos in members),
        positions=tuple(members),
    )


def has_match(cells: Snapshot, rows: int, cols: int) -> bool:
    return bool(scan_groups(cells, rows, cols))


def find_match_groups(world: World) -> List[MatchGroup]:
    """Detect every horizontal and vertical run of three or more on the board."""
    rows, cols = board_dimensions(world)
    return scan_groups(snapshot(world), rows, cols)
