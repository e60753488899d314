"""Small geometry helpers for vector jobs

Keep pure functions here for easy testing and reuse.
"""

from __future__ import annotations
import csv
from typing import List

from .commands import Point
from .constants import EpilogConstants

MM_PER_INCH = 25.4


def mm_to_units(mm: float, resolution: int = EpilogConstants.RESOLUTION_DPI) -> int:
    """Convert millimetres to device units (rounded int)."""
    return int(round(mm / MM_PER_INCH * resolution))


def units_to_mm(units: int, resolution: int = EpilogConstants.RESOLUTION_DPI) -> float:
    """Convert device units to millimetres."""
    return units * MM_PER_INCH / resolution


def square_points(size: int = EpilogConstants.DEFAULT_SQUARE_SIZE, origin=(0, 0)) -> List[Point]:
    """Closed square path starting and ending at `origin`."""
    ox, oy = origin
    return [
        Point(ox, oy),
        Point(ox + size, oy),
        Point(ox + size, oy + size),
        Point(ox, oy + size),
        Point(ox, oy),
    ]


def load_points(path: str) -> List[List[Point]]:
    """Read strokes from a CSV file of `x,y` rows.

    A blank row ends the current stroke; rows starting with `#` are
    comments. Coordinates are device units.
    """
    strokes: List[List[Point]] = []
    current: List[Point] = []
    with open(path, newline="") as f:
        for lineno, row in enumerate(csv.reader(f), start=1):
            if not row or not "".join(row).strip():
                if current:
                    strokes.append(current)
                    current = []
                continue
            if row[0].lstrip().startswith("#"):
                continue
            if len(row) < 2:
                raise ValueError(f"{path}:{lineno}: expected x,y")
            try:
                current.append(Point(int(row[0]), int(row[1])))
            except ValueError as exc:
                raise ValueError(f"{path}:{lineno}: coordinates must be integers") from exc
    if current:
        strokes.append(current)
    return strokes
