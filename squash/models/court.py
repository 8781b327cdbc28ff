"""
Court zones — the 3x3 grid used to tag where a rally was won.

Rows run from the front wall (y = 0) to the back wall (y = 1),
columns from the left side wall (x = 0) to the right (x = 1).
"""

from __future__ import annotations

from enum import Enum

# Axis cut points. Classification uses strict "<" against these.
FIRST_CUT = 0.33
SECOND_CUT = 0.66

_ROWS = ("front", "middle", "back")
_COLUMNS = ("left", "middle", "right")


def _bucket(value: float) -> int:
    if value < FIRST_CUT:
        return 0
    if value < SECOND_CUT:
        return 1
    return 2


class CourtZone(str, Enum):
    """Court zone for rally-ending analysis. Declaration order is significant."""
    FRONT_LEFT = "front_left"
    FRONT_MIDDLE = "front_middle"
    FRONT_RIGHT = "front_right"
    MIDDLE_LEFT = "middle_left"
    MIDDLE_MIDDLE = "middle_middle"
    MIDDLE_RIGHT = "middle_right"
    BACK_LEFT = "back_left"
    BACK_MIDDLE = "back_middle"
    BACK_RIGHT = "back_right"

    @property
    def row(self) -> str:
        return self.value.split("_")[0]

    @property
    def column(self) -> str:
        return self.value.split("_")[1]

    @property
    def short_name(self) -> str:
        return f"{self.row[0]}{self.column[0]}".upper()

    @property
    def label(self) -> str:
        return f"{self.row.title()} {self.column.title()}"

    @classmethod
    def from_position(cls, x: float, y: float) -> CourtZone:
        """Classify a normalized court position into its zone."""
        x = min(max(x, 0.0), 1.0)
        y = min(max(y, 0.0), 1.0)
        row = _ROWS[_bucket(y)]
        column = _COLUMNS[_bucket(x)]
        return cls(f"{row}_{column}")
