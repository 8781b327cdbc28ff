"""
Shot types — the stroke credited with ending a rally.
"""

from __future__ import annotations

from enum import Enum


class ShotType(str, Enum):
    DRIVE = "drive"
    CROSS = "cross"
    VOLLEY = "volley"
    DROP = "drop"
    LOB = "lob"
    BOAST = "boast"
    ACE = "ace"
    STROKE = "stroke"

    @property
    def short_name(self) -> str:
        return _SHORT_NAMES[self]

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]


_SHORT_NAMES = {
    ShotType.DRIVE: "DRV",
    ShotType.CROSS: "CRS",
    ShotType.VOLLEY: "VLY",
    ShotType.DROP: "DRP",
    ShotType.LOB: "LOB",
    ShotType.BOAST: "BST",
    ShotType.ACE: "ACE",
    ShotType.STROKE: "STR",
}

_DESCRIPTIONS = {
    ShotType.DRIVE: "Straight shot along the side wall",
    ShotType.CROSS: "Diagonal shot across the court",
    ShotType.VOLLEY: "Ball taken out of the air",
    ShotType.DROP: "Short ball to the front of the court",
    ShotType.LOB: "High ball to the back of the court",
    ShotType.BOAST: "Shot played off the side wall",
    ShotType.ACE: "Serve the receiver could not return",
    ShotType.STROKE: "Point awarded for obstruction",
}
