"""
Player identities — the two sides of a squash game.
"""

from __future__ import annotations

from enum import Enum


class Player(str, Enum):
    PLAYER1 = "player1"
    PLAYER2 = "player2"

    @property
    def short_name(self) -> str:
        return "P1" if self is Player.PLAYER1 else "P2"

    @property
    def opponent(self) -> Player:
        return Player.PLAYER2 if self is Player.PLAYER1 else Player.PLAYER1
