"""
Persistence record shapes — plain data exchanged with the storage layer.

A match record owns its game records, which own their point and let
records. Numbers are 1-based and define the order of each log.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

from pydantic import BaseModel, Field

from squash.models.court import CourtZone
from squash.models.player import Player
from squash.models.rally import Let, Point
from squash.models.shot import ShotType

if TYPE_CHECKING:
    from squash.engine.clock import Clock
    from squash.engine.game import Game
    from squash.engine.match import Match


def _player(raw: Optional[str]) -> Player:
    try:
        return Player(raw)
    except ValueError:
        return Player.PLAYER1


def _zone(raw: str) -> CourtZone:
    try:
        return CourtZone(raw)
    except ValueError:
        return CourtZone.MIDDLE_MIDDLE


def _shot(raw: str) -> ShotType:
    try:
        return ShotType(raw)
    except ValueError:
        return ShotType.DRIVE


class PointRecord(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    point_number: int
    scorer: str
    zone: str
    shot_type: str
    server: str
    player1_score: int
    player2_score: int
    timestamp: datetime
    duration: float = 0.0

    @classmethod
    def from_point(cls, point: Point, point_number: int) -> PointRecord:
        return cls(
            id=point.id,
            point_number=point_number,
            scorer=point.scorer.value,
            zone=point.zone.value,
            shot_type=point.shot_type.value,
            server=point.server.value,
            player1_score=point.player1_score,
            player2_score=point.player2_score,
            timestamp=point.timestamp,
            duration=point.duration,
        )

    def to_point(self) -> Point:
        return Point(
            id=self.id,
            scorer=_player(self.scorer),
            zone=_zone(self.zone),
            shot_type=_shot(self.shot_type),
            server=_player(self.server),
            player1_score=self.player1_score,
            player2_score=self.player2_score,
            timestamp=self.timestamp,
            duration=self.duration,
        )


class LetRecord(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    let_number: int
    requested_by: str
    server: str
    player1_score: int
    player2_score: int
    timestamp: datetime

    @classmethod
    def from_let(cls, let: Let, let_number: int) -> LetRecord:
        return cls(
            id=let.id,
            let_number=let_number,
            requested_by=let.requested_by.value,
            server=let.server.value,
            player1_score=let.player1_score,
            player2_score=let.player2_score,
            timestamp=let.timestamp,
        )

    def to_let(self) -> Let:
        return Let(
            id=self.id,
            requested_by=_player(self.requested_by),
            server=_player(self.server),
            player1_score=self.player1_score,
            player2_score=self.player2_score,
            timestamp=self.timestamp,
        )


class GameRecord(BaseModel):
    game_number: int
    player1_name: str
    player2_name: str
    player1_score: int
    player2_score: int
    starting_server: str
    current_server: str
    winner: Optional[str] = None
    points: list[PointRecord] = Field(default_factory=list)
    lets: list[LetRecord] = Field(default_factory=list)

    @classmethod
    def from_game(cls, game: Game, game_number: int) -> GameRecord:
        return cls(
            game_number=game_number,
            player1_name=game.player1_name,
            player2_name=game.player2_name,
            player1_score=game.player1_score,
            player2_score=game.player2_score,
            starting_server=game.starting_server.value,
            current_server=game.current_server.value,
            winner=game.winner.value if game.winner else None,
            points=[PointRecord.from_point(p, i) for i, p in enumerate(game.points, start=1)],
            lets=[LetRecord.from_let(l, i) for i, l in enumerate(game.lets, start=1)],
        )

    def to_game(self, clock: Optional[Clock] = None) -> Game:
        from squash.engine.game import Game

        points = [r.to_point() for r in sorted(self.points, key=lambda r: r.point_number)]
        lets = [r.to_let() for r in sorted(self.lets, key=lambda r: r.let_number)]
        return Game.restore(
            player1_name=self.player1_name,
            player2_name=self.player2_name,
            starting_server=_player(self.starting_server),
            current_server=_player(self.current_server),
            points=points,
            lets=lets,
            clock=clock,
        )


class MatchRecord(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    player1_name: str
    player2_name: str
    starting_server: str
    best_of: int = 5
    saved_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    games: list[GameRecord] = Field(default_factory=list)

    @property
    def score_line(self) -> str:
        p1 = sum(1 for g in self.games if g.winner == Player.PLAYER1.value)
        p2 = sum(1 for g in self.games if g.winner == Player.PLAYER2.value)
        return f"{p1} - {p2}"

    @classmethod
    def from_match(cls, match: Match) -> MatchRecord:
        return cls(
            player1_name=match.player1_name,
            player2_name=match.player2_name,
            starting_server=match.starting_server.value,
            best_of=match.best_of,
            games=[GameRecord.from_game(g, i) for i, g in enumerate(match.games, start=1)],
        )

    def to_match(self, clock: Optional[Clock] = None) -> Match:
        from squash.engine.match import Match

        games = [g.to_game(clock) for g in sorted(self.games, key=lambda g: g.game_number)]
        return Match.restore(
            player1_name=self.player1_name,
            player2_name=self.player2_name,
            starting_server=_player(self.starting_server),
            best_of=self.best_of,
            games=games,
            clock=clock,
        )
