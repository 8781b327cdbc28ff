"""
API state views — read-only snapshots of a live match returned by the routes.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from pydantic import BaseModel

from squash.models.court import CourtZone
from squash.models.player import Player
from squash.models.rally import Let, Point

if TYPE_CHECKING:
    from squash.engine.game import Game
    from squash.engine.match import Match
    from squash.models.records import MatchRecord


class GameState(BaseModel):
    player1_name: str
    player2_name: str
    player1_score: int
    player2_score: int
    server: Player
    starting_server: Player
    scoring_step: str
    selected_player: Optional[Player] = None
    selected_zone: Optional[CourtZone] = None
    is_game_over: bool = False
    winner: Optional[Player] = None
    points: int = 0
    lets: int = 0

    @classmethod
    def from_game(cls, game: Game) -> GameState:
        return cls(
            player1_name=game.player1_name,
            player2_name=game.player2_name,
            player1_score=game.player1_score,
            player2_score=game.player2_score,
            server=game.current_server,
            starting_server=game.starting_server,
            scoring_step=game.scoring_step.value,
            selected_player=game.selected_player,
            selected_zone=game.selected_zone,
            is_game_over=game.is_game_over,
            winner=game.winner,
            points=len(game.points),
            lets=len(game.lets),
        )


class MatchState(BaseModel):
    id: str
    player1_name: str
    player2_name: str
    best_of: int
    score_line: str
    current_game_index: int
    is_match_over: bool = False
    winner: Optional[Player] = None
    current_game: GameState

    @classmethod
    def from_match(cls, match_id: str, match: Match) -> MatchState:
        return cls(
            id=match_id,
            player1_name=match.player1_name,
            player2_name=match.player2_name,
            best_of=match.best_of,
            score_line=match.score_line,
            current_game_index=match.current_game_index,
            is_match_over=match.is_match_over,
            winner=match.match_winner,
            current_game=GameState.from_game(match.current_game),
        )


class StoredMatchSummary(BaseModel):
    """One row of the saved-match history."""
    id: str
    player1_name: str
    player2_name: str
    best_of: int
    score_line: str
    games: list[str]
    saved_at: datetime

    @classmethod
    def from_record(cls, record: MatchRecord) -> StoredMatchSummary:
        return cls(
            id=record.id,
            player1_name=record.player1_name,
            player2_name=record.player2_name,
            best_of=record.best_of,
            score_line=record.score_line,
            games=[f"{g.player1_score} - {g.player2_score}" for g in record.games],
            saved_at=record.saved_at,
        )


class PointEntry(BaseModel):
    """Result of the shot step: the recorded point, or None if it was rejected."""
    point: Optional[Point] = None
    state: MatchState


class LetEntry(BaseModel):
    let: Let
    state: MatchState
