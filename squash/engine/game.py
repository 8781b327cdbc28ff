"""
Squash Game — State machine for a single game scored to 11, win by 2.

Implements:
- Point-a-rally scoring with service passing to the rally winner
- Three-step point entry: player → court zone → shot type
- Rally timing anchored on the previous point or let
- Exact single-step undo for points and lets
- Per-game analytics over the point and let logs

Invalid calls (scoring a finished game, picking a zone before a player,
undoing an empty log) leave the game untouched instead of raising.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from squash.config import get_logger, settings
from squash.engine.clock import Clock, SystemClock
from squash.engine.stats_calculator import StatsCalculator
from squash.models.court import CourtZone
from squash.models.player import Player
from squash.models.rally import Let, Point
from squash.models.shot import ShotType

logger = get_logger(__name__)

POINTS_TO_WIN = 11
WIN_BY = 2


class ScoringStep(str, Enum):
    SELECT_PLAYER = "select_player"
    SELECT_ZONE = "select_zone"
    SELECT_SHOT = "select_shot"


def is_game_won(score1: int, score2: int) -> bool:
    return max(score1, score2) >= POINTS_TO_WIN and abs(score1 - score2) >= WIN_BY


class Game:
    """
    Squash game scoring state machine.

    Usage:
        game = Game()
        game.set_starting_server(Player.PLAYER1)
        game.select_player(Player.PLAYER2)
        game.select_zone(CourtZone.BACK_LEFT)
        game.add_point(ShotType.DRIVE)
        print(game.score(Player.PLAYER2), game.current_server)
    """

    def __init__(self, clock: Optional[Clock] = None):
        self.clock: Clock = clock or SystemClock()

        self.player1_name: str = settings.DEFAULT_PLAYER1_NAME
        self.player2_name: str = settings.DEFAULT_PLAYER2_NAME
        self.player1_score: int = 0
        self.player2_score: int = 0
        self.current_server: Player = Player.PLAYER1
        self.starting_server: Player = Player.PLAYER1

        self.points: list[Point] = []
        self.lets: list[Let] = []
        self.last_point_time: datetime = self.clock.now()

        # In-progress point entry
        self.selected_player: Optional[Player] = None
        self.selected_zone: Optional[CourtZone] = None

        # Undo stacks, one entry per recorded point
        self._previous_servers: list[Player] = []
        self._previous_point_times: list[datetime] = []

    @classmethod
    def restore(
        cls,
        player1_name: str,
        player2_name: str,
        starting_server: Player,
        current_server: Player,
        points: list[Point],
        lets: list[Let],
        clock: Optional[Clock] = None,
    ) -> Game:
        """Rebuild a game from its logs, including the undo stacks."""
        game = cls(clock=clock)
        game.set_names(player1_name, player2_name)
        game.set_starting_server(starting_server)
        game.current_server = current_server
        game.points = list(points)
        game.lets = list(lets)
        for point in game.points:
            game._previous_servers.append(point.server)
            game._previous_point_times.append(point.timestamp - timedelta(seconds=point.duration))
        if game.points:
            last = game.points[-1]
            game.player1_score = last.player1_score
            game.player2_score = last.player2_score
            game.last_point_time = last.timestamp
        if game.lets and game.lets[-1].timestamp > game.last_point_time:
            game.last_point_time = game.lets[-1].timestamp
        return game

    # ── State queries ────────────────────────────────────────────────────────

    @property
    def is_game_over(self) -> bool:
        return is_game_won(self.player1_score, self.player2_score)

    @property
    def winner(self) -> Optional[Player]:
        if not self.is_game_over:
            return None
        return Player.PLAYER1 if self.player1_score > self.player2_score else Player.PLAYER2

    @property
    def can_undo(self) -> bool:
        return bool(self.points)

    @property
    def can_undo_let(self) -> bool:
        return bool(self.lets)

    @property
    def last_point(self) -> Optional[Point]:
        return self.points[-1] if self.points else None

    @property
    def point_count(self) -> int:
        return len(self.points)

    @property
    def scoring_step(self) -> ScoringStep:
        if self.selected_player is None:
            return ScoringStep.SELECT_PLAYER
        if self.selected_zone is None:
            return ScoringStep.SELECT_ZONE
        return ScoringStep.SELECT_SHOT

    @property
    def score_display(self) -> str:
        return f"{self.player1_score} - {self.player2_score}"

    def score(self, player: Player) -> int:
        return self.player1_score if player == Player.PLAYER1 else self.player2_score

    def name(self, player: Player) -> str:
        return self.player1_name if player == Player.PLAYER1 else self.player2_name

    # ── Setup ────────────────────────────────────────────────────────────────

    def set_names(self, player1_name: str, player2_name: str) -> None:
        self.player1_name = player1_name
        self.player2_name = player2_name

    def set_starting_server(self, player: Player) -> None:
        self.starting_server = player
        self.current_server = player

    # ── Point entry workflow ─────────────────────────────────────────────────

    def select_player(self, player: Player) -> None:
        """Step 1: the rally winner."""
        if self.is_game_over:
            return
        self.selected_player = player
        self.selected_zone = None

    def select_zone(self, zone: CourtZone) -> None:
        """Step 2: where the rally was won. Requires a selected player."""
        if self.selected_player is None:
            return
        self.selected_zone = zone

    def select_zone_at(self, x: float, y: float) -> None:
        self.select_zone(CourtZone.from_position(x, y))

    def go_back_step(self) -> None:
        if self.selected_zone is not None:
            self.selected_zone = None
        elif self.selected_player is not None:
            self.selected_player = None

    def clear_selection(self) -> None:
        self.selected_player = None
        self.selected_zone = None

    def add_point(self, shot_type: ShotType) -> Optional[Point]:
        """Step 3: record the point for the pending player and zone."""
        if self.is_game_over:
            return None
        scorer, zone = self.selected_player, self.selected_zone
        if scorer is None or zone is None:
            return None

        now = self.clock.now()
        duration = (now - self.last_point_time).total_seconds()
        server = self.current_server

        self._previous_servers.append(server)
        self._previous_point_times.append(self.last_point_time)

        if scorer == Player.PLAYER1:
            self.player1_score += 1
        else:
            self.player2_score += 1

        point = Point(
            scorer=scorer,
            zone=zone,
            shot_type=shot_type,
            server=server,
            player1_score=self.player1_score,
            player2_score=self.player2_score,
            timestamp=now,
            duration=duration,
        )
        self.points.append(point)
        self.last_point_time = now

        # Service passes only when the receiver wins the rally
        if scorer != server:
            self.current_server = scorer

        self.clear_selection()
        logger.debug(
            "Point %s (%s, %s) -> %s, server %s",
            scorer.short_name, zone.value, shot_type.value,
            self.score_display, self.current_server.short_name,
        )
        return point

    def record_point(self, scorer: Player, zone: CourtZone, shot_type: ShotType) -> Optional[Point]:
        """Run all three entry steps at once."""
        self.select_player(scorer)
        self.select_zone(zone)
        return self.add_point(shot_type)

    def undo_last_point(self) -> Optional[Point]:
        if not self.points:
            return None
        point = self.points.pop()
        if point.scorer == Player.PLAYER1:
            self.player1_score -= 1
        else:
            self.player2_score -= 1
        self.current_server = self._previous_servers.pop()
        self.last_point_time = self._previous_point_times.pop()
        self.clear_selection()
        logger.debug("Undo point -> %s", self.score_display)
        return point

    # ── Lets ─────────────────────────────────────────────────────────────────

    def add_let(self, requested_by: Player) -> Let:
        """Record a replayed rally. Score and server are unchanged."""
        now = self.clock.now()
        let = Let(
            requested_by=requested_by,
            server=self.current_server,
            player1_score=self.player1_score,
            player2_score=self.player2_score,
            timestamp=now,
        )
        self.lets.append(let)
        self.last_point_time = now
        self.clear_selection()
        logger.debug("Let for %s at %s", requested_by.short_name, self.score_display)
        return let

    def undo_last_let(self) -> Optional[Let]:
        if not self.lets:
            return None
        return self.lets.pop()

    def reset(self) -> None:
        self.player1_score = 0
        self.player2_score = 0
        self.current_server = self.starting_server
        self.points = []
        self.lets = []
        self._previous_servers = []
        self._previous_point_times = []
        self.last_point_time = self.clock.now()
        self.clear_selection()

    # ── Analytics ────────────────────────────────────────────────────────────

    @property
    def stats(self) -> StatsCalculator:
        return StatsCalculator(self.points, self.lets)

    def points_won(self, player: Player) -> list[Point]:
        return self.stats.points_won(player)

    def points_lost(self, player: Player) -> list[Point]:
        return self.stats.points_lost(player)

    def points_won_in(self, player: Player, zone: CourtZone) -> int:
        return self.stats.points_won_in(player, zone)

    def points_won_with(self, player: Player, shot_type: ShotType) -> int:
        return self.stats.points_won_with(player, shot_type)

    def total_points_in(self, zone: CourtZone) -> int:
        return self.stats.total_points_in(zone)

    def win_percentage(self, player: Player, zone: CourtZone) -> float:
        return self.stats.win_percentage(player, zone)

    def best_zone(self, player: Player) -> CourtZone:
        return self.stats.best_zone(player)

    def worst_zone(self, player: Player) -> CourtZone:
        return self.stats.worst_zone(player)

    def best_shot_type(self, player: Player) -> ShotType:
        return self.stats.best_shot_type(player)

    def recommended_zones(self, against: Player) -> list[CourtZone]:
        return self.stats.recommended_zones(against)

    def average_duration_won(self, player: Player) -> Optional[float]:
        return self.stats.average_duration_won(player)

    def average_duration_lost(self, player: Player) -> Optional[float]:
        return self.stats.average_duration_lost(player)

    def longest_point(self) -> Optional[Point]:
        return self.stats.longest_point()

    def shortest_point(self) -> Optional[Point]:
        return self.stats.shortest_point()

    def average_point_duration(self) -> Optional[float]:
        return self.stats.average_point_duration()

    def total_game_duration(self) -> float:
        return self.stats.total_duration()

    def median_duration(self) -> Optional[float]:
        return self.stats.median_duration()

    def short_rally_win_percentage(self, player: Player) -> Optional[float]:
        return self.stats.short_rally_win_percentage(player)

    def long_rally_win_percentage(self, player: Player) -> Optional[float]:
        return self.stats.long_rally_win_percentage(player)

    def lets_requested(self, player: Player) -> list[Let]:
        return self.stats.lets_requested(player)

    @property
    def total_lets(self) -> int:
        return len(self.lets)
