"""
Squash Match — Best-of-N sequence of games.

The winner of each game serves first in the next one. Match-level
statistics are re-derived from the concatenated logs of every game.
"""

from __future__ import annotations

from typing import Optional

from squash.config import get_logger, settings
from squash.engine.clock import Clock, SystemClock
from squash.engine.game import Game
from squash.engine.stats_calculator import StatsCalculator
from squash.models.court import CourtZone
from squash.models.player import Player
from squash.models.rally import Let, Point
from squash.models.shot import ShotType

logger = get_logger(__name__)


class Match:
    """
    Best-of-N squash match.

    Usage:
        match = Match()
        match.setup_match("Ali", "Nour", Player.PLAYER2)
        match.record_point(Player.PLAYER1, CourtZone.FRONT_LEFT, ShotType.DROP)
        print(match.score_line, match.current_game.score_display)
    """

    def __init__(self, best_of: Optional[int] = None, clock: Optional[Clock] = None):
        best_of = best_of if best_of is not None else settings.DEFAULT_BEST_OF
        if best_of < 1 or best_of % 2 == 0:
            raise ValueError(f"best_of must be a positive odd number, got {best_of}")
        self.best_of: int = best_of
        self.clock: Clock = clock or SystemClock()

        self.player1_name: str = settings.DEFAULT_PLAYER1_NAME
        self.player2_name: str = settings.DEFAULT_PLAYER2_NAME
        self.starting_server: Player = Player.PLAYER1
        self.games: list[Game] = []
        self.current_game_index: int = 0

        self.start_new_game()

    @classmethod
    def restore(
        cls,
        player1_name: str,
        player2_name: str,
        starting_server: Player,
        best_of: int,
        games: list[Game],
        clock: Optional[Clock] = None,
    ) -> Match:
        match = cls(best_of=best_of, clock=clock)
        match.player1_name = player1_name
        match.player2_name = player2_name
        match.starting_server = starting_server
        if games:
            match.games = list(games)
            match.current_game_index = len(match.games) - 1
        else:
            match.reset_match()
        return match

    # ── State queries ────────────────────────────────────────────────────────

    @property
    def games_to_win(self) -> int:
        return self.best_of // 2 + 1

    @property
    def current_game(self) -> Game:
        return self.games[self.current_game_index]

    @property
    def completed_games(self) -> list[Game]:
        return [g for g in self.games if g.is_game_over]

    @property
    def player1_games_won(self) -> int:
        return self.games_won(Player.PLAYER1)

    @property
    def player2_games_won(self) -> int:
        return self.games_won(Player.PLAYER2)

    @property
    def is_match_over(self) -> bool:
        return (
            self.player1_games_won >= self.games_to_win
            or self.player2_games_won >= self.games_to_win
        )

    @property
    def match_winner(self) -> Optional[Player]:
        if not self.is_match_over:
            return None
        return Player.PLAYER1 if self.player1_games_won > self.player2_games_won else Player.PLAYER2

    @property
    def score_line(self) -> str:
        return f"{self.player1_games_won} - {self.player2_games_won}"

    def games_won(self, player: Player) -> int:
        return sum(1 for g in self.games if g.winner == player)

    def name(self, player: Player) -> str:
        return self.player1_name if player == Player.PLAYER1 else self.player2_name

    # ── Lifecycle ────────────────────────────────────────────────────────────

    def start_new_game(self) -> Game:
        game = Game(clock=self.clock)
        game.set_names(self.player1_name, self.player2_name)

        previous_winner = self.games[-1].winner if self.games else None
        game.set_starting_server(previous_winner or self.starting_server)

        self.games.append(game)
        self.current_game_index = len(self.games) - 1
        logger.info(
            "Game %d started, %s serves", len(self.games), game.name(game.starting_server)
        )
        return game

    def on_game_end(self) -> None:
        """Start the next game unless the match has been decided."""
        if self.is_match_over:
            logger.info("Match over: %s wins %s", self.name(self.match_winner), self.score_line)
            return
        self.start_new_game()

    def reset_match(self) -> None:
        self.games = []
        self.current_game_index = 0
        self.start_new_game()

    def setup_match(self, player1_name: str, player2_name: str, starting_server: Player) -> None:
        self.player1_name = player1_name if player1_name.strip() else settings.DEFAULT_PLAYER1_NAME
        self.player2_name = player2_name if player2_name.strip() else settings.DEFAULT_PLAYER2_NAME
        self.starting_server = starting_server
        self.reset_match()

    def record_point(self, scorer: Player, zone: CourtZone, shot_type: ShotType) -> Optional[Point]:
        """Score in the current game, moving on to the next game when it ends."""
        game = self.current_game
        point = game.record_point(scorer, zone, shot_type)
        if point is not None and game.is_game_over:
            self.on_game_end()
        return point

    # ── Analytics ────────────────────────────────────────────────────────────

    @property
    def all_points(self) -> list[Point]:
        return [p for g in self.games for p in g.points]

    @property
    def all_lets(self) -> list[Let]:
        return [l for g in self.games for l in g.lets]

    @property
    def stats(self) -> StatsCalculator:
        return StatsCalculator(self.all_points, self.all_lets)

    def points_for_game(self, index: int) -> list[Point]:
        if not 0 <= index < len(self.games):
            return []
        return list(self.games[index].points)

    def total_points_won(self, player: Player) -> int:
        return sum(len(g.points_won(player)) for g in self.games)

    def total_points_won_in(self, player: Player, zone: CourtZone) -> int:
        return sum(g.points_won_in(player, zone) for g in self.games)

    def total_points_won_with(self, player: Player, shot_type: ShotType) -> int:
        return sum(g.points_won_with(player, shot_type) for g in self.games)

    def win_percentage(self, player: Player, zone: CourtZone) -> float:
        return self.stats.win_percentage(player, zone)

    def most_effective_shot(self, player: Player) -> ShotType:
        return self.stats.best_shot_type(player)

    def best_zone(self, player: Player) -> CourtZone:
        return self.stats.best_zone(player)

    def worst_zone(self, player: Player) -> CourtZone:
        return self.stats.worst_zone(player)

    def recommended_zones(self, against: Player) -> list[CourtZone]:
        return self.stats.recommended_zones(against)

    def average_duration_won(self, player: Player) -> Optional[float]:
        return self.stats.average_duration_won(player)

    def average_duration_lost(self, player: Player) -> Optional[float]:
        return self.stats.average_duration_lost(player)

    def average_point_duration(self) -> Optional[float]:
        return self.stats.average_point_duration()

    def total_match_duration(self) -> float:
        return self.stats.total_duration()

    def longest_point(self) -> Optional[Point]:
        return self.stats.longest_point()

    def shortest_point(self) -> Optional[Point]:
        return self.stats.shortest_point()

    def short_rally_win_percentage(self, player: Player) -> Optional[float]:
        return self.stats.short_rally_win_percentage(player)

    def long_rally_win_percentage(self, player: Player) -> Optional[float]:
        return self.stats.long_rally_win_percentage(player)

    @property
    def total_lets(self) -> int:
        return len(self.all_lets)

    def lets_requested(self, player: Player) -> list[Let]:
        return self.stats.lets_requested(player)
