"""
Coaching Engine — Tactical insight derived from a recorded game.

- Game summaries: the read-only snapshot handed to the AI coach
- Rule-based advice: where to play, which zones to target, which shot works
- Top shots for a quick per-player breakdown
"""

from __future__ import annotations

from squash.engine.game import Game
from squash.models.advice import (
    AdviceTip,
    AdviceTipKind,
    GameSummary,
    ShotBreakdown,
    ZoneBreakdown,
)
from squash.models.court import CourtZone
from squash.models.player import Player
from squash.models.shot import ShotType


class CoachingEngine:
    """Builds coaching views over a game without mutating it."""

    def build_game_summary(self, game: Game, player: Player) -> GameSummary:
        opponent = player.opponent
        stats = game.stats

        zones = []
        for zone in CourtZone:
            won = stats.points_won_in(player, zone)
            lost = stats.points_won_in(opponent, zone)
            if won or lost:
                zones.append(ZoneBreakdown(zone=zone, won=won, lost=lost))

        shots = []
        for shot in ShotType:
            won = stats.points_won_with(player, shot)
            if won:
                shots.append(ShotBreakdown(shot_type=shot, won=won))

        winner = game.winner
        return GameSummary(
            player=player,
            player_name=game.name(player),
            opponent_name=game.name(opponent),
            player1_score=game.player1_score,
            player2_score=game.player2_score,
            winner_name=game.name(winner) if winner else None,
            points_won=len(stats.points_won(player)),
            points_lost=len(stats.points_lost(player)),
            zone_breakdown=zones,
            shot_breakdown=shots,
            best_zone=stats.best_zone(player),
            best_shot=stats.best_shot_type(player),
            worst_zone=stats.best_zone(opponent),
            total_lets=stats.total_lets(),
            average_rally_seconds=stats.average_point_duration(),
        )

    def local_advice(self, game: Game, player: Player) -> list[AdviceTip]:
        """Rule-based tips for ``player`` against the opponent."""
        opponent = player.opponent
        stats = game.stats
        tips: list[AdviceTip] = []

        if stats.points_won(opponent):
            zone = stats.best_zone(opponent)
            tips.append(AdviceTip(
                kind=AdviceTipKind.WARNING,
                text=f"Play to {zone.label}: {game.name(opponent)} scores there often",
            ))

        recommended = stats.recommended_zones(against=opponent)
        if recommended:
            tips.append(AdviceTip(
                kind=AdviceTipKind.SUCCESS,
                text="Recommended zones: " + ", ".join(z.label for z in recommended),
            ))

        if stats.points_won(player):
            shot = stats.best_shot_type(player)
            tips.append(AdviceTip(
                kind=AdviceTipKind.INFO,
                text=f"Your {shot.value} is working, keep varying",
            ))
        return tips

    def top_shots(self, game: Game, player: Player, limit: int = 3) -> list[tuple[ShotType, int]]:
        counts = [(shot, game.points_won_with(player, shot)) for shot in ShotType]
        ranked = sorted((c for c in counts if c[1] > 0), key=lambda c: c[1], reverse=True)
        return ranked[:limit]
