"""
Stats Calculator — Derived statistics over a point and let log.

Computes, for either side of a game or a whole match:
- Point counts by zone and by shot type
- Zone win percentages, best/worst zones, most effective shot
- Zone recommendations against an opponent
- Rally duration averages, extremes and the median short/long split
- Let counts

All queries are pure reads. Ties on "best" style queries resolve to the
first member in enumeration order.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from squash.models.court import CourtZone
from squash.models.player import Player
from squash.models.rally import Let, Point
from squash.models.shot import ShotType

RECOMMENDED_ZONE_LIMIT = 3
MIN_POINTS_FOR_RALLY_SPLIT = 2


def _mean(values: Sequence[float]) -> Optional[float]:
    if not values:
        return None
    return sum(values) / len(values)


class StatsCalculator:
    """Computes player statistics from point-level and let-level data."""

    def __init__(self, points: Iterable[Point], lets: Iterable[Let] = ()):
        self.points: list[Point] = list(points)
        self.lets: list[Let] = list(lets)

    # ── Counting ─────────────────────────────────────────────────────────────

    def points_won(self, player: Player) -> list[Point]:
        return [p for p in self.points if p.scorer == player]

    def points_lost(self, player: Player) -> list[Point]:
        return [p for p in self.points if p.scorer == player.opponent]

    def points_won_in(self, player: Player, zone: CourtZone) -> int:
        return sum(1 for p in self.points if p.scorer == player and p.zone == zone)

    def points_won_with(self, player: Player, shot_type: ShotType) -> int:
        return sum(1 for p in self.points if p.scorer == player and p.shot_type == shot_type)

    def total_points_in(self, zone: CourtZone) -> int:
        return sum(1 for p in self.points if p.zone == zone)

    # ── Zones and shots ──────────────────────────────────────────────────────

    def win_percentage(self, player: Player, zone: CourtZone) -> float:
        """Share of the rallies ending in ``zone`` that ``player`` won, 0-100."""
        won = self.points_won_in(player, zone)
        lost = self.points_won_in(player.opponent, zone)
        total = won + lost
        if total == 0:
            return 0.0
        return won / total * 100

    def best_zone(self, player: Player) -> CourtZone:
        return max(CourtZone, key=lambda zone: self.points_won_in(player, zone))

    def worst_zone(self, player: Player) -> CourtZone:
        """Zone where the opponent scores most against ``player``."""
        return max(CourtZone, key=lambda zone: self.points_won_in(player.opponent, zone))

    def best_shot_type(self, player: Player) -> ShotType:
        return max(ShotType, key=lambda shot: self.points_won_with(player, shot))

    def recommended_zones(
        self, against: Player, limit: int = RECOMMENDED_ZONE_LIMIT
    ) -> list[CourtZone]:
        """Zones where ``against`` has lost points, most losses first."""
        losses = [(zone, self.points_won_in(against.opponent, zone)) for zone in CourtZone]
        ranked = sorted(
            ((zone, count) for zone, count in losses if count > 0),
            key=lambda item: item[1],
            reverse=True,
        )
        return [zone for zone, _ in ranked[:limit]]

    # ── Rally duration ───────────────────────────────────────────────────────

    def average_duration_won(self, player: Player) -> Optional[float]:
        return _mean([p.duration for p in self.points_won(player)])

    def average_duration_lost(self, player: Player) -> Optional[float]:
        return _mean([p.duration for p in self.points_lost(player)])

    def average_point_duration(self) -> Optional[float]:
        return _mean([p.duration for p in self.points])

    def total_duration(self) -> float:
        return sum(p.duration for p in self.points)

    def longest_point(self) -> Optional[Point]:
        if not self.points:
            return None
        return max(self.points, key=lambda p: p.duration)

    def shortest_point(self) -> Optional[Point]:
        if not self.points:
            return None
        return min(self.points, key=lambda p: p.duration)

    def median_duration(self) -> Optional[float]:
        """Split threshold: the sorted duration at index n // 2."""
        if not self.points:
            return None
        durations = sorted(p.duration for p in self.points)
        return durations[len(durations) // 2]

    def short_rally_win_percentage(self, player: Player) -> Optional[float]:
        """Win rate over rallies strictly shorter than the median split."""
        return self._split_win_percentage(player, long_rallies=False)

    def long_rally_win_percentage(self, player: Player) -> Optional[float]:
        """Win rate over rallies at or above the median split."""
        return self._split_win_percentage(player, long_rallies=True)

    def _split_win_percentage(self, player: Player, long_rallies: bool) -> Optional[float]:
        if len(self.points) < MIN_POINTS_FOR_RALLY_SPLIT:
            return None
        threshold = self.median_duration()
        if long_rallies:
            bucket = [p for p in self.points if p.duration >= threshold]
        else:
            bucket = [p for p in self.points if p.duration < threshold]
        if not bucket:
            return None
        won = sum(1 for p in bucket if p.scorer == player)
        return won / len(bucket) * 100

    # ── Lets ─────────────────────────────────────────────────────────────────

    def lets_requested(self, player: Player) -> list[Let]:
        return [l for l in self.lets if l.requested_by == player]

    def total_lets(self) -> int:
        return len(self.lets)
