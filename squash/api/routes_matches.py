"""
Match routes — live scoring workflow, undo, lets and analysis.

Calls the game rejects (scoring a finished game, a zone before a player)
return the unchanged state rather than an error.
"""

from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, HTTPException

from squash.config import settings
from squash.engine.coaching_engine import CoachingEngine
from squash.engine.game import Game
from squash.engine.match import Match
from squash.models.court import CourtZone
from squash.models.player import Player
from squash.models.shot import ShotType
from squash.models.state import LetEntry, MatchState, PointEntry

router = APIRouter()

# ── In-memory matches ────────────────────────────────────────────────────────
_matches: dict[str, Match] = {}
_coaching = CoachingEngine()


def get_live_match(match_id: str) -> Match:
    match = _matches.get(match_id)
    if match is None:
        raise HTTPException(status_code=404, detail="Match not found")
    return match


def get_game(match: Match, index: int) -> Game:
    if not 0 <= index < len(match.games):
        raise HTTPException(status_code=400, detail="Game index out of range")
    return match.games[index]


def register_match(match: Match) -> str:
    """Keep a match in memory under a fresh id."""
    match_id = uuid.uuid4().hex
    _matches[match_id] = match
    return match_id


def _state(match_id: str, match: Match) -> MatchState:
    return MatchState.from_match(match_id, match)


def _player_stats(source, player: Player) -> dict:
    """Per-player figures shared by game and match analysis."""
    return {
        "points_won": len(source.stats.points_won(player)),
        "best_zone": source.best_zone(player).value,
        "worst_zone": source.worst_zone(player).value,
        "recommended_zones_against": [z.value for z in source.recommended_zones(player)],
        "average_duration_won": source.average_duration_won(player),
        "average_duration_lost": source.average_duration_lost(player),
        "short_rally_win_pct": source.short_rally_win_percentage(player),
        "long_rally_win_pct": source.long_rally_win_percentage(player),
        "lets_requested": len(source.lets_requested(player)),
    }


# ── Lifecycle ────────────────────────────────────────────────────────────────

@router.post("/", response_model=MatchState, status_code=201)
async def create_match(
    player1_name: str = "",
    player2_name: str = "",
    starting_server: Player = Player.PLAYER1,
    best_of: int = settings.DEFAULT_BEST_OF,
):
    """Create a match and start its first game."""
    try:
        match = Match(best_of=best_of)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    match.setup_match(player1_name, player2_name, starting_server)
    match_id = register_match(match)
    return _state(match_id, match)


@router.get("/{match_id}", response_model=MatchState)
async def get_match(match_id: str):
    return _state(match_id, get_live_match(match_id))


@router.post("/{match_id}/next-game", response_model=MatchState)
async def next_game(match_id: str):
    """Start the next game once the current one is over."""
    match = get_live_match(match_id)
    if match.current_game.is_game_over:
        match.on_game_end()
    return _state(match_id, match)


@router.post("/{match_id}/reset", response_model=MatchState)
async def reset_match(match_id: str):
    match = get_live_match(match_id)
    match.reset_match()
    return _state(match_id, match)


# ── Point entry ──────────────────────────────────────────────────────────────

@router.post("/{match_id}/select-player", response_model=MatchState)
async def select_player(match_id: str, player: Player):
    match = get_live_match(match_id)
    game = match.current_game
    # Tapping the selected player again cancels the entry
    if game.selected_player == player:
        game.clear_selection()
    else:
        game.select_player(player)
    return _state(match_id, match)


@router.post("/{match_id}/select-zone", response_model=MatchState)
async def select_zone(
    match_id: str,
    zone: Optional[CourtZone] = None,
    x: Optional[float] = None,
    y: Optional[float] = None,
):
    """Pick a zone directly or by normalized court position."""
    match = get_live_match(match_id)
    if zone is not None:
        match.current_game.select_zone(zone)
    elif x is not None and y is not None:
        match.current_game.select_zone_at(x, y)
    else:
        raise HTTPException(status_code=422, detail="Provide a zone or an x/y position")
    return _state(match_id, match)


@router.post("/{match_id}/back", response_model=MatchState)
async def go_back(match_id: str):
    match = get_live_match(match_id)
    match.current_game.go_back_step()
    return _state(match_id, match)


@router.post("/{match_id}/clear", response_model=MatchState)
async def clear_selection(match_id: str):
    match = get_live_match(match_id)
    match.current_game.clear_selection()
    return _state(match_id, match)


@router.post("/{match_id}/point", response_model=PointEntry)
async def add_point(match_id: str, shot_type: ShotType):
    match = get_live_match(match_id)
    point = match.current_game.add_point(shot_type)
    return PointEntry(point=point, state=_state(match_id, match))


@router.post("/{match_id}/undo", response_model=MatchState)
async def undo_point(match_id: str):
    match = get_live_match(match_id)
    match.current_game.undo_last_point()
    return _state(match_id, match)


@router.post("/{match_id}/let", response_model=LetEntry)
async def add_let(match_id: str, requested_by: Player):
    match = get_live_match(match_id)
    let = match.current_game.add_let(requested_by)
    return LetEntry(let=let, state=_state(match_id, match))


@router.post("/{match_id}/undo-let", response_model=MatchState)
async def undo_let(match_id: str):
    match = get_live_match(match_id)
    match.current_game.undo_last_let()
    return _state(match_id, match)


# ── Analysis ─────────────────────────────────────────────────────────────────

@router.get("/{match_id}/games/{index}/analysis")
async def game_analysis(match_id: str, index: int):
    game = get_game(get_live_match(match_id), index)
    longest = game.longest_point()
    shortest = game.shortest_point()
    return {
        "score": game.score_display,
        "winner": game.winner.value if game.winner else None,
        "zones": {
            zone.value: {
                "player1_won": game.points_won_in(Player.PLAYER1, zone),
                "player2_won": game.points_won_in(Player.PLAYER2, zone),
                "player1_win_pct": game.win_percentage(Player.PLAYER1, zone),
            }
            for zone in CourtZone
        },
        "player1": {
            **_player_stats(game, Player.PLAYER1),
            "best_shot": game.best_shot_type(Player.PLAYER1).value,
        },
        "player2": {
            **_player_stats(game, Player.PLAYER2),
            "best_shot": game.best_shot_type(Player.PLAYER2).value,
        },
        "average_point_duration": game.average_point_duration(),
        "total_duration": game.total_game_duration(),
        "longest_point": longest.model_dump(mode="json") if longest else None,
        "shortest_point": shortest.model_dump(mode="json") if shortest else None,
        "total_lets": game.total_lets,
    }


@router.get("/{match_id}/analysis")
async def match_analysis(match_id: str):
    match = get_live_match(match_id)
    return {
        "score_line": match.score_line,
        "games": [g.score_display for g in match.games],
        "player1": {
            **_player_stats(match, Player.PLAYER1),
            "most_effective_shot": match.most_effective_shot(Player.PLAYER1).value,
        },
        "player2": {
            **_player_stats(match, Player.PLAYER2),
            "most_effective_shot": match.most_effective_shot(Player.PLAYER2).value,
        },
        "average_point_duration": match.average_point_duration(),
        "total_duration": match.total_match_duration(),
        "total_lets": match.total_lets,
    }


@router.get("/{match_id}/games/{index}/advice")
async def local_advice(match_id: str, index: int, player: Player):
    """Rule-based tactical tips for one player."""
    game = get_game(get_live_match(match_id), index)
    return {
        "tips": [t.model_dump(mode="json") for t in _coaching.local_advice(game, player)],
        "top_shots": [
            {"shot_type": shot.value, "count": count}
            for shot, count in _coaching.top_shots(game, player)
        ],
    }
