"""
Coaching data models — game summaries handed to the AI coach, the advice it
returns, categorized failures, and rule-based tips.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from squash.models.court import CourtZone
from squash.models.player import Player
from squash.models.shot import ShotType

DEFAULT_NEXT_GAME_FOCUS = "Study your opponent and adapt your tactics"


class ZoneBreakdown(BaseModel):
    model_config = ConfigDict(frozen=True)

    zone: CourtZone
    won: int = 0
    lost: int = 0


class ShotBreakdown(BaseModel):
    model_config = ConfigDict(frozen=True)

    shot_type: ShotType
    won: int = 0


class GameSummary(BaseModel):
    """Read-only projection of one game from a single player's perspective."""
    model_config = ConfigDict(frozen=True)

    player: Player
    player_name: str
    opponent_name: str
    player1_score: int
    player2_score: int
    winner_name: Optional[str] = None
    points_won: int = 0
    points_lost: int = 0
    zone_breakdown: list[ZoneBreakdown] = Field(default_factory=list)
    shot_breakdown: list[ShotBreakdown] = Field(default_factory=list)
    best_zone: Optional[CourtZone] = None
    best_shot: Optional[ShotType] = None
    worst_zone: Optional[CourtZone] = None
    total_lets: int = 0
    average_rally_seconds: Optional[float] = None


class TacticalAdvice(BaseModel):
    """Structured advice produced by the AI coach."""
    summary: str
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    tactical_suggestions: list[str] = Field(default_factory=list)
    next_game_focus: str = DEFAULT_NEXT_GAME_FOCUS


class AdviceFailureKind(str, Enum):
    INVALID_REQUEST = "invalid_request"
    INVALID_CREDENTIAL = "invalid_credential"
    TRANSPORT = "transport"
    HTTP_STATUS = "http_status"
    NO_CONTENT = "no_content"
    PARSE = "parse"


class AdviceFailure(BaseModel):
    """A user-surfaceable reason the AI coach produced no advice."""
    kind: AdviceFailureKind
    message: str
    status_code: Optional[int] = None


AdviceResult = Union[TacticalAdvice, AdviceFailure]


class AdviceTipKind(str, Enum):
    WARNING = "warning"
    SUCCESS = "success"
    INFO = "info"


class AdviceTip(BaseModel):
    """One line of rule-based tactical advice."""
    kind: AdviceTipKind
    text: str
