"""
Rally records — immutable entries in a game's point and let logs.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from squash.models.court import CourtZone
from squash.models.player import Player
from squash.models.shot import ShotType


class Point(BaseModel):
    """One completed rally. Scores are the running score after this point."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    scorer: Player
    zone: CourtZone
    shot_type: ShotType
    server: Player
    player1_score: int = Field(ge=0)
    player2_score: int = Field(ge=0)
    timestamp: datetime
    duration: float = Field(default=0.0, description="Rally length in seconds")


class Let(BaseModel):
    """One replayed rally. Scores are the score at the time of the call."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    requested_by: Player
    server: Player
    player1_score: int = Field(ge=0)
    player2_score: int = Field(ge=0)
    timestamp: datetime
