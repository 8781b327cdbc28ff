"""
Coaching routes — AI tactical advice for a recorded game and the API key it uses.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from squash.api.routes_matches import get_game, get_live_match
from squash.engine.coaching_engine import CoachingEngine
from squash.models.advice import AdviceFailure, TacticalAdvice
from squash.models.player import Player
from squash.services.advice_generator import AdviceGenerator
from squash.services.credentials import CredentialStore, EnvCredentialStore

router = APIRouter()

_coaching = CoachingEngine()


class CredentialUpdate(BaseModel):
    api_key: str


class CredentialStatus(BaseModel):
    configured: bool


class AdviceResponse(BaseModel):
    player: Player
    game_index: int
    advice: Optional[TacticalAdvice] = None
    failure: Optional[AdviceFailure] = None


@lru_cache(maxsize=1)
def get_credential_store() -> CredentialStore:
    return EnvCredentialStore()


@lru_cache(maxsize=1)
def get_advice_generator() -> AdviceGenerator:
    return AdviceGenerator()


# ── AI advice ────────────────────────────────────────────────────────────────

@router.post("/matches/{match_id}/games/{index}/advice", response_model=AdviceResponse)
async def request_advice(
    match_id: str,
    index: int,
    player: Player,
    generator: AdviceGenerator = Depends(get_advice_generator),
    store: CredentialStore = Depends(get_credential_store),
):
    """Ask the AI coach about one game; failures come back as a categorized reason."""
    game = get_game(get_live_match(match_id), index)
    summary = _coaching.build_game_summary(game, player)
    result = await generator.generate(summary, player, store.get())
    if isinstance(result, AdviceFailure):
        return AdviceResponse(player=player, game_index=index, failure=result)
    return AdviceResponse(player=player, game_index=index, advice=result)


# ── API key ──────────────────────────────────────────────────────────────────

@router.get("/credential", response_model=CredentialStatus)
async def credential_status(store: CredentialStore = Depends(get_credential_store)):
    return CredentialStatus(configured=store.has_credential)


@router.put("/credential", response_model=CredentialStatus)
async def set_credential(
    update: CredentialUpdate, store: CredentialStore = Depends(get_credential_store)
):
    """Store the key; a blank value removes it."""
    store.set(update.api_key)
    return CredentialStatus(configured=store.has_credential)


@router.delete("/credential", status_code=204)
async def delete_credential(store: CredentialStore = Depends(get_credential_store)):
    store.delete()
    return Response(status_code=204)
