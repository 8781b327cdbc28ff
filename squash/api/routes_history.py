"""
History routes — save live matches, browse, restore and delete stored ones.
"""

from __future__ import annotations

from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException, Response

from squash.api.routes_matches import get_live_match, register_match
from squash.models.records import MatchRecord
from squash.models.state import MatchState, StoredMatchSummary
from squash.services.storage import MatchRepository

router = APIRouter()


@lru_cache(maxsize=1)
def get_repository() -> MatchRepository:
    return MatchRepository()


def _get_record(repository: MatchRepository, stored_id: str) -> MatchRecord:
    record = repository.load_record(stored_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Stored match not found")
    return record


@router.post("/", response_model=StoredMatchSummary, status_code=201)
async def save_match(match_id: str, repository: MatchRepository = Depends(get_repository)):
    """Store a snapshot of a live match."""
    stored_id = repository.save(get_live_match(match_id))
    return StoredMatchSummary.from_record(_get_record(repository, stored_id))


@router.get("/", response_model=list[StoredMatchSummary])
async def list_matches(repository: MatchRepository = Depends(get_repository)):
    """Stored matches, newest first."""
    return [StoredMatchSummary.from_record(r) for r in repository.list_matches()]


@router.get("/{stored_id}", response_model=MatchRecord)
async def get_stored_match(stored_id: str, repository: MatchRepository = Depends(get_repository)):
    return _get_record(repository, stored_id)


@router.post("/{stored_id}/restore", response_model=MatchState, status_code=201)
async def restore_match(stored_id: str, repository: MatchRepository = Depends(get_repository)):
    """Load a stored match back into play under a new live id."""
    match = _get_record(repository, stored_id).to_match()
    match_id = register_match(match)
    return MatchState.from_match(match_id, match)


@router.delete("/{stored_id}", status_code=204)
async def delete_match(stored_id: str, repository: MatchRepository = Depends(get_repository)):
    if not repository.delete(stored_id):
        raise HTTPException(status_code=404, detail="Stored match not found")
    return Response(status_code=204)
