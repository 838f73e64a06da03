"""
GHIN endpoints for logged-in golfers: lookup, linking a GHIN number to
the account, refreshing the stored handicap, and recent scores.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from app.errors import api_error, error_response
from app.providers import GolferRecord, HandicapLookupError, HandicapProvider
from app.routers.auth import get_handicap_provider
from auth.middleware import get_required_user
from auth.models import User
from auth.service import update_profile

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ghin", tags=["ghin"])


class GhinLinkRequest(BaseModel):
    ghinNumber: str = Field(min_length=1, max_length=20)


class GhinRefreshRequest(BaseModel):
    ghinNumber: Optional[str] = Field(default=None, max_length=20)


def _golfer_payload(golfer: GolferRecord) -> dict:
    return {
        "ghinNumber": golfer.ghin_number,
        "firstName": golfer.first_name,
        "lastName": golfer.last_name,
        "handicapIndex": golfer.handicap_index,
        "club": golfer.club,
        "state": golfer.state,
        "trend": golfer.trend,
        "lastRevision": golfer.last_revision.isoformat() if golfer.last_revision else None,
    }


async def _lookup(provider: HandicapProvider, ghin_number: str) -> Optional[GolferRecord]:
    try:
        return await provider.lookup(ghin_number)
    except HandicapLookupError as e:
        logger.error(f"GHIN lookup failed: {e}")
        raise api_error(502, "Failed to lookup GHIN", e.code)


def _not_found():
    return error_response(404, "GHIN number not found", "ghin_not_found")


@router.post("/link")
async def link_ghin(
    request: GhinLinkRequest,
    user: User = Depends(get_required_user),
    provider: HandicapProvider = Depends(get_handicap_provider),
):
    """Attach a GHIN number to the account; name and handicap come from the record."""
    golfer = await _lookup(provider, request.ghinNumber)
    if golfer is None:
        return _not_found()

    update_profile(
        user.id,
        ghin_number=golfer.ghin_number,
        handicap=golfer.handicap_index,
        name=golfer.full_name or None,
    )
    logger.info(f"Linked GHIN {golfer.ghin_number} to user {user.id}")
    return {"success": True, "ghin": _golfer_payload(golfer)}


@router.post("/refresh")
async def refresh_handicap(
    request: GhinRefreshRequest,
    user: User = Depends(get_required_user),
    provider: HandicapProvider = Depends(get_handicap_provider),
):
    """Pull the current handicap index. Uses the linked number when none is given."""
    ghin_number = request.ghinNumber or user.ghin_number
    if not ghin_number:
        return error_response(400, "No GHIN number linked", "missing_fields")

    golfer = await _lookup(provider, ghin_number)
    if golfer is None:
        return _not_found()

    update_profile(user.id, handicap=golfer.handicap_index)
    return {
        "success": True,
        "handicapIndex": golfer.handicap_index,
        "trend": golfer.trend,
        "lastRevision": golfer.last_revision.isoformat() if golfer.last_revision else None,
    }


@router.get("/{ghin_number}/scores")
async def get_scores(
    ghin_number: str,
    limit: int = 20,
    user: User = Depends(get_required_user),
    provider: HandicapProvider = Depends(get_handicap_provider),
):
    try:
        scores = await provider.recent_scores(ghin_number, limit=limit)
    except HandicapLookupError as e:
        logger.error(f"GHIN score lookup failed: {e}")
        return error_response(502, "Failed to fetch scores", e.code)
    return {"success": True, "scores": [s.model_dump(mode="json") for s in scores]}


@router.get("/{ghin_number}")
async def lookup_ghin(
    ghin_number: str,
    user: User = Depends(get_required_user),
    provider: HandicapProvider = Depends(get_handicap_provider),
):
    golfer = await _lookup(provider, ghin_number)
    if golfer is None:
        return _not_found()
    return {"success": True, "golfer": _golfer_payload(golfer)}
