"""
Authentication API endpoints.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, EmailStr, Field

from app.errors import api_error, error_response
from app.providers import HandicapProvider, HandicapLookupError, ProviderFactory
from auth.middleware import get_required_user
from auth.models import User
from auth.service import (
    AuthError,
    InvalidCredentialsError,
    authenticate_user,
    create_user,
    update_profile,
)
from auth.tokens import create_access_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


def get_handicap_provider() -> HandicapProvider:
    return ProviderFactory.get_handicap_provider()


# =============================================================================
# Request/Response Schemas
# =============================================================================

class RegisterRequest(BaseModel):
    email: EmailStr
    password: str
    name: Optional[str] = None


class GhinRegisterRequest(BaseModel):
    email: EmailStr
    password: str
    ghinNumber: str = Field(min_length=1, max_length=20)
    name: Optional[str] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class ProfileUpdateRequest(BaseModel):
    name: Optional[str] = None
    handicap: Optional[float] = Field(default=None, ge=-10, le=54)
    homeCourse: Optional[str] = None


def _auth_payload(user: User) -> dict:
    return {
        "success": True,
        "token": create_access_token(user.id, user.email),
        "user": user.to_dict(),
    }


# =============================================================================
# Routes
# =============================================================================

@router.post("/register", status_code=201)
async def register(request: RegisterRequest):
    """Register a new account (one free credit)."""
    try:
        user = create_user(request.email, request.password, name=request.name)
    except AuthError as e:
        return error_response(400, str(e), e.code)

    return _auth_payload(user)


@router.post("/register-ghin", status_code=201)
async def register_with_ghin(
    request: GhinRegisterRequest,
    provider: HandicapProvider = Depends(get_handicap_provider),
):
    """
    Register using a GHIN number.

    The handicap record pre-fills name and handicap and is returned as
    `ghin` so the client can pre-fill the analysis wizard.
    """
    try:
        golfer = await provider.lookup(request.ghinNumber)
    except HandicapLookupError as e:
        logger.error(f"GHIN lookup failed during signup: {e}")
        return error_response(502, "Handicap service unavailable", e.code, requiresManualEntry=True)

    if golfer is None:
        return error_response(404, "GHIN number not found", "ghin_not_found", requiresManualEntry=True)

    scores = await provider.recent_scores(request.ghinNumber, limit=20)

    try:
        user = create_user(
            request.email,
            request.password,
            name=request.name or golfer.full_name,
            handicap=golfer.handicap_index,
            ghin_number=golfer.ghin_number,
        )
    except AuthError as e:
        return error_response(400, str(e), e.code)

    payload = _auth_payload(user)
    payload["ghin"] = {
        "ghinNumber": golfer.ghin_number,
        "firstName": golfer.first_name,
        "lastName": golfer.last_name,
        "handicapIndex": golfer.handicap_index,
        "club": golfer.club,
        "state": golfer.state,
        "recentScores": [s.model_dump(mode="json") for s in scores],
    }
    return payload


@router.post("/login")
async def login(request: LoginRequest):
    """Login with email/password."""
    try:
        user = authenticate_user(request.email, request.password)
    except InvalidCredentialsError as e:
        return error_response(401, str(e), e.code)

    return _auth_payload(user)


@router.get("/me")
async def get_me(user: User = Depends(get_required_user)):
    """Get current user profile, including credits and subscription."""
    return user.to_dict()


@router.put("/profile")
async def put_profile(request: ProfileUpdateRequest, user: User = Depends(get_required_user)):
    """Update editable profile fields."""
    updated = update_profile(
        user.id,
        name=request.name,
        handicap=request.handicap,
        home_course=request.homeCourse,
    )
    return {"success": True, "user": updated.to_dict()}


@router.get("/ghin-lookup/{ghin_number}")
async def public_ghin_lookup(
    ghin_number: str,
    provider: HandicapProvider = Depends(get_handicap_provider),
):
    """Public GHIN lookup for the signup form (limited fields)."""
    try:
        golfer = await provider.lookup(ghin_number)
    except HandicapLookupError as e:
        logger.error(f"Public GHIN lookup failed: {e}")
        raise api_error(502, "Failed to lookup GHIN", e.code)

    if golfer is None:
        return error_response(404, "GHIN number not found", "ghin_not_found", requiresManualEntry=True)

    return {
        "success": True,
        "golfer": {
            "firstName": golfer.first_name,
            "lastName": golfer.last_name,
            "handicapIndex": golfer.handicap_index,
            "club": golfer.club,
            "state": golfer.state,
        },
    }
