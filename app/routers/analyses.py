"""
Analysis, saved-result and round tracking endpoints.

Credit rules (same for /api/analyze and /api/analyses/save):
- Pro subscribers are never charged
- Free users need a credit; one is consumed per saved analysis
- Without one, 403 with needsUpgrade so the client shows the paywall
"""

import json
import logging
from datetime import date
from typing import List, Optional, Union

from fastapi import APIRouter, Depends, File, Form, UploadFile
from pydantic import BaseModel, Field, ValidationError

from app.analysis import (
    AnalysisError,
    AnalyzerFactory,
    GolferProfile,
    ScorecardAnalyzer,
    ScorecardImage,
    StrategyAnalysis,
)
from app.analysis.config import ALLOWED_IMAGE_TYPES, MAX_IMAGE_SIZE
from app.analysis.models import MAX_SCORECARDS, MISS_DESCRIPTIONS, MissPattern
from app.errors import api_error, error_response
from app.rate_limiter import enforce_analysis_rate_limit
from auth.middleware import get_optional_user, get_required_user
from auth.models import UNLIMITED, User
from auth.service import NoCreditsError, decrement_credits
from persistence import (
    get_analysis,
    get_user_stats,
    list_analyses,
    list_rounds,
    save_analysis,
    save_round,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["analyses"])


def get_analyzer() -> ScorecardAnalyzer:
    try:
        return AnalyzerFactory.get_analyzer()
    except AnalysisError as e:
        logger.error(f"Analyzer unavailable: {e}")
        raise api_error(503, "Analysis is not available right now", e.code)


def _upgrade_required():
    return error_response(403, "No credits remaining", "upgrade_required", needsUpgrade=True)


def _charge(user: User) -> Union[int, str]:
    """
    Consume a credit unless Pro. Returns credits remaining.

    Runs before anything is saved; raises NoCreditsError when the last
    credit was already spent by another request.
    """
    if user.is_pro:
        return UNLIMITED
    return decrement_credits(user.id)


def _parse_bool(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes", "on")


def _parse_strengths(raw: Optional[str]) -> list:
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        # Plain comma-separated list from simple form posts
        return [s.strip() for s in raw.split(",") if s.strip()]
    return value if isinstance(value, list) else []


async def _read_scorecards(files: List[UploadFile]) -> List[ScorecardImage]:
    images = []
    for upload in files:
        content_type = (upload.content_type or "").lower()
        if content_type not in ALLOWED_IMAGE_TYPES:
            raise api_error(400, f"Unsupported image type: {content_type or 'unknown'}", "invalid_image")
        data = await upload.read()
        if len(data) > MAX_IMAGE_SIZE:
            raise api_error(400, f"Image too large: {upload.filename}", "image_too_large")
        images.append(ScorecardImage(content_type=content_type, data=data, filename=upload.filename))
    return images


# =============================================================================
# Analyze
# =============================================================================

@router.post("/analyze", dependencies=[Depends(enforce_analysis_rate_limit)])
async def analyze(
    name: Optional[str] = Form(default=None),
    handicap: Optional[str] = Form(default=None),
    homeCourse: Optional[str] = Form(default=None),
    missPattern: Optional[str] = Form(default=None),
    missDescription: Optional[str] = Form(default=None),
    strengths: Optional[str] = Form(default=None),
    preview: Optional[str] = Form(default=None),
    scorecards: List[UploadFile] = File(default=[]),
    user: Optional[User] = Depends(get_optional_user),
    analyzer: ScorecardAnalyzer = Depends(get_analyzer),
):
    """
    Run an analysis.

    preview=true: anyone may call; nothing is saved or charged.
    Otherwise: authenticated and entitled; the result is saved and a credit
    consumed.
    """
    is_preview = _parse_bool(preview)

    if not all([name, handicap, homeCourse, missPattern]):
        return error_response(400, "Missing required fields", "missing_fields")

    if len(scorecards) > MAX_SCORECARDS:
        return error_response(400, f"At most {MAX_SCORECARDS} scorecards allowed", "too_many_scorecards")

    if not is_preview:
        if user is None:
            return error_response(401, "Authentication required", "auth_required")
        if not user.can_analyze:
            return _upgrade_required()

    try:
        pattern = MissPattern(missPattern)
        profile = GolferProfile(
            name=name,
            handicap=float(handicap),
            home_course=homeCourse,
            miss_pattern=pattern,
            miss_description=missDescription or MISS_DESCRIPTIONS[pattern],
            strengths=_parse_strengths(strengths),
        )
    except (ValueError, ValidationError) as e:
        logger.info(f"Rejected analysis input: {e}")
        return error_response(400, "Invalid analysis input", "invalid_input")

    images = await _read_scorecards(scorecards)

    try:
        strategy = await analyzer.analyze(profile, images)
    except AnalysisError as e:
        logger.error(f"Analysis failed via {analyzer.source_name}: {e}")
        return error_response(502, "Analysis failed, please try again", e.code)

    result = strategy.to_dict()

    if is_preview:
        logger.info(f"Preview analysis produced via {analyzer.source_name}")
        return {"success": True, "preview": True, "analysis": result}

    try:
        credits_remaining = _charge(user)
    except NoCreditsError:
        return _upgrade_required()

    analysis_id = save_analysis(
        user.id,
        profile.name,
        result,
        handicap=profile.handicap,
        home_course=profile.home_course,
        miss_pattern=profile.miss_pattern.value,
    )
    logger.info(f"Saved analysis {analysis_id} for user {user.id}")

    return {
        "success": True,
        "preview": False,
        "analysis": result,
        "analysisId": analysis_id,
        "creditsRemaining": credits_remaining,
    }


# =============================================================================
# Saved analyses
# =============================================================================

class SaveAnalysisRequest(BaseModel):
    analysis: dict
    name: Optional[str] = None
    handicap: Optional[float] = None
    homeCourse: Optional[str] = None
    missPattern: Optional[str] = None


@router.post("/analyses/save")
async def save_pending_analysis(request: SaveAnalysisRequest, user: User = Depends(get_required_user)):
    """Persist a preview produced before signup/payment."""
    if not user.can_analyze:
        return _upgrade_required()

    try:
        strategy = StrategyAnalysis.model_validate(request.analysis)
    except ValidationError:
        return error_response(400, "Analysis payload is malformed", "invalid_analysis")

    try:
        credits_remaining = _charge(user)
    except NoCreditsError:
        return _upgrade_required()

    analysis_id = save_analysis(
        user.id,
        request.name or user.name or "",
        strategy.to_dict(),
        handicap=request.handicap,
        home_course=request.homeCourse,
        miss_pattern=request.missPattern,
    )
    logger.info(f"Committed pending analysis {analysis_id} for user {user.id}")

    return {
        "success": True,
        "analysisId": analysis_id,
        "creditsRemaining": credits_remaining,
    }


@router.get("/analyses")
async def get_analyses(limit: int = 50, user: User = Depends(get_required_user)):
    return {"analyses": list_analyses(user.id, limit=min(max(limit, 1), 100))}


@router.get("/analyses/{analysis_id}")
async def get_one_analysis(analysis_id: str, user: User = Depends(get_required_user)):
    record = get_analysis(analysis_id, user.id)
    if record is None:
        return error_response(404, "Analysis not found", "not_found")
    return {"analysis": record}


# =============================================================================
# Rounds
# =============================================================================

class RoundRequest(BaseModel):
    courseName: str = Field(min_length=1, max_length=200)
    score: int = Field(ge=18, le=200)
    playedOn: Optional[date] = None
    analysisId: Optional[str] = None
    putts: Optional[int] = Field(default=None, ge=0, le=100)
    fairwaysHit: Optional[int] = Field(default=None, ge=0, le=18)
    greensInRegulation: Optional[int] = Field(default=None, ge=0, le=18)
    penalties: Optional[int] = Field(default=None, ge=0, le=50)
    notes: Optional[str] = Field(default=None, max_length=2000)


@router.post("/rounds", status_code=201)
async def post_round(request: RoundRequest, user: User = Depends(get_required_user)):
    round_id = save_round(
        user.id,
        request.courseName,
        request.score,
        played_on=request.playedOn.isoformat() if request.playedOn else None,
        analysis_id=request.analysisId,
        putts=request.putts,
        fairways_hit=request.fairwaysHit,
        greens_in_regulation=request.greensInRegulation,
        penalties=request.penalties,
        notes=request.notes,
    )
    return {"success": True, "roundId": round_id}


@router.get("/rounds")
async def get_rounds(user: User = Depends(get_required_user)):
    return {"rounds": list_rounds(user.id)}


@router.get("/stats")
async def get_stats(user: User = Depends(get_required_user)):
    """Scoring stats across all logged rounds."""
    return get_user_stats(user.id)
