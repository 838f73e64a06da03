"""
Course strategy endpoints.

A course strategy is a pre-round plan for one course. Generating one
needs an account but does not consume a credit.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from pydantic import ValidationError

from app.analysis import AnalysisError, CourseRequest, ScorecardAnalyzer
from app.errors import error_response
from app.rate_limiter import enforce_analysis_rate_limit
from app.routers.analyses import _read_scorecards, get_analyzer
from auth.middleware import get_required_user
from auth.models import User
from persistence import get_course_strategy, list_course_strategies, save_course_strategy

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["strategies"])


@router.post("/course-strategy", dependencies=[Depends(enforce_analysis_rate_limit)])
async def create_course_strategy(
    courseName: Optional[str] = Form(default=None),
    tees: Optional[str] = Form(default=None),
    notes: Optional[str] = Form(default=None),
    handicap: Optional[str] = Form(default=None),
    missPattern: Optional[str] = Form(default=None),
    scorecard: Optional[UploadFile] = File(default=None),
    user: User = Depends(get_required_user),
    analyzer: ScorecardAnalyzer = Depends(get_analyzer),
):
    if not courseName or not courseName.strip():
        return error_response(400, "Course name is required", "missing_fields")

    fields = {"course_name": courseName, "tees": tees or None, "notes": notes or None}
    if handicap:
        fields["handicap"] = handicap
    if missPattern:
        fields["miss_pattern"] = missPattern
    try:
        request = CourseRequest(**fields)
    except ValidationError as e:
        logger.info(f"Rejected course strategy input: {e}")
        return error_response(400, "Invalid course strategy input", "invalid_input")

    image = None
    if scorecard is not None and scorecard.filename:
        image = (await _read_scorecards([scorecard]))[0]

    try:
        strategy = await analyzer.plan_course(request, image)
    except AnalysisError as e:
        logger.error(f"Course strategy failed via {analyzer.source_name}: {e}")
        return error_response(502, "Failed to generate course strategy", e.code)

    result = strategy.to_dict()
    strategy_id = save_course_strategy(user.id, request.course_name, result, tees=request.tees)
    logger.info(f"Saved course strategy {strategy_id} for user {user.id}")

    return {"success": True, "strategy": result, "strategyId": strategy_id}


@router.get("/course-strategies")
async def get_course_strategies(limit: int = 50, user: User = Depends(get_required_user)):
    return {"strategies": list_course_strategies(user.id, limit=limit)}


@router.get("/course-strategies/{strategy_id}")
async def get_one_course_strategy(strategy_id: str, user: User = Depends(get_required_user)):
    strategy = get_course_strategy(strategy_id, user.id)
    if strategy is None:
        return error_response(404, "Strategy not found", "not_found")
    return {"strategy": strategy}
