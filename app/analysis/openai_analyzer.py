# app/analysis/openai_analyzer.py
"""
Strategy analysis using the OpenAI API.

Two calls: a vision call that reads hole-by-hole scores off the
scorecard photos, then a text call that writes the strategy.

Course strategies are a single call; an uploaded scorecard goes along
as an image.
"""

import base64
import json
import logging
from typing import List, Optional

import openai
from pydantic import ValidationError

from app.analysis.base import AnalysisError, ScorecardAnalyzer
from app.analysis.config import get_analysis_model, get_openai_api_key, is_openai_configured
from app.analysis.models import (
    MISS_DESCRIPTIONS,
    CourseRequest,
    CourseStrategy,
    GolferProfile,
    ScorecardImage,
    StrategyAnalysis,
)

logger = logging.getLogger(__name__)


EXTRACTION_PROMPT = """You are reading golf scorecard photos for a course called "{course}".

Extract the hole-by-hole data from each scorecard. Output ONLY valid JSON:
{{
  "rounds": [
    {{
      "date": "MM/DD/YYYY or unknown",
      "totalScore": 85,
      "course": "Course Name",
      "holes": [{{"hole": 1, "par": 4, "yards": 385, "score": 5}}]
    }}
  ]
}}

Use null for values you cannot read. No markdown, no other text."""


STRATEGY_PROMPT = """You are an expert golf coach and course strategist.

## GOLFER PROFILE
- Name: {name}
- Current Handicap: {handicap}
- Home Course: {course}
- Primary Miss Pattern: {miss}
{extra}- Self-Reported Strengths: {strengths}

{scores}

Return ONLY a JSON object with these keys:
- "summary": {{"currentHandicap", "targetHandicap" (realistic 12-month goal), "potentialStrokeDrop", "keyInsight"}}
- "troubleHoles": list of {{"type", "specificHoles", "averageScore", "problem", "strategy", "acceptableScore", "clubRecommendation"}}
- "strengthHoles": list of {{"type", "specificHoles", "opportunity", "strategy", "targetScore"}}
- "courseStrategy": {{"redLightHoles", "yellowLightHoles", "greenLightHoles", "overallApproach"}}
- "practicePlan": {{"weeklySchedule": [{{"session", "duration", "focus", "drills": [{{"name", "description", "reps", "why"}}]}}], "preRoundRoutine", "practiceRoundFocus"}}
- "mentalGame": {{"preShot", "recovery", "mantras"}}
- "targetStats": {{"fairwaysHit", "penaltiesPerRound", "gir", "upAndDown", "puttsPerRound"}}
- "thirtyDayPlan": list of {{"week", "focus", "goals"}}

Tailor everything to the miss pattern. Reference hole numbers when scorecard data is available."""


COURSE_PROMPT = """I'm about to play {course}{tees}.

My handicap is {handicap} and my typical miss is: {miss}.
{notes}{scorecard}
Give me a course strategy using what you know about this course:
1. A brief overview (style, difficulty, notable features)
2. The 3-5 most important holes, with specific strategy for each
3. 4-5 general tips for my handicap and miss pattern
4. Realistic scoring targets (great round, solid round, what to stay under)
5. A pre-round checklist

Return ONLY a JSON object:
{{
  "courseName": "Course Name",
  "tees": "Tees being played",
  "overview": "Course overview paragraph",
  "keyHoles": [{{"number": 7, "par": 4, "yardage": "420", "strategy": "...", "danger": "..."}}],
  "generalStrategy": [{{"title": "...", "description": "..."}}],
  "scoringTargets": {{"great": 82, "solid": 88, "max": 95}},
  "preRoundChecklist": ["..."]
}}"""


def _strip_code_fence(content: str) -> str:
    """Remove a markdown code fence around a JSON reply, if present."""
    content = content.strip()
    if content.startswith("```json"):
        content = content[7:]
    if content.startswith("```"):
        content = content[3:]
    if content.endswith("```"):
        content = content[:-3]
    return content.strip()


def _parse_json_reply(content: Optional[str]) -> dict:
    if not content:
        raise AnalysisError("Empty response from OpenAI")
    content = _strip_code_fence(content)
    try:
        return json.loads(content)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse OpenAI response as JSON: {content[:200]}")
        raise AnalysisError(f"Invalid JSON response: {e}")


class OpenAIAnalyzer(ScorecardAnalyzer):
    """Analyzer backed by an OpenAI vision-capable chat model."""

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None):
        if not (api_key or is_openai_configured()):
            raise AnalysisError("OpenAI API key not configured")
        self._client = openai.AsyncOpenAI(api_key=api_key or get_openai_api_key())
        self._model = model or get_analysis_model()

    @property
    def source_name(self) -> str:
        return "openai"

    async def analyze(
        self, profile: GolferProfile, scorecards: List[ScorecardImage]
    ) -> StrategyAnalysis:
        rounds = await self._extract_rounds(profile, scorecards) if scorecards else []
        raw = await self._generate_strategy(profile, rounds)
        try:
            return StrategyAnalysis.model_validate(raw)
        except ValidationError as e:
            logger.error(f"Strategy response failed validation: {e}")
            raise AnalysisError("Strategy response was missing required fields")

    async def _extract_rounds(
        self, profile: GolferProfile, scorecards: List[ScorecardImage]
    ) -> list:
        content = [{"type": "text", "text": EXTRACTION_PROMPT.format(course=profile.home_course)}]
        for card in scorecards:
            image_b64 = base64.b64encode(card.data).decode("utf-8")
            content.append({
                "type": "image_url",
                "image_url": {"url": f"data:{card.content_type};base64,{image_b64}", "detail": "high"},
            })

        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=[{"role": "user", "content": content}],
                max_tokens=4096,
                temperature=0.1,
            )
        except openai.APIError as e:
            # Scores are a nice-to-have; the strategy still works without them
            logger.warning(f"Scorecard extraction failed, continuing without scores: {e}")
            return []

        try:
            extracted = _parse_json_reply(response.choices[0].message.content)
        except AnalysisError as e:
            logger.warning(f"Unreadable scorecard extraction, continuing without scores: {e}")
            return []

        rounds = extracted.get("rounds", [])
        return rounds if isinstance(rounds, list) else []

    async def _generate_strategy(self, profile: GolferProfile, rounds: list) -> dict:
        if rounds:
            scores = "## SCORECARD DATA\n" + json.dumps({"rounds": rounds}, indent=2)
        else:
            scores = "## NO SCORECARD DATA PROVIDED"

        prompt = STRATEGY_PROMPT.format(
            name=profile.name,
            handicap=profile.handicap,
            course=profile.home_course,
            miss=MISS_DESCRIPTIONS[profile.miss_pattern],
            extra=f"- Additional Context: {profile.miss_description}\n" if profile.miss_description else "",
            strengths=", ".join(s.value for s in profile.strengths) or "None specified",
            scores=scores,
        )

        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=4096,
                temperature=0.4,
                response_format={"type": "json_object"},
            )
        except openai.APIError as e:
            logger.error(f"OpenAI API error: {e}")
            raise AnalysisError(f"OpenAI API error: {e}")

        return _parse_json_reply(response.choices[0].message.content)

    async def plan_course(
        self, request: CourseRequest, scorecard: Optional[ScorecardImage] = None
    ) -> CourseStrategy:
        prompt = COURSE_PROMPT.format(
            course=request.course_name,
            tees=f" from the {request.tees}" if request.tees else "",
            handicap=request.handicap,
            miss=MISS_DESCRIPTIONS[request.miss_pattern],
            notes=f"\nAdditional notes: {request.notes}\n" if request.notes else "",
            scorecard="\nThe attached scorecard image shows the hole-by-hole details.\n" if scorecard else "",
        )

        content = [{"type": "text", "text": prompt}]
        if scorecard is not None:
            image_b64 = base64.b64encode(scorecard.data).decode("utf-8")
            content.insert(0, {
                "type": "image_url",
                "image_url": {"url": f"data:{scorecard.content_type};base64,{image_b64}", "detail": "high"},
            })

        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=[{"role": "user", "content": content}],
                max_tokens=4000,
                temperature=0.4,
                response_format={"type": "json_object"},
            )
        except openai.APIError as e:
            logger.error(f"OpenAI API error: {e}")
            raise AnalysisError(f"OpenAI API error: {e}")

        raw = _parse_json_reply(response.choices[0].message.content)
        raw.setdefault("courseName", request.course_name)
        raw.setdefault("tees", request.tees)
        try:
            return CourseStrategy.model_validate(raw)
        except ValidationError as e:
            logger.error(f"Course strategy response failed validation: {e}")
            raise AnalysisError("Course strategy response was missing required fields")
