"""
Rule-based analyzer for development and testing.
Builds a deterministic strategy from the miss pattern and handicap,
without calling any model.
"""

from typing import List, Optional

from app.analysis.base import ScorecardAnalyzer
from app.analysis.models import (
    MISS_DESCRIPTIONS,
    CourseRequest,
    CourseStrategy,
    GolferProfile,
    MissPattern,
    ScorecardImage,
    Strength,
    StrategyAnalysis,
)

# Tee-shot advice per miss
TEE_ADVICE = {
    MissPattern.SLICE: (
        "Tee up on the right side and aim down the left half of the fairway",
        "3-wood or hybrid when trouble is right",
    ),
    MissPattern.HOOK: (
        "Tee up on the left side and aim down the right half of the fairway",
        "Hybrid with a slightly open stance when trouble is left",
    ),
    MissPattern.BOTH: (
        "Pick the widest landing area and commit to a single target",
        "Club down until the miss on both sides stays in play",
    ),
    MissPattern.STRAIGHT_SHORT: (
        "Play to your real carry numbers, not your best ones",
        "Driver on open holes; take one more club into every green",
    ),
}

DRILLS = {
    MissPattern.SLICE: ("Gate path drill", "Two tees outside the ball to train an in-to-out path"),
    MissPattern.HOOK: ("Hold-off finish drill", "Finish with the clubface pointing at the sky"),
    MissPattern.BOTH: ("Nine-ball drill", "Hit three fades, three draws, three straight shots"),
    MissPattern.STRAIGHT_SHORT: ("Low point drill", "Line on the ground; strike after the line"),
}

# Side of the hole the miss ends up on
TROUBLE_SIDE = {
    MissPattern.SLICE: "right",
    MissPattern.HOOK: "left",
    MissPattern.BOTH: "either side",
    MissPattern.STRAIGHT_SHORT: "short of the green",
}

COURSE_PAR = 72


class MockAnalyzer(ScorecardAnalyzer):
    """Deterministic analyzer; same input always gives the same strategy."""

    @property
    def source_name(self) -> str:
        return "mock"

    async def analyze(
        self, profile: GolferProfile, scorecards: List[ScorecardImage]
    ) -> StrategyAnalysis:
        # Plus handicaps keep their number as the target
        target = round(profile.handicap * 0.8, 1) if profile.handicap > 0 else profile.handicap
        stroke_drop = round(profile.handicap - target, 1)
        tee_plan, club = TEE_ADVICE[profile.miss_pattern]
        drill_name, drill_description = DRILLS[profile.miss_pattern]

        strengths = [s.value for s in profile.strengths]
        attack_putting = Strength.PUTTING in profile.strengths

        return StrategyAnalysis.model_validate({
            "summary": {
                "currentHandicap": profile.handicap,
                "targetHandicap": target,
                "potentialStrokeDrop": stroke_drop,
                "keyInsight": (
                    f"Keeping your {profile.miss_pattern.value} in play at {profile.home_course} "
                    f"is worth about {stroke_drop} strokes."
                ),
            },
            "troubleHoles": [
                {
                    "type": "Long par 4s over 400 yards",
                    "specificHoles": None,
                    "averageScore": None,
                    "problem": MISS_DESCRIPTIONS[profile.miss_pattern],
                    "strategy": tee_plan,
                    "acceptableScore": "Bogey",
                    "clubRecommendation": club,
                }
            ],
            "strengthHoles": [
                {
                    "type": "Short par 4s and reachable par 5s",
                    "specificHoles": None,
                    "opportunity": "Wedge in hand lets your strengths show",
                    "strategy": "Lay up to a full wedge number",
                    "targetScore": "Birdie" if attack_putting else "Par",
                }
            ],
            "courseStrategy": {
                "redLightHoles": ["Holes with water or OB on your miss side"],
                "yellowLightHoles": ["Long par 3s"],
                "greenLightHoles": ["Short par 4s"],
                "overallApproach": "Play away from your miss and take bogey off the card.",
            },
            "practicePlan": {
                "weeklySchedule": [
                    {
                        "session": "Ball flight control",
                        "duration": "45 min",
                        "focus": profile.miss_pattern.value,
                        "drills": [
                            {
                                "name": drill_name,
                                "description": drill_description,
                                "reps": "30 balls",
                                "why": "Shrinks your typical miss",
                            }
                        ],
                    }
                ],
                "preRoundRoutine": ["10 wedges", "10 mid irons", "5 drivers at your target line", "10 putts"],
                "practiceRoundFocus": ["Track fairways and penalty strokes"],
            },
            "mentalGame": {
                "preShot": "Pick the safe side, then commit",
                "recovery": "Next shot back to the fairway",
                "mantras": ["Bogey is fine", "Commit to the target", "Play my game"],
            },
            "targetStats": {
                "fairwaysHit": "45%",
                "penaltiesPerRound": "< 2",
                "gir": "30%",
                "upAndDown": "35%",
                "puttsPerRound": "32",
            },
            "thirtyDayPlan": [
                {"week": 1, "focus": "Tee shot target", "goals": ["Under 2 penalties per round"]},
                {"week": 2, "focus": "Approach club selection", "goals": ["One more club into greens"]},
                {"week": 3, "focus": "Short game", "goals": ["Up and down 3 of 10"]},
                {"week": 4, "focus": "Scoring", "goals": [f"Break {round(72 + target)}"]},
            ],
            "inputs": {
                "strengths": strengths,
                "scorecardsAnalyzed": len(scorecards),
                "source": self.source_name,
            },
        })

    async def plan_course(
        self, request: CourseRequest, scorecard: Optional[ScorecardImage] = None
    ) -> CourseStrategy:
        solid = round(COURSE_PAR + request.handicap)
        spread = max(2, round(abs(request.handicap) * 0.3))
        tee_plan, club = TEE_ADVICE[request.miss_pattern]
        trouble = TROUBLE_SIDE[request.miss_pattern]
        tees = f" from the {request.tees}" if request.tees else ""

        return CourseStrategy.model_validate({
            "courseName": request.course_name,
            "tees": request.tees,
            "overview": (
                f"Playing {request.course_name}{tees} with a {request.miss_pattern.value}: "
                f"treat trouble {trouble} as the main hazard on every tee shot."
            ),
            "keyHoles": [
                {
                    "number": 1,
                    "par": 4,
                    "yardage": None,
                    "strategy": "Fairway finder off the first tee; bogey is a fine start",
                    "danger": f"Anything {trouble}",
                },
                {
                    "number": 9,
                    "par": 4,
                    "yardage": None,
                    "strategy": tee_plan,
                    "danger": "Compounding a mistake before the turn",
                },
                {
                    "number": 18,
                    "par": 5,
                    "yardage": None,
                    "strategy": "Three shots to the green; lay up to a full wedge",
                    "danger": "Chasing a score on the last hole",
                },
            ],
            "generalStrategy": [
                {"title": "Play away from your miss", "description": tee_plan},
                {"title": "Club down when it is tight", "description": club},
                {"title": "Middle of the green", "description": "Ignore tucked pins unless you have a wedge"},
                {"title": "One shot at a time", "description": "After a penalty, get back in play first"},
            ],
            "scoringTargets": {"great": solid - spread, "solid": solid, "max": solid + spread},
            "preRoundChecklist": [
                "Check where the trouble sits on each tee",
                "Hit a few balls with the club you will use on the tightest tee",
                "Roll ten lag putts to get the green speed",
                "Commit to the plan for the first three holes",
            ],
            "inputs": {
                "notes": request.notes,
                "scorecardProvided": scorecard is not None,
                "source": self.source_name,
            },
        })
