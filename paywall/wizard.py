# paywall/wizard.py
"""
Four-step analysis form: basics, miss pattern, strengths, scorecards.

Steps are linear. `next()` only advances when the current step validates;
`back()` always works. Field names in `snapshot()` and `to_fields()` are
the ones the analysis endpoints accept.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, List, Optional

MAX_SCORECARDS = 10

MISS_PATTERNS = ("slice", "hook", "both", "straight_short")
STRENGTHS = ("driving", "irons", "shortgame", "putting", "course_mgmt", "consistency")

MIN_HANDICAP = -10.0
MAX_HANDICAP = 54.0


class WizardStep(IntEnum):
    BASICS = 1
    MISS_PATTERN = 2
    STRENGTHS = 3
    SCORECARDS = 4


@dataclass
class Scorecard:
    filename: str
    data: bytes
    content_type: str = "image/jpeg"


@dataclass
class AnalysisForm:
    name: str = ""
    handicap: str = ""
    home_course: str = ""
    miss_pattern: Optional[str] = None
    miss_description: str = ""
    strengths: List[str] = field(default_factory=list)
    scorecards: List[Scorecard] = field(default_factory=list)

    def handicap_value(self) -> Optional[float]:
        try:
            return float(self.handicap)
        except (TypeError, ValueError):
            return None

    def to_fields(self) -> dict:
        """Multipart fields for /api/analyze (scorecards go separately)."""
        return {
            "name": self.name.strip(),
            "handicap": self.handicap,
            "homeCourse": self.home_course.strip(),
            "missPattern": self.miss_pattern,
            "missDescription": self.miss_description or None,
            "strengths": list(self.strengths),
        }

    def snapshot(self) -> dict:
        """JSON-safe copy stored with a pending preview (no image bytes)."""
        fields = self.to_fields()
        fields["handicap"] = self.handicap_value()
        fields["scorecards"] = [card.filename for card in self.scorecards]
        return fields

    def uploads(self) -> list:
        return [(card.filename, card.data, card.content_type) for card in self.scorecards]


def validate_step(form: AnalysisForm, step: WizardStep) -> Dict[str, str]:
    """Field -> message for everything blocking `step`."""
    errors = {}

    if step == WizardStep.BASICS:
        if not form.name.strip():
            errors["name"] = "Enter your name"
        handicap = form.handicap_value()
        if handicap is None:
            errors["handicap"] = "Enter your handicap"
        elif not MIN_HANDICAP <= handicap <= MAX_HANDICAP:
            errors["handicap"] = f"Handicap must be between {MIN_HANDICAP:g} and {MAX_HANDICAP:g}"
        if not form.home_course.strip():
            errors["home_course"] = "Enter your home course"

    elif step == WizardStep.MISS_PATTERN:
        if form.miss_pattern not in MISS_PATTERNS:
            errors["miss_pattern"] = "Pick your typical miss"

    elif step == WizardStep.STRENGTHS:
        if not form.strengths:
            errors["strengths"] = "Pick at least one strength"
        elif any(s not in STRENGTHS for s in form.strengths):
            errors["strengths"] = "Unknown strength"

    elif step == WizardStep.SCORECARDS:
        if len(form.scorecards) > MAX_SCORECARDS:
            errors["scorecards"] = f"Upload at most {MAX_SCORECARDS} scorecards"

    return errors


class FormWizard:
    def __init__(self, form: Optional[AnalysisForm] = None):
        self.form = form or AnalysisForm()
        self.step = WizardStep.BASICS
        self.errors: Dict[str, str] = {}

    @property
    def can_advance(self) -> bool:
        return not validate_step(self.form, self.step)

    @property
    def is_last_step(self) -> bool:
        return self.step == WizardStep.SCORECARDS

    @property
    def is_complete(self) -> bool:
        return all(not validate_step(self.form, step) for step in WizardStep)

    def next(self) -> bool:
        """Advance if the current step is valid; errors are kept in `errors`."""
        self.errors = validate_step(self.form, self.step)
        if self.errors or self.is_last_step:
            return False
        self.step = WizardStep(self.step + 1)
        return True

    def back(self) -> bool:
        self.errors = {}
        if self.step == WizardStep.BASICS:
            return False
        self.step = WizardStep(self.step - 1)
        return True

    def toggle_strength(self, strength: str) -> None:
        if strength not in STRENGTHS:
            raise ValueError(f"Unknown strength: {strength}")
        if strength in self.form.strengths:
            self.form.strengths.remove(strength)
        else:
            self.form.strengths.append(strength)

    def add_scorecard(self, scorecard: Scorecard) -> None:
        """
        Raises:
            ValueError: If the form already holds the maximum
        """
        if len(self.form.scorecards) >= MAX_SCORECARDS:
            raise ValueError(f"Upload at most {MAX_SCORECARDS} scorecards")
        self.form.scorecards.append(scorecard)

    def remove_scorecard(self, index: int) -> None:
        del self.form.scorecards[index]

    def reset(self) -> None:
        self.form = AnalysisForm()
        self.step = WizardStep.BASICS
        self.errors = {}
