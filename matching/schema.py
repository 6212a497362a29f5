"""
Domain models shared by the catalog, the scoring engine and the HTTP layer.

Python attributes are snake_case; the JSON wire format (and the catalog
file) uses camelCase through the alias generator.
"""

from __future__ import annotations

import math
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr, validator
from pydantic.alias_generators import to_camel

from .config import MAX_ANSWER_VALUE

Category = Literal["personality", "skills", "interests"]


def check_number_range(value: Union[int, float], upper: Union[int, float], name: str) -> Union[int, float]:
    """
    Reject NaN, infinities, negatives and anything above ``upper``.

    JSON bodies may carry NaN/Infinity tokens and arbitrarily large integers,
    none of which the scoring arithmetic can handle.
    """
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError(f"{name} must be a finite number")
    if value < 0:
        raise ValueError(f"{name} must not be negative")
    if value > upper:
        raise ValueError(f"{name} must be at most {upper}")
    return value


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FrozenCamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class QuizOption(FrozenCamelModel):
    id: str
    text: str
    value: int
    careers: List[str] = Field(default_factory=list)


class QuizQuestion(FrozenCamelModel):
    id: int
    question: str
    category: Category
    options: List[QuizOption]

    def get_option(self, option_id: str) -> Optional[QuizOption]:
        for option in self.options:
            if option.id == option_id:
                return option
        return None


class SalaryRange(FrozenCamelModel):
    min: int
    max: int
    currency: str = "INR"


class Career(FrozenCamelModel):
    id: str
    title: str
    description: str
    category: str
    image: Optional[str] = None
    salary_range: SalaryRange
    growth_potential: int = Field(ge=0, le=100)
    stress_index: int = Field(ge=0, le=100)
    mismatch_probability: int = Field(ge=0, le=100)
    required_skills: List[str] = Field(default_factory=list)
    personality_traits: List[str] = Field(default_factory=list)
    industry_trends: str = ""
    ar_model_path: Optional[str] = None
    video_fallback_path: Optional[str] = None
    workspace3d_model: Optional[str] = Field(default=None, alias="workspace3dModel")


class QuizAnswer(CamelModel):
    """A single submitted answer. Types are strict so "1" is not accepted as 1."""
    question_id: StrictInt
    selected_option: StrictStr
    value: Union[StrictInt, StrictFloat]

    @validator("value")
    def validate_value(cls, v: Union[int, float]) -> Union[int, float]:
        return check_number_range(v, MAX_ANSWER_VALUE, "Answer value")


class MatchBreakdown(CamelModel):
    personality_match: int = Field(ge=0, le=100)
    skills_match: int = Field(ge=0, le=100)
    interests_match: int = Field(ge=0, le=100)


class CareerMatchResult(CamelModel):
    career: Career
    # Overall score is not clamped to 100
    match_score: int = Field(ge=0)
    breakdown: MatchBreakdown


class Catalog(FrozenCamelModel):
    """Versioned quiz and career reference table."""
    version: str
    questions: List[QuizQuestion]
    careers: List[Career]

    def get_question(self, question_id: int) -> Optional[QuizQuestion]:
        for question in self.questions:
            if question.id == question_id:
                return question
        return None

    def get_career(self, career_id: str) -> Optional[Career]:
        for career in self.careers:
            if career.id == career_id:
                return career
        return None

    def get_career_by_title(self, title: str) -> Optional[Career]:
        for career in self.careers:
            if career.title == title:
                return career
        return None

    def unknown_endorsements(self) -> List[str]:
        """Career titles endorsed by some option but missing from the careers list."""
        known = {career.title for career in self.careers}
        missing: List[str] = []
        for question in self.questions:
            for option in question.options:
                for title in option.careers:
                    if title not in known and title not in missing:
                        missing.append(title)
        return missing
