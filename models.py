from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, Field, StrictFloat, StrictInt, StrictStr, validator, ConfigDict

from matching.config import MAX_OVERALL_SCORE
from matching.schema import CamelModel, Career, CareerMatchResult, MatchBreakdown, QuizAnswer, check_number_range


class MatchRequest(CamelModel):
    answers: List[QuizAnswer]

    @validator("answers")
    def validate_answers(cls, v: List[QuizAnswer]) -> List[QuizAnswer]:
        if len(v) == 0:
            raise ValueError("At least one answer is required")
        if len(v) > 50:
            raise ValueError("A maximum of 50 answers is allowed")
        return v


class MatchResponse(CamelModel):
    top_matches: List[CareerMatchResult]


class SaveAssessmentRequest(CamelModel):
    user_id: Optional[StrictStr] = Field(
        default=None,
        description="User ID the assessment belongs to (anonymous when omitted)"
    )
    answers: List[QuizAnswer]
    top_career: StrictStr = Field(..., min_length=1)
    match_score: Union[StrictInt, StrictFloat]

    @validator("match_score")
    def validate_match_score(cls, v: Union[int, float]) -> Union[int, float]:
        return check_number_range(v, MAX_OVERALL_SCORE, "matchScore")


class SaveAssessmentResponse(CamelModel):
    success: bool = True
    assessment_id: str


class Assessment(CamelModel):
    """A stored quiz result."""
    id: str
    user_id: Optional[str] = None
    answers: List[QuizAnswer] = Field(default_factory=list)
    top_career: str
    match_score: Union[int, float]
    created_at: Optional[datetime] = None


class TrackEventRequest(CamelModel):
    """Request body for the career exploration and AR preview trackers."""
    user_id: StrictStr = Field(..., min_length=1)
    career_title: StrictStr = Field(..., min_length=1)


class SuccessResponse(BaseModel):
    success: bool = True


class MetricsSalaryRange(CamelModel):
    min: int = 0
    max: int = 0


class CareerMetrics(CamelModel):
    """LLM-estimated, real-time view of a career."""
    salary_range: MetricsSalaryRange = Field(default_factory=MetricsSalaryRange)
    growth_potential: int = Field(default=0, ge=0, le=100)
    stress_index: int = Field(default=0, ge=0, le=100)
    mismatch_probability: int = Field(default=0, ge=0, le=100)
    industry_trends: str = ""
    personality_match: int = Field(default=0, ge=0, le=100)
    skills_match: int = Field(default=0, ge=0, le=100)
    interests_match: int = Field(default=0, ge=0, le=100)
    career_fit_analysis: str = ""


class CareerInsightRequest(CamelModel):
    career_title: StrictStr = Field(..., min_length=1)
    match_score: Union[StrictInt, StrictFloat]
    growth_potential: Union[StrictInt, StrictFloat]
    stress_index: Union[StrictInt, StrictFloat]
    salary_range: MetricsSalaryRange

    @validator("match_score")
    def validate_match_score(cls, v: Union[int, float]) -> Union[int, float]:
        return check_number_range(v, MAX_OVERALL_SCORE, "matchScore")

    @validator("growth_potential", "stress_index")
    def validate_percentage(cls, v: Union[int, float]) -> Union[int, float]:
        return check_number_range(v, 100, "Percentage")


class CareerInsight(CamelModel):
    title: str
    insight: str
    recommendation: str


class PlatformMetrics(CamelModel):
    students_helped: int = 0
    careers_explored: int = 0
    ar_previews_completed: int = 0
    average_match_score: int = 0
    last_updated: Optional[datetime] = None


class ReportRequest(CamelModel):
    match_result: CareerMatchResult
    user_name: str = Field(default="Student", min_length=1, max_length=120)


class ReportRow(CamelModel):
    label: str
    value: str


class BreakdownRow(CamelModel):
    label: str
    value: int


class CareerReport(CamelModel):
    """Content for the client-side PDF career report."""
    title: str
    subtitle: str
    user_name: str
    career: Career
    match_score: int
    breakdown: MatchBreakdown
    breakdown_rows: List[BreakdownRow]
    insights: List[ReportRow]
    required_skills: List[str]
    industry_trends: str
    fit_factors: List[str]
    next_steps: List[str]
    filename: str
    generated_at: datetime


class Settings(BaseModel):
    model_config = ConfigDict(protected_namespaces=())
    openai_api_key: Optional[str] = None
    model_name: str = "gpt-4o-mini"
    llm_max_retries: int = 3
    insights_cache_ttl_seconds: int = 3600
    rate_limit_requests_per_minute: int = 60
    strict_answer_validation: bool = False
    catalog_path: Optional[str] = None
    storage_backend: str = Field(default="auto", description="auto|firestore|memory")
    cors_origins: str = "*"

    def cors_origin_list(self) -> List[str]:
        """Comma-separated CORS_ORIGINS as a list, blanks dropped."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]
