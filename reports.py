"""
Career report content.

The client renders the PDF; this module assembles everything it draws so
the wording and figures come from one place.
"""

import re
import logging
from datetime import datetime, timezone
from typing import Any, List, Optional

from matching.schema import CareerMatchResult, MatchBreakdown
from matching.scoring_engine import round_half_up
from models import BreakdownRow, CareerReport, ReportRow

logger = logging.getLogger(__name__)

REPORT_BRAND = "DreamWeave"

NEXT_STEPS = [
    "Research educational pathways and degree programs for this career",
    "Connect with professionals in this field for informational interviews",
    "Explore internship opportunities to gain hands-on experience",
    "Develop the required skills through online courses or workshops",
    "Join relevant communities and professional associations",
]


def _format_amount(value: Any) -> str:
    if value is None:
        return "N/A"
    try:
        number = int(value) if isinstance(value, (int, float)) else int(str(value).strip())
    except (ValueError, OverflowError):
        return "N/A"
    if number == 0:
        return "N/A"
    # Rounds half up: 250000 -> 3L
    if number >= 10000000:
        return f"₹{round_half_up(number / 1000000) / 10:.1f}Cr"
    if number >= 100000:
        return f"₹{round_half_up(number / 100000)}L"
    return f"₹{round_half_up(number / 1000)}K"


def format_salary(min_value: Any, max_value: Optional[Any] = None) -> str:
    """
    Format an annual INR salary (range) in Indian notation: crore, lakh or thousand.

    >>> format_salary(800000, 2500000)
    '₹8L - ₹25L'
    >>> format_salary(0, 5000000)
    'N/A - ₹50L'
    """
    if not max_value:
        return _format_amount(min_value)
    return f"{_format_amount(min_value)} - {_format_amount(max_value)}"


def fit_factors(breakdown: MatchBreakdown) -> List[str]:
    """Plain-language reading of a match breakdown."""
    personality = "strongly" if breakdown.personality_match > 70 else "moderately"
    if breakdown.skills_match > 70:
        skills = "excellent"
    elif breakdown.skills_match > 50:
        skills = "good"
    else:
        skills = "developing"
    interests = "highly" if breakdown.interests_match > 70 else "moderately"
    return [
        f"Your personality traits align {personality} with this career's requirements",
        f"Your skill set shows {skills} compatibility",
        f"Your interests are {interests} aligned with this field",
    ]


def report_filename(career_title: str) -> str:
    slug = re.sub(r'\s+', '_', career_title)
    return f"{REPORT_BRAND}_{slug}_Report.pdf"


def build_career_report(match_result: CareerMatchResult, user_name: str = "Student") -> CareerReport:
    career = match_result.career
    breakdown = match_result.breakdown

    logger.info(f"Building report for {career.title} ({match_result.match_score}%)")
    return CareerReport(
        title=REPORT_BRAND,
        subtitle="Career Insights Report",
        user_name=user_name,
        career=career,
        match_score=match_result.match_score,
        breakdown=breakdown,
        breakdown_rows=[
            BreakdownRow(label="Personality Match", value=breakdown.personality_match),
            BreakdownRow(label="Skills Match", value=breakdown.skills_match),
            BreakdownRow(label="Interests Match", value=breakdown.interests_match),
        ],
        insights=[
            ReportRow(
                label="Salary Range",
                value=format_salary(career.salary_range.min, career.salary_range.max),
            ),
            ReportRow(label="Growth Potential", value=f"{career.growth_potential}%"),
            ReportRow(label="Stress Level", value=f"{career.stress_index}%"),
            ReportRow(label="Mismatch Risk", value=f"{career.mismatch_probability}%"),
        ],
        required_skills=list(career.required_skills),
        industry_trends=career.industry_trends,
        fit_factors=fit_factors(breakdown),
        next_steps=list(NEXT_STEPS),
        filename=report_filename(career.title),
        generated_at=datetime.now(timezone.utc),
    )
