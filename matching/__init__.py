"""
Deterministic Quiz-to-Career Matching System

This package ranks a fixed catalog of careers against quiz answers:
1. Tally answer points per endorsed career
2. Normalize into an overall score and a personality/skills/interests breakdown

Usage:
    from matching import match_careers, QuizAnswer

    results = match_careers([QuizAnswer(question_id=1, selected_option="1a", value=3)])
    print(f"Top: {results[0].career.title} {results[0].match_score}%")
"""

from .catalog import CatalogError, load_catalog
from .config import TOP_MATCHES_LIMIT
from .matcher import AnswerValidationError, match_careers, top_matches, validate_answers
from .schema import Career, CareerMatchResult, Catalog, MatchBreakdown, QuizAnswer, QuizQuestion

__all__ = [
    "match_careers",
    "top_matches",
    "validate_answers",
    "load_catalog",
    "AnswerValidationError",
    "CatalogError",
    "Career",
    "CareerMatchResult",
    "Catalog",
    "MatchBreakdown",
    "QuizAnswer",
    "QuizQuestion",
    "TOP_MATCHES_LIMIT",
]
__version__ = "1.0.0"
