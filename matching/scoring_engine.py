"""
Deterministic Scoring Engine

All scoring functions are deterministic - same inputs produce same outputs.
No AI/LLM is used in this module.
"""

import logging
import math
from typing import Dict, List, Sequence

from .config import (
    BREAKDOWN_FIELDS, CATEGORIES, CATEGORY_MAX_POINTS, MAX_SUB_SCORE, POINTS_PER_ANSWER
)
from .schema import Catalog, CareerMatchResult, MatchBreakdown, QuizAnswer

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (12.5 -> 13), unlike round()."""
    return int(math.floor(value + 0.5))


def calculate_overall_score(total_points: float, answer_count: int) -> int:
    """
    Calculate the overall match percentage.

    Formula:
    - round(total / (answer_count * 3) * 100)
    - Not clamped to 100
    - No answers: 0

    Args:
        total_points: Points the career accrued across all answers
        answer_count: Number of submitted answers, resolvable or not

    Returns:
        Overall score (>= 0 for non-negative points)
    """
    max_possible = answer_count * POINTS_PER_ANSWER
    if max_possible == 0:
        return 0
    return round_half_up(total_points / max_possible * 100)


def calculate_category_score(category_points: float) -> int:
    """
    Calculate a breakdown sub-score (0-100).

    Formula: min(100, round(points / 6 * 100)), 6 being two questions per
    category at 3 points each.
    """
    return min(MAX_SUB_SCORE, round_half_up(category_points / CATEGORY_MAX_POINTS * 100))


def tally_answers(
    answers: Sequence[QuizAnswer],
    catalog: Catalog
) -> Dict[str, Dict[str, float]]:
    """
    Accumulate answer points per career.

    Answers whose question or option cannot be resolved contribute nothing.
    Endorsed titles that are not in the catalog are ignored.

    Returns:
        {career_id: {"total": ..., "personality": ..., "skills": ..., "interests": ...}}
    """
    accumulators: Dict[str, Dict[str, float]] = {
        career.id: {"total": 0, **{category: 0 for category in CATEGORIES}}
        for career in catalog.careers
    }
    title_index = {career.title: career.id for career in catalog.careers}

    for answer in answers:
        question = catalog.get_question(answer.question_id)
        if question is None:
            logger.debug(f"Skipping answer for unknown question {answer.question_id}")
            continue

        option = question.get_option(answer.selected_option)
        if option is None:
            logger.debug(f"Skipping unknown option {answer.selected_option!r} for question {question.id}")
            continue

        for title in option.careers:
            career_id = title_index.get(title)
            if career_id is None:
                continue
            scores = accumulators[career_id]
            scores["total"] += answer.value
            scores[question.category] += answer.value

    return accumulators


def calculate_career_matches(
    answers: Sequence[QuizAnswer],
    catalog: Catalog
) -> List[CareerMatchResult]:
    """
    Score every catalog career against the submitted answers.

    Args:
        answers: Submitted quiz answers
        catalog: Quiz and career reference data

    Returns:
        One CareerMatchResult per catalog career, sorted by match_score
        (highest first, catalog order for ties)
    """
    accumulators = tally_answers(answers, catalog)
    answer_count = len(answers)

    results = []
    for career in catalog.careers:
        scores = accumulators[career.id]
        breakdown = MatchBreakdown(**{
            BREAKDOWN_FIELDS[category]: calculate_category_score(scores[category])
            for category in CATEGORIES
        })
        results.append(CareerMatchResult(
            career=career,
            match_score=calculate_overall_score(scores["total"], answer_count),
            breakdown=breakdown,
        ))

    # list.sort is stable, so equal scores keep catalog order
    results.sort(key=lambda r: r.match_score, reverse=True)

    if results:
        logger.debug(f"Top match: {results[0].career.title} ({results[0].match_score}%)")
    return results
