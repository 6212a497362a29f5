"""
Main Matcher Module

Orchestrates the complete matching process:
1. Resolve the catalog
2. Calculate deterministic career scores
3. Hand back the ranked list (truncation is left to the caller)
"""

import logging
from typing import List, Optional, Sequence

from .catalog import load_catalog
from .config import TOP_MATCHES_LIMIT
from .schema import Catalog, CareerMatchResult, QuizAnswer
from .scoring_engine import calculate_career_matches

logger = logging.getLogger(__name__)


class AnswerValidationError(ValueError):
    """Raised when submitted answers do not line up with the catalog."""

    def __init__(self, problems: List[str]):
        self.problems = problems
        super().__init__("; ".join(problems))


def validate_answers(answers: Sequence[QuizAnswer], catalog: Catalog) -> None:
    """
    Check answers against the catalog before matching.

    Rejects unknown questions, unknown options, values that do not echo the
    option's point value, and questions answered more than once.

    Raises:
        AnswerValidationError: Listing every problem found
    """
    problems = []
    seen = set()

    for index, answer in enumerate(answers):
        if answer.question_id in seen:
            problems.append(f"answers[{index}]: question {answer.question_id} answered more than once")
        seen.add(answer.question_id)

        question = catalog.get_question(answer.question_id)
        if question is None:
            problems.append(f"answers[{index}]: unknown question {answer.question_id}")
            continue

        option = question.get_option(answer.selected_option)
        if option is None:
            problems.append(
                f"answers[{index}]: unknown option {answer.selected_option!r} for question {question.id}"
            )
            continue

        if answer.value != option.value:
            problems.append(
                f"answers[{index}]: value {answer.value} does not match option "
                f"{option.id} value {option.value}"
            )

    if problems:
        raise AnswerValidationError(problems)


def match_careers(
    answers: Sequence[QuizAnswer],
    catalog: Optional[Catalog] = None
) -> List[CareerMatchResult]:
    """
    Rank every catalog career against a set of quiz answers.

    This is the main entry point for the matching system. It never raises
    for well-typed answers: unresolvable answers simply add nothing.

    Args:
        answers: Submitted quiz answers, in question order
        catalog: Optional catalog (defaults to the bundled table)

    Returns:
        Full ranked list, one entry per catalog career

    Example:
        >>> results = match_careers([QuizAnswer(question_id=1, selected_option="1a", value=3)])
        >>> print(f"{results[0].career.title}: {results[0].match_score}%")
    """
    catalog = catalog or load_catalog()
    logger.info(f"Matching {len(answers)} answers against {len(catalog.careers)} careers")

    results = calculate_career_matches(answers, catalog)

    if results:
        logger.info(f"MATCHING COMPLETE - Top: {results[0].career.title} ({results[0].match_score}%)")
    return results


def top_matches(
    results: Sequence[CareerMatchResult],
    limit: int = TOP_MATCHES_LIMIT
) -> List[CareerMatchResult]:
    """Truncate a ranked list to its first ``limit`` entries."""
    return list(results[:limit])
