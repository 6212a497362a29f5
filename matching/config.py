"""
Configuration for the deterministic quiz-to-career matching system.
Adjust scoring constants and catalog location here.
"""

import math
from pathlib import Path

# Quiz categories; each question feeds exactly one breakdown bucket
CATEGORIES = ("personality", "skills", "interests")

# Points a fully endorsing answer contributes (every shipped option is worth 3)
POINTS_PER_ANSWER = 3

# Questions per category in the shipped quiz
QUESTIONS_PER_CATEGORY = 2

# Sub-score denominator: 2 questions x 3 points
CATEGORY_MAX_POINTS = QUESTIONS_PER_CATEGORY * POINTS_PER_ANSWER

# Sub-scores are clamped to this ceiling, the overall score is not
MAX_SUB_SCORE = 100

# Number of matches returned by the HTTP layer
TOP_MATCHES_LIMIT = 5

# Shared quiz + career table
CATALOG_PATH = Path(__file__).resolve().parent / "data" / "catalog.json"

# Breakdown field fed by each question category
BREAKDOWN_FIELDS = {
    "personality": "personality_match",
    "skills": "skills_match",
    "interests": "interests_match",
}

# Largest value a single submitted answer may carry
MAX_ANSWER_VALUE = 100

# Largest overall score reachable with MAX_ANSWER_VALUE answers
MAX_OVERALL_SCORE = math.ceil(MAX_ANSWER_VALUE * 100 / POINTS_PER_ANSWER)
