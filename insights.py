"""
Career Enrichment Module

Uses PhiData + OpenAI to produce "real-time" career data on top of the
static catalog: trending careers, per-career metrics and counselor insights.
"""

import json
import re
import time
import logging
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from agents import build_insights_agent, build_metrics_agent, build_trends_agent
from matching.schema import Career
from models import CareerInsight, CareerMetrics

logger = logging.getLogger(__name__)

FALLBACK_INSIGHT = {
    "title": "Career Opportunity",
    "insight": "This career path aligns well with your profile and offers promising growth potential.",
    "recommendation": "Focus on continuous skill development and industry certifications to maximize your career growth.",
}

DEFAULT_INSIGHT = {
    "title": "Career Insight",
    "insight": "This career offers excellent opportunities for growth and development.",
    "recommendation": "Consider developing additional skills to enhance your career prospects.",
}

# key -> (stored_at, value)
INSIGHTS_CACHE: Dict[str, Tuple[float, Any]] = {}


class InsightsError(RuntimeError):
    """Raised when enrichment data cannot be produced."""


def _cache_get(key: str, ttl_seconds: int) -> Optional[Any]:
    entry = INSIGHTS_CACHE.get(key)
    if not entry:
        return None
    stored_at, value = entry
    if time.time() - stored_at > ttl_seconds:
        INSIGHTS_CACHE.pop(key, None)
        return None
    return value


def _cache_set(key: str, value: Any) -> None:
    INSIGHTS_CACHE[key] = (time.time(), value)


def clear_insights_cache() -> None:
    INSIGHTS_CACHE.clear()


def response_text(response: Any) -> str:
    """Pull the text out of a phi RunResponse (or anything else)."""
    if hasattr(response, 'content'):
        return str(response.content)
    if hasattr(response, 'messages') and response.messages:
        last_msg = response.messages[-1]
        return str(last_msg.content if hasattr(last_msg, 'content') else last_msg)
    return str(response)


def extract_json_from_response(text: str) -> Optional[Dict[str, Any]]:
    """Extract a JSON object from LLM response, handling markdown and other formatting."""
    if not text:
        return None

    # Remove markdown code fences
    if '```json' in text:
        match = re.search(r'```json\s*\n?(.*?)\n?```', text, re.DOTALL)
        if match:
            text = match.group(1).strip()
    elif '```' in text:
        match = re.search(r'```\s*\n?(.*?)\n?```', text, re.DOTALL)
        if match:
            text = match.group(1).strip()

    # Try direct parse
    try:
        parsed = json.loads(text)
        if isinstance(parsed, dict):
            return parsed
    except json.JSONDecodeError:
        pass

    # Outermost braces, for answers wrapped in prose
    start, end = text.find('{'), text.rfind('}')
    if start != -1 and end > start:
        try:
            parsed = json.loads(text[start:end + 1])
            if isinstance(parsed, dict):
                return parsed
        except json.JSONDecodeError:
            pass

    return None


def run_agent_json(agent: Any, prompt: str, max_retries: int = 3) -> Dict[str, Any]:
    """
    Run an agent until it answers with a JSON object.

    Raises:
        InsightsError: If no attempt produced valid JSON
    """
    last_error: Optional[Exception] = None
    for attempt in range(max_retries):
        try:
            logger.info(f"{agent.name}: attempt {attempt + 1}/{max_retries}")
            text = response_text(agent.run(prompt))
            logger.debug(f"Raw LLM response: {text[:500]}...")

            data = extract_json_from_response(text)
            if data is None:
                raise ValueError("Could not extract valid JSON from LLM response")
            return data
        except Exception as e:
            last_error = e
            logger.warning(f"{agent.name}: attempt {attempt + 1} failed: {e}")

    raise InsightsError(f"{agent.name} failed after {max_retries} attempts: {last_error}")


def clamp_percentage(value: Any) -> int:
    """Coerce an LLM-provided number into an int in [0, 100]; junk becomes 0."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if number != number:  # NaN
        return 0
    return max(0, min(100, int(number + 0.5)))


def _to_amount(value: Any) -> int:
    try:
        return max(0, int(float(value)))
    except (TypeError, ValueError):
        return 0


def slugify(title: str) -> str:
    return re.sub(r'[^a-z0-9]+', '-', title.lower()).strip('-')


def normalize_career(item: Dict[str, Any]) -> Dict[str, Any]:
    """Clamp and default an LLM career object so it validates as a Career."""
    title = str(item.get("title") or "").strip()
    salary = item.get("salaryRange") or {}
    return {
        **item,
        "id": item.get("id") or slugify(title),
        "title": title,
        "description": item.get("description") or "",
        "category": item.get("category") or "General",
        "salaryRange": {
            "min": _to_amount(salary.get("min")),
            "max": _to_amount(salary.get("max")),
            "currency": salary.get("currency") or "INR",
        },
        "growthPotential": clamp_percentage(item.get("growthPotential")),
        "stressIndex": clamp_percentage(item.get("stressIndex")),
        "mismatchProbability": clamp_percentage(item.get("mismatchProbability")),
        "industryTrends": item.get("industryTrends") or "",
    }


def _require_api_key(api_key: Optional[str]) -> None:
    if not api_key:
        raise InsightsError("OPENAI_API_KEY is not configured")


def fetch_realtime_careers(
    model_name: str,
    api_key: Optional[str],
    max_retries: int = 3,
    cache_ttl_seconds: int = 3600
) -> List[Career]:
    """
    Ask the trends agent for careers currently in demand.

    Returns:
        Validated careers (invalid entries are dropped)

    Raises:
        InsightsError: If no API key is configured or the agent keeps failing
    """
    _require_api_key(api_key)
    cached = _cache_get("realtime-careers", cache_ttl_seconds)
    if cached is not None:
        return cached

    agent = build_trends_agent(model_name, api_key=api_key)
    data = run_agent_json(agent, "List 8 careers that are in high demand right now.", max_retries)

    raw_careers = data.get("careers")
    if not isinstance(raw_careers, list):
        raise InsightsError("Trends response has no 'careers' array")

    careers = []
    for item in raw_careers:
        if not isinstance(item, dict) or not item.get("title"):
            continue
        try:
            careers.append(Career.model_validate(normalize_career(item)))
        except ValidationError as e:
            logger.warning(f"Dropping invalid career from trends response: {e}")

    logger.info(f"Fetched {len(careers)} real-time careers")
    if careers:
        _cache_set("realtime-careers", careers)
    return careers


def fetch_career_metrics(
    career_name: str,
    model_name: str,
    api_key: Optional[str],
    max_retries: int = 3,
    cache_ttl_seconds: int = 3600
) -> CareerMetrics:
    """
    Ask the metrics agent for current metrics of one career.

    Raises:
        InsightsError: If no API key is configured or the agent keeps failing
    """
    _require_api_key(api_key)
    cache_key = f"metrics:{career_name.strip().lower()}"
    cached = _cache_get(cache_key, cache_ttl_seconds)
    if cached is not None:
        return cached

    agent = build_metrics_agent(model_name, api_key=api_key)
    data = run_agent_json(agent, f"Career: {career_name}", max_retries)

    salary = data.get("salaryRange") or {}
    metrics = CareerMetrics(
        salary_range={"min": _to_amount(salary.get("min")), "max": _to_amount(salary.get("max"))},
        growth_potential=clamp_percentage(data.get("growthPotential")),
        stress_index=clamp_percentage(data.get("stressIndex")),
        mismatch_probability=clamp_percentage(data.get("mismatchProbability")),
        industry_trends=str(data.get("industryTrends") or ""),
        personality_match=clamp_percentage(data.get("personalityMatch")),
        skills_match=clamp_percentage(data.get("skillsMatch")),
        interests_match=clamp_percentage(data.get("interestsMatch")),
        career_fit_analysis=str(data.get("careerFitAnalysis") or ""),
    )
    _cache_set(cache_key, metrics)
    return metrics


def generate_career_insights(
    career_title: str,
    match_score: float,
    growth_potential: float,
    stress_index: float,
    salary_range: Dict[str, Any],
    model_name: str,
    api_key: Optional[str],
    max_retries: int = 1
) -> CareerInsight:
    """
    Generate counselor-style insights for a matched career.

    Never raises: any failure yields the fixed fallback insight, and missing
    fields are filled from the defaults.
    """
    try:
        _require_api_key(api_key)
        salary_min = _to_amount(salary_range.get("min")) / 100000
        salary_max = _to_amount(salary_range.get("max")) / 100000
        prompt = f"""Generate insights based on the following data:

Career: {career_title}
Match Score: {match_score}%
Growth Potential: {growth_potential}%
Stress Index: {stress_index}%
Salary Range: ₹{salary_min:.1f}L - ₹{salary_max:.1f}L
"""
        agent = build_insights_agent(model_name, api_key=api_key)
        data = run_agent_json(agent, prompt, max_retries)
    except Exception as e:
        logger.warning(f"Falling back to default insight for {career_title}: {e}")
        return CareerInsight(**FALLBACK_INSIGHT)

    return CareerInsight(**{
        key: str(data.get(key) or default)
        for key, default in DEFAULT_INSIGHT.items()
    })
