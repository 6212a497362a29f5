from __future__ import annotations

from typing import Any, Dict, Optional

from phi.agent import Agent
from phi.model.openai import OpenAIChat


def get_model_config(
    model_name: str,
    default_temperature: float = 0,
    api_key: Optional[str] = None
) -> Dict[str, Any]:
    """
    Get model configuration with temperature support check.

    Some models (like o1, o1-mini, gpt-5-mini) don't support custom temperature.
    Only set temperature for models that support it.

    Args:
        model_name: Name of the model
        default_temperature: Desired temperature (only used if model supports it)
        api_key: Optional OpenAI API key (falls back to OPENAI_API_KEY)

    Returns:
        Dict with model configuration
    """
    config: Dict[str, Any] = {"id": model_name}
    if api_key:
        config["api_key"] = api_key

    # Models that don't support temperature customization
    models_without_temperature = [
        "o1", "o1-mini", "o1-preview", "o1-2024",
        "gpt-5-mini", "gpt-5",
    ]

    model_lower = model_name.lower()
    supports_temperature = not any(no_temp in model_lower for no_temp in models_without_temperature)

    if supports_temperature:
        config["temperature"] = default_temperature

    # JSON mode support (only for certain models that support it)
    if "gpt-4" in model_lower or ("o1" in model_lower and "gpt-5" not in model_lower):
        config["response_format"] = {"type": "json_object"}

    return config


def build_trends_agent(model_name: str, api_key: Optional[str] = None) -> Agent:
    """Agent that lists careers currently in demand."""
    model_config = get_model_config(model_name, default_temperature=0.3, api_key=api_key)
    return Agent(
        name="Career Trends Analyst",
        role="List careers that are currently in high demand for students",
        model=OpenAIChat(**model_config),
        instructions=[
            "You track job market trends for students choosing a career in India.",
            "You MUST return ONLY valid JSON (no markdown, no code blocks, no explanations).",
            "",
            'Return an object with one key "careers": an array of career objects with these fields:',
            "- id: kebab-case identifier (e.g. 'software-engineer')",
            "- title: career title",
            "- description: one sentence",
            "- category: industry category",
            "- salaryRange: object with min, max (annual, INR) and currency ('INR')",
            "- growthPotential: integer 0-100",
            "- stressIndex: integer 0-100",
            "- mismatchProbability: integer 0-100",
            "- requiredSkills: array of 4 skills",
            "- personalityTraits: array of 4 traits",
            "- industryTrends: one sentence on current trends",
            "",
            "CRITICAL RULES:",
            "1. Return ONLY the JSON object, nothing else",
            "2. All fields must be present",
            "3. Use realistic, current figures",
        ],
        show_tool_calls=False,
        markdown=False,
    )


def build_metrics_agent(model_name: str, api_key: Optional[str] = None) -> Agent:
    """Agent that estimates real-time metrics for a single career."""
    model_config = get_model_config(model_name, default_temperature=0, api_key=api_key)
    return Agent(
        name="Career Metrics Analyst",
        role="Estimate current salary, growth and fit metrics for a career",
        model=OpenAIChat(**model_config),
        instructions=[
            "You estimate up-to-date metrics for a named career in the Indian job market.",
            "You MUST return ONLY valid JSON (no markdown, no code blocks, no explanations).",
            "",
            "Extract these fields:",
            "- salaryRange: object with min and max (annual, INR, integers)",
            "- growthPotential: integer 0-100",
            "- stressIndex: integer 0-100",
            "- mismatchProbability: integer 0-100",
            "- industryTrends: 1-2 sentences",
            "- personalityMatch: integer 0-100, typical personality fit for students drawn to this career",
            "- skillsMatch: integer 0-100",
            "- interestsMatch: integer 0-100",
            "- careerFitAnalysis: 2-3 sentences",
            "",
            "CRITICAL: Return ONLY the JSON object, no explanations.",
        ],
        show_tool_calls=False,
        markdown=False,
    )


def build_insights_agent(model_name: str, api_key: Optional[str] = None) -> Agent:
    """Career counselor agent that turns career statistics into advice."""
    model_config = get_model_config(model_name, default_temperature=0.7, api_key=api_key)
    return Agent(
        name="Career Counselor",
        role="Analyze career statistics and give a student actionable advice",
        model=OpenAIChat(**model_config),
        instructions=[
            "You are a career counselor analyzing career statistics.",
            'Return ONLY a JSON object: {"title": "...", "insight": "...", "recommendation": "..."}',
            "- title: concise title for the insight (max 10 words)",
            "- insight: detailed insight about this career (2-3 sentences)",
            "- recommendation: specific recommendation for the student (2-3 sentences)",
        ],
        show_tool_calls=False,
        markdown=False,
    )
