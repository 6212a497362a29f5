"""
Tests for LLM-backed career enrichment. Agents are mocked; no API calls are made.
"""

import json
import unittest
from unittest.mock import MagicMock, patch

import insights
from agents import get_model_config
from insights import (
    FALLBACK_INSIGHT,
    InsightsError,
    clamp_percentage,
    extract_json_from_response,
    fetch_career_metrics,
    fetch_realtime_careers,
    generate_career_insights,
    run_agent_json,
)


def fake_agent(*contents):
    """Agent whose run() answers with each content in turn."""
    agent = MagicMock()
    agent.name = "Test Agent"
    agent.run.side_effect = [MagicMock(content=c) for c in contents]
    return agent


TRENDS_RESPONSE = json.dumps({
    "careers": [
        {
            "title": "Cloud Architect",
            "description": "Designs cloud platforms",
            "category": "Technology",
            "salaryRange": {"min": 1500000, "max": "4000000", "currency": "INR"},
            "growthPotential": 140,
            "stressIndex": "55",
            "mismatchProbability": -4,
            "requiredSkills": ["AWS", "Networking"],
            "personalityTraits": ["Curious"],
            "industryTrends": "Multi-cloud adoption",
        },
        {"description": "No title here"},
        {"title": "Broken", "requiredSkills": "not a list"},
        "not an object",
    ]
})


class TestExtractJson(unittest.TestCase):

    def test_plain_json(self):
        self.assertEqual(extract_json_from_response('{"a": 1}'), {"a": 1})

    def test_fenced_json(self):
        text = 'Here you go:\n```json\n{"title": "x"}\n```'
        self.assertEqual(extract_json_from_response(text), {"title": "x"})

    def test_json_in_prose(self):
        text = 'Sure! {"title": "x", "n": 2} Hope this helps.'
        self.assertEqual(extract_json_from_response(text), {"title": "x", "n": 2})

    def test_non_object(self):
        self.assertIsNone(extract_json_from_response("[1, 2, 3]"))

    def test_garbage(self):
        self.assertIsNone(extract_json_from_response("no json at all"))
        self.assertIsNone(extract_json_from_response(""))


class TestClampPercentage(unittest.TestCase):

    def test_clamping(self):
        self.assertEqual(clamp_percentage(140), 100)
        self.assertEqual(clamp_percentage(-4), 0)
        self.assertEqual(clamp_percentage("55"), 55)
        self.assertEqual(clamp_percentage(49.5), 50)

    def test_junk(self):
        self.assertEqual(clamp_percentage(None), 0)
        self.assertEqual(clamp_percentage("high"), 0)
        self.assertEqual(clamp_percentage(float("nan")), 0)


class TestRunAgentJson(unittest.TestCase):

    def test_retries_until_json(self):
        agent = fake_agent("not json", '{"ok": true}')
        self.assertEqual(run_agent_json(agent, "prompt", max_retries=3), {"ok": True})
        self.assertEqual(agent.run.call_count, 2)

    def test_gives_up(self):
        agent = fake_agent("nope", "still nope")
        with self.assertRaises(InsightsError):
            run_agent_json(agent, "prompt", max_retries=2)

    def test_agent_exception_is_retried(self):
        agent = MagicMock()
        agent.name = "Test Agent"
        agent.run.side_effect = [ConnectionError("reset"), MagicMock(content='{"a": 1}')]
        self.assertEqual(run_agent_json(agent, "prompt", max_retries=2), {"a": 1})


class TestRealtimeCareers(unittest.TestCase):

    def setUp(self):
        insights.clear_insights_cache()

    def test_requires_api_key(self):
        with self.assertRaises(InsightsError):
            fetch_realtime_careers("gpt-4o-mini", None)

    @patch("insights.build_trends_agent")
    def test_normalizes_and_drops_invalid(self, mock_build):
        mock_build.return_value = fake_agent(TRENDS_RESPONSE)
        careers = fetch_realtime_careers("gpt-4o-mini", "key")

        self.assertEqual(len(careers), 1)
        career = careers[0]
        self.assertEqual(career.id, "cloud-architect")
        self.assertEqual(career.growth_potential, 100)
        self.assertEqual(career.stress_index, 55)
        self.assertEqual(career.mismatch_probability, 0)
        self.assertEqual(career.salary_range.max, 4000000)

    @patch("insights.build_trends_agent")
    def test_results_are_cached(self, mock_build):
        mock_build.return_value = fake_agent(TRENDS_RESPONSE)
        first = fetch_realtime_careers("gpt-4o-mini", "key")
        second = fetch_realtime_careers("gpt-4o-mini", "key")
        self.assertIs(first, second)
        self.assertEqual(mock_build.call_count, 1)

    @patch("insights.build_trends_agent")
    def test_missing_careers_array(self, mock_build):
        mock_build.return_value = fake_agent('{"jobs": []}')
        with self.assertRaises(InsightsError):
            fetch_realtime_careers("gpt-4o-mini", "key", max_retries=1)


class TestCareerMetrics(unittest.TestCase):

    def setUp(self):
        insights.clear_insights_cache()

    @patch("insights.build_metrics_agent")
    def test_maps_fields(self, mock_build):
        mock_build.return_value = fake_agent(json.dumps({
            "salaryRange": {"min": 600000, "max": 1800000},
            "growthPotential": 85,
            "stressIndex": 101,
            "mismatchProbability": 20,
            "industryTrends": "Growing",
            "personalityMatch": 70,
            "skillsMatch": 65,
            "interestsMatch": 90,
            "careerFitAnalysis": "Good fit",
        }))
        metrics = fetch_career_metrics("Data Scientist", "gpt-4o-mini", "key")

        self.assertEqual(metrics.salary_range.min, 600000)
        self.assertEqual(metrics.stress_index, 100)
        self.assertEqual(metrics.interests_match, 90)
        self.assertEqual(metrics.career_fit_analysis, "Good fit")

    @patch("insights.build_metrics_agent")
    def test_cache_is_case_insensitive(self, mock_build):
        mock_build.return_value = fake_agent('{"growthPotential": 50}')
        fetch_career_metrics("Teacher", "gpt-4o-mini", "key")
        cached = fetch_career_metrics("teacher", "gpt-4o-mini", "key")
        self.assertEqual(cached.growth_potential, 50)
        self.assertEqual(mock_build.call_count, 1)

    @patch("insights.build_metrics_agent")
    def test_failure(self, mock_build):
        mock_build.return_value = fake_agent("??")
        with self.assertRaises(InsightsError):
            fetch_career_metrics("Teacher", "gpt-4o-mini", "key", max_retries=1)


class TestCareerInsights(unittest.TestCase):

    def call(self, api_key="key"):
        return generate_career_insights(
            "Teacher", 80, 70, 40, {"min": 300000, "max": 800000}, "gpt-4o-mini", api_key
        )

    def test_no_api_key_falls_back(self):
        self.assertEqual(self.call(api_key=None).model_dump(), FALLBACK_INSIGHT)

    @patch("insights.build_insights_agent")
    def test_agent_failure_falls_back(self, mock_build):
        mock_build.return_value = fake_agent("not json")
        self.assertEqual(self.call().model_dump(), FALLBACK_INSIGHT)

    @patch("insights.build_insights_agent")
    def test_missing_fields_use_defaults(self, mock_build):
        mock_build.return_value = fake_agent('{"title": "Inspiring Path"}')
        insight = self.call()
        self.assertEqual(insight.title, "Inspiring Path")
        self.assertEqual(insight.insight, insights.DEFAULT_INSIGHT["insight"])

    @patch("insights.build_insights_agent")
    def test_prompt_uses_lakhs(self, mock_build):
        agent = fake_agent('{"title": "a", "insight": "b", "recommendation": "c"}')
        mock_build.return_value = agent
        self.call()
        prompt = agent.run.call_args[0][0]
        self.assertIn("₹3.0L - ₹8.0L", prompt)
        self.assertIn("Career: Teacher", prompt)


class TestModelConfig(unittest.TestCase):

    def test_temperature_and_json_mode(self):
        config = get_model_config("gpt-4o-mini", default_temperature=0.3, api_key="k")
        self.assertEqual(config["temperature"], 0.3)
        self.assertEqual(config["response_format"], {"type": "json_object"})
        self.assertEqual(config["api_key"], "k")

    def test_no_temperature_for_reasoning_models(self):
        config = get_model_config("o1-mini")
        self.assertNotIn("temperature", config)


if __name__ == "__main__":
    unittest.main()
