"""
test_llm_utils.py

Unit tests for the prompt builders, the response parsers, and the Groq
generator wrapper. No network: the Groq client is replaced by a mock.
"""

import unittest
from types import SimpleNamespace
from unittest.mock import AsyncMock

from factories import NOW, ROADMAP_JSON, STRENGTHS_JSON, iso_days_ago, make_metrics
from llm_utils import (
    GroqTextGenerator,
    NarrativeParseError,
    build_roadmap_prompt,
    build_strengths_prompt,
    build_summary_prompt,
    parse_roadmap,
    parse_strengths_and_weaknesses,
    parse_summary,
)


class TestPrompts(unittest.TestCase):

    def test_summary_prompt_carries_score_tier_and_activity(self):
        m = make_metrics(
            has_readme=True, stars=12, languages={"Python": 10, "Go": 5},
            updated_at=iso_days_ago(4), commits_last_month=7,
        )
        prompt = build_summary_prompt(m, 72, now=NOW)
        self.assertIn("Repository: octocat/hello-world", prompt)
        self.assertIn("Score: 72/100 (Advanced level)", prompt)
        self.assertIn("README=yes", prompt)
        self.assertIn("Tests=no", prompt)
        self.assertIn("Languages: Python, Go", prompt)
        self.assertIn("Last update 4 days ago", prompt)

    def test_summary_prompt_unknown_update_time(self):
        prompt = build_summary_prompt(make_metrics(), 30, now=NOW)
        self.assertIn("Last update unknown days ago", prompt)
        self.assertIn("Description: No description", prompt)

    def test_json_prompts_ask_for_json(self):
        m = make_metrics()
        self.assertIn('"strengths"', build_strengths_prompt(m, now=NOW))
        roadmap = build_roadmap_prompt(m, 55)
        self.assertIn("Current Score: 55/100", roadmap)
        self.assertIn('"timeEstimate"', roadmap)


class TestParsers(unittest.TestCase):

    def test_summary(self):
        self.assertEqual(parse_summary("  Looks good.  \n"), "Looks good.")
        with self.assertRaises(NarrativeParseError):
            parse_summary("   ")
        with self.assertRaises(NarrativeParseError):
            parse_summary(None)

    def test_strengths_and_weaknesses(self):
        parsed = parse_strengths_and_weaknesses(STRENGTHS_JSON)
        self.assertEqual(parsed["strengths"], ["Clear README", "Active CI"])
        self.assertEqual(parsed["weaknesses"], ["Few tests"])

    def test_strengths_with_fences_and_non_string_items(self):
        text = '```json\n{"strengths": ["ok", 3], "weaknesses": [null]}\n```'
        parsed = parse_strengths_and_weaknesses(text)
        self.assertEqual(parsed["strengths"], ["ok", "3"])
        self.assertEqual(parsed["weaknesses"], ["None"])

    def test_strengths_rejects_bad_shapes(self):
        bad = [
            "not json at all",
            "[]",
            '{"strengths": "one", "weaknesses": ["two"]}',
            '{"strengths": ["one"]}',
            '{"strengths": [], "weaknesses": ["two"]}',
            "",
        ]
        for text in bad:
            with self.assertRaises(NarrativeParseError, msg=text):
                parse_strengths_and_weaknesses(text)

    def test_parse_error_is_a_value_error(self):
        with self.assertRaises(ValueError):
            parse_strengths_and_weaknesses("{")

    def test_roadmap(self):
        items = parse_roadmap(ROADMAP_JSON)
        self.assertEqual(len(items), 1)
        item = items[0]
        self.assertEqual(item.title, "Add integration tests")
        self.assertEqual(item.priority, "High")
        self.assertEqual(item.time_estimate, "3-4 hours")
        self.assertEqual(item.category, "Testing")

    def test_roadmap_normalises_and_skips(self):
        text = """[
            {"title": "  "},
            "not an object",
            {"title": "Tidy up", "difficulty": "extreme", "priority": "low",
             "category": "Marketing", "time_estimate": "1 hour"}
        ]"""
        items = parse_roadmap(text)
        self.assertEqual(len(items), 1)
        self.assertEqual(items[0].difficulty, "Medium")
        self.assertEqual(items[0].priority, "Low")
        self.assertEqual(items[0].category, "Code Quality")
        self.assertEqual(items[0].time_estimate, "1 hour")

    def test_roadmap_rejects_object_and_empty(self):
        with self.assertRaises(NarrativeParseError):
            parse_roadmap('{"title": "x"}')
        with self.assertRaises(NarrativeParseError):
            parse_roadmap('[{"description": "no title"}]')


class TestGroqTextGenerator(unittest.IsolatedAsyncioTestCase):

    async def test_missing_key_raises(self):
        gen = GroqTextGenerator(api_key="")
        with self.assertRaises(RuntimeError):
            await gen.generate("hello")

    async def test_returns_stripped_message_content(self):
        response = SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content="  answer \n"))]
        )
        client = SimpleNamespace(
            chat=SimpleNamespace(completions=SimpleNamespace(create=AsyncMock(return_value=response)))
        )
        gen = GroqTextGenerator(api_key="test-key", model="test-model", client=client)

        self.assertEqual(await gen.generate("prompt text"), "answer")

        kwargs = client.chat.completions.create.await_args.kwargs
        self.assertEqual(kwargs["model"], "test-model")
        self.assertEqual(kwargs["messages"][-1], {"role": "user", "content": "prompt text"})


if __name__ == "__main__":
    unittest.main()
