"""
test_fallbacks.py

The deterministic stand-ins used when the LLM cannot answer.
"""

import unittest

from factories import make_metrics
from fallbacks import (
    CI_ITEM,
    DOCS_ITEM,
    FALLBACK_STRENGTHS,
    FALLBACK_WEAKNESSES,
    README_ITEM,
    REFACTOR_ITEM,
    TESTS_ITEM,
    fallback_roadmap,
    fallback_strengths_and_weaknesses,
    fallback_summary,
)


class TestFallbackSummary(unittest.TestCase):

    def test_archived_wins_over_everything(self):
        m = make_metrics(archived=True, file_count=0)
        self.assertTrue(fallback_summary(m, 20).startswith("This repository is archived."))

    def test_empty_repo(self):
        self.assertIn("appears to be empty", fallback_summary(make_metrics(), 30))

    def test_solid_practices_uses_tier(self):
        m = make_metrics(file_count=10, has_readme=True, has_tests=True, has_github_actions=True)
        self.assertTrue(fallback_summary(m, 75).startswith("Advanced-tier repository with solid"))

    def test_needs_improvement_uses_tier(self):
        m = make_metrics(file_count=10, has_readme=True)
        self.assertTrue(fallback_summary(m, 55).startswith("Intermediate-tier repository with potential"))

    def test_score_defaults_to_overall_score(self):
        # Empty flags, 10 files, no commits: 50 + 0.16 - 20 -> 30 -> Beginner
        m = make_metrics(file_count=10)
        self.assertTrue(fallback_summary(m).startswith("Beginner-tier"))


class TestFallbackLists(unittest.TestCase):

    def test_generic_lists_are_copies(self):
        first = fallback_strengths_and_weaknesses(make_metrics())
        first["strengths"].append("mutated")

        second = fallback_strengths_and_weaknesses(make_metrics())
        self.assertEqual(second["strengths"], list(FALLBACK_STRENGTHS))
        self.assertEqual(second["weaknesses"], list(FALLBACK_WEAKNESSES))


class TestFallbackRoadmap(unittest.TestCase):

    def test_everything_missing_low_score(self):
        roadmap = fallback_roadmap(make_metrics(), 30)
        self.assertEqual(roadmap, [README_ITEM, TESTS_ITEM, CI_ITEM, DOCS_ITEM, REFACTOR_ITEM])

    def test_everything_present_high_score(self):
        m = make_metrics(has_readme=True, has_tests=True, has_github_actions=True)
        self.assertEqual(fallback_roadmap(m, 70), [DOCS_ITEM])

    def test_only_ci_missing(self):
        m = make_metrics(has_readme=True, has_tests=True)
        self.assertEqual(fallback_roadmap(m, 90), [CI_ITEM, DOCS_ITEM])


if __name__ == "__main__":
    unittest.main()
