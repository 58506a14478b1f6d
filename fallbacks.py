# fallbacks.py
#
# Purpose:
# Deterministic stand-ins for the three narrative artifacts, used when the
# LLM is unavailable, rate limited, or returns something unusable.
#
# Every function here reads only the RepositoryMetrics snapshot (and the
# overall score), never the network, so the narrative step always produces
# a complete result.

from models import RoadmapItem
from scoring import compute_score, get_tier


def fallback_summary(metrics, score=None):
    """
    Pick a templated summary paragraph.

    Order of checks:
      archived -> maintenance notice
      empty repo -> initialization notice
      otherwise -> tier-based paragraph (README/tests/CI all present or not)
    """
    if score is None:
        score = compute_score(metrics)
    tier = get_tier(score)

    if metrics.archived:
        return (
            "This repository is archived. It's no longer actively maintained. "
            "Consider exploring actively maintained alternatives if you need an updated "
            "version for production use."
        )

    if metrics.file_count == 0:
        return (
            "This repository appears to be empty or has no accessible files. "
            "Check if it's properly initialized and contains project files."
        )

    if metrics.has_readme and metrics.has_tests and metrics.has_github_actions:
        return (
            f"{tier}-tier repository with solid engineering practices. Has documentation, "
            "test coverage, and automated workflows. Consider adding more comprehensive tests "
            "and detailed contribution guidelines to reach Expert level."
        )

    return (
        f"{tier}-tier repository with potential for improvement. Prioritize adding comprehensive "
        "documentation (README), setting up tests, and establishing CI/CD workflows to increase "
        "code reliability and attract contributors."
    )


# Generic on purpose: these do not look at the snapshot.
FALLBACK_STRENGTHS = (
    "Well-maintained repository structure",
    "Active development pattern",
    "Proper open source setup",
)
FALLBACK_WEAKNESSES = (
    "Consider expanding test coverage",
    "Documentation could be improved",
    "Review dependency management",
)


def fallback_strengths_and_weaknesses(metrics=None):
    return {
        "strengths": list(FALLBACK_STRENGTHS),
        "weaknesses": list(FALLBACK_WEAKNESSES),
    }


README_ITEM = RoadmapItem(
    title="Create Comprehensive README",
    description="Add a detailed README with project overview, installation instructions, and usage examples",
    difficulty="Easy",
    priority="Critical",
    time_estimate="1-2 hours",
    category="Documentation",
    impact="+15 points - Improves project discoverability",
)

TESTS_ITEM = RoadmapItem(
    title="Add Unit Tests",
    description="Write test cases for core functionality with at least 50% coverage",
    difficulty="Medium",
    priority="Critical",
    time_estimate="4-6 hours",
    category="Testing",
    impact="+20 points - Increases code reliability",
)

CI_ITEM = RoadmapItem(
    title="Setup CI/CD Pipeline",
    description="Configure GitHub Actions for automated testing and deployment",
    difficulty="Medium",
    priority="High",
    time_estimate="2-3 hours",
    category="DevOps",
    impact="+12 points - Ensures code quality",
)

DOCS_ITEM = RoadmapItem(
    title="Improve Code Documentation",
    description="Add inline comments and docstrings to complex functions",
    difficulty="Easy",
    priority="High",
    time_estimate="2-3 hours",
    category="Documentation",
    impact="+8 points - Better maintainability",
)

REFACTOR_ITEM = RoadmapItem(
    title="Refactor Code Structure",
    description="Organize code into logical modules and improve naming conventions",
    difficulty="Hard",
    priority="High",
    time_estimate="6-8 hours",
    category="Code Quality",
    impact="+15 points - Better organization",
)

REFACTOR_BELOW_SCORE = 70


def fallback_roadmap(metrics, score=None):
    """
    Rule-based roadmap, always in this order:
    README -> Tests -> CI -> code documentation -> (score < 70) refactor.
    """
    if score is None:
        score = compute_score(metrics)

    roadmap = []
    if not metrics.has_readme:
        roadmap.append(README_ITEM)
    if not metrics.has_tests:
        roadmap.append(TESTS_ITEM)
    if not metrics.has_github_actions:
        roadmap.append(CI_ITEM)
    roadmap.append(DOCS_ITEM)
    if score < REFACTOR_BELOW_SCORE:
        roadmap.append(REFACTOR_ITEM)
    return roadmap
