# scoring.py
#
# What this file is:
# The deterministic scoring logic for RepoGrade. It converts a RepositoryMetrics
# snapshot into:
#   - one overall 0–100 score plus a tier label (compute_score / get_tier)
#   - five independent 0–100 dimension scores (compute_dimensions)
#
# How it is organised:
# - Every point value lives in a named weight table near the top of the file,
#   so a single rule can be tested (and tuned) without touching the rest.
# - score_terms() lists every bonus that applied and penalty_terms() every
#   penalty; compute_score() only sums them and clamps.
# - The dimension calculators never read each other's output or the overall
#   score. They have their own baselines and caps, so the overall score is
#   NOT an average of the dimensions.
#
# Nothing in this file does I/O or suspends. It is safe to call from the
# async engine, the CLI comparison view, or a test.

import math

from analytics import (
    days_since,
    language_count,
    markdown_file_count,
    test_ratio,
)
from models import DimensionScore


def clamp(x, lo=0, hi=100):
    """
    Clamp a number into a bounded range.
    Every score the UI sees is guaranteed to land inside [0, 100].
    """
    if x < lo:
        return lo
    if x > hi:
        return hi
    return x


def round_half_up(x):
    """Round .5 away from zero for positive values (Python's round() is banker's rounding)."""
    return int(math.floor(x + 0.5))


def scaled_toward_cap(count, divisor, weight):
    """min(count / divisor * weight, weight): grows linearly, then stops at weight."""
    return min(count / divisor * weight, weight)


def first_tier_above(value, tiers):
    """
    tiers: ((threshold, points), ...) from highest threshold down.
    Returns the points for the first threshold that value is strictly greater than.
    """
    for threshold, points in tiers:
        if value > threshold:
            return points
    return 0


def first_tier_below(value, tiers):
    """Same as first_tier_above, for "fewer is better" values such as days since update."""
    if value is None:
        return 0
    for threshold, points in tiers:
        if value < threshold:
            return points
    return 0


# ----------------------------
# Tier table (single source of truth)
# ----------------------------
# The fallback summary in fallbacks.py and the engine both go through get_tier().
TIER_THRESHOLDS = (
    (85, "Expert"),
    (70, "Advanced"),
    (50, "Intermediate"),
)
LOWEST_TIER = "Beginner"


def get_tier(score):
    """Map an overall score to its tier label using TIER_THRESHOLDS (highest first)."""
    for threshold, tier in TIER_THRESHOLDS:
        if score >= threshold:
            return tier
    return LOWEST_TIER


# ----------------------------
# Overall score weight tables
# ----------------------------
SCORE_BASELINE = 50

# (group, metrics attribute, points) awarded when the flag is True.
# has_readme appears twice on purpose: it counts for organisation and for documentation.
FLAG_BONUSES = (
    ("organization", "has_readme", 8),
    ("organization", "has_license", 5),
    ("organization", "has_contributing", 4),
    ("documentation", "has_readme", 5),
    ("documentation", "has_changelog", 5),
    ("documentation", "has_wiki", 5),
    ("testing", "has_tests", 12),
    ("testing", "has_github_actions", 10),
)

# (group, metrics attribute, divisor, cap)
SCALED_BONUSES = (
    ("organization", "file_count", 500, 8),
    ("community", "stars", 200, 8),
    ("community", "contributors", 30, 7),
    ("community", "forks", 100, 5),
)

# (group, label, value getter, threshold, points), awarded when value > threshold.
THRESHOLD_BONUSES = (
    ("organization", "directory_count", lambda m: m.directory_count, 5, 2),
    ("documentation", "markdown_files", markdown_file_count, 2, 5),
    ("testing", "test_ratio", test_ratio, 0.1, 8),
    ("maintenance", "commits_last_month", lambda m: m.commits_last_month, 5, 5),
    ("maintenance", "commits_last_week", lambda m: m.commits_last_week, 0, 2),
    ("maintenance", "frameworks", lambda m: len(m.frameworks), 0, 3),
)

# Days since updated_at: (strictly under, points)
RECENCY_TIERS = ((7, 8), (30, 6), (90, 4), (180, 2))

LANGUAGE_POINTS_EACH = 2
LANGUAGE_POINTS_CAP = 5

# Branch count: (strictly over, points)
BRANCH_TIERS = ((5, 3), (2, 1))

LARGE_REPO_FILES = 50

# (label, condition, points). Applied after the bonuses and never capped against them.
PENALTIES = (
    ("archived", lambda m: m.archived, -40),
    ("disabled", lambda m: m.disabled, -35),
    ("private", lambda m: m.private, -15),
    ("no_commits", lambda m: m.commit_count == 0, -20),
    ("large_repo_without_readme", lambda m: not m.has_readme and m.file_count > LARGE_REPO_FILES, -10),
)


def score_terms(metrics, now=None):
    """
    Every positive contribution to the overall score, as (group, label, points).
    Zero-point terms are left out so the list reads like an explanation.
    """
    terms = []

    for group, attr, points in FLAG_BONUSES:
        if getattr(metrics, attr):
            terms.append((group, attr, points))

    for group, attr, divisor, cap in SCALED_BONUSES:
        points = scaled_toward_cap(getattr(metrics, attr), divisor, cap)
        if points:
            terms.append((group, attr, points))

    for group, label, getter, threshold, points in THRESHOLD_BONUSES:
        if getter(metrics) > threshold:
            terms.append((group, label, points))

    recency = first_tier_below(days_since(metrics.updated_at, now=now), RECENCY_TIERS)
    if recency:
        terms.append(("maintenance", "recently_updated", recency))

    languages = min(language_count(metrics) * LANGUAGE_POINTS_EACH, LANGUAGE_POINTS_CAP)
    if languages:
        terms.append(("maintenance", "language_diversity", languages))

    branches = first_tier_above(metrics.branches, BRANCH_TIERS)
    if branches:
        terms.append(("maintenance", "branches", branches))

    return terms


def penalty_terms(metrics):
    """Every penalty that applies, as (label, points) with negative points."""
    return [(label, points) for label, condition, points in PENALTIES if condition(metrics)]


def compute_score(metrics, now=None):
    """
    Overall repository score: an int in [0, 100].

    Total for any snapshot: missing or zero fields just earn nothing.
    Penalties can push the raw value far below zero; the result is clamped.
    """
    raw = SCORE_BASELINE
    raw += sum(points for _, _, points in score_terms(metrics, now=now))
    raw += sum(points for _, points in penalty_terms(metrics))
    return clamp(round_half_up(raw), 0, 100)


# ----------------------------
# Dimension weight tables
# ----------------------------
CODE_QUALITY_WEIGHTS = {
    "baseline": 60,
    "per_language": 3,
    "language_cap": 10,
    "issues_enabled": 5,
    "frameworks": 8,
    "directory_tiers": ((10, 8), (5, 5), (2, 2)),
    "small_repo_files": 100,
    "small_repo_bonus": 5,
    "large_repo_files": 1000,
    "large_repo_penalty": -5,
}

DOCUMENTATION_WEIGHTS = {
    "baseline": 30,
    "flags": (
        ("has_readme", 30),
        ("has_changelog", 20),
        ("has_contributing", 15),
        ("has_wiki", 10),
    ),
    "markdown_tiers": ((5, 10), (2, 5)),
}

TESTING_WEIGHTS = {
    "baseline": 40,
    "has_tests": 35,
    # Only counted when the repo has tests at all.
    "ratio_tiers": ((0.2, 15), (0.1, 10), (0.05, 5)),
    "has_ci": 20,
}

GIT_PRACTICES_WEIGHTS = {
    "baseline": 50,
    "commit_tiers": ((500, 20), (100, 15), (20, 8)),
    "push_recency_tiers": ((7, 15), (30, 10), (90, 5)),
    "branch_tiers": ((8, 10), (3, 5)),
    "merged_pr_tiers": ((20, 10), (5, 5)),
}

COMMUNITY_WEIGHTS = {
    "baseline": 40,
    # (metrics attribute, divisor, cap)
    "scaled": (
        ("stars", 500, 30),
        ("contributors", 50, 20),
        ("forks", 200, 20),
    ),
}


def _finish(score):
    return clamp(round_half_up(min(score, 100)), 0, 100)


def code_quality_score(metrics, weights=CODE_QUALITY_WEIGHTS):
    """
    Code Quality dimension: baseline 60, plus language variety, issue tracking,
    detected frameworks and directory structure. Small repos get a bonus and
    very large ones a small penalty.
    """
    score = weights["baseline"]
    score += min(language_count(metrics) * weights["per_language"], weights["language_cap"])
    if metrics.has_issues:
        score += weights["issues_enabled"]
    if metrics.frameworks:
        score += weights["frameworks"]
    score += first_tier_above(metrics.directory_count, weights["directory_tiers"])
    if metrics.file_count < weights["small_repo_files"]:
        score += weights["small_repo_bonus"]
    elif metrics.file_count > weights["large_repo_files"]:
        score += weights["large_repo_penalty"]
    return _finish(score)


def documentation_score(metrics, weights=DOCUMENTATION_WEIGHTS):
    """Documentation dimension: README, changelog, contributing guide, wiki and markdown file count."""
    score = weights["baseline"]
    for attr, points in weights["flags"]:
        if getattr(metrics, attr):
            score += points
    score += first_tier_above(markdown_file_count(metrics), weights["markdown_tiers"])
    return _finish(score)


def testing_score(metrics, weights=TESTING_WEIGHTS):
    """
    Testing dimension. The test-file ratio only counts when the repo has
    tests at all; CI counts either way.
    """
    score = weights["baseline"]
    if metrics.has_tests:
        score += weights["has_tests"]
        score += first_tier_above(test_ratio(metrics), weights["ratio_tiers"])
    if metrics.has_github_actions:
        score += weights["has_ci"]
    return _finish(score)


def git_practices_score(metrics, now=None, weights=GIT_PRACTICES_WEIGHTS):
    """Git Practices dimension: commit volume, recent pushes, branches and merged PRs."""
    score = weights["baseline"]
    score += first_tier_above(metrics.commit_count, weights["commit_tiers"])
    score += first_tier_below(days_since(metrics.pushed_at, now=now), weights["push_recency_tiers"])
    score += first_tier_above(metrics.branches, weights["branch_tiers"])
    score += first_tier_above(metrics.prs_merged, weights["merged_pr_tiers"])
    return _finish(score)


def community_score(metrics, weights=COMMUNITY_WEIGHTS):
    """Community dimension: stars, contributors and forks, each growing toward its own cap."""
    score = weights["baseline"]
    for attr, divisor, cap in weights["scaled"]:
        score += scaled_toward_cap(getattr(metrics, attr), divisor, cap)
    return _finish(score)


# name -> (description, color). Order here is the order compute_dimensions returns.
DIMENSION_INFO = (
    ("Code Quality", "Organization, structure, and consistency", "#00f0ff"),
    ("Documentation", "README, guides, and inline documentation", "#b537f2"),
    ("Testing", "Test coverage and automation", "#00ff88"),
    ("Git Practices", "Branching, commits, and PR patterns", "#ff6b35"),
    ("Community", "Engagement and contributor growth", "#f7b801"),
)


def compute_dimensions(metrics, now=None):
    """
    The five dimension scores, always in the same order:
    Code Quality, Documentation, Testing, Git Practices, Community.
    """
    scores = {
        "Code Quality": code_quality_score(metrics),
        "Documentation": documentation_score(metrics),
        "Testing": testing_score(metrics),
        "Git Practices": git_practices_score(metrics, now=now),
        "Community": community_score(metrics),
    }
    return [
        DimensionScore(name=name, score=scores[name], description=description, color=color)
        for name, description, color in DIMENSION_INFO
    ]
