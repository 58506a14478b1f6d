# models.py
#
# Purpose:
# The data shapes that flow through RepoGrade:
#   RepositoryMetrics -> (scoring, narrative) -> AnalysisResult
#
# RepositoryMetrics is the snapshot produced by github_api.py. It is frozen,
# so no scoring or narrative step can change it after collection.
# AnalysisResult, DimensionScore and RoadmapItem are built fresh for every
# analysis and never written to disk except through explicit exports.

from dataclasses import dataclass, field, asdict

from analytics import parse_github_datetime


TIERS = ("Beginner", "Intermediate", "Advanced", "Expert")

DIMENSION_NAMES = (
    "Code Quality",
    "Documentation",
    "Testing",
    "Git Practices",
    "Community",
)

DIFFICULTIES = ("Easy", "Medium", "Hard")
PRIORITIES = ("Critical", "High", "Medium", "Low")
ROADMAP_CATEGORIES = ("Documentation", "Testing", "Code Quality", "DevOps", "Performance")

_COUNT_FIELDS = (
    "stars",
    "forks",
    "watchers",
    "open_issues",
    "size",
    "file_count",
    "directory_count",
    "branches",
    "contributors",
    "test_files",
    "workflow_count",
    "prs_merged",
    "dependencies_total",
    "dependencies_outdated",
    "commit_count",
    "commits_last_week",
    "commits_last_month",
)


@dataclass(frozen=True)
class RepositoryMetrics:
    """Immutable snapshot of everything the collection layer learned about a repo."""

    # Identity
    owner: str
    name: str
    description: str = ""
    url: str = ""
    created_at: str = ""
    updated_at: str = ""
    pushed_at: str = ""

    # Popularity
    stars: int = 0
    forks: int = 0
    watchers: int = 0
    open_issues: int = 0
    language: str = "Unknown"
    languages: dict = field(default_factory=dict)
    size: int = 0

    # Repository feature flags
    has_wiki: bool = False
    has_issues: bool = False
    has_discussions: bool = False
    has_pages: bool = False
    has_downloads: bool = False
    archived: bool = False
    disabled: bool = False
    private: bool = False

    # Structure
    file_count: int = 0
    directory_count: int = 0
    default_branch: str = "main"
    branches: int = 0
    contributors: int = 0
    files_by_type: dict = field(default_factory=dict)
    config_files: list = field(default_factory=list)

    # Documentation
    has_readme: bool = False
    has_license: bool = False
    has_changelog: bool = False
    has_contributing: bool = False
    topics: list = field(default_factory=list)

    # Testing / CI
    has_tests: bool = False
    test_files: int = 0
    test_frameworks: list = field(default_factory=list)
    has_github_actions: bool = False
    workflow_count: int = 0

    # Collaboration
    prs_merged: int = 0
    pr_average_review_hours: float = 0.0

    # Dependencies
    dependencies_total: int = 0
    dependencies_outdated: int = 0
    frameworks: list = field(default_factory=list)

    # Activity
    commit_count: int = 0
    latest_commit_date: str = ""
    latest_commit_message: str = ""
    commits_last_week: int = 0
    commits_last_month: int = 0

    def __post_init__(self):
        for name in _COUNT_FIELDS:
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative, got {getattr(self, name)}")
        for lang, size in self.languages.items():
            if size < 0:
                raise ValueError(f"language byte count for {lang} must be non-negative")
        created = parse_github_datetime(self.created_at)
        pushed = parse_github_datetime(self.pushed_at)
        if created is not None and pushed is not None and pushed < created:
            raise ValueError(f"pushed_at ({self.pushed_at}) is earlier than created_at ({self.created_at})")

    @property
    def full_name(self):
        return f"{self.owner}/{self.name}"

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class DimensionScore:
    name: str
    score: int
    description: str
    color: str

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class RoadmapItem:
    """One actionable improvement, either AI-generated or from the fallback rules."""

    title: str
    description: str
    difficulty: str
    priority: str
    time_estimate: str
    category: str
    impact: str

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class AnalysisResult:
    score: int
    tier: str
    summary: str
    strengths: list
    weaknesses: list
    dimensions: list
    metrics: RepositoryMetrics
    roadmap: list

    def to_dict(self):
        """JSON-ready view used by the exports and the dashboard."""
        return {
            "score": self.score,
            "tier": self.tier,
            "summary": self.summary,
            "strengths": list(self.strengths),
            "weaknesses": list(self.weaknesses),
            "dimensions": [d.to_dict() for d in self.dimensions],
            "metrics": self.metrics.to_dict(),
            "roadmap": [item.to_dict() for item in self.roadmap],
        }
