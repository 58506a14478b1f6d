# github_api.py
#
# Purpose:
# This file is the "data ingestion" layer of RepoGrade.
# It pulls raw data from the GitHub REST API and reduces it to one
# RepositoryMetrics snapshot for the scoring engine.
#
# Main pieces:
# 1) _get(): requests.get() wrapper that returns (json_data, error_string)
# 2) one small fetcher per endpoint (languages, contributors, workflows, ...)
#    Each secondary fetcher degrades to an empty value on error.
# 3) get_complete_metrics(): runs every fetcher concurrently in worker
#    threads and builds the snapshot. Only a failure to load the repository
#    itself raises (GitHubFetchError).

import asyncio
import base64
import json
import logging
import re
from datetime import datetime, timedelta, timezone

import requests

import config
from analytics import days_since, parse_github_datetime
from models import RepositoryMetrics

logger = logging.getLogger(__name__)

ACCEPT_HEADER = "application/vnd.github+json"

TEST_FILE_PATTERN = re.compile(r"\.(test|spec)\.(js|ts|jsx|tsx|py|java|go|rb)$", re.IGNORECASE)
CONFIG_FILE_PATTERN = re.compile(
    r"^(\.?)(dockerfile|docker-compose|\.env|package\.json|\.github|pyproject\.toml|setup\.py|Cargo\.toml|go\.mod|pom\.xml)$",
    re.IGNORECASE,
)

KNOWN_FRAMEWORKS = {
    "react": "React",
    "vue": "Vue",
    "angular": "Angular",
    "express": "Express",
    "fastapi": "FastAPI",
    "django": "Django",
    "nextjs": "Next.js",
}

# Files whose presence sets a documentation / testing flag.
MARKER_FILES = {
    "has_readme": "README.md",
    "has_license": "LICENSE",
    "has_changelog": "CHANGELOG.md",
    "has_contributing": "CONTRIBUTING.md",
    "has_tests": "test",
}

REPO_URL_PATTERN = re.compile(r"github\.com/([^/\s]+)/([^/\s]+?)(?:\.git)?/?$")


class GitHubFetchError(Exception):
    """The repository itself could not be fetched (missing, private, rate limited, offline)."""


def parse_repo_url(url):
    """
    Split 'https://github.com/owner/repo' into ('owner', 'repo').
    Accepts a trailing slash or '.git'. Raises ValueError for anything else.
    """
    m = REPO_URL_PATTERN.search((url or "").strip())
    if not m:
        raise ValueError("Invalid GitHub URL format. Expected: https://github.com/owner/repo")
    return m.group(1), m.group(2)


def _headers(token=None):
    headers = {"Accept": ACCEPT_HEADER}
    token = token if token is not None else config.GITHUB_TOKEN
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


class GitHubClient:
    """
    Thin synchronous client. One instance per get_complete_metrics() call.
    Without a session it calls requests.get() directly; tests pass a mock session.
    """

    def __init__(self, session=None, token=None, base_url=None, timeout=None):
        self.session = session if session is not None else requests
        self.base_url = base_url or config.GITHUB_API_URL
        self.timeout = timeout if timeout is not None else config.HTTP_TIMEOUT
        self.headers = _headers(token)

    def _get(self, path, params=None, headers=None):
        """
        GET base_url + path.

        Returns:
          (json_data, error_string)
        """
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.get(
                url,
                headers={**self.headers, **(headers or {})},
                params=params,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            return None, f"Network error calling GitHub API: {e}"

        if resp.status_code == 404:
            return None, "Not found (404)."
        if resp.status_code == 401:
            return None, "Unauthorized (401). Check your GITHUB_TOKEN."
        if resp.status_code == 403:
            msg = ""
            try:
                msg = resp.json().get("message", "")
            except ValueError:
                msg = ""
            return None, f"Forbidden / rate limited (403). {msg}".strip()
        if resp.status_code != 200:
            return None, f"GitHub API error: status {resp.status_code}"

        try:
            return resp.json(), None
        except ValueError:
            return None, "GitHub response was not valid JSON."

    def _get_list(self, path, params=None, key=None):
        data, err = self._get(path, params=params)
        if err:
            logger.info("GitHub %s: %s", path, err)
            return []
        if key is not None:
            data = (data or {}).get(key) if isinstance(data, dict) else None
        return data if isinstance(data, list) else []

    # ----------------------------
    # Endpoint fetchers
    # ----------------------------
    def get_repository(self, owner, repo):
        data, err = self._get(f"/repos/{owner}/{repo}")
        if err:
            raise GitHubFetchError(f"Could not fetch {owner}/{repo}: {err}")
        if not isinstance(data, dict):
            raise GitHubFetchError(f"Unexpected response format for {owner}/{repo}.")
        return data

    def get_languages(self, owner, repo):
        data, err = self._get(f"/repos/{owner}/{repo}/languages")
        if err or not isinstance(data, dict):
            return {}
        return {str(k): int(v) for k, v in data.items() if isinstance(v, int) and v >= 0}

    def get_contributors(self, owner, repo):
        return self._get_list(f"/repos/{owner}/{repo}/contributors", params={"per_page": 10})

    def get_workflows(self, owner, repo):
        return self._get_list(f"/repos/{owner}/{repo}/actions/workflows", key="workflows")

    def get_topics(self, owner, repo):
        return [str(t) for t in self._get_list(f"/repos/{owner}/{repo}/topics", key="names")]

    def get_branches(self, owner, repo):
        return self._get_list(f"/repos/{owner}/{repo}/branches", params={"per_page": 100})

    def file_exists(self, owner, repo, path):
        _, err = self._get(f"/repos/{owner}/{repo}/contents/{path}")
        return err is None

    def get_file_content(self, owner, repo, path):
        data, err = self._get(f"/repos/{owner}/{repo}/contents/{path}")
        if err or not isinstance(data, dict):
            return None
        content = data.get("content") or ""
        if data.get("encoding") == "base64":
            try:
                return base64.b64decode(content).decode("utf-8", errors="replace")
            except ValueError:
                return None
        return content

    def analyze_file_structure(self, owner, repo, branch):
        """Counts from the recursive git tree of the default branch."""
        data, err = self._get(f"/repos/{owner}/{repo}/git/trees/{branch}", params={"recursive": "1"})
        entries = (data or {}).get("tree", []) if not err and isinstance(data, dict) else []
        return summarize_tree(entries or [])

    def get_pull_request_stats(self, owner, repo):
        prs = self._get_list(
            f"/repos/{owner}/{repo}/pulls",
            params={"state": "closed", "per_page": 100, "sort": "updated"},
        )
        return summarize_pull_requests(prs)

    def analyze_dependencies(self, owner, repo):
        raw = self.get_file_content(owner, repo, "package.json")
        return summarize_package_json(raw)

    def get_commit_activity(self, owner, repo, now=None):
        now = now or datetime.now(timezone.utc)
        since = (now - timedelta(days=365)).isoformat()
        commits = self._get_list(
            f"/repos/{owner}/{repo}/commits",
            params={"since": since, "per_page": 100},
        )
        return summarize_commits(commits, now=now)

    def get_latest_commit(self, owner, repo):
        commits = self._get_list(f"/repos/{owner}/{repo}/commits", params={"per_page": 1})
        return commits[0] if commits else None


# ----------------------------
# Pure reducers (tested without HTTP)
# ----------------------------
def _extension(path):
    name = path.rsplit("/", 1)[-1]
    return name.rsplit(".", 1)[-1] if "." in name else name


def summarize_tree(entries):
    file_count = 0
    directory_count = 0
    files_by_type = {}
    test_files = 0
    config_files = []

    for item in entries:
        kind = item.get("type")
        path = item.get("path", "")
        if kind == "tree":
            directory_count += 1
        elif kind == "blob":
            file_count += 1
            ext = _extension(path) or "unknown"
            files_by_type[ext] = files_by_type.get(ext, 0) + 1
            if TEST_FILE_PATTERN.search(path):
                test_files += 1
            if CONFIG_FILE_PATTERN.match(path):
                config_files.append(path)

    return {
        "file_count": file_count,
        "directory_count": directory_count,
        "files_by_type": files_by_type,
        "test_files": test_files,
        "config_files": config_files,
    }


def summarize_pull_requests(prs):
    """merged = closed PRs returned; average review time over PRs that were actually merged."""
    total_hours = 0.0
    reviewed = 0
    for pr in prs:
        created = parse_github_datetime(pr.get("created_at"))
        merged = parse_github_datetime(pr.get("merged_at"))
        if created is None or merged is None:
            continue
        total_hours += (merged - created).total_seconds() / 3600
        reviewed += 1
    average = total_hours / reviewed if reviewed else 0.0
    return {"merged": len(prs), "average_review_hours": round(average, 1)}


def summarize_package_json(raw):
    empty = {"total": 0, "outdated": 0, "frameworks": []}
    if not raw:
        return empty
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        return empty
    if not isinstance(parsed, dict):
        return empty

    deps = {}
    for section in ("dependencies", "devDependencies"):
        if isinstance(parsed.get(section), dict):
            deps.update(parsed[section])

    frameworks = []
    for dep in deps:
        for key, label in KNOWN_FRAMEWORKS.items():
            if key in dep and label not in frameworks:
                frameworks.append(label)

    return {"total": len(deps), "outdated": 0, "frameworks": frameworks}


def summarize_commits(commits, now=None):
    last_week = 0
    last_month = 0
    for c in commits:
        date = ((c.get("commit") or {}).get("author") or {}).get("date")
        d = days_since(date, now=now)
        if d is None:
            continue
        if d < 7:
            last_week += 1
        if d < 30:
            last_month += 1
    return {"total": len(commits), "last_week": last_week, "last_month": last_month}


def detect_test_frameworks(files_by_type):
    frameworks = []
    if files_by_type.get("test") or files_by_type.get("spec"):
        frameworks.append("Jest/Vitest")
    if files_by_type.get("py"):
        frameworks.append("pytest/unittest")
    if files_by_type.get("go"):
        frameworks.append("testing")
    return frameworks


def _push_time_not_before_creation(created_at, pushed_at):
    """
    Forks and imported repos can report a pushed_at older than created_at.
    Such a push happened before this copy existed, so use created_at instead.
    """
    created = parse_github_datetime(created_at)
    pushed = parse_github_datetime(pushed_at)
    if created is not None and pushed is not None and pushed < created:
        return created_at
    return pushed_at


def build_metrics(repo_data, languages, contributors, workflows, topics, branches,
                  structure, pr_stats, dependencies, activity, markers, latest_commit,
                  owner="", name=""):
    """Assemble the snapshot from the individual fetcher results."""
    latest = (latest_commit or {}).get("commit") or {}
    commit_count = activity["total"]
    if commit_count == 0 and latest_commit:
        commit_count = 1

    return RepositoryMetrics(
        owner=(repo_data.get("owner") or {}).get("login") or owner,
        name=repo_data.get("name") or name,
        description=repo_data.get("description") or "",
        url=repo_data.get("html_url", ""),
        created_at=repo_data.get("created_at") or "",
        updated_at=repo_data.get("updated_at") or "",
        pushed_at=_push_time_not_before_creation(
            repo_data.get("created_at") or "", repo_data.get("pushed_at") or ""
        ),
        stars=int(repo_data.get("stargazers_count") or 0),
        forks=int(repo_data.get("forks_count") or 0),
        watchers=int(repo_data.get("watchers_count") or 0),
        open_issues=int(repo_data.get("open_issues_count") or 0),
        language=repo_data.get("language") or "Unknown",
        languages=languages,
        size=int(repo_data.get("size") or 0),
        has_wiki=bool(repo_data.get("has_wiki")),
        has_issues=bool(repo_data.get("has_issues")),
        has_discussions=bool(repo_data.get("has_discussions")),
        has_pages=bool(repo_data.get("has_pages")),
        has_downloads=bool(repo_data.get("has_downloads")),
        archived=bool(repo_data.get("archived")),
        disabled=bool(repo_data.get("disabled")),
        private=bool(repo_data.get("private")),
        file_count=structure["file_count"],
        directory_count=structure["directory_count"],
        default_branch=repo_data.get("default_branch") or "main",
        branches=len(branches),
        contributors=len(contributors),
        files_by_type=structure["files_by_type"],
        config_files=structure["config_files"],
        has_readme=markers["has_readme"],
        has_license=markers["has_license"],
        has_changelog=markers["has_changelog"],
        has_contributing=markers["has_contributing"],
        topics=topics,
        has_tests=markers["has_tests"],
        test_files=structure["test_files"],
        test_frameworks=detect_test_frameworks(structure["files_by_type"]),
        has_github_actions=len(workflows) > 0,
        workflow_count=len(workflows),
        prs_merged=pr_stats["merged"],
        pr_average_review_hours=pr_stats["average_review_hours"],
        dependencies_total=dependencies["total"],
        dependencies_outdated=dependencies["outdated"],
        frameworks=dependencies["frameworks"],
        commit_count=commit_count,
        latest_commit_date=(latest.get("author") or {}).get("date", ""),
        latest_commit_message=latest.get("message", ""),
        commits_last_week=activity["last_week"],
        commits_last_month=activity["last_month"],
    )


async def get_complete_metrics(owner, repo, session=None, token=None):
    """
    Fetch everything RepoGrade scores, concurrently, and return a RepositoryMetrics.

    Raises GitHubFetchError if the repository itself cannot be loaded.
    """
    owner = (owner or "").strip()
    repo = (repo or "").strip()
    if owner == "" or repo == "":
        raise GitHubFetchError("Owner and repository name are required.")

    client = GitHubClient(session=session, token=token)
    run = asyncio.to_thread

    # Metadata first: the default branch is needed for the tree.
    repo_data = await run(client.get_repository, owner, repo)
    branch = repo_data.get("default_branch") or "main"

    results = await asyncio.gather(
        run(client.get_languages, owner, repo),
        run(client.get_contributors, owner, repo),
        run(client.get_workflows, owner, repo),
        run(client.get_topics, owner, repo),
        run(client.get_branches, owner, repo),
        run(client.analyze_file_structure, owner, repo, branch),
        run(client.get_pull_request_stats, owner, repo),
        run(client.analyze_dependencies, owner, repo),
        run(client.get_commit_activity, owner, repo),
        run(client.get_latest_commit, owner, repo),
        *(run(client.file_exists, owner, repo, path) for path in MARKER_FILES.values()),
    )

    (languages, contributors, workflows, topics, branches, structure,
     pr_stats, dependencies, activity, latest_commit) = results[:10]
    markers = dict(zip(MARKER_FILES.keys(), results[10:]))

    logger.info("Collected metrics for %s/%s", owner, repo)
    return build_metrics(
        repo_data, languages, contributors, workflows, topics, branches,
        structure, pr_stats, dependencies, activity, markers, latest_commit,
        owner=owner, name=repo,
    )
