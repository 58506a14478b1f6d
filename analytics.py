import math                     # math.floor for rounding day counts in summaries
from datetime import datetime, timezone  # datetime parsing and UTC time


SECONDS_PER_DAY = 86400


def parse_github_datetime(dt_str):
    """
    GitHub timestamps look like: '2024-01-01T12:34:56Z'
    Convert that string into a timezone-aware datetime.
    Return None if dt_str is missing or invalid.
    """
    if not dt_str:
        return None
    try:
        # fromisoformat doesn't understand "Z" on older Pythons, so we replace it with "+00:00"
        parsed = datetime.fromisoformat(dt_str.replace("Z", "+00:00"))
    except (TypeError, ValueError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def days_since(dt_str, now=None):
    """
    Fractional days between an ISO-8601 timestamp and now.
    Returns None when the timestamp is missing or unparseable, so callers
    award no recency bonus instead of crashing.
    """
    dt = parse_github_datetime(dt_str)
    if dt is None:
        return None

    if now is None:
        now = datetime.now(timezone.utc)

    delta = now - dt.astimezone(timezone.utc)
    return delta.total_seconds() / SECONDS_PER_DAY


def whole_days_since(dt_str, now=None):
    """Rounded day count for prompts and summaries."""
    d = days_since(dt_str, now=now)
    if d is None:
        return None
    return int(math.floor(d + 0.5))


def test_ratio(metrics):
    """Share of files that look like tests. max(..., 1) keeps empty repos at 0."""
    return metrics.test_files / max(metrics.file_count, 1)


def language_count(metrics):
    return len(metrics.languages)


def markdown_file_count(metrics):
    return int(metrics.files_by_type.get("md", 0))


def files_per_directory(metrics):
    return max(metrics.file_count, 1) / max(metrics.directory_count, 1)


def top_languages(metrics, n=5):
    """
    Languages sorted by byte count, largest first.
    Returns a list of names (used in prompts and the dashboard).
    """
    rows = sorted(metrics.languages.items(), key=lambda kv: kv[1], reverse=True)
    return [name for name, _ in rows[:n]]


def rank_rows(rows, key="score", n=None):
    """
    Sort leaderboard rows (dicts) by a numeric field, highest first.
    Missing values sort last.
    """
    ranked = sorted(rows, key=lambda r: (r.get(key) is not None, r.get(key) or 0), reverse=True)
    if n is not None:
        ranked = ranked[:n]
    return ranked
