# config.py
#
# Purpose:
# One place for every environment-driven setting in RepoGrade.
# Secrets (API keys) are read from environment variables, never hard-coded.
#
# Every component also accepts these values as arguments, so tests and
# the CLI can override them without touching the environment.

import os


def _env_int(name, default):
    """Read an int from the environment, falling back to default on bad input."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name, default):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


# ----------------------------
# GitHub (metrics collection)
# ----------------------------
GITHUB_TOKEN = os.getenv("GITHUB_TOKEN")
GITHUB_API_URL = "https://api.github.com"
HTTP_TIMEOUT = _env_float("REPOGRADE_HTTP_TIMEOUT", 20.0)

# ----------------------------
# Groq (narrative generation)
# ----------------------------
GROQ_API_KEY = os.getenv("GROQ_API_KEY")
GROQ_MODEL = os.getenv("GROQ_MODEL", "llama-3.1-8b-instant")

# ----------------------------
# Narrative cache + rate limit
# ----------------------------
CACHE_TTL_HOURS = _env_int("REPOGRADE_CACHE_TTL_HOURS", 24)
CACHE_TTL_SECONDS = CACHE_TTL_HOURS * 60 * 60

MAX_CALLS_PER_MINUTE = _env_int("REPOGRADE_MAX_CALLS_PER_MINUTE", 3)
RATE_LIMIT_WINDOW_SECONDS = 60

# ----------------------------
# Exports
# ----------------------------
REPORTS_DIR = os.getenv("REPOGRADE_REPORTS_DIR", "reports")
