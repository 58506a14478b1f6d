# llm_utils.py
#
# Purpose:
# This file is the "LLM" layer of RepoGrade. It has three jobs:
#   1) GroqTextGenerator: send one prompt to Groq and return the raw text
#   2) build_*_prompt(): turn a RepositoryMetrics snapshot into a prompt
#   3) parse_*(): turn the model's raw text into summary / lists / roadmap items
#
# It does NOT cache, rate limit, retry, or fall back. narrative.py wraps
# every call here with those rules, and treats any exception raised from
# this file as "use the fallback".

import json
import logging

from groq import AsyncGroq

import config
from analytics import top_languages, whole_days_since
from models import DIFFICULTIES, PRIORITIES, ROADMAP_CATEGORIES, RoadmapItem
from scoring import get_tier

logger = logging.getLogger(__name__)


class NarrativeParseError(ValueError):
    """The model answered, but not in the shape we asked for."""


class GroqTextGenerator:
    """
    Text-generation collaborator backed by Groq's chat completions API.

    generate(prompt) is the only method the orchestrator needs, so tests
    can swap in any object with an async generate().
    """

    SYSTEM_PROMPT = "You are a senior code reviewer. Follow the requested output format exactly."

    def __init__(self, api_key=None, model=None, temperature=0.2, max_tokens=900, client=None):
        self.api_key = api_key if api_key is not None else config.GROQ_API_KEY
        self.model = model or config.GROQ_MODEL
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._client = client

    def _get_client(self):
        if self._client is None:
            if not self.api_key:
                raise RuntimeError("Missing GROQ_API_KEY. Add it to your environment and restart.")
            self._client = AsyncGroq(api_key=self.api_key)
        return self._client

    async def generate(self, prompt):
        client = self._get_client()
        logger.info("Calling Groq model %s", self.model)
        resp = await client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": self.SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        return (resp.choices[0].message.content or "").strip()


# ----------------------------
# Prompt builders
# ----------------------------
def _yes_no(flag):
    return "yes" if flag else "no"


def build_summary_prompt(metrics, score, now=None):
    tier = get_tier(score)
    days = whole_days_since(metrics.updated_at, now=now)
    languages = ", ".join(top_languages(metrics, n=10)) or "Unknown"
    return f"""
You are a senior code reviewer. Analyze this repository and provide a brief, honest 2-3 sentence assessment:

Repository: {metrics.full_name}
Score: {score}/100 ({tier} level)
Description: {metrics.description or "No description"}
Size: {metrics.file_count} files in {metrics.directory_count} directories
Languages: {languages}
Stars: {metrics.stars} | Contributors: {metrics.contributors} | Commits: {metrics.commit_count}

Documentation: README={_yes_no(metrics.has_readme)} | License={_yes_no(metrics.has_license)} | Changelog={_yes_no(metrics.has_changelog)} | Contributing={_yes_no(metrics.has_contributing)}
Quality: Tests={_yes_no(metrics.has_tests)} | CI/CD={_yes_no(metrics.has_github_actions)} | Wiki={_yes_no(metrics.has_wiki)}
Activity: Last update {days if days is not None else "unknown"} days ago | {metrics.commits_last_month} commits last month

Focus on what's working well and what needs improvement. Be specific and constructive.
""".strip()


def build_strengths_prompt(metrics, now=None):
    days = whole_days_since(metrics.updated_at, now=now)
    languages = ", ".join(top_languages(metrics, n=5)) or "Unknown"
    return f"""
Analyze this GitHub repository and list its top 3-4 strengths and weaknesses:

Repository: {metrics.full_name}
Files: {metrics.file_count} | Contributors: {metrics.contributors} | Stars: {metrics.stars}
Has: README={_yes_no(metrics.has_readme)}, Tests={_yes_no(metrics.has_tests)}, CI/CD={_yes_no(metrics.has_github_actions)}, License={_yes_no(metrics.has_license)}
Languages: {languages}
Activity: {metrics.commits_last_month} commits last month, last update {days if days is not None else "unknown"} days ago

Respond ONLY in JSON format (no markdown, no code blocks):
{{
  "strengths": ["specific strength 1", "specific strength 2", "specific strength 3"],
  "weaknesses": ["specific weakness 1", "specific weakness 2", "specific weakness 3"]
}}
""".strip()


def build_roadmap_prompt(metrics, score):
    return f"""
Generate a personalized improvement roadmap for this GitHub repository. Return ONLY valid JSON (no markdown):

Repository: {metrics.full_name}
Current Score: {score}/100
Files: {metrics.file_count} | Tests: {_yes_no(metrics.has_tests)} | Docs: {_yes_no(metrics.has_readme)} | CI/CD: {_yes_no(metrics.has_github_actions)}

Return a JSON array with 5-7 actionable items:
[
  {{
    "title": "specific action",
    "description": "why and how to do it",
    "difficulty": "Easy|Medium|Hard",
    "priority": "Critical|High|Medium|Low",
    "timeEstimate": "1-2 hours",
    "category": "Documentation|Testing|Code Quality|DevOps|Performance",
    "impact": "how it improves the score"
  }}
]
""".strip()


# ----------------------------
# Response parsers
# ----------------------------
def _strip_fences(text):
    """Models add ```json fences even when told not to."""
    cleaned = (text or "").strip()
    cleaned = cleaned.replace("```json", "").replace("```", "")
    return cleaned.strip()


def _load_json(text):
    cleaned = _strip_fences(text)
    if not cleaned:
        raise NarrativeParseError("Empty response")
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise NarrativeParseError(f"Response was not valid JSON: {e}") from e


def parse_summary(text):
    summary = (text or "").strip()
    if not summary:
        raise NarrativeParseError("Empty summary")
    return summary


def parse_strengths_and_weaknesses(text):
    """Expect {"strengths": [...], "weaknesses": [...]}; items are stringified."""
    data = _load_json(text)
    if not isinstance(data, dict):
        raise NarrativeParseError("Expected a JSON object with strengths and weaknesses")

    strengths = data.get("strengths")
    weaknesses = data.get("weaknesses")
    if not isinstance(strengths, list) or not isinstance(weaknesses, list):
        raise NarrativeParseError("strengths and weaknesses must both be lists")
    if not strengths or not weaknesses:
        raise NarrativeParseError("strengths and weaknesses must not be empty")

    return {
        "strengths": [str(x) for x in strengths],
        "weaknesses": [str(x) for x in weaknesses],
    }


def _pick(value, allowed, default):
    value = str(value or "").strip()
    for option in allowed:
        if value.lower() == option.lower():
            return option
    return default


def parse_roadmap(text):
    """
    Expect a JSON array of roadmap objects.
    Items without a title are skipped; unknown enum values are normalised.
    """
    data = _load_json(text)
    if not isinstance(data, list):
        raise NarrativeParseError("Expected a JSON array of roadmap items")

    items = []
    for raw in data:
        if not isinstance(raw, dict):
            continue
        title = str(raw.get("title") or "").strip()
        if not title:
            continue
        items.append(
            RoadmapItem(
                title=title,
                description=str(raw.get("description") or ""),
                difficulty=_pick(raw.get("difficulty"), DIFFICULTIES, "Medium"),
                priority=_pick(raw.get("priority"), PRIORITIES, "Medium"),
                time_estimate=str(raw.get("timeEstimate") or raw.get("time_estimate") or ""),
                category=_pick(raw.get("category"), ROADMAP_CATEGORIES, "Code Quality"),
                impact=str(raw.get("impact") or ""),
            )
        )

    if not items:
        raise NarrativeParseError("Roadmap contained no usable items")
    return items
