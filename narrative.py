# narrative.py
#
# Purpose:
# Produce the three AI-written artifacts for a repository:
#   - summary (plain text)
#   - strengths / weaknesses (two lists)
#   - improvement roadmap (list of RoadmapItem)
#
# Every artifact goes through the same steps:
#   1) cache key "<kind>:<owner>/<name>"
#   2) fresh cache entry?          -> return it (no LLM call, no rate-limit check)
#   3) rate limiter says no?       -> RateLimitError, handled as in step 5
#   4) call the LLM, parse, cache  -> return it
#   5) any failure in 3-4          -> deterministic fallback, cached the same way
#
# Step 5 means these coroutines never raise. analysis_engine.py relies on that.
#
# Concurrent requests for the same key share one pending task, so two
# analyses of the same repo that both miss the cache make one LLM call,
# not two. Different keys still race on the shared rate-limit counter.
# Waiters are shielded from the shared task: cancelling one waiter never
# cancels the call the others are waiting on.
#
# Every caller gets its own deep copy of the payload, so changing a returned
# list or dict never changes what later cache hits return.

import asyncio
import copy
import logging

import config
from cache_utils import ResponseCache, make_cache_key
from fallbacks import fallback_roadmap, fallback_strengths_and_weaknesses, fallback_summary
from llm_utils import (
    GroqTextGenerator,
    build_roadmap_prompt,
    build_strengths_prompt,
    build_summary_prompt,
    parse_roadmap,
    parse_strengths_and_weaknesses,
    parse_summary,
)
from rate_limit import RateLimiter, RateLimitError
from scoring import compute_score

logger = logging.getLogger(__name__)

SUMMARY = "summary"
STRENGTHS = "strengths"
ROADMAP = "roadmap"


class NarrativeOrchestrator:
    """
    Owns the narrative cache and rate limiter. Build one per process (or per
    test) and share it between analyses; nothing here is a module-level global.
    """

    def __init__(self, generator=None, cache=None, rate_limiter=None):
        self.generator = generator if generator is not None else GroqTextGenerator()
        self.cache = cache if cache is not None else ResponseCache(ttl_seconds=config.CACHE_TTL_SECONDS)
        self.rate_limiter = (
            rate_limiter if rate_limiter is not None else RateLimiter(max_calls=config.MAX_CALLS_PER_MINUTE)
        )
        self._in_flight = {}

    async def summary(self, metrics, score=None):
        if score is None:
            score = compute_score(metrics)
        return await self._resolve(
            SUMMARY,
            metrics,
            build_prompt=lambda: build_summary_prompt(metrics, score),
            parse=parse_summary,
            fallback=lambda: fallback_summary(metrics, score),
        )

    async def strengths_and_weaknesses(self, metrics):
        return await self._resolve(
            STRENGTHS,
            metrics,
            build_prompt=lambda: build_strengths_prompt(metrics),
            parse=parse_strengths_and_weaknesses,
            fallback=lambda: fallback_strengths_and_weaknesses(metrics),
        )

    async def roadmap(self, metrics, score=None):
        if score is None:
            score = compute_score(metrics)
        return await self._resolve(
            ROADMAP,
            metrics,
            build_prompt=lambda: build_roadmap_prompt(metrics, score),
            parse=parse_roadmap,
            fallback=lambda: fallback_roadmap(metrics, score),
        )

    async def generate_all(self, metrics, score=None):
        """Run the three artifacts concurrently. Returns (summary, strengths_weaknesses, roadmap)."""
        if score is None:
            score = compute_score(metrics)
        return await asyncio.gather(
            self.summary(metrics, score),
            self.strengths_and_weaknesses(metrics),
            self.roadmap(metrics, score),
        )

    async def _resolve(self, kind, metrics, build_prompt, parse, fallback):
        key = make_cache_key(kind, metrics.owner, metrics.name)

        entry = self.cache.get_entry(key)
        if entry is not None:
            logger.info("Narrative cache hit for %s", key)
            return copy.deepcopy(entry.payload)

        task = self._in_flight.get(key)
        if task is not None:
            logger.info("Joining in-flight request for %s", key)
        else:
            task = asyncio.ensure_future(self._fetch(key, build_prompt, parse, fallback))
            self._in_flight[key] = task
            task.add_done_callback(lambda done: self._forget(key, done))

        payload = await asyncio.shield(task)
        return copy.deepcopy(payload)

    def _forget(self, key, task):
        """Drop a finished task from the in-flight map (runs once the task is done)."""
        if self._in_flight.get(key) is task:
            del self._in_flight[key]

    async def _fetch(self, key, build_prompt, parse, fallback):
        try:
            prompt = build_prompt()
            self.rate_limiter.acquire()
            text = await self.generator.generate(prompt)
            payload = parse(text)
        except RateLimitError as e:
            logger.warning("Narrative %s rate limited (retry in %ss); using fallback", key, e.wait_seconds)
            payload = fallback()
        except Exception as e:
            # Network, provider, and parse failures all end up here.
            logger.warning("Narrative %s failed (%r); using fallback", key, e)
            payload = fallback()

        self.cache.set(key, payload)
        return payload
