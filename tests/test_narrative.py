"""
test_narrative.py

Tests for NarrativeOrchestrator: caching, rate limiting, fallbacks, and
sharing one in-flight request between concurrent callers.

The LLM is a FakeGenerator, the cache and limiter get a FakeClock, so
nothing here touches the network or sleeps.
"""

import asyncio
import unittest

from cache_utils import ResponseCache
from factories import (
    FakeClock,
    FakeGenerator,
    always_fail,
    good_responder,
    make_metrics,
)
from fallbacks import FALLBACK_STRENGTHS, fallback_roadmap, fallback_summary
from narrative import NarrativeOrchestrator
from rate_limit import RateLimiter


class NarrativeTestCase(unittest.IsolatedAsyncioTestCase):

    def make_orchestrator(self, responder=good_responder, max_calls=10, ttl=3600):
        self.clock = FakeClock()
        self.generator = FakeGenerator(responder)
        return NarrativeOrchestrator(
            generator=self.generator,
            cache=ResponseCache(ttl_seconds=ttl, clock=self.clock),
            rate_limiter=RateLimiter(max_calls=max_calls, window_seconds=60, clock=self.clock),
        )


class TestCaching(NarrativeTestCase):

    async def test_second_request_is_served_from_cache(self):
        orch = self.make_orchestrator()
        m = make_metrics(has_readme=True)

        first = await orch.summary(m, 60)
        second = await orch.summary(m, 60)

        self.assertEqual(first, "A tidy repository with room to grow.")
        self.assertEqual(second, first)
        self.assertEqual(self.generator.calls, 1)

    async def test_expired_entry_calls_again(self):
        orch = self.make_orchestrator(ttl=100)
        m = make_metrics()

        await orch.summary(m, 30)
        self.clock.advance(100)
        await orch.summary(m, 30)

        self.assertEqual(self.generator.calls, 2)

    async def test_cache_hit_does_not_use_rate_budget(self):
        orch = self.make_orchestrator(max_calls=1)
        m = make_metrics()

        await orch.summary(m, 30)
        await orch.summary(m, 30)

        self.assertEqual(orch.rate_limiter.calls, 1)

    async def test_artifacts_are_cached_separately(self):
        orch = self.make_orchestrator()
        m = make_metrics()

        await orch.summary(m, 30)
        sw = await orch.strengths_and_weaknesses(m)

        self.assertEqual(self.generator.calls, 2)
        self.assertEqual(sw["strengths"], ["Clear README", "Active CI"])
        self.assertIn("summary:octocat/hello-world", orch.cache)
        self.assertIn("strengths:octocat/hello-world", orch.cache)

    async def test_changing_a_result_does_not_change_the_cache(self):
        orch = self.make_orchestrator()
        m = make_metrics()

        first = await orch.strengths_and_weaknesses(m)
        first["strengths"].append("changed by caller")
        first_roadmap = await orch.roadmap(m, 50)
        first_roadmap.clear()

        second = await orch.strengths_and_weaknesses(m)
        second["weaknesses"].append("changed again")
        third = await orch.strengths_and_weaknesses(m)

        self.assertEqual(second["strengths"], ["Clear README", "Active CI"])
        self.assertEqual(third["weaknesses"], ["Few tests"])
        self.assertEqual(len(await orch.roadmap(m, 50)), 1)
        self.assertEqual(self.generator.calls, 2)


class TestRateLimiting(NarrativeTestCase):

    async def test_over_quota_request_gets_fallback(self):
        orch = self.make_orchestrator(max_calls=2)
        repos = [make_metrics(name=f"repo-{i}") for i in range(3)]

        await orch.summary(repos[0], 40)
        await orch.summary(repos[1], 40)
        with self.assertLogs("narrative", level="WARNING") as logs:
            third = await orch.summary(repos[2], 40)

        self.assertEqual(self.generator.calls, 2)
        self.assertEqual(third, fallback_summary(repos[2], 40))
        self.assertIn("rate limited", logs.output[0])

    async def test_window_reset_allows_new_calls(self):
        orch = self.make_orchestrator(max_calls=1)

        await orch.summary(make_metrics(name="a"), 40)
        self.clock.advance(61)
        result = await orch.summary(make_metrics(name="b"), 40)

        self.assertEqual(self.generator.calls, 2)
        self.assertEqual(result, "A tidy repository with room to grow.")


class TestFallbacks(NarrativeTestCase):

    async def test_failing_provider_still_gives_complete_output(self):
        orch = self.make_orchestrator(responder=always_fail)
        m = make_metrics(file_count=12)

        with self.assertLogs("narrative", level="WARNING"):
            summary, sw, roadmap = await orch.generate_all(m, 45)

        self.assertTrue(summary)
        self.assertEqual(sw["strengths"], list(FALLBACK_STRENGTHS))
        self.assertTrue(sw["weaknesses"])
        self.assertEqual(roadmap, fallback_roadmap(m, 45))

    async def test_fallback_is_cached(self):
        orch = self.make_orchestrator(responder=always_fail)
        m = make_metrics()

        with self.assertLogs("narrative", level="WARNING"):
            first = await orch.summary(m, 30)
        second = await orch.summary(m, 30)

        self.assertEqual(first, second)
        self.assertEqual(self.generator.calls, 1)

    async def test_malformed_json_falls_back(self):
        orch = self.make_orchestrator(responder=lambda prompt: "Sure! Here are some thoughts.")
        m = make_metrics(has_readme=True)

        with self.assertLogs("narrative", level="WARNING"):
            roadmap = await orch.roadmap(m, 80)

        self.assertEqual(roadmap, fallback_roadmap(m, 80))

    async def test_empty_summary_falls_back(self):
        orch = self.make_orchestrator(responder=lambda prompt: "   ")
        m = make_metrics(archived=True)

        with self.assertLogs("narrative", level="WARNING"):
            summary = await orch.summary(m, 10)

        self.assertIn("archived", summary)


class GatedGenerator:
    """Generator that blocks until the test opens the gate."""

    def __init__(self, text):
        self.text = text
        self.gate = asyncio.Event()
        self.calls = 0

    async def generate(self, prompt):
        self.calls += 1
        await self.gate.wait()
        return self.text


class TestInFlightSharing(NarrativeTestCase):

    async def test_cancelled_waiter_does_not_cancel_the_others(self):
        """
        Two callers share one in-flight summary. The first one gives up
        (a timeout or a page rerun). The second must still get the real text,
        and the finished result must land in the cache.
        """
        orch = self.make_orchestrator()
        gated = GatedGenerator("real summary")
        orch.generator = gated
        m = make_metrics()

        first = asyncio.ensure_future(orch.summary(m, 50))
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        second = asyncio.ensure_future(orch.summary(m, 50))
        await asyncio.sleep(0)

        first.cancel()
        with self.assertRaises(asyncio.CancelledError):
            await first

        gated.gate.set()
        self.assertEqual(await second, "real summary")
        self.assertEqual(gated.calls, 1)
        self.assertEqual(orch._in_flight, {})
        self.assertEqual(await orch.summary(m, 50), "real summary")
        self.assertEqual(gated.calls, 1)

    async def test_concurrent_requests_for_same_key_make_one_call(self):
        orch = self.make_orchestrator()
        m = make_metrics()

        a, b = await asyncio.gather(orch.summary(m, 50), orch.summary(m, 50))

        self.assertEqual(a, b)
        self.assertEqual(self.generator.calls, 1)
        self.assertEqual(orch._in_flight, {})

    async def test_concurrent_requests_for_different_repos_are_independent(self):
        orch = self.make_orchestrator()

        await asyncio.gather(
            orch.summary(make_metrics(name="one"), 50),
            orch.summary(make_metrics(name="two"), 50),
        )

        self.assertEqual(self.generator.calls, 2)

    async def test_generate_all_uses_three_calls(self):
        orch = self.make_orchestrator()

        summary, sw, roadmap = await orch.generate_all(make_metrics(), 50)

        self.assertEqual(self.generator.calls, 3)
        self.assertEqual(summary, "A tidy repository with room to grow.")
        self.assertEqual(sw["weaknesses"], ["Few tests"])
        self.assertEqual(roadmap[0].title, "Add integration tests")


if __name__ == "__main__":
    unittest.main()
