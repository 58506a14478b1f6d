# analysis_engine.py
#
# Purpose:
# The composition root: one RepositoryMetrics snapshot in, one AnalysisResult out.
#
#   score + tier + dimensions   (scoring.py, synchronous, pure)
#   summary, strengths, roadmap (narrative.py, async, cached, never raises)
#
# Sync-only callers (comparison views, leaderboards) can use compute_score /
# compute_dimensions directly and skip the LLM entirely.

import logging

from models import AnalysisResult
from narrative import NarrativeOrchestrator
from scoring import compute_dimensions, compute_score, get_tier

logger = logging.getLogger(__name__)

__all__ = ["AnalysisEngine", "compute_score", "compute_dimensions", "get_tier"]


class AnalysisEngine:
    def __init__(self, orchestrator=None):
        self.orchestrator = orchestrator if orchestrator is not None else NarrativeOrchestrator()

    def score_only(self, metrics, now=None):
        """Score, tier and dimensions without any narrative (no LLM, no awaiting)."""
        score = compute_score(metrics, now=now)
        return {
            "score": score,
            "tier": get_tier(score),
            "dimensions": compute_dimensions(metrics, now=now),
        }

    async def analyze(self, metrics, now=None):
        """
        Full analysis of one snapshot.

        Only fails if the snapshot itself is missing; narrative failures are
        absorbed by the orchestrator's fallbacks.
        """
        if metrics is None:
            raise ValueError("analyze() needs a RepositoryMetrics snapshot")

        score = compute_score(metrics, now=now)
        tier = get_tier(score)
        dimensions = compute_dimensions(metrics, now=now)

        summary, strengths_weaknesses, roadmap = await self.orchestrator.generate_all(metrics, score)

        logger.info("Analyzed %s: score=%d tier=%s", metrics.full_name, score, tier)
        return AnalysisResult(
            score=score,
            tier=tier,
            summary=summary,
            strengths=list(strengths_weaknesses["strengths"]),
            weaknesses=list(strengths_weaknesses["weaknesses"]),
            dimensions=dimensions,
            metrics=metrics,
            roadmap=list(roadmap),
        )
