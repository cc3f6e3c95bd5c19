"""Natural-language explanations for each scoring criterion"""

import asyncio
import logging
from dataclasses import replace
from typing import List
from kobi_gateway.config import settings
from kobi_gateway.domain.exceptions import AdvisoryError, AdvisoryUnavailableError
from kobi_gateway.domain.fallback import fallback_explanation
from kobi_gateway.domain.models import BusinessProfile, CriterionResult
from kobi_gateway.infrastructure.clients.advisory import AdvisoryClient
from kobi_gateway.infrastructure.observability.metrics import advisory_fallback_counter

logger = logging.getLogger(__name__)


class BreakdownEnricher:
    """
    Attach an explanation to every criterion of a breakdown.

    Criteria are explained concurrently, at most `concurrency` advisory
    calls in flight. A failed call only degrades its own criterion to the
    template text. Output order always matches input order.
    """

    def __init__(self, advisory_client: AdvisoryClient, concurrency: int | None = None):
        self.advisory_client = advisory_client
        self.concurrency = concurrency or settings.enrichment_concurrency

    async def enrich(self, breakdown: List[CriterionResult], profile: BusinessProfile) -> List[CriterionResult]:
        semaphore = asyncio.Semaphore(self.concurrency)

        async def enrich_one(criterion: CriterionResult) -> CriterionResult:
            async with semaphore:
                return await self._explain(criterion, profile)

        # gather preserves argument order regardless of completion order
        return list(await asyncio.gather(*(enrich_one(c) for c in breakdown)))

    async def _explain(self, criterion: CriterionResult, profile: BusinessProfile) -> CriterionResult:
        max_score = criterion.max_score
        percentage = round(criterion.score / max_score * 100) if max_score else 0

        try:
            text = await self.advisory_client.explain_criterion(criterion, profile)
            source = "advisory"
        except AdvisoryUnavailableError:
            advisory_fallback_counter.labels(operation="explain", reason="unconfigured").inc()
            text, source = fallback_explanation(criterion, profile), "template"
        except AdvisoryError as e:
            advisory_fallback_counter.labels(operation="explain", reason="failure").inc()
            logger.warning(f"Explanation for {criterion.key} failed, using template: {e}")
            text, source = fallback_explanation(criterion, profile), "template"

        return replace(
            criterion,
            max_score=max_score,
            percentage=percentage,
            advisory_explanation=text,
            explanation_source=source,
        )
