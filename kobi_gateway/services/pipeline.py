"""Scoring pipeline - orchestrates rate limiting, caching, scoring and advisory blending"""

import logging
from dataclasses import dataclass
from typing import List, Optional
from kobi_gateway.config import settings
from kobi_gateway.domain.blending import blend
from kobi_gateway.domain.exceptions import (
    AdvisoryError,
    AdvisoryUnavailableError,
    InvalidRequestError,
    OfferNotFoundError,
    ProductNotFoundError,
    ProfileNotFoundError,
    RateLimitExceeded,
)
from kobi_gateway.domain.fallback import (
    CONFIDENCE_DEGRADED,
    CONFIDENCE_UNCONFIGURED,
    fallback_assessment,
    fallback_offer_recommendation,
)
from kobi_gateway.domain.matching import check_eligibility, quote_loan
from kobi_gateway.domain.models import (
    BusinessProfile,
    EligibilityDecision,
    EnhancedScoreResult,
    LenderOffer,
    LoanQuote,
    RateLimitResult,
    RiskAssessment,
)
from kobi_gateway.domain.scoring import score_profile
from kobi_gateway.infrastructure.cache import CacheStore, create_redis_client
from kobi_gateway.infrastructure.clients.advisory import AdvisoryClient
from kobi_gateway.infrastructure.observability.metrics import (
    advisory_fallback_counter,
    eligibility_counter,
    record_score,
    score_request_counter,
)
from kobi_gateway.infrastructure.rate_limit import RateLimiter
from kobi_gateway.infrastructure.reference_data import LenderCatalog, ProfileRepository
from kobi_gateway.services.enrichment import BreakdownEnricher

logger = logging.getLogger(__name__)

ANALYTICS_BUCKET = "analytics:scores"


@dataclass
class ScoreOutcome:
    result: EnhancedScoreResult
    cached: bool
    rate_limit: RateLimitResult


@dataclass
class ApplicationOutcome:
    decision: EligibilityDecision
    score: float
    quote: Optional[LoanQuote] = None


@dataclass
class OfferRecommendation:
    text: str
    source: str  # "advisory" | "template"
    score: float
    offers: List[LenderOffer]


def score_cache_key(profile_id: str) -> str:
    return f"score:{profile_id}"


def _require(value: str, name: str) -> str:
    if not value or not value.strip():
        raise InvalidRequestError(f"{name} is required")
    return value


class ScoringPipeline:
    """
    Process-wide scoring service.

    Created once at application startup (see api.main lifespan), shared by
    all requests, and closed at shutdown. Owns the cache and rate limiter
    state so nothing lives in module-level globals.
    """

    def __init__(
        self,
        profiles: ProfileRepository,
        catalog: LenderCatalog,
        cache: CacheStore,
        rate_limiter: RateLimiter,
        advisory_client: AdvisoryClient,
        enricher: BreakdownEnricher | None = None,
        rate_limit_requests: int | None = None,
        rate_limit_window_seconds: int | None = None,
        score_cache_ttl_seconds: int | None = None,
    ):
        self.profiles = profiles
        self.catalog = catalog
        self.cache = cache
        self.rate_limiter = rate_limiter
        self.advisory_client = advisory_client
        self.enricher = enricher or BreakdownEnricher(advisory_client)
        self.rate_limit_requests = rate_limit_requests or settings.rate_limit_requests
        self.rate_limit_window_seconds = rate_limit_window_seconds or settings.rate_limit_window_seconds
        self.score_cache_ttl_seconds = score_cache_ttl_seconds or settings.score_cache_ttl_seconds

    @classmethod
    def from_settings(cls) -> "ScoringPipeline":
        redis_client = create_redis_client(settings.redis_url)
        return cls(
            profiles=ProfileRepository.from_file(),
            catalog=LenderCatalog.from_file(),
            cache=CacheStore(redis_client),
            rate_limiter=RateLimiter(redis_client, sweep_interval=settings.cache_sweep_interval_seconds),
            advisory_client=AdvisoryClient(),
        )

    async def close(self) -> None:
        # Cache and rate limiter share one Redis client
        await self.cache.close()

    def get_profile(self, profile_id: str) -> BusinessProfile:
        profile = self.profiles.get_profile(profile_id)
        if profile is None:
            raise ProfileNotFoundError(f"Profile {profile_id} not found")
        return profile

    async def compute_score(self, profile_id: str, identity: str = "unknown") -> ScoreOutcome:
        """
        Compute (or serve from cache) the blended score for a profile.

        Flow:
        1. Rate limit the caller identity
        2. Look up the profile
        3. Return the cached result if present
        4. Rule score -> advisory assessment (fallback on failure) -> blend
        5. Enrich the criteria breakdown with explanations
        6. Cache the result and bump usage counters

        Raises:
            RateLimitExceeded, InvalidRequestError, ProfileNotFoundError
        """
        rate = await self.rate_limiter.allow(
            identity or "unknown",
            self.rate_limit_requests,
            self.rate_limit_window_seconds,
        )
        if not rate.allowed:
            score_request_counter.labels(outcome="rate_limited").inc()
            raise RateLimitExceeded(rate)

        _require(profile_id, "profile_id")
        try:
            profile = self.get_profile(profile_id)
        except ProfileNotFoundError:
            score_request_counter.labels(outcome="not_found").inc()
            raise

        cache_key = score_cache_key(profile_id)
        cached = await self.cache.get(cache_key)
        if cached is not None:
            try:
                result = EnhancedScoreResult.from_dict(cached)
                score_request_counter.labels(outcome="cached").inc()
                return ScoreOutcome(result=result, cached=True, rate_limit=rate)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Discarding unreadable cache entry {cache_key}: {e}")

        rule_result = score_profile(profile)
        assessment = await self.assess(profile)
        result = blend(rule_result, assessment)
        result.breakdown = await self.enricher.enrich(result.breakdown, profile)

        await self.cache.set(cache_key, result.to_dict(), self.score_cache_ttl_seconds)
        await self.cache.increment_field(ANALYTICS_BUCKET, "total", 1)
        await self.cache.increment_field(ANALYTICS_BUCKET, f"sector:{profile.sector}", 1)
        record_score(result.total_score)

        return ScoreOutcome(result=result, cached=False, rate_limit=rate)

    async def assess(self, profile: BusinessProfile) -> RiskAssessment:
        """Advisory assessment, replaced by the deterministic fallback on any failure"""
        try:
            return await self.advisory_client.assess(profile)
        except AdvisoryUnavailableError:
            advisory_fallback_counter.labels(operation="assess", reason="unconfigured").inc()
            return fallback_assessment(profile, confidence=CONFIDENCE_UNCONFIGURED)
        except AdvisoryError as e:
            advisory_fallback_counter.labels(operation="assess", reason="failure").inc()
            logger.warning(f"Advisory assessment failed for {profile.id}, using fallback: {e}")
            return fallback_assessment(profile, confidence=CONFIDENCE_DEGRADED)

    def check_eligibility(
        self,
        profile_id: str,
        offer_id: str,
        product_id: str,
        amount: float,
        term: int,
    ) -> ApplicationOutcome:
        """
        Check whether a profile may apply for a lender's credit product.

        The deterministic rule score is used so the answer does not depend
        on advisory availability or cache state.
        """
        _require(profile_id, "profile_id")
        _require(offer_id, "offer_id")
        _require(product_id, "product_id")
        if amount is None or amount <= 0:
            raise InvalidRequestError("amount must be positive")
        if term is None or term <= 0:
            raise InvalidRequestError("term must be positive")

        profile = self.get_profile(profile_id)
        offer = self.catalog.get_offer(offer_id)
        if offer is None:
            raise OfferNotFoundError(f"Lender offer {offer_id} not found")
        product = offer.get_product(product_id)
        if product is None:
            raise ProductNotFoundError(f"Product {product_id} not found for lender {offer_id}")

        score = score_profile(profile).total_score
        decision = check_eligibility(profile, score, offer, amount)
        eligibility_counter.labels(status=decision.status.value).inc()

        quote = quote_loan(offer, product, amount, term) if decision.eligible else None
        return ApplicationOutcome(decision=decision, score=score, quote=quote)

    def list_offers(self, min_score: float | None = None) -> List[LenderOffer]:
        return self.catalog.list_offers(min_score)

    async def recommend_offer(self, profile_id: str, amount: float, term: int) -> OfferRecommendation:
        """Recommend one of the lenders the profile's rule score qualifies for"""
        _require(profile_id, "profile_id")
        profile = self.get_profile(profile_id)
        score = score_profile(profile).total_score
        offers = self.catalog.list_offers(score)

        if offers:
            try:
                text = await self.advisory_client.recommend_offer(score, offers, amount, term)
                return OfferRecommendation(text=text, source="advisory", score=score, offers=offers)
            except AdvisoryUnavailableError:
                advisory_fallback_counter.labels(operation="recommend", reason="unconfigured").inc()
            except AdvisoryError as e:
                advisory_fallback_counter.labels(operation="recommend", reason="failure").inc()
                logger.warning(f"Offer recommendation failed for {profile_id}, using template: {e}")

        return OfferRecommendation(
            text=fallback_offer_recommendation(score, offers),
            source="template",
            score=score,
            offers=offers,
        )
