"""POST /v1/score - blended creditworthiness score endpoint"""

import time
import logging
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, HTTPException, Request, Response

from kobi_gateway.api.v1.schemas import ScoreRequest, ScoreResponse, EnhancedScoreSchema
from kobi_gateway.api.dependencies import get_client_identity, get_pipeline, get_request_id
from kobi_gateway.domain.exceptions import InvalidRequestError, ProfileNotFoundError, RateLimitExceeded
from kobi_gateway.infrastructure.observability.logging import log_score_computed
from kobi_gateway.services.pipeline import ScoringPipeline

router = APIRouter()


def rate_limit_headers(limit: int, remaining: int, reset_at: float) -> dict:
    return {
        "X-RateLimit-Limit": str(limit),
        "X-RateLimit-Remaining": str(remaining),
        "X-RateLimit-Reset": str(int(reset_at)),
    }


@router.post("/score", response_model=ScoreResponse)
async def calculate_score(
    request_body: ScoreRequest,
    request: Request,
    response: Response,
    pipeline: ScoringPipeline = Depends(get_pipeline),
):
    """
    Score a business profile.

    Flow:
    1. Rate limit by caller identity (10 requests / minute by default)
    2. Serve from cache when possible (1 hour TTL)
    3. Rule score blended with the advisory assessment (fallback on failure)
    4. Criteria breakdown enriched with explanations
    """
    start_time = time.time()
    request_id = get_request_id(request)
    identity = get_client_identity(request)

    try:
        outcome = await pipeline.compute_score(request_body.profile_id, identity)

    except RateLimitExceeded as e:
        logging.warning(f"Rate limit exceeded for {identity}", extra={"request_id": request_id})
        headers = rate_limit_headers(e.result.limit, 0, e.result.reset_at)
        headers["Retry-After"] = str(max(0, int(e.result.reset_at - time.time())))
        raise HTTPException(
            status_code=429,
            detail="Too many requests. Please try again later.",
            headers=headers,
        )

    except InvalidRequestError as e:
        raise HTTPException(status_code=400, detail=str(e))

    except ProfileNotFoundError:
        raise HTTPException(status_code=404, detail="Profile not found")

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Score calculation failed")

    profile = pipeline.get_profile(request_body.profile_id)
    result = outcome.result

    duration_ms = (time.time() - start_time) * 1000
    log_score_computed(
        request_id,
        profile.id,
        outcome.cached,
        result.total_score,
        result.assessment.source,
        duration_ms,
    )

    rate = outcome.rate_limit
    response.headers.update(rate_limit_headers(rate.limit, rate.remaining, rate.reset_at))

    return ScoreResponse(
        profile_id=profile.id,
        company_name=profile.company_name,
        score=EnhancedScoreSchema.model_validate(result.to_dict()),
        cached=outcome.cached,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
