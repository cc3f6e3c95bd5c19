"""Lender offer endpoints - catalog listing, eligibility and recommendation"""

import logging
from dataclasses import asdict
from fastapi import APIRouter, Depends, HTTPException, Query, Request

from kobi_gateway.api.v1.schemas import (
    EligibilityRequest,
    EligibilityResponse,
    LenderOfferSchema,
    LoanQuoteSchema,
    OffersResponse,
    RecommendationRequest,
    RecommendationResponse,
)
from kobi_gateway.api.dependencies import get_pipeline, get_request_id
from kobi_gateway.domain.exceptions import InvalidRequestError, NotFoundError
from kobi_gateway.infrastructure.observability.logging import log_eligibility
from kobi_gateway.services.pipeline import ScoringPipeline

router = APIRouter()


@router.get("/offers", response_model=OffersResponse)
def list_offers(
    min_score: float | None = Query(None, ge=0, le=5, description="Only lenders this score qualifies for"),
    pipeline: ScoringPipeline = Depends(get_pipeline),
):
    """List lender offers, optionally only those with minimum_score <= min_score"""
    offers = pipeline.list_offers(min_score)
    return OffersResponse(offers=[LenderOfferSchema.model_validate(asdict(o)) for o in offers])


@router.post("/offers/eligibility", response_model=EligibilityResponse)
def check_eligibility(
    request_body: EligibilityRequest,
    request: Request,
    pipeline: ScoringPipeline = Depends(get_pipeline),
):
    """
    Check whether a profile may apply for a lender's credit product.

    Returns every violated constraint; a loan quote is included only when
    the profile is eligible.
    """
    request_id = get_request_id(request)

    try:
        outcome = pipeline.check_eligibility(
            request_body.profile_id,
            request_body.offer_id,
            request_body.product_id,
            request_body.amount,
            request_body.term,
        )
    except InvalidRequestError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    decision = outcome.decision
    log_eligibility(request_id, request_body.profile_id, request_body.offer_id, decision.status.value)

    return EligibilityResponse(
        eligible=decision.eligible,
        status=decision.status.value,
        message=decision.message,
        reasons=decision.reasons,
        score=outcome.score,
        quote=LoanQuoteSchema.model_validate(asdict(outcome.quote)) if outcome.quote else None,
    )


@router.post("/offers/recommendation", response_model=RecommendationResponse)
async def recommend_offer(
    request_body: RecommendationRequest,
    request: Request,
    pipeline: ScoringPipeline = Depends(get_pipeline),
):
    """Advisory recommendation of a lender among those the profile qualifies for"""
    try:
        recommendation = await pipeline.recommend_offer(
            request_body.profile_id,
            request_body.amount,
            request_body.term,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=500, detail="Recommendation failed")

    return RecommendationResponse(
        recommendation=recommendation.text,
        source=recommendation.source,
        score=recommendation.score,
        offer_ids=[o.id for o in recommendation.offers],
    )
