"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field
from typing import List, Optional


class ScoreRequest(BaseModel):
    """Request body for POST /v1/score"""

    profile_id: str = Field(..., min_length=1, description="Business profile identifier")


class CriterionSchema(BaseModel):
    """One weighted criterion of the score breakdown"""

    key: str
    name: str
    weight: int
    score: float
    max_score: float
    percentage: int
    explanation: str
    advisory_explanation: Optional[str] = None
    explanation_source: Optional[str] = None


class RiskAssessmentSchema(BaseModel):
    risk_level: str
    risk_score: float
    strengths: List[str]
    weaknesses: List[str]
    recommendations: List[str]
    summary: str
    confidence: float
    source: str


class EnhancedScoreSchema(BaseModel):
    total_score: float
    rule_score: float
    assessment: RiskAssessmentSchema
    breakdown: List[CriterionSchema]
    recommendations: List[str]
    risk_level: str
    confidence: float


class ScoreResponse(BaseModel):
    """Response for POST /v1/score"""

    profile_id: str
    company_name: str
    score: EnhancedScoreSchema
    cached: bool
    timestamp: str


class CreditProductSchema(BaseModel):
    id: str
    name: str
    min_amount: float
    max_amount: float
    min_term: int
    max_term: int
    interest_rate: float


class LenderOfferSchema(BaseModel):
    id: str
    name: str
    logo: str
    minimum_score: float
    interest_rate_range: str
    max_amount: float
    credit_products: List[CreditProductSchema]


class OffersResponse(BaseModel):
    """Response for GET /v1/offers"""

    offers: List[LenderOfferSchema]


class EligibilityRequest(BaseModel):
    """Request body for POST /v1/offers/eligibility"""

    profile_id: str = Field(..., min_length=1)
    offer_id: str = Field(..., min_length=1)
    product_id: str = Field(..., min_length=1)
    amount: float = Field(..., gt=0, description="Requested amount in AZN")
    term: int = Field(..., gt=0, description="Loan term in months")


class LoanQuoteSchema(BaseModel):
    lender: str
    product: str
    amount: float
    term: int
    interest_rate: float
    estimated_monthly_payment: int


class EligibilityResponse(BaseModel):
    """Response for POST /v1/offers/eligibility"""

    eligible: bool
    status: str
    message: str
    reasons: List[str]
    score: float
    quote: Optional[LoanQuoteSchema] = None


class RecommendationRequest(BaseModel):
    """Request body for POST /v1/offers/recommendation"""

    profile_id: str = Field(..., min_length=1)
    amount: float = Field(..., gt=0)
    term: int = Field(..., gt=0)


class RecommendationResponse(BaseModel):
    recommendation: str
    source: str
    score: float
    offer_ids: List[str]
