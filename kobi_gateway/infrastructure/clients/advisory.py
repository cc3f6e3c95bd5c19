"""Advisory service HTTP client (Gemini-compatible generateContent API)"""

import httpx
from typing import Any, Dict, List, Sequence
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from kobi_gateway.config import settings
from kobi_gateway.domain.exceptions import AdvisoryError, AdvisoryUnavailableError
from kobi_gateway.domain.models import (
    BusinessProfile,
    CriterionResult,
    LenderOffer,
    RiskAssessment,
    RiskLevel,
)
from kobi_gateway.infrastructure.observability.metrics import advisory_latency_histogram
from kobi_gateway.utils.formatting import format_azn


class RiskAssessmentPayload(BaseModel):
    """Strict contract for the advisory risk assessment response"""

    model_config = ConfigDict(extra="ignore", strict=True)

    risk_level: RiskLevel
    risk_score: float = Field(..., ge=0, le=100)
    strengths: List[str] = Field(..., max_length=3)
    weaknesses: List[str] = Field(..., max_length=3)
    recommendations: List[str] = Field(..., max_length=3)
    summary: str
    confidence: float = Field(..., ge=0, le=1)

    def to_domain(self) -> RiskAssessment:
        return RiskAssessment(
            risk_level=self.risk_level,
            risk_score=self.risk_score,
            strengths=self.strengths,
            weaknesses=self.weaknesses,
            recommendations=self.recommendations,
            summary=self.summary,
            confidence=self.confidence,
            source="advisory",
        )


ASSESSMENT_PROMPT = """You are a credit risk analyst. Assess the credit risk of this small business.

Company: {company_name}
Company age: {company_age:g} years
Monthly revenue: {monthly_revenue}
Net profit: {net_profit}
Tax debt: {tax_debt}
Sector: {sector}
Employees: {employee_count}
Cashflow: {cashflow}

Reply with a single JSON object and nothing else:
{{
  "risk_level": "Low" | "Medium" | "High",
  "risk_score": number 0-100,
  "strengths": [up to 3 strings],
  "weaknesses": [up to 3 strings],
  "recommendations": [up to 3 strings],
  "summary": string (100-150 words),
  "confidence": number 0-1
}}
"""

EXPLANATION_PROMPT = """You are a credit advisor. Explain this scoring criterion to the business owner.

Criterion: {criterion}
Score received: {score:.2f} / {max_score:.2f}
Company: {company_name}
Monthly revenue: {monthly_revenue}

In 1-2 plain sentences, explain why this score was received and how it can be raised.
Answer directly, not as JSON. At most 100 words.
"""

RECOMMENDATION_PROMPT = """You are a credit advisor. Recommend which lender the applicant should choose.

Credit score: {score:.2f} / 5.0
Requested amount: {amount}
Term: {term} months

Eligible lenders:
{lenders}

Give a 2-3 sentence recommendation: which one and why. Answer directly, not as JSON. At most 80 words.
"""


class AdvisoryClient:
    """Client for the external advisory (LLM) service"""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key if api_key is not None else settings.advisory_api_key
        self.base_url = (base_url or settings.advisory_base_url).rstrip("/")
        self.model = model or settings.advisory_model
        self.timeout = timeout or settings.advisory_timeout_seconds
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def assess(self, profile: BusinessProfile) -> RiskAssessment:
        """
        Request a structured risk assessment for a profile.

        Raises:
            AdvisoryUnavailableError: No API key configured
            AdvisoryError: On timeout, HTTP errors, or a payload that is not
                a JSON document matching the assessment contract
        """
        prompt = ASSESSMENT_PROMPT.format(
            company_name=profile.company_name,
            company_age=profile.company_age,
            monthly_revenue=format_azn(profile.monthly_revenue),
            net_profit=format_azn(profile.net_profit),
            tax_debt=format_azn(profile.tax_debt),
            sector=profile.sector,
            employee_count=profile.employee_count,
            cashflow="positive" if profile.cashflow_positive else "negative",
        )
        text = await self._generate("assess", prompt, json_response=True)

        try:
            return RiskAssessmentPayload.model_validate_json(text).to_domain()
        except ValidationError as e:
            raise AdvisoryError(f"Advisory response does not match assessment contract: {e}") from e

    async def explain_criterion(self, criterion: CriterionResult, profile: BusinessProfile) -> str:
        prompt = EXPLANATION_PROMPT.format(
            criterion=criterion.name,
            score=criterion.score,
            max_score=criterion.max_score,
            company_name=profile.company_name,
            monthly_revenue=format_azn(profile.monthly_revenue),
        )
        return await self._generate("explain", prompt)

    async def recommend_offer(
        self,
        score: float,
        offers: Sequence[LenderOffer],
        amount: float,
        term: int,
    ) -> str:
        lenders = "\n".join(
            f"- {o.name}: minimum score {o.minimum_score:g}, rates {o.interest_rate_range}, "
            f"max amount {format_azn(o.max_amount)}"
            for o in offers
        )
        prompt = RECOMMENDATION_PROMPT.format(
            score=score,
            amount=format_azn(amount),
            term=term,
            lenders=lenders,
        )
        return await self._generate("recommend", prompt)

    async def _generate(self, operation: str, prompt: str, json_response: bool = False) -> str:
        if not self.configured:
            raise AdvisoryUnavailableError("Advisory API key is not configured")

        body: Dict[str, Any] = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
        if json_response:
            body["generationConfig"] = {"responseMimeType": "application/json"}

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                with advisory_latency_histogram.labels(operation=operation).time():
                    response = await client.post(
                        f"{self.base_url}/v1beta/models/{self.model}:generateContent",
                        headers={"x-goog-api-key": self.api_key},
                        json=body,
                    )
                    response.raise_for_status()
                data = response.json()
                text = data["candidates"][0]["content"]["parts"][0]["text"].strip()

            except httpx.TimeoutException as e:
                raise AdvisoryError(f"Advisory timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise AdvisoryError(f"Advisory API error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise AdvisoryError(f"Advisory API unreachable: {e}") from e
            except (KeyError, IndexError, ValueError, TypeError, AttributeError) as e:
                raise AdvisoryError(f"Invalid advisory response envelope: {e}") from e

        if not text:
            raise AdvisoryError("Advisory returned empty text")
        return text
