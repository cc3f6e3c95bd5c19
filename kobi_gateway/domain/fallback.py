"""Deterministic stand-in for the advisory service.

Produces the same RiskAssessment shape the advisory service returns so the
pipeline can always complete. Confidence is kept between 0.6 and 0.75 to mark
the result as less trusted than a genuine advisory response.
"""

from typing import List, Sequence
from kobi_gateway.domain import criteria as c
from kobi_gateway.domain.models import (
    BusinessProfile,
    CriterionResult,
    LenderOffer,
    RiskAssessment,
    RiskLevel,
)
from kobi_gateway.utils.formatting import format_azn

# Advisory service not configured at all
CONFIDENCE_UNCONFIGURED = 0.75
# Advisory service configured but failed (timeout, HTTP error, bad payload)
CONFIDENCE_DEGRADED = 0.6

MAX_ITEMS = 3

BASE_RISK_SCORE = 50
LOW_RISK_THRESHOLD = 70
MEDIUM_RISK_THRESHOLD = 40

STRENGTH_FILLER = "Some strengths are present"
WEAKNESS_FILLER = "Some areas could be improved"
RECOMMENDATION_FILLER = "Keep accurate financial records and documentation"


def fallback_risk_score(profile: BusinessProfile) -> float:
    score = BASE_RISK_SCORE
    if profile.monthly_revenue >= 50_000:
        score += 20
    if profile.tax_debt == 0:
        score += 15
    if profile.net_profit > c.PROFIT_STRONG:
        score += 10
    if not profile.cashflow_positive:
        score -= 15
    if profile.company_age < 2:
        score -= 10
    return float(max(0, min(100, score)))


def risk_level_for(risk_score: float) -> RiskLevel:
    if risk_score >= LOW_RISK_THRESHOLD:
        return RiskLevel.LOW
    if risk_score >= MEDIUM_RISK_THRESHOLD:
        return RiskLevel.MEDIUM
    return RiskLevel.HIGH


def _capped(items: List[str], filler: str) -> List[str]:
    return items[:MAX_ITEMS] if items else [filler]


def fallback_assessment(
    profile: BusinessProfile,
    confidence: float = CONFIDENCE_UNCONFIGURED,
) -> RiskAssessment:
    """Heuristic risk assessment built from the same thresholds as the rule scorer"""
    strengths = []
    if profile.monthly_revenue >= 50_000:
        strengths.append("High monthly revenue indicates financial stability")
    if profile.tax_debt == 0:
        strengths.append("No tax debt, a sign of good financial discipline")
    if profile.company_age >= 3:
        strengths.append("Experienced company with market knowledge and stability")

    weaknesses = []
    if profile.tax_debt > 0:
        weaknesses.append(f"{format_azn(profile.tax_debt)} tax debt is a risk factor")
    if profile.monthly_revenue < 20_000:
        weaknesses.append("Low revenue may limit repayment capacity")
    if not profile.cashflow_positive:
        weaknesses.append("Negative cashflow points to a liquidity problem")

    recommendations = []
    if profile.tax_debt > 0:
        recommendations.append("Pay off the tax debt; it will raise your score significantly")
    if profile.monthly_revenue < 50_000:
        recommendations.append("Improve sales strategy and grow revenue")
    recommendations.append(RECOMMENDATION_FILLER)

    risk_score = fallback_risk_score(profile)
    risk_level = risk_level_for(risk_score)
    focus = weaknesses[0] if weaknesses else "monitoring financial indicators"

    return RiskAssessment(
        risk_level=risk_level,
        risk_score=risk_score,
        strengths=_capped(strengths, STRENGTH_FILLER),
        weaknesses=_capped(weaknesses, WEAKNESS_FILLER),
        recommendations=_capped(recommendations, RECOMMENDATION_FILLER),
        summary=(
            f"{profile.company_name} has a {risk_level.value.lower()} risk level. "
            f"Main focus: {focus}."
        ),
        confidence=confidence,
        source="fallback",
    )


def fallback_explanation(criterion: CriterionResult, profile: BusinessProfile) -> str:
    """Template explanation for a criterion when no advisory text is available"""
    good = criterion.percentage > 70

    if criterion.key == c.REVENUE.key:
        verdict = "This is a good result" if good else "Higher revenue would raise your score"
        return f"Your monthly revenue is {format_azn(profile.monthly_revenue)}. {verdict}."
    if criterion.key == c.TAX_DEBT.key:
        if profile.tax_debt == 0:
            return "You have no tax debt, which has a positive effect on your score."
        return (
            f"You have {format_azn(profile.tax_debt)} of tax debt. "
            "Paying it off would raise your score significantly."
        )
    if criterion.key == c.CASHFLOW.key:
        if profile.cashflow_positive:
            return "Your cashflow is positive, which supports repayment capacity."
        return "Your cashflow is negative. Improving liquidity would raise your score."

    verdict = "This is a good result" if good else "There is room for improvement"
    return (
        f"You scored {criterion.score:.2f} of {criterion.max_score:.2f} "
        f"points on this criterion. {verdict}."
    )


def fallback_offer_recommendation(score: float, offers: Sequence[LenderOffer]) -> str:
    eligible = [o for o in offers if score >= o.minimum_score]
    if not eligible:
        return "You do not currently qualify for any lender. Work on raising your score."
    best = eligible[0]
    return (
        f"We recommend {best.name}: its minimum score ({best.minimum_score:g}) "
        f"matches your score ({score:.2f}), with rates of {best.interest_rate_range} "
        f"and loans up to {format_azn(best.max_amount)}."
    )
