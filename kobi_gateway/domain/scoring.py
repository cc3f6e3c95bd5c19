"""Rule-based credit scoring engine - core business logic for KOBI scoring"""

from typing import Callable, Dict, List
from kobi_gateway.domain import criteria as c
from kobi_gateway.domain.models import BusinessProfile, CriterionResult, ScoreResult
from kobi_gateway.utils.formatting import format_azn


def sector_coefficient(sector: str) -> float:
    """Sector risk coefficient; unknown sectors get the mid-table value"""
    return c.SECTOR_COEFFICIENTS.get(sector, c.SECTOR_DEFAULT)


def loan_capacity(profile: BusinessProfile) -> float:
    return profile.monthly_revenue * c.LOAN_CAPACITY_RATIO


def _age_fraction(p: BusinessProfile) -> float:
    return max(0.0, min(p.company_age / c.AGE_FULL_CREDIT_YEARS, 1.0))


def _revenue_fraction(p: BusinessProfile) -> float:
    return c.banded(p.monthly_revenue, c.REVENUE_BANDS, c.REVENUE_FLOOR)


def _profit_fraction(p: BusinessProfile) -> float:
    if p.net_profit > c.PROFIT_STRONG:
        return 1.0
    if p.net_profit > 0:
        return c.PROFIT_PARTIAL
    return 0.0


def _tax_debt_fraction(p: BusinessProfile) -> float:
    # Any outstanding debt is a hard penalty
    return 1.0 if p.tax_debt == 0 else 0.0


def _employee_fraction(p: BusinessProfile) -> float:
    return c.banded(p.employee_count, c.EMPLOYEE_BANDS, c.EMPLOYEE_FLOOR)


def _cashflow_fraction(p: BusinessProfile) -> float:
    return 1.0 if p.cashflow_positive else 0.0


def _loan_capacity_fraction(p: BusinessProfile) -> float:
    return c.banded(loan_capacity(p), c.LOAN_CAPACITY_BANDS, c.LOAN_CAPACITY_FLOOR)


_FRACTIONS: Dict[str, Callable[[BusinessProfile], float]] = {
    c.AGE.key: _age_fraction,
    c.REVENUE.key: _revenue_fraction,
    c.PROFIT.key: _profit_fraction,
    c.TAX_DEBT.key: _tax_debt_fraction,
    c.SECTOR_RISK.key: lambda p: sector_coefficient(p.sector),
    c.EMPLOYEES.key: _employee_fraction,
    c.CASHFLOW.key: _cashflow_fraction,
    c.LOAN_CAPACITY.key: _loan_capacity_fraction,
}


def describe_criterion(key: str, profile: BusinessProfile) -> str:
    """Short factual detail shown next to a criterion"""
    if key == c.AGE.key:
        return f"{profile.company_age:g} years in operation"
    if key == c.REVENUE.key:
        return format_azn(profile.monthly_revenue)
    if key == c.PROFIT.key:
        return f"Net profit {format_azn(profile.net_profit)}"
    if key == c.TAX_DEBT.key:
        if profile.tax_debt == 0:
            return "No tax debt"
        return f"{format_azn(profile.tax_debt)} tax debt"
    if key == c.SECTOR_RISK.key:
        return f"Sector: {profile.sector}"
    if key == c.EMPLOYEES.key:
        return f"{profile.employee_count} employees"
    if key == c.CASHFLOW.key:
        return "Positive" if profile.cashflow_positive else "Negative"
    if key == c.LOAN_CAPACITY.key:
        return f"Estimated repayment capacity {format_azn(loan_capacity(profile))}"
    return ""


def score_criterion(criterion: c.Criterion, profile: BusinessProfile) -> CriterionResult:
    max_score = criterion.max_score
    score = _FRACTIONS[criterion.key](profile) * max_score
    return CriterionResult(
        key=criterion.key,
        name=criterion.label,
        weight=criterion.weight,
        score=score,
        max_score=max_score,
        percentage=round(score / max_score * 100),
        explanation=describe_criterion(criterion.key, profile),
    )


def build_recommendations(breakdown: List[CriterionResult]) -> List[str]:
    """Recommendations for criteria scoring below half their max, in priority order"""
    by_key = {r.key: r for r in breakdown}
    recommendations = []
    for key in c.RECOMMENDATION_ORDER:
        result = by_key[key]
        if result.score < result.max_score * c.RECOMMENDATION_THRESHOLD:
            recommendations.append(c.RECOMMENDATIONS[key])
    return recommendations


def score_profile(profile: BusinessProfile) -> ScoreResult:
    """
    Main entry point: compute the deterministic rule score for a profile.

    Eight weighted criteria (weights sum to 100) each contribute up to
    weight/100 * 5 points. The total is clamped to [0, 5] and rounded to
    two decimals. Pure function: no I/O, never raises for a valid profile.
    """
    breakdown = [score_criterion(criterion, profile) for criterion in c.CRITERIA]
    total = sum(r.score for r in breakdown)
    total = round(min(max(total, 0.0), c.MAX_SCORE), 2)

    return ScoreResult(
        total_score=total,
        breakdown=breakdown,
        recommendations=build_recommendations(breakdown),
    )
