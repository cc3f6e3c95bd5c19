"""Lender eligibility matching"""

from kobi_gateway.domain.models import (
    BusinessProfile,
    CreditProduct,
    EligibilityDecision,
    EligibilityStatus,
    LenderOffer,
    LoanQuote,
)
from kobi_gateway.utils.formatting import format_azn

# Requested amount may not exceed this share of monthly revenue
MAX_AMOUNT_REVENUE_RATIO = 0.5

STATUS_MESSAGES = {
    EligibilityStatus.ELIGIBLE: "ELIGIBLE - application can be submitted",
    EligibilityStatus.SCORE_TOO_LOW: "REJECTED - score is below the lender minimum",
    EligibilityStatus.TAX_DEBT: "PROBLEMATIC - outstanding tax debt",
    EligibilityStatus.TERMS_NOT_SUITABLE: "RISKY - terms are not suitable",
}

ELIGIBLE_REASON = "All conditions are met"


def check_eligibility(
    profile: BusinessProfile,
    score: float,
    offer: LenderOffer,
    requested_amount: float | None = None,
) -> EligibilityDecision:
    """
    Decide whether a profile at a given score may apply to a lender offer.

    Requirements (all must hold):
    - score >= offer.minimum_score
    - no outstanding tax debt
    - requested amount (when given) <= 50% of monthly revenue
    - requested amount (when given) <= offer.max_amount

    Every violated constraint is listed; the status reports the most
    specific failure class (score, then tax debt, then generic terms).
    """
    reasons = []
    score_too_low = score < offer.minimum_score
    has_tax_debt = profile.tax_debt > 0

    if score_too_low:
        reasons.append(
            f"Your score ({score:.2f}) is below the minimum requirement ({offer.minimum_score:.2f})"
        )

    if has_tax_debt:
        reasons.append(f"Outstanding tax debt of {format_azn(profile.tax_debt)}")

    if requested_amount is not None:
        if requested_amount > profile.monthly_revenue * MAX_AMOUNT_REVENUE_RATIO:
            reasons.append("Requested amount is too high (more than 50% of monthly revenue)")
        if requested_amount > offer.max_amount:
            reasons.append(f"Requested amount exceeds the lender limit of {format_azn(offer.max_amount)}")

    if not reasons:
        status = EligibilityStatus.ELIGIBLE
    elif score_too_low:
        status = EligibilityStatus.SCORE_TOO_LOW
    elif has_tax_debt:
        status = EligibilityStatus.TAX_DEBT
    else:
        status = EligibilityStatus.TERMS_NOT_SUITABLE

    eligible = status is EligibilityStatus.ELIGIBLE
    return EligibilityDecision(
        eligible=eligible,
        status=status,
        message=STATUS_MESSAGES[status],
        reasons=[ELIGIBLE_REASON] if eligible else reasons,
    )


def quote_loan(offer: LenderOffer, product: CreditProduct, amount: float, term: int) -> LoanQuote:
    """Flat-rate estimate: total with interest spread evenly over the term"""
    monthly = round(amount * (1 + product.interest_rate / 100) / term)
    return LoanQuote(
        lender=offer.name,
        product=product.name,
        amount=amount,
        term=term,
        interest_rate=product.interest_rate,
        estimated_monthly_payment=monthly,
    )
