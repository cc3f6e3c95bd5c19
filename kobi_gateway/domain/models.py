"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Optional


class RiskLevel(str, Enum):
    """Mutually exclusive risk bands reported by an assessment"""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class EligibilityStatus(str, Enum):
    """Most specific outcome class of an eligibility check"""

    ELIGIBLE = "ELIGIBLE"
    SCORE_TOO_LOW = "SCORE_TOO_LOW"
    TAX_DEBT = "TAX_DEBT"
    TERMS_NOT_SUITABLE = "TERMS_NOT_SUITABLE"


@dataclass(frozen=True)
class BusinessProfile:
    """Small/medium business applicant (KOBI) as supplied by the profile provider"""

    id: str
    tax_id: str
    company_name: str
    company_age: float  # years
    monthly_revenue: float  # AZN
    net_profit: float  # AZN
    tax_debt: float  # AZN
    sector: str
    employee_count: int
    cashflow_positive: bool
    owner_name: str = ""
    email: str = ""


@dataclass
class CriterionResult:
    """Contribution of one weighted criterion to the rule score"""

    key: str
    name: str
    weight: int  # percent
    score: float
    max_score: float
    percentage: int
    explanation: str
    advisory_explanation: Optional[str] = None
    explanation_source: Optional[str] = None  # "advisory" | "template"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CriterionResult":
        return cls(**data)


@dataclass
class ScoreResult:
    """Output of the deterministic rule scorer"""

    total_score: float
    breakdown: List[CriterionResult]
    recommendations: List[str]


@dataclass
class RiskAssessment:
    """Structured risk opinion, from the advisory service or the fallback heuristic"""

    risk_level: RiskLevel
    risk_score: float  # 0-100
    strengths: List[str]
    weaknesses: List[str]
    recommendations: List[str]
    summary: str
    confidence: float  # 0-1
    source: str = "advisory"  # "advisory" | "fallback"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RiskAssessment":
        return cls(**{**data, "risk_level": RiskLevel(data["risk_level"])})


@dataclass
class EnhancedScoreResult:
    """Blended rule + advisory score with an enriched criteria breakdown"""

    total_score: float
    rule_score: float
    assessment: RiskAssessment
    breakdown: List[CriterionResult]
    recommendations: List[str]
    risk_level: RiskLevel
    confidence: float

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["risk_level"] = self.risk_level.value
        data["assessment"]["risk_level"] = self.assessment.risk_level.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EnhancedScoreResult":
        return cls(
            total_score=data["total_score"],
            rule_score=data["rule_score"],
            assessment=RiskAssessment.from_dict(data["assessment"]),
            breakdown=[CriterionResult.from_dict(c) for c in data["breakdown"]],
            recommendations=list(data["recommendations"]),
            risk_level=RiskLevel(data["risk_level"]),
            confidence=data["confidence"],
        )


@dataclass(frozen=True)
class CreditProduct:
    """Loan instrument offered by a lender"""

    id: str
    name: str
    min_amount: float
    max_amount: float
    min_term: int  # months
    max_term: int  # months
    interest_rate: float  # percent


@dataclass(frozen=True)
class LenderOffer:
    """Microfinance lender (BOKT) and its credit products"""

    id: str
    name: str
    minimum_score: float
    interest_rate_range: str
    max_amount: float
    credit_products: List[CreditProduct] = field(default_factory=list)
    logo: str = ""

    def get_product(self, product_id: str) -> Optional[CreditProduct]:
        return next((p for p in self.credit_products if p.id == product_id), None)


@dataclass
class EligibilityDecision:
    """Outcome of matching a profile and score against a lender offer"""

    eligible: bool
    status: EligibilityStatus
    message: str
    reasons: List[str]


@dataclass
class LoanQuote:
    """Summary of the requested loan under a specific credit product"""

    lender: str
    product: str
    amount: float
    term: int
    interest_rate: float
    estimated_monthly_payment: int


@dataclass
class RateLimitResult:
    """Admission decision for one request"""

    allowed: bool
    limit: int
    remaining: int
    reset_at: float  # epoch seconds
