"""Shared criteria table for rule-based scoring.

Every weight, band and sector coefficient used by the scorer, the fallback
advisor and the templates lives here. Keys are stable English codes; labels
are the localized names shown to applicants.
"""

from dataclasses import dataclass
from typing import Dict, List

MAX_SCORE = 5.0


@dataclass(frozen=True)
class Criterion:
    key: str
    label: str
    weight: int  # percent of MAX_SCORE

    @property
    def max_score(self) -> float:
        return self.weight / 100 * MAX_SCORE


AGE = Criterion("age", "Şirkət Yaşı", 15)
REVENUE = Criterion("revenue", "Aylıq Dövriyyə", 20)
PROFIT = Criterion("profit", "Xalis Gəlir", 15)
TAX_DEBT = Criterion("tax_debt", "Vergi Borcu", 15)
SECTOR_RISK = Criterion("sector_risk", "Sektor Riski", 10)
EMPLOYEES = Criterion("employees", "İşçi Sayı", 5)
CASHFLOW = Criterion("cashflow", "Cashflow", 5)
LOAN_CAPACITY = Criterion("loan_capacity", "Kredit Kapasitesi", 15)

# Output order of the breakdown
CRITERIA: List[Criterion] = [
    AGE,
    REVENUE,
    PROFIT,
    TAX_DEBT,
    SECTOR_RISK,
    EMPLOYEES,
    CASHFLOW,
    LOAN_CAPACITY,
]

if sum(c.weight for c in CRITERIA) != 100:
    raise ValueError("criteria weights must sum to 100")

# Company age reaches full credit at this many years
AGE_FULL_CREDIT_YEARS = 5

# (minimum monthly revenue, fraction of criterion max), checked top-down
REVENUE_BANDS = [(50_000, 1.0), (20_000, 0.7), (10_000, 0.4)]
REVENUE_FLOOR = 0.2

PROFIT_STRONG = 5_000
PROFIT_PARTIAL = 2 / 3

EMPLOYEE_BANDS = [(10, 1.0), (5, 0.6)]
EMPLOYEE_FLOOR = 0.2

# Loan capacity is 30% of monthly revenue; eligibility uses its own 50% ratio
LOAN_CAPACITY_RATIO = 0.3
LOAN_CAPACITY_BANDS = [(15_000, 1.0), (5_000, 0.67)]
LOAN_CAPACITY_FLOOR = 0.33

SECTOR_COEFFICIENTS: Dict[str, float] = {
    "IT": 1.0,
    "Ticarət": 0.7,
    "İstehsalat": 0.6,
    "Restoran": 0.5,
    "Tikinti": 0.3,
}
SECTOR_DEFAULT = 0.5

# Below this fraction of its max a criterion produces a recommendation
RECOMMENDATION_THRESHOLD = 0.5

RECOMMENDATIONS: Dict[str, str] = {
    AGE.key: "Build a longer operating history before applying for larger loans",
    TAX_DEBT.key: "Pay off outstanding tax debt",
    PROFIT.key: "Focus on improving profitability",
    REVENUE.key: "Prepare a strategy to grow monthly sales",
    CASHFLOW.key: "Improve cashflow management",
}

# Fixed priority order in which recommendations are emitted
RECOMMENDATION_ORDER = [AGE.key, TAX_DEBT.key, PROFIT.key, REVENUE.key, CASHFLOW.key]


def banded(value: float, bands: List[tuple], floor: float) -> float:
    """Return the fraction of the first band whose threshold value reaches"""
    for threshold, fraction in bands:
        if value >= threshold:
            return fraction
    return floor
