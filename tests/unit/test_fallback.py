"""Unit tests for the deterministic fallback advisor"""

import pytest
from dataclasses import replace
from kobi_gateway.domain.fallback import (
    CONFIDENCE_DEGRADED,
    CONFIDENCE_UNCONFIGURED,
    STRENGTH_FILLER,
    WEAKNESS_FILLER,
    fallback_assessment,
    fallback_explanation,
    fallback_offer_recommendation,
    fallback_risk_score,
    risk_level_for,
)
from kobi_gateway.domain.models import BusinessProfile, LenderOffer, RiskLevel
from kobi_gateway.domain.scoring import score_profile


def test_fallback_confidence_signals_reduced_trust():
    for confidence in (CONFIDENCE_UNCONFIGURED, CONFIDENCE_DEGRADED):
        assert 0.6 <= confidence <= 0.75


def test_strong_profile_is_low_risk(strong_profile: BusinessProfile):
    """50 + 20 (revenue) + 15 (no tax debt) + 10 (profit) = 95"""
    assessment = fallback_assessment(strong_profile)

    assert assessment.risk_score == 95
    assert assessment.risk_level is RiskLevel.LOW
    assert assessment.source == "fallback"
    assert assessment.weaknesses == [WEAKNESS_FILLER]
    assert len(assessment.strengths) == 3


def test_weak_profile_is_high_risk(weak_profile: BusinessProfile):
    """50 - 15 (negative cashflow) - 10 (age < 2) = 25"""
    assessment = fallback_assessment(weak_profile, confidence=CONFIDENCE_DEGRADED)

    assert assessment.risk_score == 25
    assert assessment.risk_level is RiskLevel.HIGH
    assert assessment.strengths == [STRENGTH_FILLER]
    assert "1,200 AZN" in assessment.weaknesses[0]
    assert assessment.confidence == CONFIDENCE_DEGRADED
    assert "Weak Tikinti MMC" in assessment.summary


def test_medium_risk_band(strong_profile: BusinessProfile):
    """50 + 15 (no tax debt) = 65"""
    profile = replace(strong_profile, monthly_revenue=30_000, net_profit=1_000)
    assert fallback_risk_score(profile) == 65
    assert fallback_assessment(profile).risk_level is RiskLevel.MEDIUM


@pytest.mark.parametrize(
    "risk_score, level",
    [(100, RiskLevel.LOW), (70, RiskLevel.LOW), (69, RiskLevel.MEDIUM), (40, RiskLevel.MEDIUM), (39, RiskLevel.HIGH)],
)
def test_risk_level_thresholds(risk_score: float, level: RiskLevel):
    assert risk_level_for(risk_score) is level


def test_lists_capped_at_three(weak_profile: BusinessProfile):
    assessment = fallback_assessment(weak_profile)

    assert 1 <= len(assessment.strengths) <= 3
    assert 1 <= len(assessment.weaknesses) <= 3
    assert 1 <= len(assessment.recommendations) <= 3


def test_revenue_template_explanation(weak_profile: BusinessProfile):
    revenue = next(r for r in score_profile(weak_profile).breakdown if r.key == "revenue")
    text = fallback_explanation(revenue, weak_profile)
    assert "15,000 AZN" in text
    assert "Higher revenue" in text


def test_tax_debt_template_explanation(strong_profile: BusinessProfile, weak_profile: BusinessProfile):
    strong_tax = next(r for r in score_profile(strong_profile).breakdown if r.key == "tax_debt")
    weak_tax = next(r for r in score_profile(weak_profile).breakdown if r.key == "tax_debt")

    assert "no tax debt" in fallback_explanation(strong_tax, strong_profile)
    assert "1,200 AZN" in fallback_explanation(weak_tax, weak_profile)


def test_offer_recommendation_template(offer: LenderOffer):
    assert offer.name in fallback_offer_recommendation(4.0, [offer])
    assert "do not currently qualify" in fallback_offer_recommendation(1.0, [offer])
