"""Blend the rule score with an advisory risk assessment"""

from typing import Iterable, List
from kobi_gateway.domain.criteria import MAX_SCORE
from kobi_gateway.domain.models import EnhancedScoreResult, RiskAssessment, ScoreResult

RULE_WEIGHT = 0.8
ADVISORY_WEIGHT = 0.2
MAX_RECOMMENDATIONS = 5


def advisory_contribution(assessment: RiskAssessment) -> float:
    """Map a 0-100 risk score onto the 0-5 score scale"""
    return (100 - assessment.risk_score) / 100 * MAX_SCORE


def merge_recommendations(*groups: Iterable[str], limit: int = MAX_RECOMMENDATIONS) -> List[str]:
    """Concatenate, drop duplicates keeping the first occurrence, cap at limit"""
    merged: List[str] = []
    for group in groups:
        for item in group:
            if item not in merged:
                merged.append(item)
    return merged[:limit]


def blend(rule_result: ScoreResult, assessment: RiskAssessment) -> EnhancedScoreResult:
    """
    Combine rule score (80%) and advisory contribution (20%) into the final score.

    Never raises: advisory failures have already been replaced by the
    fallback assessment upstream. Risk level and confidence pass through
    from the assessment unchanged.
    """
    total = rule_result.total_score * RULE_WEIGHT + advisory_contribution(assessment) * ADVISORY_WEIGHT
    total = min(max(total, 0.0), MAX_SCORE)

    return EnhancedScoreResult(
        total_score=total,
        rule_score=rule_result.total_score,
        assessment=assessment,
        breakdown=list(rule_result.breakdown),
        recommendations=merge_recommendations(rule_result.recommendations, assessment.recommendations),
        risk_level=assessment.risk_level,
        confidence=assessment.confidence,
    )
