"""Unit tests for the advisory HTTP client contract"""

import json
import httpx
import pytest
from kobi_gateway.domain.exceptions import AdvisoryError, AdvisoryUnavailableError
from kobi_gateway.domain.models import BusinessProfile, RiskLevel
from kobi_gateway.domain.scoring import score_profile
from kobi_gateway.infrastructure.clients.advisory import AdvisoryClient

ASSESSMENT = {
    "risk_level": "Medium",
    "risk_score": 45,
    "strengths": ["Stable revenue"],
    "weaknesses": ["Thin margins", "Young company"],
    "recommendations": ["Build cash reserves"],
    "summary": "Moderate risk.",
    "confidence": 0.8,
}


def _client(transport: httpx.MockTransport) -> AdvisoryClient:
    return AdvisoryClient(
        api_key="test-key",
        base_url="https://advisory.test",
        model="test-model",
        timeout=1.0,
        transport=transport,
    )


async def test_unconfigured_client_makes_no_call(strong_profile: BusinessProfile, gemini_transport):
    transport = gemini_transport(json.dumps(ASSESSMENT))
    client = AdvisoryClient(api_key="", transport=transport)

    with pytest.raises(AdvisoryUnavailableError):
        await client.assess(strong_profile)
    assert transport.calls == []


async def test_valid_assessment(strong_profile: BusinessProfile, gemini_transport, valid_assessment_json: str):
    transport = gemini_transport(valid_assessment_json)

    assessment = await _client(transport).assess(strong_profile)

    assert assessment.risk_level is RiskLevel.LOW
    assert assessment.risk_score == 20
    assert assessment.confidence == 0.9
    assert assessment.source == "advisory"

    request = transport.calls[0]
    assert request.url.path == "/v1beta/models/test-model:generateContent"
    assert request.headers["x-goog-api-key"] == "test-key"
    body = json.loads(request.content)
    assert body["generationConfig"]["responseMimeType"] == "application/json"
    assert "Strong IT MMC" in body["contents"][0]["parts"][0]["text"]


@pytest.mark.parametrize(
    "text",
    [
        "The company looks healthy overall.",
        "```json\n" + json.dumps(ASSESSMENT) + "\n```",
        json.dumps({**ASSESSMENT, "risk_score": 150}),
        json.dumps({**ASSESSMENT, "confidence": 1.5}),
        json.dumps({**ASSESSMENT, "risk_level": "Aşağı"}),
        json.dumps({**ASSESSMENT, "strengths": ["a", "b", "c", "d"]}),
        json.dumps({k: v for k, v in ASSESSMENT.items() if k != "summary"}),
        json.dumps({**ASSESSMENT, "risk_score": "45"}),
        json.dumps({**ASSESSMENT, "confidence": "0.8"}),
    ],
    ids=["prose", "fenced", "risk-score-range", "confidence-range", "unknown-level", "too-many", "missing-field", "string-risk-score", "string-confidence"],
)
async def test_invalid_payload_rejected(strong_profile: BusinessProfile, gemini_transport, text: str):
    """Anything but a JSON document matching the contract is a failure"""
    with pytest.raises(AdvisoryError):
        await _client(gemini_transport(text)).assess(strong_profile)


async def test_timeout_is_failure(strong_profile: BusinessProfile, gemini_transport):
    transport = gemini_transport(exc_type=httpx.ReadTimeout)

    with pytest.raises(AdvisoryError, match="timeout"):
        await _client(transport).assess(strong_profile)


async def test_http_error_is_failure(strong_profile: BusinessProfile, gemini_transport):
    with pytest.raises(AdvisoryError, match="503"):
        await _client(gemini_transport("{}", status_code=503)).assess(strong_profile)


async def test_connection_error_is_failure(strong_profile: BusinessProfile, gemini_transport):
    transport = gemini_transport(exc_type=httpx.ConnectError)

    with pytest.raises(AdvisoryError, match="unreachable"):
        await _client(transport).assess(strong_profile)


async def test_malformed_envelope_is_failure(strong_profile: BusinessProfile):
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"candidates": []}))

    with pytest.raises(AdvisoryError, match="envelope"):
        await _client(transport).assess(strong_profile)


async def test_explain_criterion(weak_profile: BusinessProfile, gemini_transport):
    criterion = score_profile(weak_profile).breakdown[1]
    transport = gemini_transport("  Revenue is modest. Growing sales would raise this score.  \n")

    text = await _client(transport).explain_criterion(criterion, weak_profile)

    assert text == "Revenue is modest. Growing sales would raise this score."
    body = json.loads(transport.calls[0].content)
    assert "generationConfig" not in body


async def test_empty_explanation_is_failure(weak_profile: BusinessProfile, gemini_transport):
    criterion = score_profile(weak_profile).breakdown[0]

    with pytest.raises(AdvisoryError):
        await _client(gemini_transport("   ")).explain_criterion(criterion, weak_profile)
