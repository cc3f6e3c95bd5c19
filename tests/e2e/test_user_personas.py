"""
E2E tests for the 5 bundled business personas.

These run the full HTTP stack over the packaged reference data with the
advisory service unconfigured, so every assessment comes from the
deterministic fallback.

Business personas:
- kobi_001: Established IT company, no debt - qualifies everywhere
- kobi_002: Mid-size trading company - just clears the top lender
- kobi_003: Young construction company with losses and tax debt
- kobi_004: Restaurant with moderate revenue - amount-sensitive
- kobi_005: Large manufacturer held back only by tax debt
"""

import pytest
from fastapi.testclient import TestClient


def _eligibility(client: TestClient, profile_id: str, offer_id: str, product_id: str, amount: float, term: int = 12):
    response = client.post(
        "/v1/offers/eligibility",
        json={
            "profile_id": profile_id,
            "offer_id": offer_id,
            "product_id": product_id,
            "amount": amount,
            "term": term,
        },
    )
    assert response.status_code == 200
    return response.json()


@pytest.mark.integration
def test_kobi_001_strong_profile(client: TestClient):
    """
    kobi_001: Strong on every criterion
    Expected: Top rule score, eligible at the strictest lender
    """
    score = client.post("/v1/score", json={"profile_id": "kobi_001"}).json()["score"]
    assert score["rule_score"] == 5.0
    assert score["risk_level"] == "Low"

    data = _eligibility(client, "kobi_001", "bokt_001", "prod_001_a", 30000)
    assert data["eligible"] is True
    assert data["quote"]["estimated_monthly_payment"] == 2900


@pytest.mark.integration
def test_kobi_002_borderline_eligible(client: TestClient):
    """
    kobi_002: Rule score 3.65 against a 3.5 minimum
    Expected: Eligible for a modest amount
    """
    data = _eligibility(client, "kobi_002", "bokt_001", "prod_001_a", 10000)
    assert data["eligible"] is True
    assert data["score"] == pytest.approx(3.65)
    assert data["quote"]["estimated_monthly_payment"] == 967


@pytest.mark.integration
def test_kobi_003_never_eligible(client: TestClient):
    """
    kobi_003: Low score and outstanding tax debt
    Expected: Rejected by every lender with tax debt among the reasons
    """
    score = client.post("/v1/score", json={"profile_id": "kobi_003"}).json()["score"]
    assert score["rule_score"] == pytest.approx(1.0)
    assert "Pay off outstanding tax debt" in score["recommendations"]
    assert any("tax debt" in w for w in score["assessment"]["weaknesses"])

    offers = client.get("/v1/offers").json()["offers"]
    for offer in offers:
        product = offer["credit_products"][0]
        data = _eligibility(client, "kobi_003", offer["id"], product["id"], 5000)
        assert data["eligible"] is False, f"kobi_003 should not qualify at {offer['id']}"
        assert any("tax debt" in reason for reason in data["reasons"])


@pytest.mark.integration
def test_kobi_004_amount_too_high(client: TestClient):
    """
    kobi_004: 22,000 AZN monthly revenue
    Expected: 15,000 AZN exceeds half of revenue, 10,000 AZN is fine
    """
    data = _eligibility(client, "kobi_004", "bokt_002", "prod_002_a", 15000)
    assert data["eligible"] is False
    assert data["status"] == "TERMS_NOT_SUITABLE"
    assert data["reasons"] == ["Requested amount is too high (more than 50% of monthly revenue)"]

    assert _eligibility(client, "kobi_004", "bokt_002", "prod_002_a", 10000)["eligible"] is True


@pytest.mark.integration
def test_kobi_005_tax_debt_blocks(client: TestClient):
    """
    kobi_005: High score but 3,000 AZN of tax debt
    Expected: TAX_DEBT status even at a lenient lender
    """
    data = _eligibility(client, "kobi_005", "bokt_002", "prod_002_a", 10000)
    assert data["eligible"] is False
    assert data["status"] == "TAX_DEBT"
    assert data["score"] == pytest.approx(4.05)
    assert data["reasons"] == ["Outstanding tax debt of 3,000 AZN"]
