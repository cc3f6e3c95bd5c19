"""Pytest fixtures for testing"""

import json
import pytest
import httpx
from typing import Generator
from fastapi.testclient import TestClient
from kobi_gateway.api.main import create_app
from kobi_gateway.domain.models import BusinessProfile, CreditProduct, LenderOffer
from kobi_gateway.infrastructure.cache import CacheStore
from kobi_gateway.infrastructure.clients.advisory import AdvisoryClient
from kobi_gateway.infrastructure.rate_limit import RateLimiter
from kobi_gateway.infrastructure.reference_data import LenderCatalog, ProfileRepository
from kobi_gateway.services.pipeline import ScoringPipeline


class FakeClock:
    """Manually advanced clock for TTL and window tests"""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _gemini_transport(
    text: str | None = None,
    status_code: int = 200,
    exc_type: type[httpx.TransportError] | None = None,
) -> httpx.MockTransport:
    """MockTransport answering generateContent calls with the given text"""
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if exc_type is not None:
            raise exc_type("advisory transport failure", request=request)
        body = {"candidates": [{"content": {"parts": [{"text": text}]}}]}
        return httpx.Response(status_code, json=body)

    transport = httpx.MockTransport(handler)
    transport.calls = calls
    return transport


@pytest.fixture
def gemini_transport():
    """Factory for advisory transports: gemini_transport(text, status_code, exc_type)"""
    return _gemini_transport


VALID_ASSESSMENT = {
    "risk_level": "Low",
    "risk_score": 20,
    "strengths": ["Strong revenue", "No tax debt", "Experienced team"],
    "weaknesses": ["Sector concentration"],
    "recommendations": ["Diversify clients", "Pay off outstanding tax debt"],
    "summary": "Healthy company with low credit risk.",
    "confidence": 0.9,
}


@pytest.fixture
def valid_assessment_json() -> str:
    return json.dumps(VALID_ASSESSMENT)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def strong_profile() -> BusinessProfile:
    """Established IT company with no tax debt"""
    return BusinessProfile(
        id="kobi_strong",
        tax_id="1400000001",
        company_name="Strong IT MMC",
        company_age=6,
        monthly_revenue=80_000,
        net_profit=12_000,
        tax_debt=0,
        sector="IT",
        employee_count=15,
        cashflow_positive=True,
    )


@pytest.fixture
def weak_profile() -> BusinessProfile:
    """Young construction company with losses and tax debt"""
    return BusinessProfile(
        id="kobi_weak",
        tax_id="1400000002",
        company_name="Weak Tikinti MMC",
        company_age=1,
        monthly_revenue=15_000,
        net_profit=-500,
        tax_debt=1_200,
        sector="Tikinti",
        employee_count=3,
        cashflow_positive=False,
    )


@pytest.fixture
def offer() -> LenderOffer:
    return LenderOffer(
        id="bokt_test",
        name="Test Mikro BOKT",
        minimum_score=3.5,
        interest_rate_range="14-18%",
        max_amount=100_000,
        credit_products=[
            CreditProduct(
                id="prod_test",
                name="Growth Loan",
                min_amount=5_000,
                max_amount=100_000,
                min_term=6,
                max_term=36,
                interest_rate=16,
            )
        ],
    )


@pytest.fixture
def unconfigured_advisory() -> AdvisoryClient:
    return AdvisoryClient(api_key="")


@pytest.fixture
def pipeline(unconfigured_advisory: AdvisoryClient) -> ScoringPipeline:
    """Pipeline over bundled reference data with in-process cache and limiter"""
    return ScoringPipeline(
        profiles=ProfileRepository.from_file(),
        catalog=LenderCatalog.from_file(),
        cache=CacheStore(),
        rate_limiter=RateLimiter(),
        advisory_client=unconfigured_advisory,
        rate_limit_requests=10,
        rate_limit_window_seconds=60,
    )


@pytest.fixture
def client(pipeline: ScoringPipeline) -> Generator[TestClient, None, None]:
    """FastAPI test client wired to the test pipeline"""
    app = create_app(pipeline_factory=lambda: pipeline)
    with TestClient(app) as test_client:
        yield test_client
