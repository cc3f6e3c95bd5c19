"""Dependency injection for FastAPI endpoints"""

from fastapi import Request
from kobi_gateway.services.pipeline import ScoringPipeline


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_client_identity(request: Request) -> str:
    """Caller identity for rate limiting: first forwarded hop, then socket peer"""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def get_pipeline(request: Request) -> ScoringPipeline:
    """Provide the process-wide scoring pipeline created at startup"""
    return request.app.state.pipeline
