"""Domain-specific exceptions"""

from kobi_gateway.domain.models import RateLimitResult


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidRequestError(DomainException):
    """Required input is missing or malformed"""

    pass


class NotFoundError(DomainException):
    """Referenced entity does not exist"""

    pass


class ProfileNotFoundError(NotFoundError):
    """Unknown business profile id"""

    pass


class OfferNotFoundError(NotFoundError):
    """Unknown lender offer id"""

    pass


class ProductNotFoundError(NotFoundError):
    """Unknown credit product id for the selected lender"""

    pass


class RateLimitExceeded(DomainException):
    """Caller exhausted its request allowance for the current window"""

    def __init__(self, result: RateLimitResult):
        super().__init__(f"Rate limit of {result.limit} requests exceeded")
        self.result = result


class AdvisoryError(DomainException):
    """Advisory service failed, timed out or returned an invalid payload"""

    pass


class AdvisoryUnavailableError(AdvisoryError):
    """Advisory service is not configured"""

    pass


class CacheBackendError(DomainException):
    """Shared cache backend is unreachable or rejected the operation"""

    pass
