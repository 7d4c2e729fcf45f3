"""
Domain exceptions raised by the quota services.

Services raise these; API routers translate them into HTTPException with
the status_code carried on the exception.
"""

from typing import Optional


class QuotaError(Exception):
    """Base class for quota service errors."""

    status_code: int = 400

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class QuotaConfigurationNotFoundError(QuotaError):
    status_code = 404


class AllocationNotFoundError(QuotaError):
    status_code = 404


class LineItemNotFoundError(QuotaError):
    status_code = 404


# =============================================================================
# Quota Generator
# =============================================================================


class QuotaGeneratorError(QuotaError):
    """Failure talking to the external quota generator, or a non-2xx reply."""

    status_code = 500


class QuotaGeneratorAuthError(QuotaGeneratorError):
    status_code = 401


class QuotaGeneratorNotFoundError(QuotaGeneratorError):
    status_code = 404
