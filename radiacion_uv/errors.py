"""
Exceptions raised by the reconciliation pipeline.

Provider failures are NOT represented here: providers convert every failure
into a None result at their boundary (see resilience.py). These exceptions
are the ones the HTTP layer turns into error responses.
"""

from typing import Any, Dict, Optional


class RadiacionUVError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code = 500

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, **self.context}


class CoordinateValidationError(RadiacionUVError):
    """Missing, non-numeric or out-of-range lat/lng."""

    status_code = 400


class ForecastUnavailableError(RadiacionUVError):
    """The realtime provider returned no forecast and there is no fallback."""

    status_code = 503
