"""
Domain exceptions.

Services raise these; the REST routes and the prediction session translate
them into a single user-facing message per concern.
"""

from typing import Any, Optional


class AgriYieldError(Exception):
    """Base exception for the service."""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class MalformedForecastError(AgriYieldError):
    """Raised when the weather provider payload cannot be normalized."""

    def __init__(self, message: str = "Weather provider returned a malformed forecast"):
        super().__init__(code="MALFORMED_FORECAST", message=message, status_code=502)


class WeatherServiceError(AgriYieldError):
    """Raised on network failures or errors reported by the weather provider."""

    def __init__(self, message: str, provider_status: Optional[int] = None):
        details = {"provider_status": provider_status} if provider_status else None
        super().__init__(
            code="WEATHER_SERVICE_ERROR",
            message=message,
            status_code=503,
            details=details,
        )


class InvalidLocationError(AgriYieldError):
    """Raised when a location descriptor is empty or unusable."""

    def __init__(self, message: str = "Location must not be empty"):
        super().__init__(code="INVALID_LOCATION", message=message, status_code=422)


class PredictionParseError(AgriYieldError):
    """Raised when the AI response does not conform to the requested schema."""

    def __init__(self, message: str, errors: Optional[list[Any]] = None):
        super().__init__(
            code="PREDICTION_PARSE_ERROR",
            message=message,
            status_code=502,
            details={"errors": errors} if errors else None,
        )


class PredictionServiceError(AgriYieldError):
    """Raised when the AI service call itself fails."""

    def __init__(self, message: str):
        super().__init__(code="PREDICTION_SERVICE_ERROR", message=message, status_code=503)


class PersistenceError(AgriYieldError):
    """Raised by key-value stores; history operations log and swallow it."""

    def __init__(self, message: str):
        super().__init__(code="PERSISTENCE_ERROR", message=message, status_code=500)
