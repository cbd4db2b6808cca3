"""Error types raised by KrishiAi+ services.

Every error carries the HTTP status the API should answer with; the FastAPI
handlers in `krishiai.main` render them as `{"error": message}`.
"""
from typing import Optional


class KrishiError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ConfigurationError(KrishiError):
    status_code = 500


class InvalidDataURI(KrishiError):
    status_code = 400


class UploadRejected(KrishiError):
    status_code = 400


class RemoteAPIError(KrishiError):
    """The external model endpoint answered with a non-2xx status."""

    status_code = 502

    def __init__(self, message: str, status: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message)
        self.status = status
        self.body = body


class InvalidRemoteResponse(KrishiError):
    status_code = 502


class FlowError(KrishiError):
    status_code = 502


class PredictionError(KrishiError):
    status_code = 500


class LocationNotFound(KrishiError):
    status_code = 404


class WeatherUnavailable(KrishiError):
    status_code = 502


class SchemeNotFound(KrishiError):
    status_code = 404


class UnsupportedLocale(KrishiError):
    status_code = 404
