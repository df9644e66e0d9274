"""
Recreation.gov availability API
"""
from .client import RecGovAvailabilityClient, APIError, RateLimitedError, parse_availabilities
from .endpoints import Endpoints, WebPages, DEFAULT_HEADERS

__all__ = [
    "RecGovAvailabilityClient",
    "APIError",
    "RateLimitedError",
    "parse_availabilities",
    "Endpoints",
    "WebPages",
    "DEFAULT_HEADERS",
]
