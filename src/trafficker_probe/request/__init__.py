"""HTTP request/response probe."""

from .outcome import RequestOutcome
from .request_probe import JSON_HEADERS, RequestProbe, validate_address

__all__ = ["RequestOutcome", "RequestProbe", "JSON_HEADERS", "validate_address"]
