"""Result of one request/response exchange."""

from dataclasses import dataclass
from typing import Any, Optional

from ..exceptions import RequestError


@dataclass(frozen=True)
class RequestOutcome:
    """
    Finalized result of a single exchange.

    `response_body` is only populated on success; `error` only on failure.
    `elapsed_ms` runs from dispatch start to finalization on both branches.
    """

    address: str
    request_body: Any
    success: bool
    elapsed_ms: float
    response_body: Any = None
    status_code: Optional[int] = None
    error: Optional[RequestError] = None

    @property
    def error_kind(self) -> Optional[str]:
        """Name of the failure class (e.g. "HttpStatusError"), or None."""
        if self.error is None:
            return None
        return type(self.error).__name__

    def raise_for_error(self) -> "RequestOutcome":
        """Re-raise the captured error, or return self on success."""
        if self.error is not None:
            raise self.error
        return self
