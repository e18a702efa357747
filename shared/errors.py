"""
Shared error handling for the Gameday gateway.
"""

from typing import Dict, Any, Optional, Sequence, Union
from pydantic import BaseModel, Field

from opentelemetry import trace


class ErrorResponse(BaseModel):
    """Standard error response format."""

    error: str
    code: str
    trace_id: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict)


class GamedayException(Exception):
    """Base exception for Gameday services."""

    status_code = 400

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def public_details(self) -> Dict[str, Any]:
        """Details safe to return to API callers."""
        return self.details

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        trace_id = None
        current_span = trace.get_current_span()
        if current_span and current_span.is_recording():
            span_context = current_span.get_span_context()
            if span_context.trace_id != 0:
                trace_id = f"{span_context.trace_id:032x}"

        return ErrorResponse(
            error=self.message,
            code=self.code,
            trace_id=trace_id,
            details=self.public_details(),
        )


class ValidationError(GamedayException):
    """A required request parameter is missing or malformed."""

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)


class UpstreamError(GamedayException):
    """Non-2xx response or network failure from the Stats API.

    ``message`` holds the upstream diagnostic and stays in logs; callers of
    the HTTP API only see a generic message naming the resource.
    """

    status_code = 500

    def __init__(self, resource: str, status: Optional[int] = None, message: str = "Upstream request failed"):
        self.resource = resource
        self.status = status
        self.upstream_message = message
        super().__init__(
            "UPSTREAM_ERROR",
            f"Could not fetch {resource} data from the Stats API",
            {"resource": resource, "status": status, "upstream_message": message},
        )

    def public_details(self) -> Dict[str, Any]:
        return {"resource": self.resource}

    def __str__(self) -> str:
        status = self.status if self.status is not None else "network"
        return f"{self.resource} ({status}): {self.upstream_message}"


class PartialBatchFailure(GamedayException):
    """One people batch failed; its members are missing from the result."""

    def __init__(self, batch_index: int, person_ids: Sequence[str], cause: BaseException):
        self.batch_index = batch_index
        self.person_ids = list(person_ids)
        self.cause = cause
        super().__init__(
            "PARTIAL_BATCH_FAILURE",
            f"People batch {batch_index} failed: {cause}",
            {"batch_index": batch_index, "size": len(self.person_ids)},
        )


class PerGameFailure(GamedayException):
    """Enrichment for a single game failed; the game is left out of the result."""

    def __init__(self, game_pk: Union[int, str], cause: BaseException):
        self.game_pk = game_pk
        self.cause = cause
        super().__init__(
            "PER_GAME_FAILURE",
            f"Game {game_pk} enrichment failed: {cause}",
            {"game_pk": game_pk},
        )
