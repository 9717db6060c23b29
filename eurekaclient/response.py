"""Raw HTTP responses returned by the client."""

from __future__ import annotations

from dataclasses import dataclass, field

VALID_STATUS_CODES = frozenset({204, 201, 200, 400, 404, 412, 403})


@dataclass
class RawResponse:
    """Status code, body and headers of a completed request."""

    status_code: int
    body: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)


def is_valid_status(status_code: int) -> bool:
    """Whether a status code ends the retry loop with a readable body."""
    return status_code in VALID_STATUS_CODES