"""Error types reported by the Eureka client."""

from __future__ import annotations

import json
import logging

API_VERSION = "v2"

ERR_CODE_EUREKA_NOT_REACHABLE = 501
ERR_CODE_INSTANCE_NOT_FOUND = 502

ERROR_MESSAGES = {
    ERR_CODE_INSTANCE_NOT_FOUND: "Instance resource not found",
    ERR_CODE_EUREKA_NOT_REACHABLE: "All the given peers are not reachable",
}

_log = logging.getLogger(__name__)


class EurekaError(Exception):
    """An error with a Eureka error code, message, cause and index."""

    def __init__(self, error_code: int = 0, message: str = "", cause: str = "", index: int = 0):
        super().__init__(error_code, message, cause, index)
        self.error_code = error_code
        self.message = message
        self.cause = cause
        self.index = index

    def __str__(self) -> str:
        return f"{self.error_code}: {self.message} ({self.cause}) [{self.index}]"

    @classmethod
    def from_code(cls, error_code: int, cause: str, index: int = 0) -> "EurekaError":
        """Build an error whose message is looked up from its code."""
        return cls(error_code, ERROR_MESSAGES.get(error_code, ""), cause, index)


class RequestCancelledError(Exception):
    """Raised when a request is cancelled before it completes."""

    def __init__(self, message: str = "sending request is cancelled"):
        super().__init__(message)


def handle_error(data: bytes | str) -> EurekaError:
    """Decode a JSON error body into an EurekaError.

    Raises ValueError if the body is not a JSON error object.
    """
    try:
        decoded = json.loads(data)
        if not isinstance(decoded, dict):
            raise ValueError("eureka error body is not a JSON object")
        return EurekaError(
            int(decoded.get("errorCode") or 0),
            str(decoded.get("message") or ""),
            str(decoded.get("cause") or ""),
            int(decoded.get("index") or 0),
        )
    except (ValueError, TypeError) as exc:
        _log.warning("cannot unmarshal eureka error: %s", exc)
        raise ValueError(str(exc)) from exc