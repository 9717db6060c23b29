"""Client configuration."""

from __future__ import annotations

from dataclasses import dataclass, field

_NANOS = 1_000_000_000


@dataclass
class Config:
    """TLS files, dial timeout in seconds and consistency setting."""

    cert_file: str = ""
    key_file: str = ""
    ca_cert_files: list[str] = field(default_factory=list)
    dial_timeout: float = 1.0
    consistency: str = ""

    def to_dict(self) -> dict:
        """JSON form; the timeout is stored in nanoseconds."""
        return {
            "certFile": self.cert_file,
            "keyFile": self.key_file,
            "caCertFiles": list(self.ca_cert_files),
            "timeout": round(self.dial_timeout * _NANOS),
            "consistency": self.consistency,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Config":
        return cls(
            cert_file=data.get("certFile") or "",
            key_file=data.get("keyFile") or "",
            ca_cert_files=list(data.get("caCertFiles") or []),
            dial_timeout=(data.get("timeout") or 0) / _NANOS,
            consistency=data.get("consistency") or "",
        )