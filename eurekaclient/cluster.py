"""The set of Eureka servers a client talks to."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from urllib.parse import SplitResult, urlsplit

DEFAULT_MACHINE = "http://127.0.0.1:4001"

_log = logging.getLogger(__name__)


@dataclass
class Cluster:
    """Known machines and the one currently used as leader."""

    leader: str = ""
    machines: list[str] = field(default_factory=list)

    @classmethod
    def from_machines(cls, machines) -> "Cluster":
        """Create a cluster; an empty list means the local default server."""
        machines = list(machines or []) or [DEFAULT_MACHINE]
        return cls(leader=machines[0], machines=machines)

    def switch_leader(self, num: int) -> None:
        _log.debug("switch.leader[from %s to %s]", self.leader, self.machines[num])
        self.leader = self.machines[num]

    def update_from_str(self, machines: str) -> None:
        self.machines = machines.split(", ")

    def update_leader(self, leader: str) -> None:
        _log.debug("update.leader[%s,%s]", self.leader, leader)
        self.leader = leader

    def update_leader_from_url(self, url) -> None:
        """Set the leader to the scheme and host of a URL."""
        parts = url if isinstance(url, SplitResult) else urlsplit(url)
        scheme = parts.scheme or "http"
        self.update_leader(f"{scheme}://{parts.netloc}")

    def to_dict(self) -> dict:
        return {"leader": self.leader, "machines": list(self.machines)}

    @classmethod
    def from_dict(cls, data: dict) -> "Cluster":
        return cls(leader=data.get("leader") or "", machines=list(data.get("machines") or []))