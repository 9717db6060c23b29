"""Registry operations: query, register, renew and remove instances."""

from __future__ import annotations

import json

from .client import Client
from .errors import ERR_CODE_INSTANCE_NOT_FOUND, EurekaError
from .models import (
    Application,
    Applications,
    InstanceInfo,
    parse_application,
    parse_applications,
    parse_instance,
)


def _path(*segments: str) -> str:
    return "/".join(segments)


class EurekaClient(Client):
    """A cluster client with the Eureka registry operations.

    Query methods raise ``xml.etree.ElementTree.ParseError`` when the server
    answers with a body that is not XML.
    """

    def get_applications(self) -> Applications:
        """Every registered application."""
        response = self.get("apps")
        return parse_applications(response.body)

    def get_application(self, app_id: str) -> Application:
        """One application and its instances."""
        response = self.get(_path("apps", app_id))
        return parse_application(response.body)

    def get_instance(self, app_id: str, instance_id: str) -> InstanceInfo:
        """One instance of an application."""
        response = self.get(_path("apps", app_id, instance_id))
        return parse_instance(response.body)

    def get_vip(self, vip_id: str) -> Applications:
        """Applications registered under a virtual IP address."""
        response = self.get(_path("vips", vip_id))
        return parse_applications(response.body)

    def get_svip(self, svip_id: str) -> Applications:
        """Applications registered under a secure virtual IP address."""
        response = self.get(_path("svips", svip_id))
        return parse_applications(response.body)

    def register_instance(self, app_id: str, instance_info: InstanceInfo) -> None:
        """Register an instance of an application."""
        body = json.dumps({"instance": instance_info.to_json()}).encode("utf-8")
        self.post(_path("apps", app_id), body)

    def send_heartbeat(self, app_id: str, instance_id: str) -> None:
        """Renew an instance's lease.

        Raises EurekaError with code 502 when the server does not know the instance.
        """
        response = self.put(_path("apps", app_id, instance_id), None)
        if response.status_code == 404:
            raise EurekaError.from_code(
                ERR_CODE_INSTANCE_NOT_FOUND,
                "Instance resource not found when sending heartbeat",
                0,
            )

    def unregister_instance(self, app_id: str, instance_id: str) -> None:
        """Remove an instance from the registry."""
        self.delete(_path("apps", app_id, instance_id))