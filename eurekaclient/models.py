"""Registry data types and their JSON and XML forms."""

from __future__ import annotations

import json
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field

UP = "UP"
DOWN = "DOWN"
STARTING = "STARTING"

DEFAULT_DATA_CENTER_CLASS = "com.netflix.appinfo.InstanceInfo$DefaultDataCenterInfo"


def _parse_bool(text: str | None) -> bool:
    return (text or "").strip() in {"1", "t", "T", "true", "TRUE", "True"}


def _parse_int(text: str | None) -> int:
    text = (text or "").strip()
    return int(text) if text else 0


def _child_text(element: ET.Element, tag: str) -> str:
    child = element.find(tag)
    return (child.text or "") if child is not None else ""


def _add_child(parent: ET.Element, tag: str, text: str) -> None:
    ET.SubElement(parent, tag).text = text


def _root(data: bytes | str) -> ET.Element:
    return ET.fromstring(data)


@dataclass
class Port:
    port: int = 0
    enabled: bool = False

    def to_json(self) -> dict:
        return {"$": self.port, "@enabled": self.enabled}

    def to_xml(self, tag: str) -> ET.Element:
        el = ET.Element(tag, {"enabled": "true" if self.enabled else "false"})
        el.text = str(self.port)
        return el

    @classmethod
    def from_xml(cls, element: ET.Element) -> "Port":
        return cls(_parse_int(element.text), _parse_bool(element.get("enabled")))


_DC_FIELDS = [
    ("ami_launch_index", "ami-launch-index"),
    ("local_hostname", "local-hostname"),
    ("availability_zone", "availability-zone"),
    ("instance_id", "instance-id"),
    ("public_ipv4", "public-ipv4"),
    ("public_hostname", "public-hostname"),
    ("ami_manifest_path", "ami-manifest-path"),
    ("local_ipv4", "local-ipv4"),
    ("hostname", "hostname"),
    ("ami_id", "ami-id"),
    ("instance_type", "instance-type"),
]


@dataclass
class DataCenterMetadata:
    ami_launch_index: str = ""
    local_hostname: str = ""
    availability_zone: str = ""
    instance_id: str = ""
    public_ipv4: str = ""
    public_hostname: str = ""
    ami_manifest_path: str = ""
    local_ipv4: str = ""
    hostname: str = ""
    ami_id: str = ""
    instance_type: str = ""

    def to_json(self) -> dict:
        return {name: getattr(self, attr) for attr, name in _DC_FIELDS if getattr(self, attr)}

    def to_xml(self, tag: str = "metadata") -> ET.Element:
        el = ET.Element(tag)
        for attr, name in _DC_FIELDS:
            if getattr(self, attr):
                _add_child(el, name, getattr(self, attr))
        return el

    @classmethod
    def from_xml(cls, element: ET.Element) -> "DataCenterMetadata":
        return cls(**{attr: _child_text(element, name) for attr, name in _DC_FIELDS})


@dataclass
class DataCenterInfo:
    name: str = ""
    class_: str = ""
    metadata: DataCenterMetadata | None = None

    def to_json(self) -> dict:
        out: dict = {"name": self.name, "@class": self.class_}
        if self.metadata is not None:
            out["metadata"] = self.metadata.to_json()
        return out

    def to_xml(self, tag: str = "dataCenterInfo") -> ET.Element:
        el = ET.Element(tag, {"class": self.class_})
        _add_child(el, "name", self.name)
        if self.metadata is not None:
            el.append(self.metadata.to_xml("metadata"))
        return el

    @classmethod
    def from_xml(cls, element: ET.Element) -> "DataCenterInfo":
        meta = element.find("metadata")
        return cls(
            name=_child_text(element, "name"),
            class_=element.get("class", ""),
            metadata=DataCenterMetadata.from_xml(meta) if meta is not None else None,
        )


_LEASE_FIELDS = [
    ("eviction_duration_in_secs", "evictionDurationInSecs"),
    ("renewal_interval_in_secs", "renewalIntervalInSecs"),
    ("duration_in_secs", "durationInSecs"),
    ("registration_timestamp", "registrationTimestamp"),
    ("last_renewal_timestamp", "lastRenewalTimestamp"),
    ("eviction_timestamp", "evictionTimestamp"),
    ("service_up_timestamp", "serviceUpTimestamp"),
]


@dataclass
class LeaseInfo:
    eviction_duration_in_secs: int = 0
    renewal_interval_in_secs: int = 0
    duration_in_secs: int = 0
    registration_timestamp: int = 0
    last_renewal_timestamp: int = 0
    eviction_timestamp: int = 0
    service_up_timestamp: int = 0

    def to_json(self) -> dict:
        return {name: getattr(self, attr) for attr, name in _LEASE_FIELDS if getattr(self, attr)}

    def to_xml(self, tag: str = "leaseInfo") -> ET.Element:
        el = ET.Element(tag)
        for attr, name in _LEASE_FIELDS:
            if getattr(self, attr):
                _add_child(el, name, str(getattr(self, attr)))
        return el

    @classmethod
    def from_xml(cls, element: ET.Element) -> "LeaseInfo":
        return cls(**{attr: _parse_int(_child_text(element, name)) for attr, name in _LEASE_FIELDS})


_METADATA_ENTRY = re.compile(r"\s*<([^<>]+)>([^<>]+)</[^<>]+>\s*")


@dataclass
class MetaData:
    """Free-form key/value metadata with an optional class name."""

    map: dict[str, str] = field(default_factory=dict)
    class_: str = ""

    def to_xml(self, tag: str = "metadata") -> ET.Element:
        el = ET.Element(tag, {"class": self.class_} if self.class_ else {})
        for key, value in self.map.items():
            _add_child(el, key, value)
        return el

    @classmethod
    def from_xml(cls, element: ET.Element) -> "MetaData":
        inner = (element.text or "") + "".join(
            ET.tostring(child, encoding="unicode") for child in element
        )
        entries = {m.group(1): m.group(2) for m in _METADATA_ENTRY.finditer(inner)}
        return cls(map=entries, class_=element.get("class", ""))

    def to_json(self) -> dict:
        out = dict(self.map)
        if self.class_:
            out["@class"] = self.class_
        return out

    @classmethod
    def from_json(cls, data) -> "MetaData":
        if isinstance(data, (str, bytes)):
            data = json.loads(data)
        entries = {str(k): str(v) for k, v in dict(data).items()}
        class_ = entries.pop("@class", "")
        return cls(map=entries, class_=class_)


# (attribute, wire name, kind, omitempty)
_INSTANCE_FIELDS = [
    ("host_name", "hostName", "str", False),
    ("home_page_url", "homePageUrl", "str", True),
    ("status_page_url", "statusPageUrl", "str", False),
    ("health_check_url", "healthCheckUrl", "str", True),
    ("app", "app", "str", False),
    ("ip_addr", "ipAddr", "str", False),
    ("vip_address", "vipAddress", "str", False),
    ("secure_vip_address", "secureVipAddress", "str", True),
    ("status", "status", "str", False),
    ("port", "port", "port", True),
    ("secure_port", "securePort", "port", True),
    ("data_center_info", "dataCenterInfo", "dc", False),
    ("lease_info", "leaseInfo", "lease", True),
    ("metadata", "metadata", "meta", True),
    ("is_coordinating_discovery_server", "isCoordinatingDiscoveryServer", "bool", True),
    ("last_updated_timestamp", "lastUpdatedTimestamp", "int", True),
    ("last_dirty_timestamp", "lastDirtyTimestamp", "int", True),
    ("action_type", "actionType", "str", True),
    ("overriddenstatus", "overriddenstatus", "str", True),
    ("country_id", "countryId", "int", True),
    ("instance_id", "instanceId", "str", True),
]

_COMPOSITE_XML = {"port": Port, "dc": DataCenterInfo, "lease": LeaseInfo, "meta": MetaData}


@dataclass
class InstanceInfo:
    """One registered service instance."""

    host_name: str = ""
    home_page_url: str = ""
    status_page_url: str = ""
    health_check_url: str = ""
    app: str = ""
    ip_addr: str = ""
    vip_address: str = ""
    secure_vip_address: str = ""
    status: str = ""
    port: Port | None = None
    secure_port: Port | None = None
    data_center_info: DataCenterInfo | None = None
    lease_info: LeaseInfo | None = None
    metadata: MetaData | None = None
    is_coordinating_discovery_server: bool = False
    last_updated_timestamp: int = 0
    last_dirty_timestamp: int = 0
    action_type: str = ""
    overriddenstatus: str = ""
    country_id: int = 0
    instance_id: str = ""

    def to_json(self) -> dict:
        out: dict = {}
        for attr, name, kind, omit in _INSTANCE_FIELDS:
            value = getattr(self, attr)
            if kind in _COMPOSITE_XML:
                if value is not None:
                    out[name] = value.to_json()
                elif not omit:
                    out[name] = None
            elif value or not omit:
                out[name] = value
        return out

    def to_xml(self) -> ET.Element:
        el = ET.Element("instance")
        for attr, name, kind, omit in _INSTANCE_FIELDS:
            value = getattr(self, attr)
            if kind in _COMPOSITE_XML:
                if value is not None:
                    el.append(value.to_xml(name))
            elif value or not omit:
                if kind == "bool":
                    _add_child(el, name, "true" if value else "false")
                else:
                    _add_child(el, name, str(value))
        return el

    @classmethod
    def from_xml(cls, element: ET.Element) -> "InstanceInfo":
        values = {}
        for attr, name, kind, _ in _INSTANCE_FIELDS:
            child = element.find(name)
            if child is None:
                continue
            if kind in _COMPOSITE_XML:
                values[attr] = _COMPOSITE_XML[kind].from_xml(child)
            elif kind == "int":
                values[attr] = _parse_int(child.text)
            elif kind == "bool":
                values[attr] = _parse_bool(child.text)
            else:
                values[attr] = child.text or ""
        return cls(**values)


@dataclass
class Application:
    name: str = ""
    instances: list[InstanceInfo] = field(default_factory=list)

    @classmethod
    def from_xml(cls, element: ET.Element) -> "Application":
        return cls(
            name=_child_text(element, "name"),
            instances=[InstanceInfo.from_xml(e) for e in element.findall("instance")],
        )


@dataclass
class Applications:
    versions_delta: int = 0
    apps_hashcode: str = ""
    applications: list[Application] = field(default_factory=list)

    @classmethod
    def from_xml(cls, element: ET.Element) -> "Applications":
        return cls(
            versions_delta=_parse_int(_child_text(element, "versions__delta")),
            apps_hashcode=_child_text(element, "apps__hashcode"),
            applications=[Application.from_xml(e) for e in element.findall("application")],
        )


def new_instance_info(host_name: str, app: str, ip: str, port: int, ttl: int, is_ssl: bool) -> InstanceInfo:
    """Build an UP instance with default data-center and lease info."""
    info = InstanceInfo(
        host_name=host_name,
        app=app,
        ip_addr=ip,
        status=UP,
        data_center_info=DataCenterInfo(name="MyOwn", class_=DEFAULT_DATA_CENTER_CLASS),
        lease_info=LeaseInfo(eviction_duration_in_secs=ttl),
    )
    port_suffix = "" if port in (80, 443) else f":{port}"
    protocol = "https" if is_ssl else "http"
    address = f"{protocol}://{host_name}{port_suffix}"
    if is_ssl:
        info.secure_vip_address = address
        info.secure_port = Port(port, True)
    else:
        info.vip_address = address
        info.port = Port(port, True)
    info.status_page_url = address + "/info"
    return info


def parse_applications(data: bytes | str) -> Applications:
    return Applications.from_xml(_root(data))


def parse_application(data: bytes | str) -> Application:
    return Application.from_xml(_root(data))


def parse_instance(data: bytes | str) -> InstanceInfo:
    return InstanceInfo.from_xml(_root(data))