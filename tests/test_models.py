import xml.etree.ElementTree as ET

import pytest

from eurekaclient.models import (
    MetaData,
    Port,
    new_instance_info,
    parse_application,
    parse_applications,
    parse_instance,
)


def test_new_instance_plain_http():
    info = new_instance_info("host", "APP", "10.0.0.1", 8080, 30, False)
    assert info.vip_address == "http://host:8080"
    assert info.status_page_url == "http://host:8080/info"
    assert info.port == Port(8080, True)
    assert info.secure_port is None
    assert info.status == "UP"
    assert info.lease_info.eviction_duration_in_secs == 30
    assert info.data_center_info.class_ == "com.netflix.appinfo.InstanceInfo$DefaultDataCenterInfo"


def test_new_instance_ssl_default_port():
    info = new_instance_info("host", "APP", "10.0.0.1", 443, 30, True)
    assert info.secure_vip_address == "https://host"
    assert info.status_page_url == "https://host/info"
    assert info.port is None


def test_instance_json_omits_empty():
    data = new_instance_info("host", "APP", "1.2.3.4", 80, 10, False).to_json()
    assert data["port"] == {"$": 80, "@enabled": True}
    assert data["dataCenterInfo"]["name"] == "MyOwn"
    assert "securePort" not in data
    assert "instanceId" not in data


def test_instance_xml_round_trip():
    info = new_instance_info("host", "APP", "1.2.3.4", 8080, 10, False)
    info.metadata = MetaData({"zone": "a"}, "java.util.Map")
    assert parse_instance(ET.tostring(info.to_xml())) == info


def test_metadata_json_round_trip():
    meta = MetaData({"k": "v"}, "cls")
    assert meta.to_json()["@class"] == "cls"
    assert MetaData.from_json(meta.to_json()) == meta


def test_metadata_from_xml():
    el = ET.fromstring('<metadata class="c"><a>1</a><b>two</b><empty></empty></metadata>')
    meta = MetaData.from_xml(el)
    assert meta.map == {"a": "1", "b": "two"}
    assert meta.class_ == "c"


def test_parse_applications():
    doc = (
        "<applications><versions__delta>1</versions__delta><apps__hashcode>UP_1_</apps__hashcode>"
        "<application><name>APP</name><instance><hostName>h</hostName>"
        '<port enabled="true">8080</port></instance></application></applications>'
    )
    apps = parse_applications(doc)
    assert apps.versions_delta == 1
    assert apps.apps_hashcode == "UP_1_"
    assert apps.applications[0].name == "APP"
    assert apps.applications[0].instances[0].port == Port(8080, True)


def test_parse_application_name():
    assert parse_application("<application><name>X</name></application>").instances == []


def test_parse_invalid_xml():
    with pytest.raises(ET.ParseError):
        parse_instance("<instance>")