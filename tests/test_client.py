import io
import json
import threading

import pytest
import requests
import responses

from eurekaclient.client import Client, RawRequest, default_check_retry
from eurekaclient.cluster import Cluster
from eurekaclient.errors import EurekaError, RequestCancelledError
from eurekaclient.response import RawResponse

LEADER = "http://127.0.0.1:4001"


@pytest.fixture
def mocked():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


def test_default_client_uses_local_machine_and_one_second_timeout():
    client = Client([])
    assert client.cluster.leader == LEADER
    assert client.cluster.machines == [LEADER]
    assert client.config.dial_timeout == 1.0


def test_set_dial_timeout():
    client = Client(["http://a:1"])
    client.set_dial_timeout(2.5)
    assert client.config.dial_timeout == 2.5


def test_get_returns_body_and_sends_json_content_type(mocked):
    mocked.add(responses.GET, LEADER + "/apps", body=b"<applications/>", status=200,
               headers={"X-Test": "yes"})
    client = Client([])
    result = client.get("apps")
    assert result.status_code == 200
    assert result.body == b"<applications/>"
    assert result.headers["X-Test"] == "yes"
    assert mocked.calls[0].request.headers["Content-Type"] == "application/json"


def test_put_and_post_send_body(mocked):
    mocked.add(responses.PUT, LEADER + "/apps/a/i", status=200)
    mocked.add(responses.POST, LEADER + "/apps/a", status=204)
    client = Client([])
    assert client.put("apps/a/i", b"x").status_code == 200
    assert client.post("apps/a", b'{"k": 1}').status_code == 204
    assert mocked.calls[0].request.body == b"x"
    assert mocked.calls[1].request.body == b'{"k": 1}'


def test_delete_and_not_found_is_a_valid_status(mocked):
    mocked.add(responses.DELETE, LEADER + "/apps/a/i", status=404)
    client = Client([])
    assert client.delete("apps/a/i").status_code == 404


def test_unreachable_single_machine_raises_not_reachable(mocked):
    client = Client(["http://down.invalid:1"])
    with pytest.raises(EurekaError) as info:
        client.get("apps")
    assert info.value.error_code == 501
    assert info.value.message == "All the given peers are not reachable"
    assert info.value.cause == "Tried to connect to each peer twice and failed"


def test_switches_to_next_machine_after_network_errors(mocked):
    mocked.add(responses.GET, "http://b:2/apps", body=b"ok", status=200)
    client = Client(["http://a:1", "http://b:2"])
    result = client.get("apps")
    assert result.body == b"ok"
    assert client.cluster.leader == "http://b:2"


def test_custom_check_retry_sees_unexpected_status(mocked):
    mocked.add(responses.GET, LEADER + "/apps", status=500)
    seen = []

    def check(cluster, num_reqs, last_response, error):
        seen.append((num_reqs, last_response.status_code))
        raise RuntimeError("stop")

    client = Client([])
    client.check_retry = check
    with pytest.raises(RuntimeError, match="stop"):
        client.get("apps")
    assert seen == [(2, 500)]


def test_retries_until_valid_status(mocked):
    mocked.add(responses.GET, LEADER + "/apps", status=503)
    mocked.add(responses.GET, LEADER + "/apps", body=b"later", status=200)
    client = Client([])
    client.check_retry = lambda *args: None
    result = client.get("apps")
    assert result.body == b"later"
    assert len(mocked.calls) == 2


def test_cancelled_request_raises(mocked):
    mocked.add(responses.GET, LEADER + "/apps", status=200)
    cancel = threading.Event()
    cancel.set()
    client = Client([])
    with pytest.raises(RequestCancelledError):
        client.get("apps", cancel)


def test_send_request_with_raw_request(mocked):
    mocked.add(responses.GET, LEADER + "/vips/v", body=b"v", status=201)
    client = Client([])
    result = client.send_request(RawRequest("GET", "vips/v"))
    assert (result.status_code, result.body) == (201, b"v")


def test_sync_cluster_updates_machines_and_leader(mocked):
    mocked.add(responses.GET, LEADER + "/machines", body=b"http://a:1, http://b:2")
    client = Client([])
    assert client.sync_cluster() is True
    assert client.cluster.machines == ["http://a:1", "http://b:2"]
    assert client.cluster.leader == "http://a:1"


def test_set_cluster_tries_next_machine_and_fails_when_none_answer(mocked):
    mocked.add(responses.GET, "http://b:2/base/machines", body=b"http://c:3")
    client = Client([])
    assert client.set_cluster(["http://a:1", "http://b:2/base"]) is True
    assert client.cluster.leader == "http://c:3"
    assert client.set_cluster(["http://x:9"]) is False
    assert client.cluster.leader == "http://c:3"


def test_to_json_round_trips_through_reader():
    client = Client(["http://a:1", "http://b:2"])
    client.set_dial_timeout(3.0)
    document = client.to_json()
    decoded = json.loads(document)
    assert decoded["cluster"] == {"leader": "http://a:1", "machines": ["http://a:1", "http://b:2"]}
    restored = Client.from_reader(io.StringIO(document))
    assert restored.cluster == client.cluster
    assert restored.config == client.config


def test_from_file(tmp_path):
    path = tmp_path / "client.json"
    path.write_text(json.dumps({"cluster": {"leader": "http://a:1", "machines": ["http://a:1"]}}))
    client = Client.from_file(path)
    assert client.cluster.leader == "http://a:1"
    assert client.config.cert_file == ""


def test_from_reader_with_cert_but_no_key():
    document = json.dumps({"config": {"certFile": "cert.pem"}, "cluster": {}})
    with pytest.raises(ValueError, match="Require both cert and key path"):
        Client.from_reader(io.StringIO(document))


def test_from_reader_rejects_bad_json():
    with pytest.raises(ValueError):
        Client.from_reader(io.StringIO("not json"))


def test_with_tls_requires_cert_and_key():
    with pytest.raises(ValueError):
        Client.with_tls([], "cert.pem", "", [])


def test_with_tls_missing_files(tmp_path):
    with pytest.raises(OSError):
        Client.with_tls([], str(tmp_path / "c.pem"), str(tmp_path / "k.pem"), [])


def test_add_root_ca_rejects_file_without_certificate(tmp_path):
    path = tmp_path / "ca.pem"
    path.write_text("no certificate here")
    client = Client([])
    with pytest.raises(ValueError, match="Unable to load caCert"):
        client.add_root_ca(str(path))
    assert client.config.ca_cert_files == [str(path)]
    assert client.session.verify is True


def test_add_root_ca_missing_file(tmp_path):
    client = Client([])
    with pytest.raises(OSError):
        client.add_root_ca(str(tmp_path / "missing.pem"))
    assert client.config.ca_cert_files == []


def test_default_check_retry_stops_after_two_rounds():
    cluster = Cluster.from_machines(["http://a:1", "http://b:2"])
    error = requests.ConnectionError("down")
    assert default_check_retry(cluster, 3, RawResponse(0), error) is None
    with pytest.raises(EurekaError) as info:
        default_check_retry(cluster, 4, RawResponse(0), error)
    assert info.value.error_code == 501