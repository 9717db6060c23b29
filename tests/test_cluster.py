import pytest

from eurekaclient.cluster import Cluster


def test_empty_machines_default():
    cl = Cluster.from_machines([])
    assert cl.machines == ["http://127.0.0.1:4001"]
    assert cl.leader == "http://127.0.0.1:4001"


def test_first_machine_is_leader():
    cl = Cluster.from_machines(["http://a", "http://b"])
    assert cl.leader == "http://a"


def test_switch_leader():
    cl = Cluster.from_machines(["http://a", "http://b"])
    cl.switch_leader(1)
    assert cl.leader == "http://b"
    with pytest.raises(IndexError):
        cl.switch_leader(5)


def test_update_from_str():
    cl = Cluster.from_machines([])
    cl.update_from_str("http://a, http://b")
    assert cl.machines == ["http://a", "http://b"]


def test_update_leader_from_url():
    cl = Cluster.from_machines([])
    cl.update_leader_from_url("https://host:8080/eureka/apps")
    assert cl.leader == "https://host:8080"
    cl.update_leader_from_url("//other:9")
    assert cl.leader == "http://other:9"


def test_dict_round_trip():
    cl = Cluster.from_machines(["http://a", "http://b"])
    assert Cluster.from_dict(cl.to_dict()) == cl