from eurekaclient.config import Config


def test_default_timeout_one_second():
    assert Config().to_dict()["timeout"] == 1_000_000_000


def test_round_trip():
    cfg = Config(cert_file="c.pem", key_file="k.pem", ca_cert_files=["ca.pem"], dial_timeout=2.5)
    assert Config.from_dict(cfg.to_dict()) == cfg


def test_missing_fields():
    cfg = Config.from_dict({"caCertFiles": None})
    assert cfg.ca_cert_files == []
    assert cfg.dial_timeout == 0
    assert cfg.cert_file == ""