"""HTTP client that sends requests to a cluster of Eureka servers."""

from __future__ import annotations

import json
import logging
import os
import posixpath
import random
import ssl
import tempfile
import threading
import time
import weakref
from dataclasses import dataclass
from typing import Callable, IO
from urllib.parse import urljoin, urlsplit, urlunsplit

import requests

from .cluster import Cluster
from .config import Config
from .errors import ERR_CODE_EUREKA_NOT_REACHABLE, EurekaError, RequestCancelledError
from .response import RawResponse, is_valid_status

DEFAULT_TLS_MACHINE = "https://127.0.0.1:4001"

_INITIAL_SLEEP = 0.025
_MAX_SLEEP = 1.0

_log = logging.getLogger(__name__)

CheckRetry = Callable[[Cluster, int, RawResponse, BaseException], None]


@dataclass
class RawRequest:
    """A request relative to the current leader, optionally cancellable."""

    method: str
    relative_path: str
    body: bytes | None = None
    cancel: threading.Event | None = None


def default_check_retry(
    cluster: Cluster, num_reqs: int, last_response: RawResponse, error: BaseException
) -> None:
    """Stop after trying every peer twice; pause briefly after a server error.

    Raises EurekaError to stop retrying.
    """
    if num_reqs >= 2 * len(cluster.machines):
        raise EurekaError.from_code(
            ERR_CODE_EUREKA_NOT_REACHABLE, "Tried to connect to each peer twice and failed", 0
        )
    code = last_response.status_code if last_response is not None else 0
    if code == 500:
        time.sleep(0.2)
    _log.warning("bad response status code %d", code)


def _remove_file(path: str) -> None:
    try:
        os.remove(path)
    except OSError:
        pass


class Client:
    """Client for a Eureka cluster.

    ``check_retry`` decides whether a failed request is retried; it is called
    with the cluster, the number of requests made so far, the last response
    (status 0 when there was none) and the failure, and raises to stop.
    """

    def __init__(self, machines=None):
        self.config = Config(dial_timeout=1.0)
        self.cluster = Cluster.from_machines(machines)
        self.check_retry: CheckRetry | None = None
        self._ca_pems: list[str] = []
        self._bundle_finalizer: weakref.finalize | None = None
        self._init_http_session()

    # -- construction -----------------------------------------------------

    @classmethod
    def with_tls(cls, machines, cert: str, key: str, ca_certs=()) -> "Client":
        """Create a client that presents a client certificate over HTTPS."""
        client = cls(list(machines or []) or [DEFAULT_TLS_MACHINE])
        client.config.cert_file = cert
        client.config.key_file = key
        client.config.ca_cert_files = []
        client._init_https_session(cert, key)
        for ca_cert in ca_certs or ():
            client.add_root_ca(ca_cert)
        return client

    @classmethod
    def from_file(cls, path) -> "Client":
        """Create a client from a JSON configuration file."""
        with open(path, "rb") as handle:
            return cls.from_reader(handle)

    @classmethod
    def from_reader(cls, reader: IO) -> "Client":
        """Create a client from a readable object holding JSON configuration."""
        data = json.loads(reader.read())
        if not isinstance(data, dict):
            raise ValueError("client configuration is not a JSON object")
        client = cls()
        client.config = Config.from_dict(data.get("config") or {})
        client.cluster = Cluster.from_dict(data.get("cluster") or {})
        if client.config.cert_file:
            client._init_https_session(client.config.cert_file, client.config.key_file)
        ca_files = list(client.config.ca_cert_files)
        client.config.ca_cert_files = []
        for ca_cert in ca_files:
            client.add_root_ca(ca_cert)
        return client

    def _init_http_session(self) -> None:
        self.session = requests.Session()
        self.session.verify = False

    def _init_https_session(self, cert: str, key: str) -> None:
        if not cert or not key:
            raise ValueError("Require both cert and key path")
        # Fail early on an unreadable or mismatched key pair.
        ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT).load_cert_chain(cert, key)
        self.session = requests.Session()
        self.session.cert = (cert, key)
        self.session.verify = False

    # -- configuration ----------------------------------------------------

    def set_dial_timeout(self, timeout: float) -> None:
        """Set the connect timeout, in seconds."""
        self.config.dial_timeout = timeout

    def add_root_ca(self, ca_cert: str) -> None:
        """Trust the certificates in a PEM file; turns on server verification.

        Raises OSError if the file cannot be read and ValueError if it holds
        no certificate. The file is recorded in the configuration either way.
        """
        if getattr(self, "session", None) is None:
            raise RuntimeError("Client has not been initialized yet!")
        with open(ca_cert, "rb") as handle:
            pem = handle.read().decode("utf-8", errors="replace")
        try:
            ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT).load_verify_locations(cadata=pem)
            loaded = True
        except (ssl.SSLError, ValueError):
            loaded = False
        if loaded:
            self._ca_pems.append(pem)
        self._refresh_verify()
        self.config.ca_cert_files.append(ca_cert)
        if not loaded:
            raise ValueError("Unable to load caCert")

    def _refresh_verify(self) -> None:
        if not self._ca_pems:
            self.session.verify = True
            return
        fd, path = tempfile.mkstemp(suffix=".pem")
        with os.fdopen(fd, "w", encoding="utf-8") as bundle:
            bundle.write("\n".join(self._ca_pems))
        if self._bundle_finalizer is not None:
            self._bundle_finalizer()
        self._bundle_finalizer = weakref.finalize(self, _remove_file, path)
        self.session.verify = path

    # -- cluster ------------------------------------------------------------

    def set_cluster(self, machines) -> bool:
        """Update the cluster from the first of the given machines that answers."""
        return self._sync_cluster(list(machines))

    def sync_cluster(self) -> bool:
        """Update the cluster from the machines already known."""
        return self._sync_cluster(list(self.cluster.machines))

    def _sync_cluster(self, machines: list[str]) -> bool:
        for machine in machines:
            try:
                response = self.session.get(
                    self._create_http_path(machine, "machines"),
                    timeout=(self.config.dial_timeout, None),
                )
                body = response.content
            except requests.RequestException:
                continue
            finally:
                pass
            self.cluster.update_from_str(body.decode("utf-8", errors="replace"))
            self.cluster.switch_leader(0)
            _log.debug("sync.machines %s", ", ".join(self.cluster.machines))
            return True
        return False

    @staticmethod
    def _create_http_path(server_name: str, sub_path: str) -> str:
        parts = urlsplit(server_name)
        path = posixpath.normpath(posixpath.join(parts.path, sub_path))
        if parts.netloc and not path.startswith("/"):
            path = "/" + path
        return urlunsplit((parts.scheme or "http", parts.netloc, path, parts.query, parts.fragment))

    def _http_path(self, use_random: bool, *segments: str) -> str:
        machine = random.choice(self.cluster.machines) if use_random else self.cluster.leader
        return machine + "".join("/" + segment for segment in segments)

    # -- serialisation ------------------------------------------------------

    def to_json(self) -> str:
        """The configuration and cluster as a JSON document."""
        return json.dumps({"config": self.config.to_dict(), "cluster": self.cluster.to_dict()})

    # -- requests -------------------------------------------------------------

    def get(self, endpoint: str, cancel: threading.Event | None = None) -> RawResponse:
        _log.debug("get %s [%s]", endpoint, self.cluster.leader)
        return self.send_request(RawRequest("GET", endpoint, None, cancel))

    def put(self, endpoint: str, body: bytes | None = None) -> RawResponse:
        _log.debug("put %s, %s, [%s]", endpoint, body, self.cluster.leader)
        return self.send_request(RawRequest("PUT", endpoint, body))

    def post(self, endpoint: str, body: bytes | None = None) -> RawResponse:
        _log.debug("post %s, %s, [%s]", endpoint, body, self.cluster.leader)
        return self.send_request(RawRequest("POST", endpoint, body))

    def delete(self, endpoint: str) -> RawResponse:
        _log.debug("delete %s [%s]", endpoint, self.cluster.leader)
        return self.send_request(RawRequest("DELETE", endpoint))

    def send_request(self, request: RawRequest) -> RawResponse:
        """Send a request to the leader, retrying and switching machines on failure."""
        check_retry = self.check_retry or default_check_retry
        cancel = request.cancel
        num_reqs = 1
        sleep = _INITIAL_SLEEP
        attempt = 0

        while True:
            if attempt > 0:
                if cancel is not None:
                    if cancel.wait(sleep):
                        raise RequestCancelledError()
                else:
                    time.sleep(sleep)
                sleep = min(sleep * 2, _MAX_SLEEP)

            _log.debug("Connecting to eureka: attempt %d for %s", attempt + 1, request.relative_path)
            http_path = self._http_path(False, request.relative_path)
            _log.debug("send.request.to %s | method %s", http_path, request.method)

            response = None
            error: BaseException | None = None
            try:
                response = self.session.request(
                    request.method,
                    http_path,
                    data=request.body if request.body is not None else b"",
                    headers={"Content-Type": "application/json"},
                    timeout=(self.config.dial_timeout, None),
                    stream=True,
                )
            except requests.RequestException as exc:
                error = exc

            if cancel is not None and cancel.is_set():
                if response is not None:
                    response.close()
                raise RequestCancelledError()

            num_reqs += 1

            if error is not None:
                _log.error("network error: %s", error)
                check_retry(self.cluster, num_reqs, RawResponse(0), error)
                self.cluster.switch_leader(attempt % len(self.cluster.machines))
                attempt += 1
                continue

            _log.debug("recv.response.from %s", http_path)

            if is_valid_status(response.status_code):
                try:
                    body = response.content
                except (requests.exceptions.ChunkedEncodingError, requests.exceptions.ContentDecodingError):
                    if cancel is not None and cancel.is_set():
                        raise RequestCancelledError() from None
                    # The connection closed early; treat the body as empty.
                    body = b""
                    _log.debug("recv.success %s", http_path)
                    return self._raw(response, body)
                except requests.RequestException:
                    if cancel is not None and cancel.is_set():
                        raise RequestCancelledError() from None
                else:
                    _log.debug("recv.success %s", http_path)
                    return self._raw(response, body)

            if response.status_code == 307:
                location = response.headers.get("Location")
                if not location:
                    _log.warning("http: no Location header in response")
                else:
                    target = urljoin(http_path, location)
                    self.cluster.update_leader_from_url(target)
                    _log.debug("recv.response.relocate %s", target)
                response.close()
                attempt += 1
                continue

            last = RawResponse(response.status_code, b"", dict(response.headers))
            response.close()
            check_retry(self.cluster, num_reqs, last, RuntimeError("Unexpected HTTP status code"))
            attempt += 1

    @staticmethod
    def _raw(response: requests.Response, body: bytes) -> RawResponse:
        headers = dict(response.headers)
        response.close()
        return RawResponse(response.status_code, body, headers)