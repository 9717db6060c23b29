# eurekaclient

A small client library for the Eureka service registry. It keeps track of a
cluster of Eureka servers and sends each request to the current leader. When a
request fails, it waits and tries again. The wait starts at 25 ms and doubles up
to one second. After a network error it moves on to another server.

## Installation

```
pip install eurekaclient
```

## Registering an instance

```python
from eurekaclient.registry import EurekaClient
from eurekaclient.models import new_instance_info

client = EurekaClient(["http://127.0.0.1:8761/eureka/v2"])

instance = new_instance_info(
    "myhost.example.com",  # host name
    "MYAPP",               # application name
    "10.0.0.5",            # IP address
    8080,                  # port
    30,                    # eviction duration in seconds
    False,                 # use SSL
)

client.register_instance("MYAPP", instance)
client.send_heartbeat("MYAPP", "myhost.example.com")
client.unregister_instance("MYAPP", "myhost.example.com")
```

Each request goes to the leader's address with the path appended, for example
`http://127.0.0.1:8761/eureka/v2/apps/MYAPP`. For that reason a machine address
includes the server's base path.

`new_instance_info` builds an `InstanceInfo` with these settings:

* the status is `UP`;
* the data-center info is `MyOwn`;
* the lease's eviction duration is the `ttl` you pass.

It also fills in the following fields. The port is left out of the URLs when it
is 80 or 443.

* Without SSL, it sets `vip_address` and `port`.
* With SSL, it sets `secure_vip_address` and `secure_port`.
* In both cases, it sets `status_page_url`, which ends in `/info`.

`register_instance` sends the instance as JSON.

## Querying the registry

```python
apps = client.get_applications()
for app in apps.applications:
    for inst in app.instances:
        print(app.name, inst.host_name, inst.status)

app = client.get_application("MYAPP")
inst = client.get_instance("MYAPP", "myhost.example.com")
by_vip = client.get_vip("myvip")
by_svip = client.get_svip("mysecurevip")
```

Responses are parsed as XML into the dataclasses in `eurekaclient.models`:
`Applications`, `Application`, `InstanceInfo`, `Port`, `DataCenterInfo`,
`DataCenterMetadata`, `LeaseInfo` and `MetaData`. If a body is not XML, the call
raises `xml.etree.ElementTree.ParseError`.

Instance metadata is a `MetaData` value. It has two members:

* `map` holds the keys and their values;
* `class_` holds the optional `class` attribute, which is `@class` in JSON.

The functions `parse_applications`, `parse_application` and `parse_instance`
parse raw XML bodies directly.

## Lower-level requests

`EurekaClient` builds on `eurekaclient.client.Client`, which has these methods:

* `get(endpoint, cancel=None)`
* `put(endpoint, body=None)`
* `post(endpoint, body=None)`
* `delete(endpoint)`

Each method returns a `RawResponse`, which has `status_code`, `body` and
`headers`.

A request ends when the server answers with one of 200, 201, 204, 400, 403, 404
or 412. It then behaves as follows for other answers:

* On a 307 redirect, it follows the `Location` host as the new leader.
* On any other status, or on a network error, it consults the retry policy.

The policy is `client.check_retry`. It is called with these arguments:

* the cluster;
* the number of requests made so far;
* the last response, which has status 0 when there was none;
* the error.

It stops the retries by raising. When it is not set, `default_check_retry` is
used. That policy behaves as follows:

* Once every machine has been tried twice, it raises `EurekaError` with code 501.
* After a 500 response, it pauses for 200 ms before the next attempt.

`get` accepts a `threading.Event`. Setting the event cancels the request during
its retries, and the call then raises `RequestCancelledError`:

```python
import threading

cancel = threading.Event()
response = client.get("apps", cancel)
```

## Cluster

`set_cluster(machines)` and `sync_cluster()` fetch `<machine>/machines` from the
first server that answers. The reply is a list separated by `", "`. That list
becomes the new machine list, and its first entry becomes the leader. Both
methods return `True` on success and `False` if no server answered.

When no machines are given, a client uses `http://127.0.0.1:4001`.
`Client.with_tls` uses `https://127.0.0.1:4001` instead.

## Errors

Failures are raised as exceptions from `eurekaclient.errors`:

* `EurekaError` has an `error_code`, a `message`, a `cause` and an `index`.
  * Code 501 means none of the configured servers could be reached.
  * Code 502 means the instance was not found, for example when
    `send_heartbeat` gets a 404.
* `RequestCancelledError` is raised when a cancellable request is cancelled.
* `handle_error(data)` decodes a JSON error body into an `EurekaError`. It
  raises `ValueError` if the body is not such an object.

## Configuration

A client can be set up from a JSON document holding `config` and `cluster`
sections. The `timeout` value is in nanoseconds.

```python
from eurekaclient.registry import EurekaClient

client = EurekaClient.from_file("eureka.json")
```

```json
{
  "config": {"certFile": "", "keyFile": "", "caCertFiles": [], "timeout": 1000000000, "consistency": ""},
  "cluster": {"leader": "http://127.0.0.1:8761/eureka/v2", "machines": ["http://127.0.0.1:8761/eureka/v2"]}
}
```

`from_reader` does the same from any readable object.

`client.to_json()` returns the current configuration and cluster as a JSON
string in the same format.

`set_dial_timeout(seconds)` changes the connect timeout. The default is one
second.

### TLS

Use `EurekaClient.with_tls(machines, cert, key, ca_certs)` to present a client
certificate. It needs both a certificate path and a key path, and it raises
`ValueError` if either one is missing.

By default, server certificates are not checked. Each PEM file passed to
`add_root_ca` is added to the trusted set and turns checking on.
`add_root_ca` raises `ValueError` if the file holds no certificate.

## Logging

Diagnostics go through the standard `logging` module under the `eurekaclient`
logger names.

## What this package does not do

It is a library only: it has no command-line tool. It does not renew leases on
its own either. Each call to `send_heartbeat` sends one renewal, so call it on
your own schedule.