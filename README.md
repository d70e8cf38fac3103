# dockertestkit

Building blocks for integration tests that run against real Docker
containers. The package describes *what* to run and *when it counts as
ready*:

- `dockertestkit.generic.GenericImage`: an image name and tag, readiness
  conditions, an optional entrypoint and the ports to expose.
- `dockertestkit.ports`: `ContainerPort` (such as `8080/tcp`), `Ports` (the
  host ports Docker mapped them to, on IPv4 and IPv6) and `PortMappingError`.
- `dockertestkit.mounts`: `Mount`, `MountType` and `AccessMode` for bind
  mounts, named volumes and tmpfs mounts.
- `dockertestkit.logs`: `LogFrame`, `LogStream`, `LogConsumer`,
  `FunctionConsumer`, `LoggingConsumer` and `as_consumer`.
- `dockertestkit.wait.WaitFor` and the strategies behind it:
  `LogWaitStrategy`, `HealthWaitStrategy`, `ExitWaitStrategy`
  (in `dockertestkit.strategies`) and `HttpWaitStrategy`
  (in `dockertestkit.http_wait`).
- `dockertestkit.strategies.CmdWaitFor`: conditions for commands run inside
  a container.

Everything is built on the standard library; there are no runtime
dependencies. All descriptions are immutable: each `with_*` method returns
a new object.

## Describing an image

```python
from dockertestkit.generic import GenericImage
from dockertestkit.ports import ContainerPort
from dockertestkit.wait import WaitFor

image = (
    GenericImage("simple_web_server", "latest")
    .with_exposed_port(ContainerPort.tcp(80))
    .with_wait_for(WaitFor.message_on_stdout("server is ready"))
    .with_wait_for(WaitFor.seconds(1))
)

print(image.descriptor())        # simple_web_server:latest
print(image.ready_conditions())  # the conditions, in the order added
```

`with_exposed_port` also takes a bare integer, which means TCP.

## Ports

`ContainerPort` renders and parses the form Docker uses:

```python
from dockertestkit.ports import ContainerPort, Ports, container_port

port = ContainerPort.parse("18333/udp")
assert port == ContainerPort.udp(18333)
assert str(port) == "18333/udp"
assert port.as_u16() == 18333
assert container_port(8080) == ContainerPort.tcp(8080)
```

`ContainerPort.parse` raises `ValueError` on a missing or unknown protocol
or a number outside 0–65535.

`Ports.from_docker` reads the `NetworkSettings.Ports` section of a container
inspection and sorts the bindings by the IP version of their `HostIp`;
bindings without a host port or with an unparsable `HostIp` are skipped:

```python
ports = Ports.from_docker({
    "8333/tcp": [
        {"HostIp": "0.0.0.0", "HostPort": "33077"},
        {"HostIp": "::", "HostPort": "49718"},
    ],
    "18443/tcp": None,
})

assert ports.map_to_host_port_ipv4(8333) == 33077
assert ports.map_to_host_port_ipv6(ContainerPort.tcp(8333)) == 49718
assert ports.map_to_host_port_ipv4(18443) is None
```

A container port or host port that cannot be parsed raises
`PortMappingError`. `Ports.from_port_map` does the same for a plain map of
`"<number>/<protocol>"` to bindings.

## Mounts

```python
from dockertestkit.mounts import AccessMode, Mount

data = Mount.bind_mount("/srv/fixtures", "/data").with_access_mode(AccessMode.READ_ONLY)
cache = Mount.volume_mount("build-cache", "/cache")
scratch = Mount.tmpfs_mount("/tmp/scratch")

print(data.to_api())
# {'Target': '/data', 'Source': '/srv/fixtures', 'Type': 'bind', 'ReadOnly': True}
```

Mounts are read-write unless `with_access_mode` says otherwise.

## Readiness conditions

```python
from dockertestkit.http_wait import HttpWaitStrategy
from dockertestkit.strategies import CmdWaitFor, ExitWaitStrategy, LogWaitStrategy
from dockertestkit.wait import WaitFor

WaitFor.log(LogWaitStrategy.stdout("server is ready").with_times(2))
WaitFor.message_on_stderr("server will be listening to")
WaitFor.healthcheck()
WaitFor.exit(ExitWaitStrategy().with_exit_code(0))
WaitFor.http(HttpWaitStrategy("/").with_expected_status_code(200))
WaitFor.millis(500)
WaitFor.millis_in_env_var("EXTRA_STARTUP_DELAY_MS")

CmdWaitFor.exit_code(0)
CmdWaitFor.message_on_stdout("foo")
```

`WaitFor.millis_in_env_var` gives `WaitFor.nothing()` when the variable is
unset or is not a whole number. Poll intervals default to 100 ms and accept
a `timedelta` or a number of seconds.

### HTTP readiness

`HttpWaitStrategy` builds the request (`with_method`, `with_header`,
`with_body`, `with_basic_auth`, `with_bearer_auth`, `with_tls`,
`with_client` for a custom `urllib.request.OpenerDirector`) and can poll
an endpoint itself:

```python
import asyncio

strategy = HttpWaitStrategy("/health").with_expected_status_code(200)
asyncio.run(strategy.wait_until_ready("127.0.0.1", 8080))
```

`wait_until_ready` retries connection errors and keeps polling until the
response matcher accepts a response; it raises `HttpWaitError` if no
matcher was set. A matcher may be a plain function or a coroutine function.
`resolve_port` picks the configured port, or else the first exposed one.

## Container output

```python
import asyncio
from dockertestkit.logs import LogFrame, LoggingConsumer, as_consumer

consumer = LoggingConsumer().with_prefix("web").with_stderr_level("ERROR")
asyncio.run(consumer.accept(LogFrame.stdout(b"Hello from Docker!\n")))

printer = as_consumer(lambda frame: print(frame.text, end=""))
```

`LoggingConsumer` writes each frame through the standard `logging` module at
INFO by default, with trailing line breaks removed. `LogStream` wraps an
async iterable of frames; `into_stdout` and `into_stderr` filter it, and
`split` hands back separate stdout and stderr streams fed by a background
task, with an error delivered to both.

## Test servers and commands

Two small HTTP servers are included for use inside test images:

```
dockertestkit-simple-web-server [--host HOST] [--port PORT]
dockertestkit-no-expose-port [--host HOST] [--port PORT]
```

`dockertestkit-simple-web-server` listens on port 80 by default, prints
`server will be listening to the port <port>` on stderr and
`server is ready` twice on stdout, and answers `GET /` with the file name it
was started under. `dockertestkit-no-expose-port` listens on port 8080 by
default, prints `listening on <host>:<port>` and answers `GET /` with
`Hello, World!`. Both shut down on Ctrl+C or SIGTERM.

To build the `no_expose_port:latest` and `simple_web_server:latest` images:

```
dockertestkit-build-images [ROOT]
```

It runs `docker build` with the dockerfiles
`ROOT/src/dockerfiles/no_expose_port.dockerfile` and
`ROOT/src/dockerfiles/simple_web_server.dockerfile` (ROOT defaults to the
current directory, which is also the build context). On failure it prints
Docker's error output and exits with status 1. From Python,
`build_test_images(root)` does the same and raises `ImageBuildError`.

## What the package does not do

- It does not talk to a Docker daemon: it cannot create, start, stop or
  remove containers, pull images, create networks or run commands in a
  container. Images, mounts, ports and readiness conditions are described
  here for a runner to act on.
- Apart from `HttpWaitStrategy.wait_until_ready`, the readiness conditions
  are descriptions only; nothing here reads a container's logs, health or
  exit status.
- The dockerfiles used by `dockertestkit-build-images` are not shipped with
  the package; they must be supplied under `ROOT/src/dockerfiles`.

## Running the tests

```
pip install -e ".[test]"
pytest
```