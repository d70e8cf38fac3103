"""Readiness by HTTP response: poll an endpoint until a response matches."""

from __future__ import annotations

import asyncio
import base64
import dataclasses
import inspect
import ipaddress
import logging
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Optional, Union

from dockertestkit.ports import ContainerPort, PortLike, container_port

log = logging.getLogger(__name__)

_DEFAULT_POLL_INTERVAL = timedelta(milliseconds=100)

ResponseMatcher = Callable[[Any], Any]


class HttpWaitError(ValueError):
    """The HTTP wait strategy could not be set up."""


@dataclass(frozen=True)
class _BasicAuth:
    username: str
    password: str = field(repr=False)

    def header_value(self) -> str:
        raw = f"{self.username}:{self.password}".encode("utf-8")
        return "Basic " + base64.b64encode(raw).decode("ascii")


@dataclass(frozen=True)
class _BearerAuth:
    token: str = field(repr=False)

    def header_value(self) -> str:
        return f"Bearer {self.token}"


def _as_interval(value: Union[timedelta, int, float]) -> timedelta:
    if isinstance(value, timedelta):
        interval = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        interval = timedelta(seconds=value)
    else:
        raise TypeError("poll interval must be a timedelta or a number of seconds")
    if interval < timedelta(0):
        raise ValueError("poll interval must not be negative")
    return interval


@dataclass(frozen=True)
class HttpWaitStrategy:
    """Wait until a request to ``path`` yields a response the matcher accepts.

    GET is used by default; the port defaults to the image's first exposed port.
    """

    path: str
    port: Optional[ContainerPort] = None
    client: Optional[urllib.request.OpenerDirector] = field(
        default=None, repr=False, compare=False
    )
    method: str = "GET"
    headers: tuple[tuple[str, str], ...] = ()
    body: Optional[bytes] = None
    auth: Optional[Union[_BasicAuth, _BearerAuth]] = None
    use_tls: bool = False
    response_matcher: Optional[ResponseMatcher] = field(
        default=None, repr=False, compare=False
    )
    poll_interval: timedelta = _DEFAULT_POLL_INTERVAL

    def with_port(self, port: PortLike) -> HttpWaitStrategy:
        """Use the host port mapped to this container port."""
        return dataclasses.replace(self, port=container_port(port))

    def with_client(self, client: urllib.request.OpenerDirector) -> HttpWaitStrategy:
        """Send requests through a custom opener (proxies, TLS contexts and so on)."""
        return dataclasses.replace(self, client=client)

    def with_method(self, method: str) -> HttpWaitStrategy:
        method = str(method)
        if not method or any(c.isspace() for c in method):
            raise HttpWaitError(f"invalid HTTP method: {method!r}")
        return dataclasses.replace(self, method=method)

    def with_header(self, key: str, value: str) -> HttpWaitStrategy:
        """Add a header, replacing any earlier one of the same name."""
        lowered = key.lower()
        kept = tuple((k, v) for k, v in self.headers if k.lower() != lowered)
        return dataclasses.replace(self, headers=kept + ((key, str(value)),))

    def with_body(self, body: Union[str, bytes]) -> HttpWaitStrategy:
        data = body.encode("utf-8") if isinstance(body, str) else bytes(body)
        return dataclasses.replace(self, body=data)

    def with_basic_auth(self, username: str, password: str) -> HttpWaitStrategy:
        """Use basic auth; overrides any Authorization header."""
        return dataclasses.replace(self, auth=_BasicAuth(str(username), str(password)))

    def with_bearer_auth(self, token: str) -> HttpWaitStrategy:
        """Use a bearer token; overrides any Authorization header."""
        return dataclasses.replace(self, auth=_BearerAuth(str(token)))

    def with_tls(self) -> HttpWaitStrategy:
        """Use the https scheme."""
        return dataclasses.replace(self, use_tls=True)

    def with_poll_interval(
        self, poll_interval: Union[timedelta, int, float]
    ) -> HttpWaitStrategy:
        return dataclasses.replace(self, poll_interval=_as_interval(poll_interval))

    def with_expected_status_code(self, status: int) -> HttpWaitStrategy:
        """Wait for a response with this status code."""
        expected = int(status)
        return self.with_response_matcher(lambda response: _status_of(response) == expected)

    def with_response_matcher(self, matcher: ResponseMatcher) -> HttpWaitStrategy:
        """Wait for a response the matcher accepts; it may be a coroutine function."""
        if not callable(matcher):
            raise TypeError("response matcher must be callable")
        return dataclasses.replace(self, response_matcher=matcher)

    def resolve_port(self, exposed_ports: Iterable[ContainerPort]) -> ContainerPort:
        """The configured port, or else the first exposed one."""
        if self.port is not None:
            return self.port
        for port in exposed_ports:
            return port
        raise HttpWaitError("container has no exposed ports")

    def base_url(self, host: str, port: int) -> str:
        """The scheme, host and port requests are sent to."""
        if isinstance(port, bool) or not isinstance(port, int) or not 0 <= port <= 0xFFFF:
            raise HttpWaitError(f"invalid URL: invalid port number {port!r}")
        host = str(host)
        if not host:
            raise HttpWaitError("invalid URL: empty host")
        try:
            if ipaddress.ip_address(host).version == 6:
                host = f"[{host}]"
        except ValueError:
            pass
        scheme = "https" if self.use_tls else "http"
        url = f"{scheme}://{host}:{port}"
        try:
            parts = urllib.parse.urlsplit(url)
            parsed_port = parts.port
        except ValueError as exc:
            raise HttpWaitError(f"invalid URL: {exc}") from exc
        if parts.path or parts.query or parts.fragment or parsed_port != port:
            raise HttpWaitError(f"invalid URL: {url}")
        return url

    def build_request(self, base_url: str) -> urllib.request.Request:
        """The request for ``path`` relative to ``base_url``."""
        url = urllib.parse.urljoin(base_url, self.path)
        try:
            request = urllib.request.Request(url, data=self.body, method=self.method)
        except ValueError as exc:
            raise HttpWaitError(f"invalid URL: {exc}") from exc
        for key, value in self.headers:
            request.add_header(key, value)
        if self.auth is not None:
            request.add_header("Authorization", self.auth.header_value())
        return request

    async def matches(self, response: Any) -> bool:
        """Whether the response satisfies the matcher."""
        if self.response_matcher is None:
            raise HttpWaitError(f"No response matcher provided for HTTP wait strategy: {self!r}")
        result = self.response_matcher(response)
        if inspect.isawaitable(result):
            result = await result
        return bool(result)

    async def wait_until_ready(self, host: str, host_port: int) -> None:
        """Poll until a response matches; connection errors are retried."""
        if self.response_matcher is None:
            raise HttpWaitError(f"No response matcher provided for HTTP wait strategy: {self!r}")
        base = self.base_url(host, host_port)
        while True:
            request = self.build_request(base)
            try:
                response = await asyncio.to_thread(self._open, request)
            except OSError as exc:
                log.debug("Error while waiting for HTTP response: %s", exc)
            else:
                try:
                    ok = await self.matches(response)
                finally:
                    response.close()
                if ok:
                    log.debug("HTTP response condition met")
                    return
                log.debug("HTTP response condition not met")
            await asyncio.sleep(self.poll_interval.total_seconds())

    def _open(self, request: urllib.request.Request) -> Any:
        opener = self.client if self.client is not None else urllib.request.build_opener()
        try:
            return opener.open(request)
        except urllib.error.HTTPError as response:
            return response


def _status_of(response: Any) -> Optional[int]:
    status = getattr(response, "status", None)
    if status is None:
        status = getattr(response, "code", None)
    return status