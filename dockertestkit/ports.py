"""Container ports and the host ports Docker maps them to."""

from __future__ import annotations

import ipaddress
import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

log = logging.getLogger(__name__)

_U16_PATTERN = re.compile(r"\+?[0-9]+")
_U16_MAX = 0xFFFF


def _parse_u16(text: str) -> int:
    if not _U16_PATTERN.fullmatch(text):
        raise ValueError(f"invalid digit found in string: {text!r}")
    value = int(text)
    if value > _U16_MAX:
        raise ValueError(f"number too large to fit in target type: {text!r}")
    return value


class Protocol(str, Enum):
    """Transport protocol of an exposed port."""

    TCP = "tcp"
    UDP = "udp"
    SCTP = "sctp"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ContainerPort:
    """A port exposed by a container, written as ``<number>/<protocol>``."""

    port: int
    protocol: Protocol = Protocol.TCP

    def __post_init__(self) -> None:
        if not 0 <= self.port <= _U16_MAX:
            raise ValueError(f"port out of range: {self.port}")

    @classmethod
    def tcp(cls, port: int) -> ContainerPort:
        return cls(port, Protocol.TCP)

    @classmethod
    def udp(cls, port: int) -> ContainerPort:
        return cls(port, Protocol.UDP)

    @classmethod
    def sctp(cls, port: int) -> ContainerPort:
        return cls(port, Protocol.SCTP)

    @classmethod
    def parse(cls, text: str) -> ContainerPort:
        """Parse text such as ``8080/tcp``; raises ValueError on bad input."""
        number, sep, proto = text.partition("/")
        if not sep:
            raise ValueError(f"missing protocol in container port: {text!r}")
        try:
            protocol = Protocol(proto)
        except ValueError:
            raise ValueError(f"unknown protocol in container port: {text!r}") from None
        return cls(_parse_u16(number), protocol)

    def as_u16(self) -> int:
        """Return the port number, regardless of the protocol."""
        return self.port

    def __str__(self) -> str:
        return f"{self.port}/{self.protocol}"


PortLike = Union[int, ContainerPort]


def container_port(value: PortLike) -> ContainerPort:
    """Turn a bare port number into a TCP port; pass ContainerPort through."""
    if isinstance(value, ContainerPort):
        return value
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"expected an int or ContainerPort, got {type(value).__name__}")
    return ContainerPort.tcp(value)


class PortMappingError(ValueError):
    """A port mapping reported by Docker could not be understood."""


Binding = Mapping[str, Optional[str]]


@dataclass
class Ports:
    """The exposed ports of a running container."""

    ipv4_mapping: dict[ContainerPort, int] = field(default_factory=dict)
    ipv6_mapping: dict[ContainerPort, int] = field(default_factory=dict)

    @classmethod
    def from_docker(
        cls, ports: Mapping[str, Optional[Iterable[Binding]]]
    ) -> Ports:
        """Build from the ``NetworkSettings.Ports`` object in an inspect response.

        Entries without bindings are dropped before any parsing.
        """
        present = {
            internal: [
                {"HostIp": b.get("HostIp"), "HostPort": b.get("HostPort")}
                for b in external
            ]
            for internal, external in ports.items()
            if external is not None
        }
        return cls.from_port_map(present)

    @classmethod
    def from_port_map(
        cls, ports: Mapping[str, Optional[Iterable[Binding]]]
    ) -> Ports:
        """Build from a map of ``"<number>/<proto>"`` to host bindings."""
        result = cls()
        for internal, external in ports.items():
            try:
                port = ContainerPort.parse(internal)
            except ValueError as exc:
                raise PortMappingError(f"failed to parse container port: {exc}") from exc

            for binding in external or ():
                raw_host_port = binding.get("HostPort")
                if raw_host_port is None:
                    continue
                try:
                    host_port = _parse_u16(raw_host_port)
                except ValueError as exc:
                    raise PortMappingError(f"failed to parse host port: {exc}") from exc

                host_ip = binding.get("HostIp")
                if host_ip is None:
                    continue
                try:
                    address = ipaddress.ip_address(host_ip)
                except ValueError:
                    continue

                if address.version == 4:
                    log.debug("Registering IPv4 port mapping: %s -> %s", port, host_port)
                    result.ipv4_mapping[port] = host_port
                else:
                    log.debug("Registering IPv6 port mapping: %s -> %s", port, host_port)
                    result.ipv6_mapping[port] = host_port
        return result

    def map_to_host_port_ipv4(self, container_port: PortLike) -> Optional[int]:
        """Host port for the container port on the host's IPv4 interfaces."""
        return self.ipv4_mapping.get(_as_port(container_port))

    def map_to_host_port_ipv6(self, container_port: PortLike) -> Optional[int]:
        """Host port for the container port on the host's IPv6 interfaces."""
        return self.ipv6_mapping.get(_as_port(container_port))


_as_port = container_port