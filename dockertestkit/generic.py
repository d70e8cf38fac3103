"""A general-purpose image description for any Docker image."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Optional

from dockertestkit.ports import ContainerPort, PortLike, container_port
from dockertestkit.wait import WaitFor


@dataclass(frozen=True)
class GenericImage:
    """Any image by name and tag, with its readiness conditions and exposed ports."""

    name: str
    tag: str
    wait_for: tuple[WaitFor, ...] = ()
    entrypoint: Optional[str] = None
    exposed_ports: tuple[ContainerPort, ...] = ()

    def with_wait_for(self, wait_for: WaitFor) -> GenericImage:
        """Add a readiness condition after the existing ones."""
        if not isinstance(wait_for, WaitFor):
            raise TypeError(f"expected a WaitFor, got {type(wait_for).__name__}")
        return dataclasses.replace(self, wait_for=self.wait_for + (wait_for,))

    def with_entrypoint(self, entrypoint: str) -> GenericImage:
        return dataclasses.replace(self, entrypoint=str(entrypoint))

    def with_exposed_port(self, port: PortLike) -> GenericImage:
        """Expose a port; a bare number means TCP."""
        return dataclasses.replace(
            self, exposed_ports=self.exposed_ports + (container_port(port),)
        )

    def ready_conditions(self) -> list[WaitFor]:
        """The readiness conditions, in the order they were added."""
        return list(self.wait_for)

    def descriptor(self) -> str:
        """The image reference, ``name:tag``."""
        return f"{self.name}:{self.tag}"