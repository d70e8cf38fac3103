"""Filesystem mounts for containers."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class MountType(str, Enum):
    """Kind of mount."""

    BIND = "bind"
    VOLUME = "volume"
    TMPFS = "tmpfs"

    def __str__(self) -> str:
        return self.value


class AccessMode(str, Enum):
    """Access mode of a mount."""

    READ_ONLY = "ro"
    READ_WRITE = "rw"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Mount:
    """A filesystem mount: bind, named volume or tmpfs."""

    access_mode: AccessMode
    mount_type: MountType
    source: Optional[str]
    target: Optional[str]

    @classmethod
    def bind_mount(cls, host_path: str, container_path: str) -> Mount:
        """Mount a host file or directory into the container."""
        return cls(AccessMode.READ_WRITE, MountType.BIND, str(host_path), str(container_path))

    @classmethod
    def volume_mount(cls, name: str, container_path: str) -> Mount:
        """Mount a named volume; it outlives the container."""
        return cls(AccessMode.READ_WRITE, MountType.VOLUME, str(name), str(container_path))

    @classmethod
    def tmpfs_mount(cls, container_path: str) -> Mount:
        """Mount an in-memory filesystem, removed with the container."""
        return cls(AccessMode.READ_WRITE, MountType.TMPFS, None, str(container_path))

    def with_access_mode(self, access_mode: AccessMode) -> Mount:
        """Return a copy with the given access mode."""
        return dataclasses.replace(self, access_mode=AccessMode(access_mode))

    def to_api(self) -> dict[str, Any]:
        """Render as a Docker Engine API mount object."""
        api: dict[str, Any] = {}
        if self.target is not None:
            api["Target"] = self.target
        if self.source is not None:
            api["Source"] = self.source
        api["Type"] = self.mount_type.value
        api["ReadOnly"] = self.access_mode is AccessMode.READ_ONLY
        return api