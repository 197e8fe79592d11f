from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from withebs.errors import VolumeError


@runtime_checkable
class VolumeBackend(Protocol):
    """Minimal contract for remote volume APIs.
    Semantics:
      - attach_volume(): ask the control plane to attach the volume at the given platform device name.
      - detach_volume(): ask the control plane to detach the volume; device may be omitted.
    Notes:
      - Each call is issued exactly once; implementations must not retry.
      - Raise VolumeError (or a subclass) for any failure reported by the remote side.
    """

    def attach_volume(self, volume_id: str, instance_id: str, device: str) -> None:
        ...

    def detach_volume(self, volume_id: str, instance_id: str, device: Optional[str] = None) -> None:
        ...


__all__ = ["VolumeBackend", "VolumeError"]
