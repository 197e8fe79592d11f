#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Data models for withebs.
This module contains the data classes used throughout the application.
"""
import dataclasses
import enum
from typing import List, Literal, Optional, Tuple

from pydantic import BaseModel, Field


class AttachmentState(str, enum.Enum):
    UNATTACHED = "unattached"
    ATTACHING = "attaching"
    ATTACHED = "attached"
    DETACHING = "detaching"
    DETACHED = "detached"


class MountState(str, enum.Enum):
    UNMOUNTED = "unmounted"
    MOUNTED = "mounted"


@dataclasses.dataclass(frozen=True)
class InstanceIdentity:
    """Instance the volume is attached to."""

    instance_id: str
    region: str


@dataclasses.dataclass(frozen=True)
class DeviceSlot:
    """One attachment point, as named by the control plane and by the guest OS."""

    platform_name: str
    os_name: str


@dataclasses.dataclass(frozen=True)
class MountTarget:
    """Where to mount the volume and which filesystem to create on a blank volume."""

    path: str
    fs_type: str = "ext4"


@dataclasses.dataclass(frozen=True)
class RunConfig:
    """Immutable settings for one invocation, built once at startup."""

    volume_id: str
    target: MountTarget
    attach_timeout: float = 90.0
    poll_interval: float = 1.0
    driver: str = "ec2"
    mode: str = "run"
    platform_device_prefix: str = "/dev/sd"
    os_device_prefix: str = "/dev/xvd"
    extended_slots: bool = False
    blank_probe_exit_codes: Tuple[int, ...] = (2,)
    unmount_busy_exit_codes: Tuple[int, ...] = (32,)
    metadata_url: str = "http://169.254.169.254"
    metadata_timeout: float = 2.0


@dataclasses.dataclass(frozen=True)
class RunOutcome:
    """How the guarded command finished: by exiting, or by a signal arriving first."""

    returncode: Optional[int] = None
    signum: Optional[int] = None
    pid: Optional[int] = None

    @property
    def interrupted(self) -> bool:
        return self.signum is not None


_ATTACHMENT_TRANSITIONS = {
    AttachmentState.UNATTACHED: {AttachmentState.ATTACHING},
    AttachmentState.ATTACHING: {AttachmentState.ATTACHED, AttachmentState.DETACHING, AttachmentState.UNATTACHED},
    AttachmentState.ATTACHED: {AttachmentState.DETACHING},
    AttachmentState.DETACHING: {AttachmentState.DETACHED},
    AttachmentState.DETACHED: set(),
}


@dataclasses.dataclass
class Attachment:
    """Tracks one volume attachment through its lifecycle."""

    volume_id: str
    identity: InstanceIdentity
    slot: DeviceSlot
    state: AttachmentState = AttachmentState.UNATTACHED

    def advance(self, new_state: AttachmentState) -> None:
        if new_state not in _ATTACHMENT_TRANSITIONS[self.state]:
            raise ValueError(f"illegal attachment transition {self.state.value} -> {new_state.value}")
        self.state = new_state


@dataclasses.dataclass
class Mount:
    """Tracks whether the target is currently mounted by this run."""

    device: str
    target: MountTarget
    state: MountState = MountState.UNMOUNTED

    def mounted(self) -> None:
        if self.state is MountState.MOUNTED:
            raise ValueError(f"{self.target.path} is already mounted")
        self.state = MountState.MOUNTED

    def unmounted(self) -> None:
        self.state = MountState.UNMOUNTED


class LoggingDefaults(BaseModel):
    level: str = "INFO"


class AgentDefaults(BaseModel):
    """Settings read from the optional JSON config file; flags override them."""

    driver: Literal["ec2"] = Field(default="ec2", description="Remote volume API driver")
    fs_type: str = Field(default="ext4", description="Filesystem created on blank volumes")
    attach_timeout: float = Field(default=90.0, gt=0, description="Seconds to wait for the device to appear")
    poll_interval: float = Field(default=1.0, gt=0, description="Seconds between device existence checks")
    mount_root: str = Field(default="/ebs", description="Parent directory of the default mount path")
    platform_device_prefix: str = "/dev/sd"
    os_device_prefix: str = "/dev/xvd"
    extended_slots: bool = Field(default=False, description="Also try two-letter device suffixes after z")
    blank_probe_exit_codes: List[int] = Field(default_factory=lambda: [2])
    unmount_busy_exit_codes: List[int] = Field(default_factory=lambda: [32])
    metadata_url: str = "http://169.254.169.254"
    metadata_timeout: float = Field(default=2.0, gt=0)
    logging: LoggingDefaults = Field(default_factory=LoggingDefaults)
