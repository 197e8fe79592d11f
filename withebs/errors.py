#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Error definitions for withebs.
Every failure the pipeline can report derives from WithEbsError so the CLI can
print it and exit non-zero.
"""
from typing import Optional


class WithEbsError(Exception):
    """Base exception for all withebs errors."""

    pass


class ConfigError(WithEbsError):
    """Invalid configuration file or flags."""

    pass


class IdentityUnresolvedError(WithEbsError):
    """The instance ID or region could not be determined."""

    pass


class NoFreeSlotError(WithEbsError):
    """Every candidate device slot is already in use."""

    def __init__(self, os_prefix: str):
        super().__init__(f"cannot locate an available device to attach (all {os_prefix}* slots are taken)")
        self.os_prefix = os_prefix


class VolumeError(WithEbsError):
    """Generic remote volume API error."""

    pass


class AttachFailedError(VolumeError):
    """The attach request was rejected or the device path could not be checked."""

    pass


class DetachFailedError(VolumeError):
    """The detach request failed."""

    pass


class AttachTimeoutError(WithEbsError):
    """The OS device did not appear within the attach timeout."""

    def __init__(self, device: str, timeout: float):
        super().__init__(f"timed out after {timeout:g}s waiting for {device} to appear")
        self.device = device
        self.timeout = timeout


class ProbeFailedError(WithEbsError):
    """blkid failed with a status other than the blank-volume one."""

    pass


class FormatFailedError(WithEbsError):
    """mkfs failed."""

    pass


class MountFailedError(WithEbsError):
    """mount failed or the mount point could not be created."""

    pass


class UnmountFailedError(WithEbsError):
    """umount failed with a status other than busy or not mounted."""

    pass


class SpawnFailedError(WithEbsError):
    """The child command could not be started."""

    pass


class CommandFailedError(WithEbsError):
    """The child command exited with a non-zero status."""

    def __init__(self, argv, returncode: int):
        super().__init__(f"{argv[0]}: exit status {returncode}")
        self.argv = list(argv)
        self.returncode = returncode

    @property
    def exit_code(self) -> int:
        # negative return codes mean the child died from a signal
        if self.returncode < 0:
            return 128 - self.returncode
        return self.returncode


class RunInterruptedError(WithEbsError):
    """A termination signal arrived before the run finished."""

    def __init__(self, signum: int, name: Optional[str] = None):
        super().__init__(f"interrupted by {name or f'signal {signum}'}")
        self.signum = signum

    @property
    def exit_code(self) -> int:
        return 128 + self.signum
