#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Filesystem and mount helpers for withebs.
Wraps blkid, mkfs, mount and umount; each tool only contributes its exit status.
"""
import logging
import subprocess
from pathlib import Path
from typing import Iterable

from withebs.errors import FormatFailedError, MountFailedError, ProbeFailedError, UnmountFailedError
from withebs.models import Mount, MountTarget

logger = logging.getLogger("withebs")

# Force flags per filesystem; unknown types run mkfs.<type> without flags
MKFS_COMMANDS = {
    "ext4": ["mkfs.ext4", "-F"],
    "ext3": ["mkfs.ext3", "-F"],
    "ext2": ["mkfs.ext2", "-F"],
    "xfs": ["mkfs.xfs", "-f"],
    "btrfs": ["mkfs.btrfs", "-f"],
}


def _run(cmd):
    logger.debug("exec: %s", " ".join(cmd))
    return subprocess.run(cmd, capture_output=True, text=True, check=False)


def _detail(result) -> str:
    stderr = (result.stderr or "").strip()
    return f"exit status {result.returncode}" + (f": {stderr}" if stderr else "")


def mkfs_device(device_path: str, fstype: str) -> None:
    """Create a filesystem on the device."""
    cmd = MKFS_COMMANDS.get(fstype, [f"mkfs.{fstype}"]) + [device_path]
    logger.info("Creating %s filesystem on %s", fstype, device_path)
    try:
        result = _run(cmd)
    except OSError as e:
        raise FormatFailedError(f"failed to create {fstype} filesystem on {device_path}: {e}") from e
    if result.returncode != 0:
        raise FormatFailedError(f"failed to create {fstype} filesystem on {device_path}: {_detail(result)}")


def ensure_filesystem(device_path: str, fstype: str, blank_exit_codes: Iterable[int] = (2,)) -> bool:
    """Make sure the device carries a filesystem, creating one on a blank volume.
    Returns True if a filesystem was created.
    """
    try:
        result = _run(["blkid", device_path])
    except OSError as e:
        raise ProbeFailedError(f"cannot probe {device_path}: {e}") from e
    if result.returncode == 0:
        logger.info("%s already has a filesystem", device_path)
        return False
    if result.returncode in set(blank_exit_codes):
        mkfs_device(device_path, fstype)
        return True
    raise ProbeFailedError(f"cannot probe {device_path}: {_detail(result)}")


def mount_device(device_path: str, target: MountTarget) -> Mount:
    """Create the mount point and mount the device on it."""
    logger.info("mounting %s on %s", device_path, target.path)
    try:
        Path(target.path).mkdir(parents=True, exist_ok=True)
        result = _run(["mount", device_path, target.path])
    except OSError as e:
        raise MountFailedError(f"cannot mount {device_path} on {target.path}: {e}") from e
    if result.returncode != 0:
        raise MountFailedError(f"cannot mount {device_path} on {target.path}: {_detail(result)}")
    mount = Mount(device=device_path, target=target)
    mount.mounted()
    return mount


def unmount_target(target: MountTarget, busy_exit_codes: Iterable[int] = (32,)) -> None:
    """Unmount the target path.
    A busy or not-mounted status counts as success.
    """
    logger.info("unmounting %s", target.path)
    try:
        result = _run(["umount", target.path])
    except OSError as e:
        raise UnmountFailedError(f"failed to unmount {target.path}: {e}") from e
    if result.returncode == 0:
        return
    if result.returncode in set(busy_exit_codes):
        logger.info("%s is busy or not mounted (%s), leaving it", target.path, _detail(result))
        return
    raise UnmountFailedError(f"failed to unmount {target.path}: {_detail(result)}")
