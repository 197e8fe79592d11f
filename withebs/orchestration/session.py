#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Volume session for withebs.
Acquires the volume (slot, attach, filesystem, mount), runs the command, and
releases everything it acquired in reverse order on every exit path.
"""
import logging
from typing import Callable, List, Optional

from withebs.backend.volume import VolumeBackend, get_backend_by_driver
from withebs.errors import CommandFailedError, RunInterruptedError
from withebs.models import InstanceIdentity, Mount, RunConfig
from withebs.utils.devices import allocate_slot
from withebs.utils.filesystem import ensure_filesystem, mount_device, unmount_target
from withebs.utils.metadata import resolve_instance_identity

from .attacher import VolumeAttacher
from .cleanup import CleanupStack
from .runner import GuardedCommandRunner, SignalLatch, signal_name, signals_ignored

logger = logging.getLogger("withebs")


class VolumeSession:
    """One invocation: at most one volume, one slot and one mount."""

    def __init__(
        self,
        config: RunConfig,
        backend_factory: Optional[Callable[[InstanceIdentity], VolumeBackend]] = None,
        runner: Optional[GuardedCommandRunner] = None,
        identity_resolver: Optional[Callable[[], InstanceIdentity]] = None,
    ):
        self.config = config
        self.backend_factory = backend_factory or (lambda identity: get_backend_by_driver(config.driver, identity))
        self.runner = runner or GuardedCommandRunner()
        self.identity_resolver = identity_resolver or (
            lambda: resolve_instance_identity(config.metadata_url, config.metadata_timeout)
        )
        self.cleanup = CleanupStack()

    def execute(self, argv: Optional[List[str]] = None) -> int:
        """Dispatch on the configured mode. Returns 0 or raises WithEbsError."""
        if self.config.mode == "mount":
            return self.mount_only()
        if self.config.mode == "unmount":
            return self.unmount_only()
        return self.run(argv or [])

    def run(self, argv: List[str]) -> int:
        """Mount the volume, run argv, then unmount and detach whatever happened."""
        identity = self.identity_resolver()
        backend = self.backend_factory(identity)
        # termination signals keep a handler from acquisition through teardown
        with SignalLatch() as latch:
            try:
                self._acquire(identity, backend, latch)
                outcome = self.runner.run(argv)
            finally:
                self._release()
        if outcome.interrupted:
            raise RunInterruptedError(outcome.signum, signal_name(outcome.signum))
        if outcome.returncode:
            raise CommandFailedError(argv, outcome.returncode)
        return 0

    def mount_only(self) -> int:
        """Mount the volume and leave it attached and mounted on success."""
        identity = self.identity_resolver()
        backend = self.backend_factory(identity)
        with SignalLatch() as latch:
            try:
                mount = self._acquire(identity, backend, latch)
            except BaseException:
                self._release()
                raise
        self.cleanup.dismiss()
        logger.info("%s is mounted on %s", self.config.volume_id, mount.target.path)
        return 0

    def unmount_only(self) -> int:
        """Unmount the target and detach the volume; the first failure is reported."""
        identity = self.identity_resolver()
        backend = self.backend_factory(identity)
        cfg = self.config
        self.cleanup.push(
            f"detach {cfg.volume_id}", lambda: backend.detach_volume(cfg.volume_id, identity.instance_id)
        )
        self.cleanup.push(
            f"unmount {cfg.target.path}", lambda: unmount_target(cfg.target, cfg.unmount_busy_exit_codes)
        )
        errors = self._release()
        if errors:
            raise errors[0]
        return 0

    def _acquire(self, identity: InstanceIdentity, backend: VolumeBackend, latch: SignalLatch) -> Mount:
        # signals are only acted on at latch.check(), after each step's undo is on the stack
        cfg = self.config
        slot = allocate_slot(cfg.platform_device_prefix, cfg.os_device_prefix, cfg.extended_slots)
        attacher = VolumeAttacher(backend, poll_interval=cfg.poll_interval)
        attacher.attach(cfg.volume_id, identity, slot, cfg.attach_timeout, self.cleanup, checkpoint=latch.check)
        latch.check()
        if ensure_filesystem(slot.os_name, cfg.target.fs_type, cfg.blank_probe_exit_codes):
            logger.info("created %s filesystem on %s", cfg.target.fs_type, cfg.volume_id)
        latch.check()
        mount = mount_device(slot.os_name, cfg.target)
        self.cleanup.push(f"unmount {cfg.target.path}", lambda: self._unmount(mount))
        latch.check()
        return mount

    def _unmount(self, mount: Mount) -> None:
        unmount_target(mount.target, self.config.unmount_busy_exit_codes)
        mount.unmounted()

    def _release(self) -> List[Exception]:
        with signals_ignored():
            return self.cleanup.unwind()
