#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Volume attach/detach for withebs.
Attaching is one remote request followed by a bounded wait for the OS device.
"""
import logging
import time
from typing import Callable, Optional

from withebs.backend.volume import VolumeBackend
from withebs.errors import AttachFailedError, AttachTimeoutError, DetachFailedError, VolumeError
from withebs.models import Attachment, AttachmentState, DeviceSlot, InstanceIdentity
from withebs.utils.devices import device_exists

from .cleanup import CleanupStack

logger = logging.getLogger("withebs")


class VolumeAttacher:
    """Attaches one volume through a VolumeBackend and waits for it to show up."""

    def __init__(self, backend: VolumeBackend, poll_interval: float = 1.0):
        self.backend = backend
        self.poll_interval = poll_interval

    def attach(
        self,
        volume_id: str,
        identity: InstanceIdentity,
        slot: DeviceSlot,
        timeout: float,
        cleanup: CleanupStack,
        checkpoint: Optional[Callable[[], None]] = None,
    ) -> Attachment:
        """Attach the volume at the slot and wait until its OS device exists.
        The detach is pushed onto the cleanup stack as soon as the remote side accepts
        the request, so a timed out or interrupted wait still detaches. checkpoint is
        called before every device check and may raise to abandon the wait.
        """
        attachment = Attachment(volume_id=volume_id, identity=identity, slot=slot)
        logger.info("attaching %s to %s", volume_id, slot.platform_name)
        attachment.advance(AttachmentState.ATTACHING)
        try:
            self.backend.attach_volume(volume_id, identity.instance_id, slot.platform_name)
        except AttachFailedError:
            attachment.advance(AttachmentState.UNATTACHED)
            raise
        except VolumeError as e:
            attachment.advance(AttachmentState.UNATTACHED)
            raise AttachFailedError(f"failed to attach {volume_id} at {slot.platform_name}: {e}") from e
        cleanup.push(f"detach {volume_id} from {slot.platform_name}", lambda: self.detach(attachment))
        self.wait_for_device(attachment, timeout, checkpoint)
        return attachment

    def wait_for_device(
        self, attachment: Attachment, timeout: float, checkpoint: Optional[Callable[[], None]] = None
    ) -> None:
        device = attachment.slot.os_name
        deadline = time.monotonic() + timeout
        while True:
            if checkpoint is not None:
                checkpoint()
            try:
                if device_exists(device):
                    break
            except OSError as e:
                raise AttachFailedError(f"failed to attach {device}: {e}") from e
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise AttachTimeoutError(device, timeout)
            time.sleep(min(self.poll_interval, remaining))
        attachment.advance(AttachmentState.ATTACHED)
        logger.info("%s is attached as %s", attachment.volume_id, device)

    def detach(self, attachment: Attachment) -> None:
        """Issue the detach request; the attachment ends DETACHED even if it fails."""
        if attachment.state in (AttachmentState.DETACHED, AttachmentState.UNATTACHED):
            return
        logger.info("detaching %s from %s", attachment.volume_id, attachment.slot.platform_name)
        attachment.advance(AttachmentState.DETACHING)
        try:
            self.backend.detach_volume(
                attachment.volume_id, attachment.identity.instance_id, attachment.slot.platform_name
            )
        except DetachFailedError:
            raise
        except VolumeError as e:
            raise DetachFailedError(f"failed to detach {attachment.volume_id}: {e}") from e
        finally:
            attachment.advance(AttachmentState.DETACHED)
