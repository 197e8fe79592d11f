import logging
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from withebs.errors import AttachFailedError, DetachFailedError

from .base import VolumeBackend

logger = logging.getLogger("withebs")


class Ec2VolumeBackend(VolumeBackend):
    def __init__(self, region: str, client=None):
        self.region = region
        self.client = client or boto3.client("ec2", region_name=region)

    def attach_volume(self, volume_id: str, instance_id: str, device: str) -> None:
        logger.info("Requesting attach of %s to %s at %s", volume_id, instance_id, device)
        try:
            self.client.attach_volume(VolumeId=volume_id, InstanceId=instance_id, Device=device)
        except (ClientError, BotoCoreError) as e:
            raise AttachFailedError(f"failed to attach {volume_id} at {device}: {e}") from e

    def detach_volume(self, volume_id: str, instance_id: str, device: Optional[str] = None) -> None:
        logger.info("Requesting detach of %s from %s", volume_id, instance_id)
        params = {"VolumeId": volume_id, "InstanceId": instance_id}
        if device:
            params["Device"] = device
        try:
            self.client.detach_volume(**params)
        except (ClientError, BotoCoreError) as e:
            raise DetachFailedError(f"failed to detach {volume_id}: {e}") from e
