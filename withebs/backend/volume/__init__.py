"""
Remote volume API implementations for withebs.
The control plane is reached through a VolumeBackend; "ec2" talks to the
AWS EC2 API with boto3.
"""
from typing import TYPE_CHECKING

from .base import VolumeBackend, VolumeError
from .ec2 import Ec2VolumeBackend

if TYPE_CHECKING:
    from withebs.models import InstanceIdentity


def get_backend_by_driver(driver: str, identity: "InstanceIdentity") -> VolumeBackend:
    """
    Create the volume backend for a driver name.
    Args:
        driver: Volume API driver name ("ec2")
        identity: Resolved identity of this instance; selects the API region
    Returns:
        VolumeBackend instance bound to the instance's region
    Raises:
        ValueError: If the driver is unknown
    """
    drv = (driver or "ec2").lower()
    if drv == "ec2":
        return Ec2VolumeBackend(identity.region)
    raise ValueError(f"Unknown volume driver: {driver}")


__all__ = [
    "VolumeBackend",
    "VolumeError",
    "Ec2VolumeBackend",
    "get_backend_by_driver",
]
