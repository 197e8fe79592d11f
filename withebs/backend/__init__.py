# Backends for the external collaborators of withebs
from .volume import VolumeBackend, get_backend_by_driver

__all__ = ["VolumeBackend", "get_backend_by_driver"]
