# Orchestration module for the acquire, run, release pipeline
from .attacher import VolumeAttacher
from .cleanup import CleanupStack
from .runner import GuardedCommandRunner
from .session import VolumeSession

__all__ = ["CleanupStack", "GuardedCommandRunner", "VolumeAttacher", "VolumeSession"]
