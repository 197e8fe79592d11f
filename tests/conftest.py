"""
Pytest configuration and fixtures for withebs tests.

Devices live in a temporary directory, the remote API is a recording fake and
blkid/mkfs/mount/umount are replaced by a fake subprocess.run.
"""

import subprocess
from pathlib import Path
from typing import List, Optional

import pytest

from withebs.errors import AttachFailedError, DetachFailedError
from withebs.models import InstanceIdentity, MountTarget, RunConfig, RunOutcome


# =============================================================================
# Fakes
# =============================================================================

class FakeBackend:
    """VolumeBackend that records calls and materializes the OS device on attach."""

    def __init__(self, events: List[str], platform_prefix: str, os_prefix: str, appear: bool = True):
        self.events = events
        self.platform_prefix = platform_prefix
        self.os_prefix = os_prefix
        self.appear = appear
        self.fail_attach = False
        self.fail_detach = False
        self.attach_calls = []
        self.detach_calls = []

    def attach_volume(self, volume_id, instance_id, device):
        self.events.append("attach")
        self.attach_calls.append((volume_id, instance_id, device))
        if self.fail_attach:
            raise AttachFailedError(f"failed to attach {volume_id} at {device}: IncorrectState")
        if self.appear:
            Path(self.os_prefix + device[len(self.platform_prefix):]).touch()

    def detach_volume(self, volume_id, instance_id, device=None):
        self.events.append("detach")
        self.detach_calls.append((volume_id, instance_id, device))
        if self.fail_detach:
            raise DetachFailedError(f"failed to detach {volume_id}: VolumeInUse")


class FakeTools:
    """Stand-in for subprocess.run covering blkid, mkfs.*, mount and umount."""

    EVENTS = {"blkid": "blkid", "mkfs": "format", "mount": "mount", "umount": "unmount"}

    def __init__(self, events: List[str]):
        self.events = events
        self.codes = {"blkid": 0, "mkfs": 0, "mount": 0, "umount": 0}
        self.calls = []

    def __call__(self, cmd, **kwargs):
        tool = cmd[0].split(".")[0]
        self.calls.append(list(cmd))
        self.events.append(self.EVENTS[tool])
        code = self.codes[tool]
        return subprocess.CompletedProcess(cmd, code, stdout="", stderr="" if code == 0 else f"{tool} failed")

    def count(self, event: str) -> int:
        return self.events.count(event)


class FakeRunner:
    """Records the command instead of running it."""

    def __init__(self, events: List[str], outcome: Optional[RunOutcome] = None):
        self.events = events
        self.outcome = outcome or RunOutcome(returncode=0, pid=4242)
        self.argv = None

    def run(self, argv):
        self.events.append("run")
        self.argv = list(argv)
        return self.outcome


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def events() -> List[str]:
    return []


@pytest.fixture
def dev_dir(tmp_path) -> Path:
    path = tmp_path / "dev"
    path.mkdir()
    return path


@pytest.fixture
def os_prefix(dev_dir) -> str:
    return str(dev_dir / "xvd")


@pytest.fixture
def identity() -> InstanceIdentity:
    return InstanceIdentity(instance_id="i-0123456789abcdef0", region="us-east-1")


@pytest.fixture
def backend(events, os_prefix) -> FakeBackend:
    return FakeBackend(events, "/dev/sd", os_prefix)


@pytest.fixture
def tools(events, monkeypatch) -> FakeTools:
    fake = FakeTools(events)
    monkeypatch.setattr("withebs.utils.filesystem.subprocess.run", fake)
    return fake


@pytest.fixture
def runner(events) -> FakeRunner:
    return FakeRunner(events)


@pytest.fixture
def run_config(tmp_path, os_prefix) -> RunConfig:
    return RunConfig(
        volume_id="vol-0abc",
        target=MountTarget(path=str(tmp_path / "mnt" / "vol-0abc"), fs_type="ext4"),
        attach_timeout=2.0,
        poll_interval=0.01,
        os_device_prefix=os_prefix,
    )
