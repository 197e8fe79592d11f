"""
Unit tests for configuration loading.
"""

import json

import pytest

from withebs.config import ConfigManager
from withebs.errors import ConfigError


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    path = tmp_path / "withebs.json"
    monkeypatch.setenv("WITHEBS_CONFIG", str(path))
    return path


class TestLoadAgentConfig:
    def test_missing_file_uses_defaults(self, config_file):
        defaults = ConfigManager().load_agent_config()

        assert defaults.fs_type == "ext4"
        assert defaults.attach_timeout == 90.0
        assert defaults.blank_probe_exit_codes == [2]
        assert defaults.unmount_busy_exit_codes == [32]

    def test_file_values_override_defaults(self, config_file):
        config_file.write_text(json.dumps({"fs_type": "xfs", "mount_root": "/data", "blank_probe_exit_codes": [2, 4]}))

        defaults = ConfigManager().load_agent_config()

        assert defaults.fs_type == "xfs"
        assert defaults.mount_root == "/data"
        assert defaults.blank_probe_exit_codes == [2, 4]

    def test_invalid_json_is_fatal(self, config_file):
        config_file.write_text("{not json")

        with pytest.raises(ConfigError, match="Invalid JSON"):
            ConfigManager().load_agent_config()

    def test_invalid_value_is_fatal(self, config_file):
        config_file.write_text(json.dumps({"attach_timeout": -1}))

        with pytest.raises(ConfigError):
            ConfigManager().load_agent_config()

    def test_non_object_is_fatal(self, config_file):
        config_file.write_text("[]")

        with pytest.raises(ConfigError):
            ConfigManager().load_agent_config()

    def test_unknown_driver_is_fatal(self, config_file):
        config_file.write_text(json.dumps({"driver": "gce"}))

        with pytest.raises(ConfigError, match="driver"):
            ConfigManager().load_agent_config()


class TestBuildRunConfig:
    def test_defaults(self, config_file):
        manager = ConfigManager()
        manager.load_agent_config()

        config = manager.build_run_config("vol-0abc")

        assert config.target.path == "/ebs/vol-0abc"
        assert config.target.fs_type == "ext4"
        assert config.attach_timeout == 90.0
        assert config.mode == "run"
        assert config.blank_probe_exit_codes == (2,)

    def test_flags_override_file(self, config_file):
        config_file.write_text(json.dumps({"fs_type": "xfs", "attach_timeout": 30}))
        manager = ConfigManager()
        manager.load_agent_config()

        config = manager.build_run_config(
            "vol-0abc", mountpoint="/mnt/data", fs_type="btrfs", attach_timeout=10, mode="mount"
        )

        assert config.target.path == "/mnt/data"
        assert config.target.fs_type == "btrfs"
        assert config.attach_timeout == 10
        assert config.mode == "mount"

    def test_mount_root_from_file(self, config_file):
        config_file.write_text(json.dumps({"mount_root": "/volumes"}))
        manager = ConfigManager()
        manager.load_agent_config()

        assert manager.build_run_config("vol-9").target.path == "/volumes/vol-9"

    @pytest.mark.parametrize("volume", ["", "vol/../etc", "vol 1"])
    def test_invalid_volume(self, volume):
        with pytest.raises(ConfigError):
            ConfigManager().build_run_config(volume)

    def test_non_positive_timeout(self):
        with pytest.raises(ConfigError):
            ConfigManager().build_run_config("vol-1", attach_timeout=0)

    def test_config_is_immutable(self):
        config = ConfigManager().build_run_config("vol-1")

        with pytest.raises(AttributeError):
            config.volume_id = "vol-2"
