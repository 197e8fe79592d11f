#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Configuration management module for withebs.
This module loads the optional defaults file and merges command-line flags into
the immutable RunConfig handed to the session.
"""
import json
import logging
import os
import posixpath
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

from withebs.errors import ConfigError
from withebs.models import AgentDefaults, MountTarget, RunConfig
from withebs.utils.validation import validate_volume_id

logger = logging.getLogger("withebs")

DEFAULT_CONFIG_PATH = "/etc/withebs/withebs.json"
MODES = ("run", "mount", "unmount")


class ConfigManager:
    """Manager for configuration operations."""

    def __init__(self, defaults: Optional[AgentDefaults] = None):
        self.defaults = defaults or AgentDefaults()

    def load_agent_config(self, cfg_path: Optional[str] = None) -> AgentDefaults:
        """Load defaults from the JSON file named by WITHEBS_CONFIG.
        A missing file means built-in defaults. Syntax errors and invalid values are
        fatal so that nothing is attached with a half-read configuration.
        """
        cfg_path = cfg_path or os.environ.get("WITHEBS_CONFIG", DEFAULT_CONFIG_PATH)
        p = Path(cfg_path)
        file_cfg: Dict[str, Any] = {}
        if p.exists():
            try:
                with p.open("r", encoding="utf-8") as f:
                    file_cfg = json.load(f)
            except (OSError, ValueError) as e:
                raise ConfigError(f"Invalid JSON in WITHEBS_CONFIG='{cfg_path}': {e}") from e
            if not isinstance(file_cfg, dict):
                raise ConfigError(f"WITHEBS_CONFIG='{cfg_path}' is not a JSON object")
            logger.debug("Loaded defaults from %s", cfg_path)
        try:
            self.defaults = AgentDefaults(**file_cfg)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration in '{cfg_path}': {e}") from e
        return self.defaults

    def default_mountpoint(self, volume_id: str) -> str:
        return posixpath.join(self.defaults.mount_root, volume_id)

    def build_run_config(
        self,
        volume_id: str,
        mountpoint: Optional[str] = None,
        fs_type: Optional[str] = None,
        attach_timeout: Optional[float] = None,
        mode: str = "run",
    ) -> RunConfig:
        """Merge flags over the loaded defaults. Raise ConfigError on invalid input."""
        if not volume_id:
            raise ConfigError("a volume id is required (--volume)")
        try:
            validate_volume_id(volume_id)
        except ValueError as e:
            raise ConfigError(str(e)) from e
        if mode not in MODES:
            raise ConfigError(f"Unknown mode: {mode}")
        if attach_timeout is not None and attach_timeout <= 0:
            raise ConfigError("--attach-timeout must be positive")
        d = self.defaults
        target = MountTarget(
            path=mountpoint or self.default_mountpoint(volume_id),
            fs_type=fs_type or d.fs_type,
        )
        return RunConfig(
            volume_id=volume_id,
            target=target,
            attach_timeout=attach_timeout if attach_timeout is not None else d.attach_timeout,
            poll_interval=d.poll_interval,
            driver=d.driver,
            mode=mode,
            platform_device_prefix=d.platform_device_prefix,
            os_device_prefix=d.os_device_prefix,
            extended_slots=d.extended_slots,
            blank_probe_exit_codes=tuple(d.blank_probe_exit_codes),
            unmount_busy_exit_codes=tuple(d.unmount_busy_exit_codes),
            metadata_url=d.metadata_url,
            metadata_timeout=d.metadata_timeout,
        )
