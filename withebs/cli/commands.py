#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
CLI commands module for withebs.
This module turns parsed flags into a session run and maps its outcome to an exit code.
"""
import logging
from typing import List, Optional

from withebs.config import ConfigManager
from withebs.errors import CommandFailedError, RunInterruptedError, WithEbsError
from withebs.orchestration import VolumeSession
from withebs.utils.validation import fail

logger = logging.getLogger("withebs")


class CLICommands:
    """CLI commands handler."""

    def __init__(self, config_manager: ConfigManager, session_factory=None):
        self.config_manager = config_manager
        self.session_factory = session_factory or VolumeSession

    def run(
        self,
        volume: str,
        command: Optional[List[str]] = None,
        mountpoint: Optional[str] = None,
        fs_type: Optional[str] = None,
        attach_timeout: Optional[float] = None,
        mount_only: bool = False,
        unmount_only: bool = False,
    ) -> None:
        """Validate flags, run the session and exit with its status."""
        command = list(command or [])
        if mount_only and unmount_only:
            fail("--mount and --unmount are mutually exclusive")
        mode = "mount" if mount_only else "unmount" if unmount_only else "run"
        if mode == "run" and not command:
            fail("no command specified")
        if mode != "run" and command:
            logger.warning("ignoring command %r in --%s mode", command, mode)
        try:
            config = self.config_manager.build_run_config(
                volume, mountpoint=mountpoint, fs_type=fs_type, attach_timeout=attach_timeout, mode=mode
            )
            session = self.session_factory(config)
            session.execute(command)
        except (CommandFailedError, RunInterruptedError) as e:
            fail(str(e), code=e.exit_code)
        except WithEbsError as e:
            fail(str(e))
