#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Licensed to the Apache Software Foundation (ASF) under one
# or more contributor license agreements.  See the NOTICE file
# distributed with this work for additional information
# regarding copyright ownership.  The ASF licenses this file
# to you under the Apache License, Version 2.0 (the
# "License"); you may not use this file except in compliance
# with the License.  You may obtain a copy of the License at
#
#   http://www.apache.org/licenses/LICENSE/2.0
#
# Unless required by applicable law or agreed to in writing,
# software distributed under the License is distributed on an
# "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY
# KIND, either express or implied.  See the License for the
# specific language governing permissions and limitations
# under the License.
"""
withebs: run a command with an EBS volume attached and mounted.

    withebs --volume vol-0123abcd [--mountpoint /ebs/data] -- command [args...]

The volume is attached to this instance, formatted if blank, mounted, and the
command is run. Afterwards the volume is unmounted and detached again, whether
the command succeeded, failed or was interrupted.
"""
from __future__ import annotations

import logging
import sys
from typing import List, Optional

import typer

from withebs.cli import CLICommands
from withebs.config import ConfigManager
from withebs.errors import ConfigError
from withebs.utils.validation import fail

logger = logging.getLogger("withebs")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

cli = typer.Typer(add_completion=False)


def _setup_logging(verbose: bool, level: str = "INFO") -> None:
    """Send progress to stderr when verbose; otherwise only warnings and errors."""
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    logger.propagate = False
    if not verbose:
        logger.setLevel(logging.WARNING)
        return
    try:
        logger.setLevel(getattr(logging, level.upper()))
    except AttributeError:
        logger.setLevel(logging.INFO)


@cli.command(context_settings={"allow_interspersed_args": False})
def run(
    command: Optional[List[str]] = typer.Argument(None, help="Command to run while the volume is mounted"),
    volume: str = typer.Option("", "--volume", help="The volume ID to mount"),
    mountpoint: Optional[str] = typer.Option(None, "--mountpoint", help="Where to mount the volume (default /ebs/<volume>)"),
    fs: Optional[str] = typer.Option(
        None, "--fs", help="Which filesystem to create on the volume if one does not already exist (default ext4)"
    ),
    attach_timeout: Optional[float] = typer.Option(
        None, "--attach-timeout", help="Seconds to wait for the volume to attach to the instance (default 90)"
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Print progress messages"),
    mount: bool = typer.Option(False, "--mount", help="Mount the volume and exit"),
    unmount: bool = typer.Option(False, "--unmount", help="Unmount the volume and exit"),
):
    """Attach and mount a volume, run COMMAND, then unmount and detach it."""
    _setup_logging(verbose)
    config_manager = ConfigManager()
    try:
        defaults = config_manager.load_agent_config()
    except ConfigError as e:
        fail(str(e))
    _setup_logging(verbose, defaults.logging.level)
    CLICommands(config_manager).run(
        volume,
        command=command,
        mountpoint=mountpoint,
        fs_type=fs,
        attach_timeout=attach_timeout,
        mount_only=mount,
        unmount_only=unmount,
    )


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
