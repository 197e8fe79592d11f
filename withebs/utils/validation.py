#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Validation and CLI reporting helpers for withebs.
"""
import re

import typer

NAME_RE = re.compile(r"^[A-Za-z0-9-]+$")


def fail(msg: str, code: int = 1) -> None:
    """Print an error on stderr and exit with the given code."""
    typer.echo(msg, err=True)
    raise typer.Exit(code=code)


def validate_volume_id(volume_id: str) -> None:
    """Validate a volume identifier. Raise ValueError on error."""
    if not NAME_RE.match(volume_id or ""):
        raise ValueError(f"Invalid volume id '{volume_id}'. Only A-Z, a-z, 0-9 and '-' allowed")
