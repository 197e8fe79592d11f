#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Device namespace helpers for withebs.
Chooses a free attachment slot by looking at which OS device paths already exist.
"""
import logging
import os
import string
from typing import Iterator

from withebs.errors import NoFreeSlotError
from withebs.models import DeviceSlot

logger = logging.getLogger("withebs")


def device_exists(path: str) -> bool:
    """Return True if the device path exists, False if it does not.
    Any other OS error (permissions, I/O) propagates to the caller.
    """
    try:
        os.stat(path)
    except FileNotFoundError:
        return False
    return True


def slot_suffixes(extended: bool = False) -> Iterator[str]:
    """Yield device suffixes a..z, then aa..zz when extended."""
    yield from string.ascii_lowercase
    if extended:
        for first in string.ascii_lowercase:
            for second in string.ascii_lowercase:
                yield first + second


def allocate_slot(
    platform_prefix: str = "/dev/sd",
    os_prefix: str = "/dev/xvd",
    extended: bool = False,
) -> DeviceSlot:
    """Pick the first slot whose OS device path is absent.
    Candidates that cannot be checked are logged and skipped. No remote state is touched.
    """
    for suffix in slot_suffixes(extended):
        os_name = f"{os_prefix}{suffix}"
        try:
            if device_exists(os_name):
                continue
        except OSError as e:
            logger.warning("%s: %s", os_name, e)
            continue
        slot = DeviceSlot(platform_name=f"{platform_prefix}{suffix}", os_name=os_name)
        logger.info("found device %s", os_name)
        return slot
    raise NoFreeSlotError(os_prefix)
