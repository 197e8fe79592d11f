#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Cleanup sequencing for withebs.
Teardown actions are pushed as each resource is acquired and run in reverse
order exactly once, whichever way the run ends.
"""
import logging
from typing import Callable, List, Tuple

from withebs.errors import WithEbsError

logger = logging.getLogger("withebs")


class CleanupStack:
    """LIFO stack of teardown actions."""

    def __init__(self):
        self._actions: List[Tuple[str, Callable[[], None]]] = []

    def __len__(self) -> int:
        return len(self._actions)

    def push(self, description: str, action: Callable[[], None]) -> None:
        self._actions.append((description, action))

    def dismiss(self) -> None:
        """Forget pending actions without running them."""
        self._actions.clear()

    def unwind(self) -> List[Exception]:
        """Run every pending action, newest first.
        Failures are logged and collected; they never stop the remaining actions.
        """
        errors: List[Exception] = []
        while self._actions:
            description, action = self._actions.pop()
            logger.info("cleanup: %s", description)
            try:
                action()
            except WithEbsError as e:
                logger.warning("%s failed: %s", description, e)
                errors.append(e)
            except Exception as e:
                logger.exception("Unexpected error during %s: %s", description, e)
                errors.append(e)
        return errors
