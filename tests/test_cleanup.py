"""
Unit tests for the cleanup stack.
"""

from withebs.errors import UnmountFailedError
from withebs.orchestration.cleanup import CleanupStack


def test_unwinds_in_reverse_order():
    calls = []
    stack = CleanupStack()
    stack.push("detach", lambda: calls.append("detach"))
    stack.push("unmount", lambda: calls.append("unmount"))

    errors = stack.unwind()

    assert calls == ["unmount", "detach"]
    assert errors == []


def test_failure_does_not_stop_remaining_actions():
    calls = []

    def broken_unmount():
        raise UnmountFailedError("failed to unmount /ebs/vol-1: exit status 1")

    stack = CleanupStack()
    stack.push("detach", lambda: calls.append("detach"))
    stack.push("unmount", broken_unmount)

    errors = stack.unwind()

    assert calls == ["detach"]
    assert len(errors) == 1
    assert isinstance(errors[0], UnmountFailedError)


def test_unexpected_errors_are_collected():
    stack = CleanupStack()
    stack.push("boom", lambda: 1 / 0)

    errors = stack.unwind()

    assert isinstance(errors[0], ZeroDivisionError)


def test_actions_run_exactly_once():
    calls = []
    stack = CleanupStack()
    stack.push("detach", lambda: calls.append("detach"))

    stack.unwind()
    stack.unwind()

    assert calls == ["detach"]
    assert len(stack) == 0


def test_dismiss_drops_pending_actions():
    calls = []
    stack = CleanupStack()
    stack.push("detach", lambda: calls.append("detach"))

    stack.dismiss()

    assert stack.unwind() == []
    assert calls == []
