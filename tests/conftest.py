"""Pytest configuration and fixtures."""

from __future__ import annotations

import pytest

from eventci.events import EventRouter
from eventci.model import JobSpec
from eventci.ui.console import Console, set_console


class RecordingRunner:
    """Job runner that keeps every submitted spec."""

    def __init__(self):
        self.submitted: list[JobSpec] = []

    def submit(self, spec: JobSpec) -> None:
        self.submitted.append(spec)


class FailingRunner:
    """Job runner whose submit always raises the given error."""

    def __init__(self, error: Exception):
        self.error = error
        self.calls = 0

    def submit(self, spec: JobSpec) -> None:
        self.calls += 1
        raise self.error


@pytest.fixture(autouse=True)
def console():
    """Fresh non-debug console for every test."""
    c = Console()
    set_console(c)
    return c


@pytest.fixture
def runner():
    return RecordingRunner()


@pytest.fixture
def router():
    return EventRouter()
