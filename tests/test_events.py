"""Tests for the in-process event router."""

import pytest

from eventci.model import Event, Project


def test_handlers_run_in_registration_order(router):
    calls = []
    router.on("exec", lambda e, p: calls.append(("first", e.commit)))
    router.on("exec", lambda e, p: calls.append(("second", e.commit)))

    assert router.fire(Event(commit="abc123")) == 2
    assert calls == [("first", "abc123"), ("second", "abc123")]


def test_project_is_passed_to_handler(router):
    project = Project(name="demo")
    seen = []
    router.on("exec", lambda e, p: seen.append(p))

    router.fire(Event(commit="abc123", project=project))

    assert seen == [project]


def test_no_handlers(router):
    assert router.fire(Event(commit="abc123")) == 0


def test_handler_error_propagates(router):
    def boom(event, project):
        raise RuntimeError("handler failed")

    router.on("exec", boom)

    with pytest.raises(RuntimeError, match="handler failed"):
        router.fire(Event(commit="abc123"))


def test_handlers_returns_a_copy(router):
    router.on("exec", lambda e, p: None)
    router.handlers("exec").clear()

    assert len(router.handlers("exec")) == 1
