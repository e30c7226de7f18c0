# eventci_pipeline.py
# Pipeline for eventci itself: run the test suite in a Python image on every push.
#
#   eventci fire --pipeline eventci_pipeline.py
from __future__ import annotations

from eventci.dsl import job
from eventci.ui.console import get_console


def register(router, runner):
    def on_exec(event, project):
        get_console().print_info(f"received push for commit {event.commit}")
        runner.submit(
            job(
                "test-python",
                "python:3.12-slim",
                "cd /src",
                "pip install -e '.[test]'",
                "pytest -q",
            )
        )

    router.on("exec", on_exec)
