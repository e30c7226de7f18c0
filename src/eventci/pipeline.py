# pipeline.py
from __future__ import annotations

import runpy
from pathlib import Path
from typing import Callable, Optional

from .dsl import job
from .events import EventRouter
from .model import EXEC_EVENT, Event, JobSpec, Project
from .runner import JobRunner
from .ui.console import Console, get_console


BUILD_JOB_NAME = "build-go"
BUILD_IMAGE = "mcuadros/golang-arm:1.9-alpine"
BUILD_TASKS = (
    "cd /src",
    "dep ensure",
    "go build",
)


def build_job_spec(event: Event, project: Optional[Project]) -> JobSpec:
    """The job every exec event maps to. Does not depend on the event."""
    return job(BUILD_JOB_NAME, BUILD_IMAGE, *BUILD_TASKS)


class Pipeline:
    """Turns each exec event into one build job and hands it to a runner."""

    def __init__(self, runner: JobRunner, console: Optional[Console] = None):
        self.runner = runner
        self.console = console

    def on_execution_event(self, event: Event, project: Optional[Project]) -> None:
        console = self.console or get_console()
        console.print_info(f"received push for commit {event.commit}")

        spec = build_job_spec(event, project)

        # one-way: no result is read back from the runner
        self.runner.submit(spec)


def register(router: EventRouter, runner: JobRunner, console: Optional[Console] = None) -> Pipeline:
    pipeline = Pipeline(runner, console=console)
    router.on(EXEC_EVENT, pipeline.on_execution_event)
    return pipeline


# ----------------------------------------------------------------------
# Pipeline loading (local file)
# ----------------------------------------------------------------------

RegisterFn = Callable[..., object]


def load_pipeline(path: str | Path) -> RegisterFn:
    """
    Load a pipeline definition from a python file path.

    The file must define:
      - register(router, runner) -> Any

    Returns:
      the file's register callable
    """
    pl_path = Path(path).expanduser().resolve()
    if not pl_path.exists():
        raise FileNotFoundError(f"Pipeline file not found: {pl_path}")
    if pl_path.suffix != ".py":
        raise ValueError(f"Pipeline must be a .py file, got: {pl_path.name}")

    module_name = f"eventci_pipeline_{pl_path.stem}"
    globals_dict = runpy.run_path(str(pl_path), run_name=module_name)

    register_fn = globals_dict.get("register")
    if not callable(register_fn):
        raise TypeError(
            "Pipeline file must define register(router, runner). "
            "Subscribe your handlers there, e.g. `router.on('exec', handler)`."
        )

    return register_fn
