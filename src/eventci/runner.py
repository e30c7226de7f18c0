# runner.py
from __future__ import annotations

import os
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Tuple

from .api_client import APIClient, APIError
from .containers.docker import JobResult, check_docker_available, run_job
from .model import JobSpec
from .ui.console import Console, get_console


class JobRunner(Protocol):
    """Anything that accepts a JobSpec. submit() is one-way: nothing comes back."""

    def submit(self, spec: JobSpec) -> None:
        ...


# ----------------------------------------------------------------------
# Errors
# ----------------------------------------------------------------------

@dataclass
class SubmissionError(Exception):
    """
    A job could not be handed to its runner.

    Carries enough context for clean CLI output without a traceback.
    """
    kind: str
    job: str
    message: str
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        lines = [f"{self.kind}: {self.message}", f"job={self.job}"]
        for k, v in self.details.items():
            lines.append(f"{k}={v}")
        return "\n".join(lines)


@dataclass
class JobFailure(Exception):
    job: str
    image: str
    exit_code: int
    stdout: str = ""
    stderr: str = ""

    def __str__(self) -> str:
        return f"[{self.job}] failed in {self.image} (exit={self.exit_code})"


TOOL_HINTS = {
    "docker": "Install Docker and ensure the daemon is running.",
}


# ----------------------------------------------------------------------
# Local Docker runner
# ----------------------------------------------------------------------

class DockerRunner:
    """
    Runs jobs with the local Docker daemon.

    submit() returns as soon as the job is scheduled; the terminal status is
    printed from a done-callback once the container exits.
    """

    def __init__(
        self,
        source_dir: str | Path = ".",
        *,
        max_workers: int | None = None,
        env: Dict[str, str] | None = None,
        console: Optional[Console] = None,
    ):
        self.source_dir = Path(source_dir).resolve()
        self.env = dict(env or {})
        self.console = console
        # (job name, "ok" | "failed"), one entry per finished submission
        self.results: List[Tuple[str, str]] = []

        if max_workers is None:
            c = os.cpu_count() or 2
            max_workers = max(1, c - 1)
        self._pool = ThreadPoolExecutor(max_workers=max_workers)

    def _console(self) -> Console:
        return self.console or get_console()

    def submit(self, spec: JobSpec) -> None:
        check_docker_available(spec.name)

        fut = self._pool.submit(run_job, spec, self.source_dir, env=self.env)
        fut.add_done_callback(partial(self._report, spec))
        self._console().print_job_submitted(spec.name, spec.image)

    def _report(self, spec: JobSpec, fut: Future) -> None:
        console = self._console()
        try:
            result: JobResult = fut.result()
        except JobFailure as e:
            self.results.append((spec.name, "failed"))
            console.print_failure(spec.name, e.stderr or str(e), exit_code=e.exit_code)
            return
        except Exception as e:
            self.results.append((spec.name, "failed"))
            hint = TOOL_HINTS["docker"] if isinstance(e, FileNotFoundError) else None
            console.print_failure(spec.name, str(e), hint=hint)
            return

        self.results.append((spec.name, "ok"))
        console.print_success(spec.name, duration=result.duration)

    @property
    def failed(self) -> bool:
        return any(status == "failed" for _name, status in self.results)

    def shutdown(self, wait: bool = True) -> None:
        self._pool.shutdown(wait=wait)


# ----------------------------------------------------------------------
# Cloud runner
# ----------------------------------------------------------------------

class CloudRunner:
    """Queues jobs on the eventci intake API (see eventci.cloud)."""

    def __init__(
        self,
        api_url: str,
        *,
        commit: Optional[str] = None,
        project: Optional[str] = None,
        client: Optional[APIClient] = None,
        console: Optional[Console] = None,
    ):
        self.client = client or APIClient(api_url)
        self.commit = commit
        self.project = project
        self.console = console

    def submit(self, spec: JobSpec) -> None:
        try:
            job_id = self.client.submit_job(spec, commit=self.commit, project=self.project)
        except APIError as e:
            raise SubmissionError(
                kind="api_error",
                job=spec.name,
                message=str(e),
                details={"api": self.client.base_url},
            ) from e

        console = self.console or get_console()
        console.print_job_submitted(spec.name, spec.image)
        console.print_info(f"  Job ID: {job_id}")
