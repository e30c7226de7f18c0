# containers/docker.py
from __future__ import annotations

import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List

from ..model import JobSpec


# Where the source tree is mounted inside the build container
SOURCE_MOUNT = "/src"


@dataclass
class JobResult:
    job: str
    exit_code: int
    stdout: str
    stderr: str
    duration: float


# ---------------------------------------------------------------------
# Docker availability
# ---------------------------------------------------------------------

def check_docker_available(job_name: str = "") -> None:
    """Check if Docker is available, raise helpful error if not."""
    # Import here to avoid circular import
    from ..runner import TOOL_HINTS, SubmissionError

    try:
        subprocess.run(
            ["docker", "--version"],
            capture_output=True,
            check=True,
        )
    except (subprocess.CalledProcessError, FileNotFoundError):
        hint = TOOL_HINTS.get("docker", "Install Docker and ensure the daemon is running.")
        raise SubmissionError(
            kind="docker_unavailable",
            job=job_name,
            message="Docker is not available",
            details={"hint": hint},
        )


# ---------------------------------------------------------------------
# Job execution
# ---------------------------------------------------------------------

def docker_command(
    spec: JobSpec,
    source_dir: Path,
    *,
    env: Dict[str, str] | None = None,
) -> List[str]:
    """Build the `docker run` argv that executes every task in one shell."""
    cmd = ["docker", "run", "--rm"]

    # Volume mount: source_dir -> /src
    cmd.extend(["-v", f"{source_dir.resolve()}:{SOURCE_MOUNT}"])

    for key, value in (env or {}).items():
        cmd.extend(["-e", f"{key}={value}"])

    # Image and command
    cmd.append(spec.image)
    cmd.extend(["sh", "-c", spec.script()])
    return cmd


def run_job(
    spec: JobSpec,
    source_dir: Path,
    *,
    env: Dict[str, str] | None = None,
) -> JobResult:
    """Run a job to completion inside its image. Raises JobFailure on a non-zero exit."""
    # Import here to avoid circular import
    from ..runner import JobFailure

    started = time.monotonic()
    proc = subprocess.run(
        docker_command(spec, source_dir, env=env),
        shell=False,
        text=True,
        capture_output=True,
    )
    duration = time.monotonic() - started

    if proc.returncode != 0:
        raise JobFailure(
            job=spec.name,
            image=spec.image,
            exit_code=proc.returncode,
            stdout=proc.stdout[-4000:],
            stderr=proc.stderr[-4000:],
        )

    return JobResult(
        job=spec.name,
        exit_code=proc.returncode,
        stdout=proc.stdout,
        stderr=proc.stderr,
        duration=duration,
    )
