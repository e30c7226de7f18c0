"""Tests for the job runners."""

import subprocess
from pathlib import Path

import pytest

import eventci.runner as runner_mod
from eventci.api_client import APIError
from eventci.containers import docker
from eventci.containers.docker import JobResult, check_docker_available, docker_command, run_job
from eventci.events import EventRouter
from eventci.model import Event, JobSpec
from eventci.pipeline import register
from eventci.runner import CloudRunner, DockerRunner, JobFailure, SubmissionError


SPEC = JobSpec(
    name="build-go",
    image="mcuadros/golang-arm:1.9-alpine",
    tasks=("cd /src", "dep ensure", "go build"),
)


class TestDockerCommand:
    def test_mounts_source_and_runs_script(self, tmp_path):
        cmd = docker_command(SPEC, tmp_path, env={"EVENTCI_COMMIT": "abc123"})

        assert cmd[:3] == ["docker", "run", "--rm"]
        assert cmd[cmd.index("-v") + 1] == f"{tmp_path.resolve()}:/src"
        assert cmd[cmd.index("-e") + 1] == "EVENTCI_COMMIT=abc123"
        assert cmd[-4:] == [SPEC.image, "sh", "-c", "set -e\ncd /src\ndep ensure\ngo build"]

    def test_run_job_failure(self, tmp_path, monkeypatch):
        def fake_run(cmd, **kwargs):
            return subprocess.CompletedProcess(cmd, 2, stdout="", stderr="dep: not found")

        monkeypatch.setattr(docker.subprocess, "run", fake_run)

        with pytest.raises(JobFailure) as exc_info:
            run_job(SPEC, tmp_path)

        assert exc_info.value.exit_code == 2
        assert exc_info.value.stderr == "dep: not found"

    def test_run_job_success(self, tmp_path, monkeypatch):
        def fake_run(cmd, **kwargs):
            return subprocess.CompletedProcess(cmd, 0, stdout="built", stderr="")

        monkeypatch.setattr(docker.subprocess, "run", fake_run)

        result = run_job(SPEC, tmp_path)

        assert result.job == "build-go"
        assert result.stdout == "built"

    def test_docker_missing(self, monkeypatch):
        def fake_run(cmd, **kwargs):
            raise FileNotFoundError("docker")

        monkeypatch.setattr(docker.subprocess, "run", fake_run)

        with pytest.raises(SubmissionError) as exc_info:
            check_docker_available("build-go")

        assert exc_info.value.kind == "docker_unavailable"
        assert exc_info.value.job == "build-go"


class TestDockerRunner:
    def test_submit_reports_success_out_of_band(self, tmp_path, monkeypatch, capsys):
        calls = []

        def fake_run_job(spec, source_dir, env=None):
            calls.append((spec, source_dir, env))
            return JobResult(job=spec.name, exit_code=0, stdout="", stderr="", duration=0.5)

        monkeypatch.setattr(runner_mod, "check_docker_available", lambda name: None)
        monkeypatch.setattr(runner_mod, "run_job", fake_run_job)

        r = DockerRunner(tmp_path, max_workers=1, env={"EVENTCI_COMMIT": "abc123"})
        assert r.submit(SPEC) is None
        r.shutdown(wait=True)

        assert calls == [(SPEC, Path(tmp_path).resolve(), {"EVENTCI_COMMIT": "abc123"})]
        assert r.results == [("build-go", "ok")]
        assert not r.failed
        out = capsys.readouterr().out
        assert "JOB SUBMITTED: build-go" in out
        assert "JOB SUCCEEDED: build-go" in out

    def test_submit_reports_failure_out_of_band(self, tmp_path, monkeypatch, capsys):
        def fake_run_job(spec, source_dir, env=None):
            raise JobFailure(job=spec.name, image=spec.image, exit_code=1, stderr="go: build failed")

        monkeypatch.setattr(runner_mod, "check_docker_available", lambda name: None)
        monkeypatch.setattr(runner_mod, "run_job", fake_run_job)

        r = DockerRunner(tmp_path, max_workers=1)
        r.submit(SPEC)
        r.shutdown(wait=True)

        assert r.failed
        out = capsys.readouterr().out
        assert "JOB FAILED: build-go" in out
        assert "Exit code: 1" in out

    def test_failure_is_kept_when_a_later_job_with_the_same_name_succeeds(self, tmp_path, monkeypatch):
        """Every exec event submits build-go; one failure must still fail the runner."""
        outcomes = [
            JobFailure(job="build-go", image=SPEC.image, exit_code=1, stderr="dep: not found"),
            JobResult(job="build-go", exit_code=0, stdout="", stderr="", duration=0.1),
        ]

        def fake_run_job(spec, source_dir, env=None):
            outcome = outcomes.pop(0)
            if isinstance(outcome, Exception):
                raise outcome
            return outcome

        monkeypatch.setattr(runner_mod, "check_docker_available", lambda name: None)
        monkeypatch.setattr(runner_mod, "run_job", fake_run_job)

        r = DockerRunner(tmp_path, max_workers=1)
        router = EventRouter()
        register(router, r)
        router.fire(Event(commit="abc123"))
        router.fire(Event(commit="def456"))
        r.shutdown(wait=True)

        assert r.results == [("build-go", "failed"), ("build-go", "ok")]
        assert r.failed

    def test_submit_raises_when_docker_missing(self, tmp_path, monkeypatch):
        def unavailable(name):
            raise SubmissionError(kind="docker_unavailable", job=name, message="Docker is not available")

        monkeypatch.setattr(runner_mod, "check_docker_available", unavailable)

        r = DockerRunner(tmp_path, max_workers=1)
        with pytest.raises(SubmissionError):
            r.submit(SPEC)
        r.shutdown()

        assert r.results == []


class FakeClient:
    base_url = "http://ci.test"

    def __init__(self, error=None):
        self.error = error
        self.calls = []

    def submit_job(self, spec, *, commit=None, project=None):
        self.calls.append((spec, commit, project))
        if self.error:
            raise self.error
        return "job-1"


class TestCloudRunner:
    def test_submit(self, capsys):
        client = FakeClient()
        r = CloudRunner("http://ci.test", commit="abc123", project="demo", client=client)

        assert r.submit(SPEC) is None

        assert client.calls == [(SPEC, "abc123", "demo")]
        assert "job-1" in capsys.readouterr().out

    def test_api_error_becomes_submission_error(self):
        r = CloudRunner("http://ci.test", client=FakeClient(APIError("Network error: refused")))

        with pytest.raises(SubmissionError) as exc_info:
            r.submit(SPEC)

        assert exc_info.value.kind == "api_error"
        assert "refused" in exc_info.value.message
        assert isinstance(exc_info.value.__cause__, APIError)
