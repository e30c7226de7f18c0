# cli.py
from __future__ import annotations

import subprocess
import sys
from pathlib import Path

import click

from eventci.events import EventRouter
from eventci.git_facts.git import head_sha, project_name, remote_url
from eventci.model import EXEC_EVENT, Event, Project
from eventci.pipeline import build_job_spec, load_pipeline, register
from eventci.runner import CloudRunner, DockerRunner, SubmissionError
from eventci.ui.console import Console, set_console, get_console


def resolve_commit(commit_arg: str | None) -> str:
    """
    Use the --commit argument, or fall back to git HEAD.

    Raises:
        SystemExit: If no commit was given and git cannot provide one
    """
    if commit_arg is not None:
        return commit_arg

    console = get_console()
    try:
        sha = head_sha()
        console.print_debug(f"Using commit from git HEAD: {sha}")
        return sha
    except (subprocess.CalledProcessError, FileNotFoundError):
        console.print_error(
            "Could not determine commit",
            "No --commit specified and git HEAD is not available.",
            suggestion="Specify the commit explicitly:\n  eventci fire --commit <sha>",
        )
        sys.exit(1)


def resolve_project(name: str | None, repo: str | None) -> Project:
    """Build the project handle, filling gaps from the local checkout when possible."""
    if name is None:
        try:
            name = project_name()
        except (subprocess.CalledProcessError, FileNotFoundError):
            name = Path(".").resolve().name
    if repo is None:
        try:
            repo = remote_url()
        except (subprocess.CalledProcessError, FileNotFoundError):
            repo = None
    return Project(name=name, repo_url=repo)


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.pass_context
def cli(ctx, debug):
    """eventci: turn source-control events into container build jobs."""
    console = Console(debug=debug)
    set_console(console)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@cli.command()
@click.option("--commit", default=None, help="Commit the event carries (defaults to git HEAD)")
@click.option("--project", "project_arg", default=None, help="Project name (defaults to the repo name)")
@click.option("--repo", default=None, help="Repository URL (defaults to git remote origin URL)")
@click.option("--pipeline", "pipeline_arg", default=None, help="Pipeline file defining register(router, runner)")
@click.option(
    "--runner",
    "runner_kind",
    type=click.Choice(["docker", "cloud"]),
    default="docker",
    show_default=True,
    help="Where submitted jobs run",
)
@click.option("--api", default=None, envvar="EVENTCI_API_URL", help="Job intake API base URL (cloud runner)")
@click.option("--source-dir", default=".", show_default=True, help="Directory mounted at /src (docker runner)")
@click.option(
    "--check-jobs/--no-check-jobs",
    default=True,
    show_default=True,
    help="Exit non-zero if a local job fails. Local jobs always finish before eventci exits",
)
@click.pass_context
def fire(ctx, commit, project_arg, repo, pipeline_arg, runner_kind, api, source_dir, check_jobs):
    """Fire an exec event through the pipeline."""
    console = get_console()

    commit = resolve_commit(commit)
    project = resolve_project(project_arg, repo)

    if runner_kind == "cloud":
        if not api:
            console.print_error(
                "No API URL",
                "The cloud runner needs the job intake API URL.",
                suggestion="Pass --api or set EVENTCI_API_URL:\n  eventci fire --runner cloud --api http://localhost:8000",
            )
            sys.exit(1)
        runner = CloudRunner(api, commit=commit, project=project.name)
    else:
        runner = DockerRunner(source_dir, env={"EVENTCI_COMMIT": commit})

    try:
        router = EventRouter()
        register_fn = load_pipeline(pipeline_arg) if pipeline_arg else register
        register_fn(router, runner)

        event = Event(commit=commit, project=project, kind=EXEC_EVENT)
        console.print_event_fired(
            kind=event.kind,
            project=project.name,
            handler_count=len(router.handlers(event.kind)),
        )
        router.fire(event)

        if isinstance(runner, DockerRunner):
            runner.shutdown(wait=True)
            if check_jobs and runner.failed:
                sys.exit(1)

    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(130)
    except SubmissionError as e:
        console.print_error(
            "Job submission failed",
            e.message,
            details=[f"{k}: {v}" for k, v in e.details.items()] or None,
        )
        if ctx.obj.get("debug", False):
            import traceback
            traceback.print_exc()
        sys.exit(1)
    except Exception as e:
        console.print_exception(e)
        sys.exit(1)


@cli.command()
@click.option("--commit", default="", help="Commit to put on the event")
def show(commit):
    """Print the job spec an exec event would submit, without submitting it."""
    event = Event(commit=commit)
    get_console().print_job_spec(build_job_spec(event, event.project))


if __name__ == "__main__":
    cli()
