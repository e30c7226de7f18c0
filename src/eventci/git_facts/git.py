# git.py
# Thin wrapper around the Git CLI, used to fill in event defaults
# (commit, project name, repo URL) when the CLI is run inside a checkout.

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Optional


def _git(args: list[str], cwd: Optional[str] = None) -> str:
    """
    Execute a git command and return its stdout as a clean string.

    Args:
        args: List of git arguments (e.g. ["rev-parse", "HEAD"])
        cwd: Optional working directory in which to run the git command.

    Returns:
        Stdout from the git command with surrounding whitespace removed.

    Raises:
        subprocess.CalledProcessError: git exited non-zero (e.g. not a repo)
        FileNotFoundError: git is not installed
    """
    out = subprocess.check_output(
        ["git", *args],
        cwd=cwd,
        text=True,
        stderr=subprocess.DEVNULL,
    )
    return out.strip()


def repo_root(cwd: Optional[str] = None) -> Path:
    """Absolute path to the root of the enclosing Git repository."""
    return Path(_git(["rev-parse", "--show-toplevel"], cwd=cwd))


def head_sha(cwd: Optional[str] = None) -> str:
    """
    Full SHA of the current HEAD commit.

    This is what a push event would carry as its commit identifier.
    """
    return _git(["rev-parse", "HEAD"], cwd=cwd)


def remote_url(remote: str = "origin", cwd: Optional[str] = None) -> str:
    """URL configured for a remote (defaults to origin)."""
    return _git(["remote", "get-url", remote], cwd=cwd)


def project_name(cwd: Optional[str] = None) -> str:
    """
    Best-effort project name: the remote's repo name, else the checkout directory.
    """
    try:
        url = remote_url(cwd=cwd)
        return url.rstrip("/").split("/")[-1].replace(".git", "")
    except (subprocess.CalledProcessError, FileNotFoundError):
        return repo_root(cwd=cwd).name
