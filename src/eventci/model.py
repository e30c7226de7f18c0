# model.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


EXEC_EVENT = "exec"


@dataclass(frozen=True)
class Project:
    """The project an event belongs to. Opaque to the pipeline."""
    name: str
    repo_url: Optional[str] = None
    settings: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Event:
    """
    A source-control trigger delivered to registered handlers.

    `commit` is an opaque revision identifier; nothing checks its format.
    """
    commit: str
    project: Optional[Project] = None
    kind: str = EXEC_EVENT

    @classmethod
    def from_dict(cls, data: Dict[str, Any], project: Optional[Project] = None) -> Event:
        """Build an Event from a webhook-style payload: {"commit": "...", "kind": "exec"}."""
        if "commit" not in data:
            raise ValueError("event payload is missing 'commit'")
        commit = data["commit"]
        if not isinstance(commit, str):
            raise ValueError(f"event 'commit' must be a string, got {type(commit).__name__}")
        return cls(commit=commit, project=project, kind=data.get("kind", EXEC_EVENT))


@dataclass(frozen=True)
class JobSpec:
    """
    One containerized unit of work: an image and the shell tasks to run in it.

    Tasks run in order inside a single shell session, so a `cd` in one task
    still applies to the tasks after it.
    """
    name: str
    image: str
    tasks: Tuple[str, ...]

    def script(self) -> str:
        # set -e: the first failing task ends the job
        return "\n".join(["set -e", *self.tasks])

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "image": self.image,
            "tasks": list(self.tasks),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> JobSpec:
        return cls(
            name=data["name"],
            image=data["image"],
            tasks=tuple(data["tasks"]),
        )
