# src/eventci/dsl.py
from __future__ import annotations

from typing import List, Optional

from .model import JobSpec


# ---------------------------------------------------------------------
# Functional JobSpec helper
# ---------------------------------------------------------------------

def job(name: str, image: str, *tasks: str, tasks_list: Optional[List[str]] = None) -> JobSpec:
    """
    Create a JobSpec.

    Users can write:
        job("build-go", "golang:1.9", "cd /src", "go build")
    or:
        job("build-go", "golang:1.9", tasks_list=[...])
    """
    tasks_final: List[str] = []
    if tasks_list:
        tasks_final.extend(list(tasks_list))
    tasks_final.extend(list(tasks))

    if not name:
        raise ValueError("job() needs a non-empty name")
    if not image:
        raise ValueError(f"job({name!r}) needs a container image")
    if not tasks_final:
        raise ValueError(f"job({name!r}) must have at least one task")

    return JobSpec(name=name, image=image, tasks=tuple(tasks_final))


# ---------------------------------------------------------------------
# Builder API
# ---------------------------------------------------------------------

class JobBuilder:
    def __init__(self, name: str):
        self.name = name
        self._image: str = ""
        self._tasks: list[str] = []

    def with_image(self, image: str):
        self._image = image
        return self

    def define_task(self, cmd: str):
        self._tasks.append(cmd)
        return self

    def build(self) -> JobSpec:
        if not self._tasks:
            raise ValueError(f"Job '{self.name}' has no tasks")
        return job(self.name, self._image, tasks_list=self._tasks)


def build(name: str) -> JobBuilder:
    """Convenience: build('build-go').with_image(...).define_task(...).build()"""
    return JobBuilder(name)
