from .dsl import job, JobBuilder, build
from .events import EventRouter
from .model import Event, JobSpec, Project
from .pipeline import Pipeline, build_job_spec, register
from .runner import CloudRunner, DockerRunner, SubmissionError

__all__ = [
    "job", "JobBuilder", "build", "EventRouter", "Event", "JobSpec", "Project",
    "Pipeline", "build_job_spec", "register", "CloudRunner", "DockerRunner", "SubmissionError",
]
