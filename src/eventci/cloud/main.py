from __future__ import annotations

import uuid
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from .db import SessionLocal, create_tables
from .models import Job
from .redisq import enqueue_job

# -------------------- Startup --------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_tables()
    yield

app = FastAPI(title="eventci Job Intake", lifespan=lifespan)

JOB_STATUSES = ("running", "ok", "failed")

# -------------------- Schemas --------------------

class SubmitJobRequest(BaseModel):
    name: str = Field(min_length=1)
    image: str = Field(min_length=1)
    tasks: list[str] = Field(min_length=1)
    commit: str | None = None
    project: str | None = None

class SubmitJobResponse(BaseModel):
    job_id: str

class StatusRequest(BaseModel):
    status: str
    logs: str | None = None

class JobResponse(BaseModel):
    id: str
    name: str
    image: str
    tasks: list[str]
    commit: str | None
    project: str | None
    status: str
    logs: str | None
    created_at: datetime

def _parse_id(job_id: str) -> uuid.UUID:
    try:
        return uuid.UUID(job_id)
    except ValueError:
        raise HTTPException(status_code=404, detail="Job not found")

# -------------------- Endpoints --------------------

@app.post("/jobs", response_model=SubmitJobResponse)
async def submit_job(req: SubmitJobRequest):
    async with SessionLocal() as s:
        async with s.begin():
            job = Job(
                name=req.name,
                image=req.image,
                tasks=list(req.tasks),
                commit=req.commit,
                project=req.project,
                status="queued",
            )
            s.add(job)
            await s.flush()
            job_id = str(job.id)

    # push to Redis after DB commit
    await enqueue_job(job_id)

    return SubmitJobResponse(job_id=job_id)

@app.get("/jobs/{job_id}", response_model=JobResponse)
async def get_job(job_id: str):
    """Get job details including status and logs."""
    async with SessionLocal() as s:
        job = await s.get(Job, _parse_id(job_id))
        if not job:
            raise HTTPException(status_code=404, detail="Job not found")

        return JobResponse(
            id=str(job.id),
            name=job.name,
            image=job.image,
            tasks=job.tasks,
            commit=job.commit,
            project=job.project,
            status=job.status,
            logs=job.logs,
            created_at=job.created_at,
        )

@app.post("/jobs/{job_id}/status")
async def report_status(job_id: str, req: StatusRequest):
    if req.status not in JOB_STATUSES:
        raise HTTPException(status_code=400, detail="status must be running|ok|failed")

    async with SessionLocal() as s:
        async with s.begin():
            job = await s.get(Job, _parse_id(job_id))
            if not job:
                raise HTTPException(status_code=404, detail="Job not found")
            if job.status in ("ok", "failed"):
                raise HTTPException(status_code=409, detail=f"Job already {job.status}")

            job.status = req.status
            if req.logs:
                job.logs = req.logs

    return {"ok": True}
