from __future__ import annotations

import redis.asyncio as redis
from .settings import REDIS_URL, QUEUE_NAME

r = redis.from_url(REDIS_URL, decode_responses=True)

async def enqueue_job(job_id: str) -> None:
    await r.rpush(QUEUE_NAME, job_id)  # FIFO: push right

