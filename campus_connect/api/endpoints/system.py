# campus_connect/api/endpoints/system.py

import time

import psutil
from fastapi import APIRouter, Request
from loguru import logger
from pydantic import BaseModel

from campus_connect.core.database import test_connection

router = APIRouter(tags=["System"])

STARTED_AT = time.monotonic()


class SystemMetrics(BaseModel):
    status: str
    version: str
    cpu: float
    ram: float
    disk: float
    uptime: int
    database: str
    db_latency: float


async def probe_database() -> tuple[str, float]:
    """Returns (status, round-trip ms) for a `SELECT 1`."""
    started = time.perf_counter()
    try:
        await test_connection()
    except Exception:
        logger.exception("Database probe failed")
        return "Error", 0.0
    return "Connected", round((time.perf_counter() - started) * 1000, 2)


def _disk_percent() -> float:
    try:
        return psutil.disk_usage("/").percent
    except OSError:
        return 0.0


@router.get("/api/metrics", response_model=SystemMetrics)
async def metrics(request: Request):
    database, latency = await probe_database()
    return SystemMetrics(
        status="Online",
        version=request.app.version,
        cpu=psutil.cpu_percent(interval=None),
        ram=psutil.virtual_memory().percent,
        disk=_disk_percent(),
        uptime=int(time.monotonic() - STARTED_AT),
        database=database,
        db_latency=latency,
    )


@router.get("/")
async def root(request: Request):
    return {
        "status": "ok",
        "service": request.app.title,
        "version": request.app.version,
        "database": request.app.state.db_status,
    }
