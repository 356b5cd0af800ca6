import logging
import os
import time
from typing import List

import psutil
from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.concurrency import run_in_threadpool

from .config import MAX_DEPTH, MAX_INSPECT_SIZE, VERSION
from .models.schemas import BoxInfo, HealthResponse, InspectResponse, ViolationInfo
from .services.dump import render
from .services.walker import BoxWalker, as_type_code

logger = logging.getLogger(__name__)

app = FastAPI(
    title="ISOBMFF Inspection API",
    description="Box structure inspection for MP4 files and fragmented segments",
    version=VERSION,
)


def init_services():
    """Reset counters; called by main.py on startup"""
    app.state.start_time = time.time()
    app.state.active_tasks = 0
    app.state.inspections = 0


def _too_large() -> HTTPException:
    return HTTPException(status_code=413, detail=f"Body exceeds the {MAX_INSPECT_SIZE} byte limit")


async def _read_body(request: Request) -> bytes:
    """Read the request body, giving up as soon as it passes MAX_INSPECT_SIZE"""
    content_length = request.headers.get("content-length", "")
    if content_length.isdigit() and int(content_length) > MAX_INSPECT_SIZE:
        raise _too_large()

    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > MAX_INSPECT_SIZE:
            raise _too_large()
    return bytes(body)


def _dump_codes(dump_types: List[str]) -> List[bytes]:
    try:
        return [as_type_code(t) for t in dump_types]
    except (ValueError, UnicodeEncodeError) as e:
        raise HTTPException(status_code=422, detail=str(e))


def inspect_bytes(data: bytes, dump_types: List[bytes], raw: bool, start_time: float) -> InspectResponse:
    """Traverse data and convert the report for the API"""
    report = BoxWalker(data, dump_types=dump_types, max_depth=MAX_DEPTH).run()

    boxes = [
        BoxInfo(
            offset=event.offset,
            depth=event.depth,
            type=event.name,
            size=event.size,
            header_length=event.header_length,
            dump=render(event.region.read(data), raw=raw) if event.region is not None else None,
        )
        for event in report.events
    ]
    violations = [
        ViolationInfo(
            offset=v.offset,
            depth=v.depth,
            type=v.name,
            claimed_size=v.claimed_size,
            boundary=v.boundary,
        )
        for v in report.violations
    ]

    return InspectResponse(
        data_size=report.data_size,
        end_offset=report.end_offset,
        complete=report.complete,
        stop_reason=str(report.stop_reason) if report.stop_reason else None,
        boxes=boxes,
        violations=violations,
        processing_time=time.time() - start_time,
    )


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint with system metrics"""
    process = psutil.Process(os.getpid())
    memory_info = process.memory_info()

    return HealthResponse(
        status="healthy",
        version=VERSION,
        uptime=time.time() - getattr(app.state, "start_time", time.time()),
        memory_usage=memory_info.rss / 1024 / 1024,  # MB
        active_tasks=getattr(app.state, "active_tasks", 0),
    )


@app.post("/inspect", response_model=InspectResponse)
async def inspect_upload(
    request: Request,
    dump: List[str] = Query([], description="Box types whose payloads are rendered"),
    raw: bool = Query(False, description="Render payloads as escaped raw text"),
):
    """
    Inspect the container sent as the request body

    - **dump**: Repeatable 4-character box type filter
    - **raw**: Escaped raw rendering instead of hex+ASCII
    """
    start_time = time.time()
    dump_codes = _dump_codes(dump)

    data = await _read_body(request)
    if not data:
        raise HTTPException(status_code=400, detail="Request body is empty")

    app.state.active_tasks += 1
    app.state.inspections += 1
    try:
        return await run_in_threadpool(inspect_bytes, data, dump_codes, raw, start_time)
    finally:
        app.state.active_tasks -= 1
