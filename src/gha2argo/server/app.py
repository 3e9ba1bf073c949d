# server/app.py
from __future__ import annotations

from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool
from starlette.requests import ClientDisconnect

from ..errors import EmptyBodyFailure, QueueClosed, QueueFullFailure, UnknownJobFailure
from .models import ConversionResult
from .service import STATUS_PROCESSING, ConversionService


YAML_MEDIA_TYPE = "application/x-yaml"

# -------------------- Schemas --------------------

class SubmitResponse(BaseModel):
    status: str
    jobID: str
    resultURL: str

class NotFoundResponse(BaseModel):
    status: str
    message: str

class HealthResponse(BaseModel):
    ok: bool
    queued: int
    workers: int

# -------------------- Helpers --------------------

def get_service(request: Request) -> ConversionService:
    return request.app.state.service

def result_url(job_id: str) -> str:
    return f"/result/{job_id}"

async def read_payload(request: Request) -> bytes:
    try:
        body = await request.body()
    except ClientDisconnect:
        raise HTTPException(status_code=400, detail="Failed to read request body")
    if not body:
        raise HTTPException(status_code=400, detail="Request body is empty")
    return body

def result_response(result: ConversionResult) -> Response:
    if not result.ok:
        raise HTTPException(status_code=500, detail=f"Failed to process job: {result.error}")
    return Response(content=result.output, media_type=YAML_MEDIA_TYPE)

# -------------------- App --------------------

def create_app(service: Optional[ConversionService] = None) -> FastAPI:
    """
    Build the HTTP API around one ConversionService.

    Without an explicit service one is built from environment settings.
    The worker pool starts with the app and is stopped on shutdown.
    """
    app = FastAPI(title="gha2argo", version="0.1.0")
    app.state.service = service if service is not None else ConversionService.from_settings()

    @app.on_event("startup")
    async def startup() -> None:
        app.state.service.start()

    @app.on_event("shutdown")
    async def shutdown() -> None:
        await run_in_threadpool(app.state.service.stop)

    @app.get("/healthz", response_model=HealthResponse)
    def healthz(svc: ConversionService = Depends(get_service)):
        return HealthResponse(ok=True, queued=svc.queued(), workers=svc.pool.num_workers)

    @app.post("/api/v1/convert", responses={200: {"content": {YAML_MEDIA_TYPE: {}}}})
    async def convert_sync(request: Request, svc: ConversionService = Depends(get_service)):
        """Convert and wait: the response carries the Argo YAML directly."""
        payload = await read_payload(request)
        try:
            result = await run_in_threadpool(svc.convert, payload)
        except QueueFullFailure:
            raise HTTPException(status_code=503, detail="Server busy, queue is full")
        except QueueClosed:
            raise HTTPException(status_code=503, detail="Server is shutting down")
        except EmptyBodyFailure:
            raise HTTPException(status_code=400, detail="Request body is empty")
        return result_response(result)

    @app.post("/convert", status_code=202, response_model=SubmitResponse)
    async def convert_async(request: Request, svc: ConversionService = Depends(get_service)):
        """Queue a conversion; poll resultURL for the outcome."""
        payload = await read_payload(request)
        try:
            job_id = svc.submit(payload)
        except QueueFullFailure:
            raise HTTPException(status_code=503, detail="Server busy, queue is full")
        except QueueClosed:
            raise HTTPException(status_code=503, detail="Server is shutting down")
        except EmptyBodyFailure:
            raise HTTPException(status_code=400, detail="Request body is empty")
        return SubmitResponse(status="processing", jobID=job_id, resultURL=result_url(job_id))

    @app.get(
        "/result/{job_id}",
        responses={
            200: {"content": {YAML_MEDIA_TYPE: {}}},
            404: {"model": NotFoundResponse},
        },
    )
    def get_result(job_id: str, svc: ConversionService = Depends(get_service)):
        # 404 either way; the body says whether the job is still running
        if svc.status(job_id) == STATUS_PROCESSING:
            body = NotFoundResponse(status="processing", message="Job is still processing")
            return JSONResponse(status_code=404, content=body.model_dump())
        try:
            result = svc.require_result(job_id)
        except UnknownJobFailure as e:
            body = NotFoundResponse(status="not_found", message=str(e))
            return JSONResponse(status_code=404, content=body.model_dump())
        return result_response(result)

    return app
