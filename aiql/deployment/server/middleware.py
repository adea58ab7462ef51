"""aiql/deployment/server/middleware.py

CORS, per-request reasoning time, and translation of boundary errors
(malformed nodes, bad ontologies, invalid config) into HTTP 422.
"""
from __future__ import annotations
import time
import logging
from typing import Sequence
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from aiql.core.exceptions import AIQLError, ValidationError

logger = logging.getLogger(__name__)

TIMING_HEADER = "X-Reasoning-Time-Ms"


def error_detail(exc: AIQLError) -> dict:
    detail = {"error": str(exc), **exc.context}
    if isinstance(exc, ValidationError):
        detail["errors"] = list(exc.errors)
    return detail


def setup_middleware(app: FastAPI, allow_origins: Sequence[str] = ("*",)) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(allow_origins),
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
        expose_headers=[TIMING_HEADER],
    )

    @app.exception_handler(AIQLError)
    async def reject_bad_input(request: Request, exc: AIQLError):
        logger.warning(f"{request.url.path}: rejected input ({type(exc).__name__}: {exc})")
        return JSONResponse(status_code=422, content={"detail": error_detail(exc)})

    @app.middleware("http")
    async def time_requests(request: Request, call_next):
        t0 = time.perf_counter()
        response = await call_next(request)
        ms = (time.perf_counter() - t0) * 1000
        response.headers[TIMING_HEADER] = f"{ms:.1f}"
        logger.info(f"{request.method} {request.url.path} → {response.status_code} ({ms:.1f}ms)")
        return response
