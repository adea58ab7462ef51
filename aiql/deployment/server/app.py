"""
aiql/deployment/server/app.py
=============================
FastAPI server for the AIQL reasoning core.
Exposes /reason, /prove, /unify, /conflicts as REST endpoints.
Requires: pip install fastapi uvicorn
"""
from __future__ import annotations
import logging
import uvicorn
from fastapi import FastAPI
from aiql.deployment.server.routes import router
from aiql.deployment.server.middleware import setup_middleware
from aiql.version import FRAMEWORK_NAME, __version__

logger = logging.getLogger(__name__)

app = FastAPI(
    title="AIQL Reasoning Server",
    description="Unification, forward/backward chaining and ontology conflict detection",
    version=__version__,
)

setup_middleware(app)
app.include_router(router, prefix="/api/v1")


@app.get("/health")
async def health():
    return {"status": "ok", "framework": FRAMEWORK_NAME, "version": __version__}


def serve(host: str = "0.0.0.0", port: int = 8000, reload: bool = False):
    logger.info(f"Serving {FRAMEWORK_NAME} {__version__} on {host}:{port}")
    uvicorn.run("aiql.deployment.server.app:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    serve()
