"""
Workflow Template Builder API
REST layer over the workflow store: CRUD, import/export and example templates.
"""

import logging
from datetime import datetime, UTC
from uuid import uuid4

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from . import __version__
from .config import settings
from .errors import (
    PersistenceError,
    WorkflowBuilderError,
    WorkflowNotFound,
    WorkflowValidationError,
)
from .logging_config import configure_logging
from .routers import examples, workflows

configure_logging(settings)
logger = logging.getLogger(__name__)


# ============================================================================
# App Configuration
# ============================================================================

app = FastAPI(
    title="Workflow Template Builder API",
    version=__version__,
    description="Create, edit, reorder, import and export stage/task workflow templates",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(workflows.router, tags=["workflows"])
app.include_router(examples.router, tags=["examples"])


@app.middleware("http")
async def add_request_id_header(request: Request, call_next):
    request_id = request.headers.get("X-Request-Id") or uuid4().hex
    resp: Response = await call_next(request)
    resp.headers.setdefault("X-Request-Id", request_id)
    return resp


# ============================================================================
# Error Handling
# ============================================================================

STATUS_BY_ERROR = {
    WorkflowNotFound: 404,
    WorkflowValidationError: 400,
    PersistenceError: 500,
}


@app.exception_handler(WorkflowBuilderError)
async def workflow_error_handler(request: Request, exc: WorkflowBuilderError):
    status_code = STATUS_BY_ERROR.get(type(exc), 500)
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message,
                     extra={"method": request.method, "path": request.url.path})
    return JSONResponse(status_code=status_code, content=exc.to_dict())


@app.exception_handler(ValidationError)
async def model_validation_handler(request: Request, exc: ValidationError):
    details = [
        {"path": ".".join(str(p) for p in err["loc"]), "msg": err["msg"]}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content=WorkflowValidationError("Invalid request body", details).to_dict(),
    )


@app.exception_handler(Exception)
async def default_exception_handler(request: Request, exc: Exception):
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL",
                "message": "Unhandled error",
                "details": [{"path": "", "msg": str(exc)}],
            }
        },
    )


# ============================================================================
# Health Check
# ============================================================================

@app.get("/health", tags=["health"])
def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "timestamp": datetime.now(UTC).isoformat(),
        "store_backend": settings.store_backend,
    }
