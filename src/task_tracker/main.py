import logging
from datetime import datetime, timezone

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

# Must run before settings are read
load_dotenv()

from . import __version__  # noqa: E402
from .logging_setup import setup_logging  # noqa: E402
from .models import TaskValidationError  # noqa: E402
from .routers import tasks as tasks_router  # noqa: E402
from .settings import get_settings  # noqa: E402
from .utils import error_body  # noqa: E402

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service metadata and health endpoints."},
    {
        "name": "tasks",
        "description": "CRUD operations for tasks, with filtering by completion status.",
    },
]

app = FastAPI(
    title="Task Manager API",
    description="Personal task tracker backed by a single JSON file.",
    version=__version__,
    openapi_tags=openapi_tags,
)

_settings = get_settings()

# Configure CORS based on settings (.env -> CORS_ALLOW_ORIGINS), with '*' fallback
allow_all = (_settings.cors_allow_origins == ["*"]) or (len(_settings.cors_allow_origins) == 0)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if allow_all else _settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info("%s %s", request.method, request.url.path)
    return await call_next(request)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Malformed request bodies and parameters are client errors (400).

    Response format:
        {
            "success": false,
            "error": "Request validation failed",
            "detail": [... pydantic/fastapi error details ...]
        }
    """
    body = error_body("Request validation failed")
    body["detail"] = jsonable_encoder(exc.errors())
    return JSONResponse(status_code=400, content=body)


@app.exception_handler(TaskValidationError)
async def task_validation_exception_handler(request: Request, exc: TaskValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content=error_body(str(exc)))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """
    Wrap HTTP errors in the standard envelope. Unrouted paths and methods
    are reported as 404 "Endpoint not found".
    """
    unrouted = (exc.status_code == 404 and exc.detail == "Not Found") or exc.status_code == 405
    if unrouted:
        return JSONResponse(status_code=404, content=error_body("Endpoint not found"))
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=error_body(str(exc) or exc.__class__.__name__))


# PUBLIC_INTERFACE
@app.get("/", summary="Service Metadata", tags=["health"])
def root():
    """
    Describe the service and its main endpoints.
    """
    return {
        "message": "Task Manager API",
        "version": __version__,
        "endpoints": {
            "tasks": "/api/tasks",
            "health": "/health",
        },
    }


# PUBLIC_INTERFACE
@app.get("/health", summary="Health Check", tags=["health"])
def health_check():
    """
    Health check endpoint.

    Returns:
        A JSON object with the service status and the current UTC time.
    """
    return {"status": "OK", "timestamp": datetime.now(timezone.utc).isoformat()}


# Include routers
app.include_router(tasks_router.router)


# PUBLIC_INTERFACE
def run() -> None:
    """Serve the API with uvicorn on the configured host and port."""
    settings = get_settings()
    setup_logging(settings.log_level)
    logger.info("Task Manager API running on http://%s:%s", settings.host, settings.port)
    logger.info("Data directory: %s", settings.data_dir)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    run()
