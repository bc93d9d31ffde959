import asyncio
import logging
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .logging_setup import setup_logging
from .routers import categories as categories_router
from .routers import sections as sections_router
from .routers import sync as sync_router
from .routers import tasks as tasks_router
from .routers.sync import get_sync_monitor
from .settings import get_settings

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {"name": "categories", "description": "CRUD operations for task categories."},
    {"name": "tasks", "description": "CRUD operations for tasks, including completion toggling."},
    {
        "name": "sections",
        "description": "Tasks grouped by category with search, sorting and completion filtering.",
    },
    {"name": "sync", "description": "Cloud sync availability status."},
]

_settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(console_level=settings.log_level, log_file=settings.log_file)
    if settings.sync_check_on_startup:
        # Keep a reference so the check is not garbage collected mid-flight
        app.state.sync_check = asyncio.create_task(get_sync_monitor().check())
    logger.info("Task Manager Backend started")
    try:
        yield
    finally:
        check = getattr(app.state, "sync_check", None)
        if check is not None and not check.done():
            check.cancel()
            with suppress(asyncio.CancelledError):
                await check
        logger.info("Task Manager Backend stopped")


app = FastAPI(
    title="Task Manager Backend",
    description="Backend API for a personal task manager: categories, tasks, a grouped task view and sync status.",
    version="0.1.0",
    openapi_tags=openapi_tags,
    lifespan=lifespan,
)

# Configure CORS based on settings (.env -> CORS_ALLOW_ORIGINS), with '*' fallback
allow_all = (_settings.cors_allow_origins == ["*"]) or (len(_settings.cors_allow_origins) == 0)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if allow_all else _settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Global exception handlers for consistent JSON on validation errors
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Return a consistent JSON structure for request validation errors.

    Response format:
        {
            "error": "ValidationError",
            "detail": [... pydantic/fastapi error details ...],
            "message": "Request validation failed"
        }
    """
    logger.debug("Validation failed for %s %s: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(
        status_code=422,
        content={
            "error": "ValidationError",
            "message": "Request validation failed",
            "detail": _jsonable_errors(exc),
        },
    )


def _jsonable_errors(exc: RequestValidationError) -> list:
    # pydantic may attach the original exception under 'ctx', which is not JSON serializable
    errors = []
    for err in exc.errors():
        err = dict(err)
        if "ctx" in err:
            err["ctx"] = {k: str(v) for k, v in err["ctx"].items()}
        errors.append(err)
    return errors


# PUBLIC_INTERFACE
@app.get("/", summary="Health Check", tags=["health"])
async def health_check():
    """
    Health check endpoint.

    Returns:
        A JSON object indicating service health and the current sync status.
    """
    return {"message": "Healthy", "sync_status": get_sync_monitor().status.value}


# Include routers
app.include_router(categories_router.router)
app.include_router(tasks_router.router)
app.include_router(sections_router.router)
app.include_router(sync_router.router)
