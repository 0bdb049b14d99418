from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
import time
import uuid

from api_concepts import router as concepts_router
from api_graph import router as graph_router
from api_maps import router as maps_router

from config import CORS_ORIGINS, SEED_ON_STARTUP
from db_neo4j import build_graph_store
from errors import GraphError, StoreUnavailableError
from responses import failure, success
from services_logging import configure_logging, structured_log_line

# Configure logging
logger = configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Build the graph store once per process, make sure its constraints exist
    and optionally seed the demo map. The store is closed on shutdown.
    """
    # Startup
    store = build_graph_store()
    app.state.graph_store = store
    try:
        store.ensure_schema()
        logger.info(structured_log_line({"event": "schema_ready"}))
    except StoreUnavailableError as e:
        # Requests will answer 503 until the database comes up
        logger.warning(f"Graph store unreachable on startup, schema not ensured: {e}")

    if SEED_ON_STARTUP:
        try:
            if store.count_concepts() == 0:
                from scripts import seed_concepts
                seed_concepts.seed_default_map(store)
                logger.info(structured_log_line({"event": "startup_seed", "status": "ok"}))
            else:
                logger.info(structured_log_line({"event": "startup_seed", "status": "skipped_not_empty"}))
        except StoreUnavailableError as e:
            logger.warning(f"Skipping seed, graph store unreachable: {e}")

    yield  # App runs here

    # Shutdown
    store.close()


app = FastAPI(
    title="Concept Atlas Backend",
    description="Concept graph API: maps, concepts, relationships and shortest paths.",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(concepts_router)
app.include_router(graph_router)
app.include_router(maps_router)


@app.middleware("http")
async def request_observability(request: Request, call_next):
    start = time.perf_counter()
    request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
    request.state.request_id = request_id

    response = None
    try:
        response = await call_next(request)
    finally:
        latency_ms = int((time.perf_counter() - start) * 1000)
        status_code = getattr(response, "status_code", 500)

        logger.info(
            structured_log_line(
                {
                    "event": "request",
                    "request_id": request_id,
                    "route": request.url.path,
                    "method": request.method,
                    "status": status_code,
                    "latency_ms": latency_ms,
                }
            )
        )

    if isinstance(response, Response):
        response.headers["x-request-id"] = request_id
    return response


def _log_http_error(request: Request, status_code: int, detail) -> None:
    # 4xx at WARNING, 5xx at ERROR
    extra = {
        "status_code": status_code,
        "method": request.method,
        "path": request.url.path,
        "detail": detail,
    }
    if status_code >= 500:
        logger.error(f"HTTP {status_code} error on {request.method} {request.url.path}: {detail}", extra=extra)
    else:
        logger.warning(f"HTTP {status_code} error on {request.method} {request.url.path}: {detail}", extra=extra)


# Centralized error handling
@app.exception_handler(GraphError)
async def graph_error_handler(request: Request, exc: GraphError):
    """
    Typed failures from the graph layer: not found, bad input, conflicts and
    an unreachable store. Each carries its own status code.
    """
    _log_http_error(request, exc.status_code, exc.message)
    return failure(exc.status_code, exc.message)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Unknown routes, wrong methods and any HTTPException raised by FastAPI itself."""
    _log_http_error(request, exc.status_code, exc.detail)
    if exc.status_code >= 500:
        return failure(exc.status_code, "Internal server error")
    return failure(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Malformed bodies or query parameters. Answered as 400 with the first
    problem spelled out, since clients only show a single message.
    """
    errors = exc.errors()
    logger.warning(
        f"Validation error on {request.method} {request.url.path}",
        extra={
            "method": request.method,
            "path": request.url.path,
            "errors": errors,
        },
    )
    return failure(400, _describe_validation_errors(errors))


def _describe_validation_errors(errors) -> str:
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """
    Catch-all handler for unhandled exceptions.
    Logs full stack trace but returns sanitized error message to client.
    """
    logger.exception(
        f"Unhandled exception on {request.method} {request.url.path}",
        extra={
            "method": request.method,
            "path": request.url.path,
            "exception_type": type(exc).__name__,
            "exception_message": str(exc),
        },
    )
    return failure(500, "Internal server error")


@app.get("/health")
def health():
    return success({"status": "ok"})


if __name__ == "__main__":
    import uvicorn
    from config import PORT

    uvicorn.run("main:app", host="0.0.0.0", port=PORT, reload=False)
