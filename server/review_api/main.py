import logging
import time
import uuid
from typing import Optional
from contextlib import asynccontextmanager
from fastapi import APIRouter, FastAPI, Depends, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from . import __version__
from . import db
from .db import Store
from .errors import QueryError, StoreConnectError, UserNotFoundError
from .models import ByIdLookup, DefaultLookup, ErrorResponse, HealthResponse, Lookup, User
from .settings import Settings, settings as default_settings


logger = logging.getLogger("review_api")

GENERIC_STORE_ERROR = "internal database error"
GENERIC_SERVER_ERROR = "internal server error"


def configure_logging(level: str) -> None:
    """Install one stream handler on the root logger (first call wins)."""
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        root.addHandler(handler)
    root.setLevel(level.upper())


def _make_lifespan(settings: Settings):
    # Lifespan context manager for startup/shutdown
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Open the shared store on startup and close it on shutdown."""
        configure_logging(settings.log_level)
        try:
            store = await Store.open(settings.database_path)
            logger.info(f"[startup] SQLite store connected: {settings.database_path}")
        except StoreConnectError as e:
            logger.error(f"[startup] Failed to open SQLite store: {e}")
            if settings.require_database:
                raise
            logger.warning("[startup] Serving without a database; lookups will fail with 500")
            store = Store.unavailable(settings.database_path)

        app.state.store = store
        logger.info(f"[startup] Listening for requests (port {settings.port})")

        yield

        await store.close()

    return lifespan


# --- Dependencies ---


def get_store(request: Request) -> Store:
    """The process-wide store handle opened in the lifespan."""
    return request.app.state.store


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


# --- Request Logging Middleware ---


def _get_or_create_request_id(request: Request) -> str:
    """Get request ID from header or generate one."""
    return request.headers.get("X-Request-Id") or str(uuid.uuid4())


class RequestLogMiddleware(BaseHTTPMiddleware):
    """Tag each request with an X-Request-Id and log one line per response."""

    async def dispatch(self, request: Request, call_next):
        request_id = _get_or_create_request_id(request)
        start_time = time.time()
        request.state.request_id = request_id

        response = await call_next(request)

        duration_ms = int((time.time() - start_time) * 1000)
        logger.info(
            f"[request] method={request.method} path={request.url.path} "
            f"status={response.status_code} duration_ms={duration_ms} request_id={request_id}"
        )
        response.headers["X-Request-Id"] = request_id
        return response


# --- Exception Handlers ---


async def _query_error_handler(request: Request, exc: QueryError) -> JSONResponse:
    settings: Settings = request.app.state.settings
    message = exc.message if settings.expose_store_errors else GENERIC_STORE_ERROR
    return JSONResponse(status_code=500, content={"error": message})


async def _not_found_handler(request: Request, exc: UserNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": exc.message})


async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # Same error shape for framework errors (unknown route, bad method)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"error": GENERIC_SERVER_ERROR})


# --- Endpoints ---


router = APIRouter(prefix="/api")

ERROR_RESPONSES = {
    404: {"model": ErrorResponse, "description": "No matching user"},
    500: {"model": ErrorResponse, "description": "Store or query failure"},
}


async def _respond_with_user(lookup: Lookup, store: Store, settings: Settings) -> JSONResponse:
    user: Optional[User] = await db.lookup_user(store, lookup, settings.sentinel_username)
    if user is None:
        raise UserNotFoundError(settings.not_found_message)
    return JSONResponse(content=user.model_dump(mode="json"))


@router.get("/anonymous_user", response_model=User, responses=ERROR_RESPONSES)
async def get_default_anonymous_user(
    store: Store = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    """Return the default anonymous user (first row with the sentinel username)."""
    return await _respond_with_user(DefaultLookup(), store, settings)


@router.get("/anonymous_user/{user_id}", response_model=User, responses=ERROR_RESPONSES)
async def get_anonymous_user(
    user_id: str,
    store: Store = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    """Return the user with the given user_id."""
    return await _respond_with_user(ByIdLookup(user_id=user_id), store, settings)


async def health(store: Store = Depends(get_store)) -> HealthResponse:
    """
    Health check endpoint.
    Always answers 200; a missing or broken store reports as degraded.
    """
    healthy = await store.ping()
    return HealthResponse(
        status="ok" if healthy else "degraded",
        version=__version__,
        database="connected" if healthy else "unavailable",
        timestamp=int(time.time()),
    )


# --- Application ---


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the FastAPI application around a settings instance."""
    settings = settings or default_settings

    app = FastAPI(
        title="Review App Server",
        version=__version__,
        lifespan=_make_lifespan(settings),
    )
    app.state.settings = settings
    # Replaced by the lifespan once the store is opened
    app.state.store = Store.unavailable(settings.database_path)

    app.include_router(router)
    app.add_api_route("/health", health, methods=["GET"], response_model=HealthResponse)

    app.add_exception_handler(QueryError, _query_error_handler)
    app.add_exception_handler(UserNotFoundError, _not_found_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)

    app.add_middleware(RequestLogMiddleware)

    # The Flutter client calls from any origin
    allowed_origins = settings.allowed_origins or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials="*" not in allowed_origins,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the module-level app with uvicorn."""
    import uvicorn
    uvicorn.run(
        "review_api.main:app",
        host=default_settings.host,
        port=default_settings.port,
        reload=default_settings.debug,
    )


if __name__ == "__main__":
    run()
