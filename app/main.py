"""FastAPI application factory. No business logic; only wiring, error mapping and middleware."""

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.v1 import router as v1_router
from app.core.config import Settings, get_settings
from app.core.database import build_engine, build_session_factory, ping_database
from app.core.errors import ServiceError, Unauthenticated
from app.core.security import TokenService
from app.models import Base
from app.services.account_store import MemoryAccountStore, SqlAccountStore
from app.services.catalog_store import MemoryCatalogStore, SqlCatalogStore

logger = logging.getLogger(__name__)


def _fail(status_code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    status = "error" if status_code >= 500 else "fail"
    return JSONResponse(
        status_code=status_code,
        content={"status": status, "message": message},
        headers=headers,
    )


def _summarize_validation_errors(errors: list[dict]) -> str:
    parts = []
    for err in errors:
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "invalid request"


def register_exception_handlers(app: FastAPI) -> None:
    """Translate typed errors to the {status, message} envelope with fixed status codes."""

    @app.exception_handler(ServiceError)
    async def handle_service_error(request: Request, exc: ServiceError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthenticated) else None
        return _fail(exc.status_code, exc.message, headers)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _fail(400, _summarize_validation_errors(exc.errors()))

    @app.exception_handler(SQLAlchemyError)
    async def handle_database_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.error("Database error on %s %s", request.method, request.url.path, exc_info=exc)
        return _fail(500, "internal server error")

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _fail(exc.status_code, str(exc.detail), getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return _fail(500, "internal server error")


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the application and its process-wide components from settings.

    With the sql backend the database is pinged here; an unreachable database
    raises and the process must not start serving.
    """
    settings = settings or get_settings()
    engine = None
    if settings.STORE_BACKEND == "sql":
        engine = build_engine(settings)
        ping_database(engine)
        if settings.DB_CREATE_TABLES:
            Base.metadata.create_all(engine)
        session_factory = build_session_factory(engine)
        catalog_store = SqlCatalogStore(session_factory)
        account_store = SqlAccountStore(session_factory)
    else:
        logger.warning("Using in-memory stores; data is lost on restart")
        catalog_store = MemoryCatalogStore()
        account_store = MemoryAccountStore()

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        yield
        if engine is not None:
            engine.dispose()

    app = FastAPI(
        title="Bookshelf API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.catalog_store = catalog_store
    app.state.account_store = account_store
    app.state.token_service = TokenService.from_settings(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.APP_ENV == "dev" else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "%s %s %s %.1fms",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - start) * 1000,
        )
        return response

    register_exception_handlers(app)
    app.include_router(v1_router, prefix=settings.API_PREFIX)
    return app
