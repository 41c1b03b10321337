"""
RentFlow FastAPI application
"""
from contextlib import asynccontextmanager
import time
import uuid

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.config.settings import settings
from core.database.connection import close_db_connections, db_manager, get_db
from core.errors import RentFlowError
from core.logging.logger import logger, setup_logging
from .main import api_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle."""
    logger.info("Starting RentFlow API", environment=settings.environment)
    if settings.auto_create_schema:
        db_manager.create_schema()

    yield

    close_db_connections()
    logger.info("RentFlow API stopped")


def error_response(status_code: int, error: str, message, details=None) -> JSONResponse:
    """Error envelope shared by every handler: error, message, details."""
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder({"error": error, "message": message, "details": details}),
    )


def register_error_handlers(app: FastAPI) -> None:

    @app.exception_handler(RentFlowError)
    async def domain_exception_handler(request: Request, exc: RentFlowError):
        """Validation, state, not found, conflict and permission errors."""
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(exc.error, error_message=exc.message, status_code=exc.status_code, path=request.url.path)
        return error_response(exc.status_code, exc.error, exc.message, exc.details)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        logger.warning("HTTP Exception", status_code=exc.status_code, detail=exc.detail, path=request.url.path)
        error = "Not Found" if exc.status_code == 404 else "HTTP Error"
        return error_response(exc.status_code, error, exc.detail, {"status_code": exc.status_code})

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning("Request rejected", errors=str(exc.errors()), path=request.url.path)
        return error_response(422, "Validation Error", "Invalid request data", exc.errors())

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error("Unhandled error", error=str(exc), path=request.url.path, exc_info=True)
        return error_response(500, "Internal Server Error", "Internal server error")


def create_app() -> FastAPI:
    """Build the FastAPI application."""
    setup_logging()

    app = FastAPI(
        title=settings.app_name,
        description="Rental orders, worker tasks and remuneration",
        version=settings.version,
        debug=settings.debug,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.allowed_hosts)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Tags each request with an id and logs its outcome and duration."""
        request_id = str(uuid.uuid4())
        started = time.perf_counter()
        logger.info(
            "Request received",
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            role=request.headers.get("x-user-role"),
        )
        try:
            response = await call_next(request)
        except Exception as e:
            logger.error("Request failed", request_id=request_id, error=str(e),
                         duration=round(time.perf_counter() - started, 4))
            raise

        duration = round(time.perf_counter() - started, 4)
        logger.info("Request finished", request_id=request_id, status_code=response.status_code, duration=duration)
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = str(duration)
        return response

    register_error_handlers(app)
    app.include_router(api_router)

    @app.get("/")
    async def root():
        return {
            "app": settings.app_name,
            "version": settings.version,
            "status": "running",
            "docs": "/docs" if settings.debug else "disabled",
        }

    @app.get("/health")
    def health_check(db: Session = Depends(get_db)):
        """Liveness and database reachability."""
        try:
            db.execute(text("SELECT 1"))
            database = "ok"
        except SQLAlchemyError as e:
            logger.error("Health check database error", error=str(e))
            database = "unavailable"
        return {
            "status": "healthy" if database == "ok" else "degraded",
            "database": database,
            "timestamp": time.time(),
            "version": settings.version,
        }

    return app


app = create_app()
