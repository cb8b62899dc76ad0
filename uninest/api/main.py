import logging
from contextlib import asynccontextmanager

import socketio
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from uninest.api.rate_limit import limiter
from uninest.api.responses import create_error_response, create_success_response
from uninest.core.config import get_settings
from uninest.realtime.sockets import create_socket_server
from uninest.services.errors import ServiceError, ServiceValidationError

settings = get_settings()

logger = logging.getLogger(__name__)

__all__ = ["create_success_response", "create_error_response", "app", "create_app", "socket_app"]

@asynccontextmanager
async def lifespan(app: FastAPI):

    logger.info("Starting %s %s (%s)", settings.app_name, settings.app_version, settings.environment)
    yield
    logger.info("Shutting down %s", settings.app_name)

def create_app() -> FastAPI:

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="UniNest roommate matching API for students",
        docs_url="/api/docs" if settings.debug else None,
        redoc_url="/api/redoc" if settings.debug else None,
        openapi_url="/api/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )

    app.state.limiter = limiter

    _configure_cors(app)

    _configure_error_handlers(app)

    _include_routers(app)

    return app

def _configure_cors(app: FastAPI) -> None:

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

def _configure_error_handlers(app: FastAPI) -> None:


    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    @app.exception_handler(ServiceError)
    async def service_exception_handler(
        request: Request, exc: ServiceError
    ) -> JSONResponse:
        """Map service-layer failures to the error envelope."""
        details = None
        if isinstance(exc, ServiceValidationError):
            details = [{"field": exc.field, "message": exc.message}]

        return JSONResponse(
            status_code=exc.status_code,
            content=create_error_response(
                code=exc.code,
                message=exc.message,
                details=details,
            ),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Unwrap envelope details raised by dependencies and routes."""
        if isinstance(exc.detail, dict) and "success" in exc.detail:
            content = exc.detail
        else:
            content = create_error_response(
                code="HTTP_ERROR",
                message=str(exc.detail),
            )

        return JSONResponse(
            status_code=exc.status_code,
            content=content,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle Pydantic validation errors with consistent format."""
        errors = []
        for error in exc.errors():
            field = ".".join(str(loc) for loc in error["loc"] if loc != "body")
            errors.append({
                "field": field,
                "message": error["msg"],
            })

        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=create_error_response(
                code="VALIDATION_ERROR",
                message="Invalid input data",
                details=errors,
            ),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=create_error_response(
                code="INTERNAL_ERROR",
                message="An unexpected error occurred" if not settings.debug else str(exc),
            ),
        )

def _include_routers(app: FastAPI) -> None:

    from uninest.api.v1.router import api_router

    app.include_router(api_router, prefix=settings.api_prefix)

app = create_app()

@app.get("/health", tags=["Health"])
async def health_check() -> dict:

    return create_success_response(data={"status": "healthy"})

sio = create_socket_server(settings.get_cors_origins())
socket_app = socketio.ASGIApp(sio, other_asgi_app=app)
