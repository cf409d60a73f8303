from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlmodel import SQLModel

from src.adapter.services.email_service import LoggingEmailService, SmtpEmailService
from src.adapter.services.event_bus import InMemoryEventBus
from src.app.services.notification_fanout import NotificationFanout
from src.app.services.rate_limiter import AuthRateLimiter, RateLimitConfig
from src.app.services.realtime_gateway import RealtimeGateway
from src.app.services.unit_of_work import UnitOfWorkScope

from .error import PUBLIC_DETAIL_CODES, ClientError, ServerError
from .middleware import RequestContextMiddleware
import logging

logger = logging.getLogger(__name__)


def _correlation_id(request: Request) -> Optional[str]:
    return getattr(request.state, "correlation_id", None)


async def handle_client_error(request: Request, exc: ClientError):
    error = exc.base_error
    error_dict = {"code": error.code, "message": error.message}
    show_details = (
        request.app.state.config.ENVIRONMENT != "production"
        or error.code in PUBLIC_DETAIL_CODES
    )
    if error.details is not None and show_details:
        error_dict["details"] = error.details
    logger.warning("Client error: %s %s", error.code, error.message)

    headers = None
    if error.code == "RATE_LIMITED" and isinstance(error.details, dict):
        headers = {"Retry-After": str(error.details.get("retry_after", ""))}
    return JSONResponse(
        status_code=exc.status_code, content={"error": error_dict}, headers=headers
    )


async def handle_server_error(request: Request, exc: ServerError):
    correlation_id = _correlation_id(request)
    error_dict = {
        "code": "INTERNAL_ERROR",
        "message": "Internal server error",
        "correlation_id": correlation_id,
    }
    logger.error(
        "Server error: %s %s [%s]",
        exc.base_error.code,
        exc.base_error.message,
        correlation_id,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": error_dict}
    )


async def handle_validation_error(request: Request, exc: RequestValidationError):
    details = [
        {
            "field": ".".join(str(part) for part in err["loc"] if part != "body"),
            "message": err["msg"],
        }
        for err in exc.errors()
    ]
    error_dict = {"code": "VALIDATION_FAILED", "message": "Validation failed"}
    if request.app.state.config.ENVIRONMENT != "production":
        error_dict["details"] = details
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST, content={"error": error_dict}
    )


async def handle_unexpected_error(request: Request, exc: Exception):
    correlation_id = _correlation_id(request)
    logger.exception("Unhandled error [%s]", correlation_id)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "Internal server error",
                "correlation_id": correlation_id,
            }
        },
    )


def build_email_service(config):
    if not config.SMTP_HOST:
        return LoggingEmailService()
    return SmtpEmailService(
        host=config.SMTP_HOST,
        port=config.SMTP_PORT,
        sender=config.SMTP_FROM,
        username=config.SMTP_USER,
        password=config.SMTP_PASSWORD,
        use_tls=config.SMTP_USE_TLS,
    )


def create_app(ApplicationConfig, uow_scope: Optional[UnitOfWorkScope] = None) -> FastAPI:
    logging.basicConfig(
        level=ApplicationConfig.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if uow_scope is None:
        from src.depends import unit_of_work_scope

        uow_scope = unit_of_work_scope

    event_bus = InMemoryEventBus(
        handler_timeout=ApplicationConfig.EVENT_BUS_HANDLER_TIMEOUT_SECONDS,
        queue_size=ApplicationConfig.EVENT_BUS_QUEUE_SIZE,
    )
    gateway = RealtimeGateway(event_bus)
    email_service = build_email_service(ApplicationConfig)
    fanout = NotificationFanout(event_bus, uow_scope, gateway, email_service)
    rate_limiter = AuthRateLimiter(
        RateLimitConfig(
            max_attempts=ApplicationConfig.AUTH_RATE_LIMIT_MAX_ATTEMPTS,
            window_seconds=ApplicationConfig.AUTH_RATE_LIMIT_WINDOW_SECONDS,
            block_seconds=ApplicationConfig.AUTH_RATE_LIMIT_BLOCK_SECONDS,
        )
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if ApplicationConfig.DB_CREATE_TABLES:
            from src.depends import engine

            async with engine.begin() as conn:
                await conn.run_sync(SQLModel.metadata.create_all)
        await fanout.start()
        logger.info("Event Control started (environment=%s)", ApplicationConfig.ENVIRONMENT)
        yield
        await fanout.stop()
        await event_bus.close()
        logger.info("Event Control stopped")

    app = FastAPI(title="Event Control", version="0.1.0", lifespan=lifespan)

    app.state.config = ApplicationConfig
    app.state.event_bus = event_bus
    app.state.gateway = gateway
    app.state.email_service = email_service
    app.state.fanout = fanout
    app.state.rate_limiter = rate_limiter

    app.add_middleware(
        RequestContextMiddleware,
        timeout_seconds=ApplicationConfig.REQUEST_TIMEOUT_SECONDS,
        log_requests=ApplicationConfig.ENABLE_LOGGING_MIDDLEWARE,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from src.api.routes import (
        auth,
        events,
        health_check,
        incidents,
        maintenance,
        notifications,
        websocket,
    )

    app.include_router(health_check.router, tags=["Health"])
    app.include_router(auth.router, tags=["Authentication"])
    app.include_router(events.router, tags=["Events"])
    app.include_router(incidents.router, tags=["Incidents"])
    app.include_router(notifications.router, tags=["Notifications"])
    app.include_router(maintenance.router, tags=["Maintenance"])
    app.include_router(websocket.router, tags=["Realtime"])

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, handle_server_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    return app
