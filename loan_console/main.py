import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.middleware import SlowAPIMiddleware

from loan_console.api.v1 import api_router
from loan_console.clients.lending_api import create_http_client
from loan_console.core.errors import register_exception_handlers
from loan_console.core.health import APP_VERSION
from loan_console.core.limiter import limiter
from loan_console.core.logging import configure_logging
from loan_console.core.response_envelope import register_response_envelope
from loan_console.core.settings import settings
from loan_console.middlewares.request_context import RequestContextMiddleware
from loan_console.middlewares.security_headers import SecurityHeadersMiddleware
from loan_console.utils.redis_client import close_redis_client

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.http_client = create_http_client()
    logger.info("Lending API client ready base_url=%s", settings.resolved_lending_api_base_url)
    try:
        yield
    finally:
        await app.state.http_client.aclose()
        await close_redis_client()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="Loan Console", version=APP_VERSION, lifespan=lifespan)
    register_exception_handlers(app)
    register_response_envelope(app)
    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(SecurityHeadersMiddleware, enable_hsts=settings.enable_hsts)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(api_router, prefix="/api/v1")
    return app


app = create_app()
