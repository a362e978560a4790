"""FastAPI application for the Greeter service."""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

import structlog
from fastapi import APIRouter, FastAPI, Query, Request, Response
from fastapi.responses import PlainTextResponse

from ..errors import GreeterError
from ..models import ClientInfo
from ..service import GreetingService
from ..utils.config import Settings, get_settings
from ..utils.logging import get_logger
from ..utils.request_context import resolve_client_ip, set_client_ip

logger = get_logger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def create_app(
    settings: Settings | None = None,
    service: GreetingService | None = None,
) -> FastAPI:
    """Create the FastAPI application with the /api/hello route."""
    settings = settings or get_settings()
    service = service or GreetingService(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.service.shutdown()

    app = FastAPI(
        title="Greeter",
        description="Greets visitors with the weather where they are",
        version="0.1.0",
        docs_url="/api/docs",
        redoc_url=None,
        openapi_url="/api/openapi.json",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.service = service

    # CORS headers go on every response, including errors and unknown paths.
    # Unexpected exceptions become a plain 500 here.
    @app.middleware("http")
    async def add_cors_headers(request: Request, call_next: Any) -> Response:
        structlog.contextvars.clear_contextvars()
        try:
            response = await call_next(request)
        except Exception as e:
            logger.error("request_crashed", error=str(e), error_type=type(e).__name__, exc_info=True)
            response = PlainTextResponse("Internal Server Error", status_code=500)
        for name, value in CORS_HEADERS.items():
            response.headers[name] = value
        return response

    @app.exception_handler(GreeterError)
    async def greeter_error_handler(request: Request, exc: GreeterError) -> PlainTextResponse:
        logger.error("request_failed", error=str(exc), error_type=type(exc).__name__)
        return PlainTextResponse(str(exc), status_code=500)

    api = APIRouter(prefix="/api")

    @api.options("/hello")
    async def hello_preflight() -> Response:
        return Response(status_code=200)

    @api.get("/hello", response_model=ClientInfo)
    async def hello(
        request: Request,
        visitor_name: str | None = Query(default=None),
    ) -> ClientInfo:
        client_ip = resolve_client_ip(request)
        set_client_ip(client_ip)
        return await app.state.service.greet(client_ip, visitor_name)

    app.include_router(api)
    return app
