"""Request context: resolve the client IP and bind it to request-scoped log lines."""

import structlog
from fastapi import Request


def resolve_client_ip(request: Request) -> str:
    """Return the first X-Forwarded-For entry, else the transport peer address."""
    forwarded = request.headers.get("x-forwarded-for", "").split(",")[0].strip()
    if forwarded:
        return forwarded
    return request.client.host if request.client else ""


def set_client_ip(ip: str) -> None:
    """Set the client IP for the current request's log lines."""
    structlog.contextvars.bind_contextvars(client_ip=ip or "")
