"""
Greeter - Visitor Weather Greeting Service
Main Entry Point

Loads the environment, configures logging, binds the listening socket and
serves the API with uvicorn.
"""

import argparse
import asyncio
import socket
import sys
from pathlib import Path

import structlog
from dotenv import load_dotenv
from fastapi import FastAPI
from uvicorn import Config, Server

from greeter.errors import TransportError
from greeter.utils.config import Settings
from greeter.utils.logging import setup_logging
from greeter.web.api import create_app

logger = structlog.get_logger()


def load_env_file(path: str | Path) -> bool:
    """Load a .env file without overriding variables that are already set."""
    env_path = Path(path)
    if not env_path.is_file():
        return False
    load_dotenv(dotenv_path=env_path, override=False)
    return True


def bind_socket(host: str, port: int) -> socket.socket:
    """
    Bind the listening socket up front so a busy port fails fast.

    Raises:
        TransportError: If the address cannot be bound.
    """
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        sock.bind((host, port))
    except OSError as e:
        sock.close()
        raise TransportError(f"cannot listen on {host}:{port}: {e}") from e
    sock.set_inheritable(True)
    return sock


async def serve(app: FastAPI, sock: socket.socket) -> None:
    """Serve ``app`` on an already bound socket until shutdown."""
    # log_config=None keeps uvicorn on the handlers set up by setup_logging
    config = Config(app, log_config=None)
    server = Server(config)
    await server.serve(sockets=[sock])


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="greeter",
        description="Greeter - greets visitors with the weather where they are",
    )
    parser.add_argument("--host", default=None, help="Interface to bind (default: settings host)")
    parser.add_argument("--port", type=int, default=None, help="Port to listen on (default: PORT or 8000)")
    parser.add_argument("--env-file", default=".env", help="Environment file to load at startup")
    parser.add_argument("--config", default=None, help="Path to a YAML settings file")
    parser.add_argument("--log-level", default=None, help="Log level override (DEBUG, INFO, ...)")
    return parser.parse_args(argv)


def build_settings(args: argparse.Namespace) -> Settings:
    """Build settings from the config file and environment, then apply CLI overrides."""
    settings = Settings.from_yaml(args.config)
    overrides = {}
    if args.host:
        overrides["host"] = args.host
    if args.port is not None:
        overrides["port"] = args.port
    if args.log_level:
        overrides["logging"] = settings.logging.model_copy(update={"level": args.log_level})
    if overrides:
        settings = settings.model_copy(update=overrides)
        settings.validate()
    return settings


def run(argv: list[str] | None = None) -> None:
    """Synchronous entry point with CLI argument parsing."""
    args = parse_args(argv)
    env_loaded = load_env_file(args.env_file)

    try:
        settings = build_settings(args)
    except ValueError as e:
        logger.error("Invalid configuration", error=str(e))
        sys.exit(1)

    setup_logging(settings)
    if not env_loaded:
        logger.warning("Environment file not loaded", path=str(args.env_file))

    app = create_app(settings)

    try:
        sock = bind_socket(settings.host, settings.port)
    except TransportError as e:
        logger.error("Server error", error=str(e))
        sys.exit(1)

    logger.info("Server listening", host=settings.host, port=settings.port)
    try:
        asyncio.run(serve(app, sock))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    finally:
        sock.close()


if __name__ == "__main__":
    run()
