"""FastAPI application setup and routing for the DemoApp API."""

import logging
import sys
from datetime import datetime, timezone
from typing import Callable, Optional

from fastapi import FastAPI, Request

from . import value
from .config import Config
from .services import Service, ServiceRegistry, ValueService

logger = logging.getLogger(__name__)

ConfigureServices = Callable[[ServiceRegistry], None]


def configure_services(services: ServiceRegistry) -> None:
    """Register the default service implementations.

    Capabilities the registry already provides are left as they are.
    """
    if ValueService not in services:
        services.add_transient(ValueService, Service)


def create_app(
    config: Optional[Config] = None,
    configure_additional_services: Optional[ConfigureServices] = None,
    services: Optional[ServiceRegistry] = None,
) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        config: Configuration to use, loaded from the environment when omitted
        configure_additional_services: Callback run after the default
            registrations and before the registry is frozen; its bindings
            take precedence over the defaults
        services: Registry to compose into, a fresh one when omitted; its
            existing bindings are kept in place of the defaults

    Returns:
        The composed application
    """
    if config is None:
        config = Config.from_env()
    if services is None:
        services = ServiceRegistry()

    configure_services(services)
    if configure_additional_services is not None:
        configure_additional_services(services)
    services.freeze()

    logger.debug(
        "Composed services: " + ", ".join(interface.__name__ for interface in services.registered())
    )

    app = FastAPI(
        title=config.title,
        description="Demonstration API serving a single value",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.config = config
    app.state.services = services

    # Middleware for request logging
    @app.middleware("http")
    async def logging_middleware(request: Request, call_next):
        start_time = datetime.now(timezone.utc)
        response = await call_next(request)

        duration = (datetime.now(timezone.utc) - start_time).total_seconds()
        logger.debug(
            f"{request.method} {request.url.path} -> {response.status_code} ({duration * 1000:.1f}ms)"
        )

        return response

    app.include_router(value.router, prefix="/api", tags=["value"])

    return app


app = create_app()


def main():
    """Entry point for demoapp command."""
    import uvicorn

    config = app.state.config

    logging.basicConfig(
        level=config.numeric_log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    logger.info(f"Starting DemoApp API server on {config.host}:{config.port}")

    try:
        uvicorn.run(
            "demoapp.api.server:app",
            host=config.host,
            port=config.port,
            log_level=config.log_level.lower(),
            reload=False,
        )
    except KeyboardInterrupt:
        logger.info("Server shutdown requested")
        sys.exit(0)
    except Exception as e:
        logger.error(f"Server startup failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
