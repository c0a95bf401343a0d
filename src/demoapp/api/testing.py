"""In-process test server for exercising the API with overridden services."""

import logging
from typing import List, Optional

from fastapi import FastAPI
from fastapi.testclient import TestClient

from .config import Config
from .server import ConfigureServices, create_app

logger = logging.getLogger(__name__)


class ServerClosedError(RuntimeError):
    """Raised when using a ConfigurableServer after it has been closed."""

    pass


class InProcessClient(TestClient):
    """HTTP client that talks to the application without opening a socket."""

    def get_string(self, url: str) -> str:
        """GET ``url`` and return the response body as text.

        Raises:
            httpx.HTTPStatusError: If the response status is not a success
        """
        response = self.get(url)
        response.raise_for_status()
        return response.text


class ConfigurableServer:
    """Application host for tests.

    Composes the application exactly like production, except that
    ``configure_action`` runs after the default registrations so a test can
    add services or replace them with doubles. Use it as a context manager
    so its clients are closed on every exit path::

        with ConfigurableServer(lambda sc: sc.replace(ValueService, stub)) as server:
            client = server.create_client()
            assert client.get_string("api/value") == "stubbed"
    """

    def __init__(
        self,
        configure_action: Optional[ConfigureServices] = None,
        config: Optional[Config] = None,
        raise_server_exceptions: bool = True,
    ):
        self.app: FastAPI = create_app(config=config, configure_additional_services=configure_action)
        self.raise_server_exceptions = raise_server_exceptions
        self._clients: List[InProcessClient] = []
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def create_client(self) -> InProcessClient:
        """Create a client bound to this server's application.

        Raises:
            ServerClosedError: If the server has been closed
        """
        if self._closed:
            raise ServerClosedError("Cannot create a client, the server has been closed")

        client = InProcessClient(self.app, raise_server_exceptions=self.raise_server_exceptions)
        self._clients.append(client)
        return client

    def close(self) -> None:
        """Close every client created by this server. Safe to call twice."""
        if self._closed:
            return
        self._closed = True

        clients, self._clients = self._clients, []
        for client in clients:
            client.close()
        logger.debug(f"Closed test server and {len(clients)} client(s)")

    def __enter__(self) -> "ConfigurableServer":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()
