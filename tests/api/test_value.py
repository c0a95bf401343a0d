"""Tests for the value endpoint."""

from unittest.mock import Mock

import pytest

from demoapp.api.services import ServiceLifetime, ServiceNotRegisteredError, ValueService
from demoapp.api.testing import ConfigurableServer


def test_should_get_value(config):
    """Default composition serves the production value."""
    with ConfigurableServer(config=config) as server:
        client = server.create_client()
        value = client.get_string("api/value")

    assert value == "Hello world"


def test_should_get_mock_value(config):
    """A mocked service registered by the test replaces the default."""
    service_mock = Mock(spec=ValueService)
    service_mock.get_value.return_value = "Hello mockworld"

    with ConfigurableServer(lambda sc: sc.replace(ValueService, service_mock), config=config) as server:
        client = server.create_client()
        value = client.get_string("api/value")

    assert value == "Hello mockworld"
    service_mock.get_value.assert_called_once_with()


def test_value_response_is_plain_text(config):
    with ConfigurableServer(config=config) as server:
        response = server.create_client().get("/api/value")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert response.text == "Hello world"


@pytest.mark.parametrize("expected", ["", "Hello stubworld", "héllo wörld", "multi\nline"])
def test_replacement_value_is_served_exactly(config, make_stub, expected):
    """Whatever string the replacement returns is the full response body."""
    with ConfigurableServer(lambda sc: sc.replace(ValueService, make_stub(expected)), config=config) as server:
        response = server.create_client().get("/api/value")

    assert response.status_code == 200
    assert response.text == expected


def test_added_registration_takes_precedence(config, stub_service):
    """add_singleton after the defaults wins without an explicit replace."""
    with ConfigurableServer(lambda sc: sc.add_singleton(ValueService, stub_service), config=config) as server:
        value = server.create_client().get_string("api/value")

    assert value == "Hello stubworld"


def test_repeated_requests_are_identical(config):
    with ConfigurableServer(config=config) as server:
        client = server.create_client()
        first = client.get("/api/value")
        second = client.get("/api/value")

    assert first.status_code == second.status_code == 200
    assert first.text == second.text
    assert first.headers["content-type"] == second.headers["content-type"]


def test_service_is_resolved_per_request(config, make_stub):
    """Transient replacements are created for every request."""
    created = []

    def factory():
        stub = make_stub("fresh")
        created.append(stub)
        return stub

    with ConfigurableServer(
        lambda sc: sc.replace(ValueService, factory=factory, lifetime=ServiceLifetime.TRANSIENT),
        config=config,
    ) as server:
        client = server.create_client()
        client.get_string("api/value")
        client.get_string("api/value")

    assert len(created) == 2
    assert all(stub.calls == 1 for stub in created)


def test_post_not_allowed(config):
    with ConfigurableServer(config=config) as server:
        response = server.create_client().post("/api/value")

    assert response.status_code == 405


def test_unknown_route_not_found(config):
    with ConfigurableServer(config=config) as server:
        response = server.create_client().get("/api/values")

    assert response.status_code == 404


class TestFailures:
    """Failures are left to the framework's default error response."""

    def test_failing_service_returns_server_error(self, config):
        service_mock = Mock(spec=ValueService)
        service_mock.get_value.side_effect = RuntimeError("boom")

        with ConfigurableServer(
            lambda sc: sc.replace(ValueService, service_mock),
            config=config,
            raise_server_exceptions=False,
        ) as server:
            response = server.create_client().get("/api/value")

        assert response.status_code == 500

    def test_failing_service_propagates_when_raising(self, config):
        service_mock = Mock(spec=ValueService)
        service_mock.get_value.side_effect = RuntimeError("boom")

        with ConfigurableServer(lambda sc: sc.replace(ValueService, service_mock), config=config) as server:
            client = server.create_client()
            with pytest.raises(RuntimeError, match="boom"):
                client.get("/api/value")

    def test_missing_registration_fails_at_request_time(self, config):
        """Composition succeeds without a value service; the request fails."""
        server = ConfigurableServer(
            lambda sc: sc.remove(ValueService), config=config, raise_server_exceptions=False
        )
        try:
            assert ValueService not in server.app.state.services
            response = server.create_client().get("/api/value")
        finally:
            server.close()

        assert response.status_code == 500

    def test_missing_registration_raises_not_registered(self, config):
        with ConfigurableServer(lambda sc: sc.remove(ValueService), config=config) as server:
            client = server.create_client()
            with pytest.raises(ServiceNotRegisteredError):
                client.get("/api/value")
