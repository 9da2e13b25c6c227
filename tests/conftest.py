"""
Pytest configuration and fixtures for testing.

This module provides shared fixtures for the registry, relay contexts and
the application.
"""

import json

import pytest

from tests.mocks.websocket_mocks import connect_mock


@pytest.fixture
def registry():
    """
    Provides an empty ConnectionRegistry.

    Returns:
        ConnectionRegistry: Fresh registry instance
    """
    from game_relay.managers.connection_registry import ConnectionRegistry

    return ConnectionRegistry()


@pytest.fixture
def host(registry):
    """
    Provides an open connection registered as the host.

    Args:
        registry: Fixture providing the registry

    Returns:
        Connection: The host connection
    """
    connection = connect_mock(registry)
    registry.set_host(connection)
    return connection


@pytest.fixture
def client(registry):
    """
    Provides an open connection registered as a client.

    Args:
        registry: Fixture providing the registry

    Returns:
        Connection: The client connection
    """
    connection = connect_mock(registry)
    registry.register(connection.client_id, connection)
    return connection


@pytest.fixture
def make_ctx(registry):
    """
    Provides a factory of RelayContext objects bound to the registry.

    Args:
        registry: Fixture providing the registry

    Returns:
        Callable: Builds a context for a given connection
    """
    from game_relay.routing import RelayContext

    def factory(connection):
        return RelayContext(connection=connection, registry=registry)

    return factory


@pytest.fixture
def frame():
    """
    Provides a helper that serializes a dict into a text frame.

    Returns:
        Callable: Serializes keyword arguments to JSON text
    """

    def factory(**payload):
        return json.dumps(payload)

    return factory
