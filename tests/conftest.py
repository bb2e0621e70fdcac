"""Shared test fixtures for modemmanager."""

from __future__ import annotations

import pathlib

import pytest

from modemmanager.errors import TransportError

FIXTURES_DIR = pathlib.Path(__file__).parent / "fixtures"


class FakeTransport:
    """In-memory Transport recording every call it receives.

    Responses are looked up by (path, interface) for property reads and
    by (path, method) for method calls. A response that is an exception
    instance is raised instead of returned.
    """

    def __init__(self) -> None:
        self.properties: dict[tuple[str, str], object] = {}
        self.methods: dict[tuple[str, str], object] = {}
        self.calls: list[tuple] = []

    @staticmethod
    def _respond(response):
        if isinstance(response, BaseException):
            raise response
        return response

    async def get_property(self, path, interface, name):
        self.calls.append(("get", path, interface, name))
        response = self.properties[(path, interface)]
        if isinstance(response, dict):
            return response[name]
        return self._respond(response)

    async def get_all_properties(self, path, interface):
        self.calls.append(("get_all", path, interface))
        return self._respond(self.properties[(path, interface)])

    async def call_method(self, path, method, *args):
        self.calls.append(("call", path, method, args))
        return self._respond(self.methods.get((path, method)))


def transport_error(name: str, text: str = "test error") -> TransportError:
    """Build a TransportError chained from a DBusError named name."""
    from dbus_fast.errors import DBusError

    try:
        raise DBusError(name, text)
    except DBusError as e:
        try:
            raise TransportError(f"call failed: {e}") from e
        except TransportError as wrapped:
            return wrapped


@pytest.fixture
def fixtures_dir():
    """Return the path to the test fixtures directory."""
    return FIXTURES_DIR


@pytest.fixture
def transport():
    """Return an empty FakeTransport."""
    return FakeTransport()


@pytest.fixture
def make_transport_error():
    """Return a factory for TransportErrors carrying a D-Bus error name."""
    return transport_error
