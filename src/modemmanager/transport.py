"""The remote-object transport used by the client.

The client only needs three primitive operations, described by the
Transport protocol. DBusTransport implements them on top of a connected
dbus_fast MessageBus; tests substitute an in-memory fake.

Cancellation and timeouts belong to the caller: wrap calls in
asyncio.timeout() or cancel the task, and the CancelledError or
TimeoutError propagates unchanged.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from dbus_fast import Message, MessageType, Variant
from dbus_fast.errors import DBusError

from modemmanager.errors import TransportError
from modemmanager.paths import PROPERTIES_INTERFACE, SERVICE, split_method

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Protocol for the remote calls the client makes.

    Property values and method results are variants: objects with a
    D-Bus ``signature`` and a ``value``.
    """

    async def get_property(self, path: str, interface: str, name: str) -> Variant:
        """Fetch one property of an interface on an object."""
        ...

    async def get_all_properties(self, path: str, interface: str) -> dict[str, Variant]:
        """Fetch every property of an interface on an object."""
        ...

    async def call_method(self, path: str, method: str, *args: Variant) -> Variant | None:
        """Call "interface.Member" on an object.

        Returns None when the method has no output.
        """
        ...


class DBusTransport:
    """Transport over a connected dbus_fast.aio.MessageBus.

    Args:
        bus: A connected message bus. The transport does not own it;
            disconnecting is up to whoever created it.
        service: Bus name of the remote service.
    """

    def __init__(self, bus: Any, service: str = SERVICE) -> None:
        self._bus = bus
        self._service = service

    async def _call(
        self,
        path: str,
        interface: str,
        member: str,
        args: tuple[Variant, ...] = (),
    ) -> Message:
        """Send a method call and return the reply, raising on error replies."""
        logger.debug("calling %s.%s on %s", interface, member, path)
        reply = await self._bus.call(
            Message(
                destination=self._service,
                path=path,
                interface=interface,
                member=member,
                signature="".join(a.signature for a in args),
                body=[a.value for a in args],
            )
        )
        if reply.message_type == MessageType.ERROR:
            text = str(reply.body[0]) if reply.body else ""
            raise DBusError(reply.error_name, text, reply=reply)
        return reply

    async def get_property(self, path: str, interface: str, name: str) -> Variant:
        try:
            reply = await self._call(
                path, PROPERTIES_INTERFACE, "Get",
                (Variant("s", interface), Variant("s", name)),
            )
        except DBusError as e:
            msg = f"failed to get property {name!r} for {interface!r}: {e}"
            raise TransportError(msg) from e
        return reply.body[0]

    async def get_all_properties(self, path: str, interface: str) -> dict[str, Variant]:
        try:
            reply = await self._call(
                path, PROPERTIES_INTERFACE, "GetAll",
                (Variant("s", interface),),
            )
        except DBusError as e:
            msg = f"failed to get all properties for {interface!r}: {e}"
            raise TransportError(msg) from e
        return reply.body[0]

    async def call_method(self, path: str, method: str, *args: Variant) -> Variant | None:
        interface, member = split_method(method)
        try:
            reply = await self._call(path, interface, member, args)
        except DBusError as e:
            raise TransportError(f"failed to call {method!r}: {e}") from e

        if not reply.body:
            return None
        if len(reply.body) == 1:
            return Variant(reply.signature, reply.body[0])
        # Several output arguments are returned as a single struct.
        return Variant(f"({reply.signature})", list(reply.body))
