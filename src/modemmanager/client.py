"""ModemManager client.

Fetches property maps through a Transport, classifies D-Bus errors and
hands the maps to the parsers in modemmanager.parsers.

Usage:
    async with await dial() as client:
        handle = await client.modem(0)
        print(handle.modem.model, handle.modem.state)
        signal = await handle.signal()

Fetching modems by index is the caller's business; a modem that does not
exist raises NotFoundError.
"""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Callable, Iterator
from datetime import datetime, timedelta

from dbus_fast import Variant
from dbus_fast.aio import MessageBus

from modemmanager.config import ClientConfig
from modemmanager.errors import (
    SERVICE_UNKNOWN_ERROR,
    UNKNOWN_METHOD_ERROR,
    PropertyError,
    ValueTypeError,
    to_not_found,
    to_permission_denied,
)
from modemmanager.parsers import (
    parse_bearer,
    parse_modem,
    parse_network_time,
    parse_signal,
)
from modemmanager.paths import (
    BASE_PATH,
    SERVICE,
    interface_name,
    method_name,
    object_path,
)
from modemmanager.transport import DBusTransport, Transport
from modemmanager.types import Bearer, Modem, Signal
from modemmanager.values import ValueParser

logger = logging.getLogger(__name__)

_SECOND = timedelta(seconds=1)
_HALF_SECOND = timedelta(milliseconds=500)
_MAX_UINT32 = 2**32 - 1


@contextlib.contextmanager
def _classified(
    classify: Callable[..., BaseException], *names: str,
) -> Iterator[None]:
    """Re-raise errors from the block through an error classifier."""
    try:
        yield
    except Exception as e:
        err = classify(e, *names)
        if err is e:
            raise
        raise err


class Client:
    """A connection to ModemManager.

    Use Client.create() (or dial()) rather than the constructor so the
    service is checked and its version read.

    Args:
        transport: Transport used for all remote calls.
        version: ModemManager version string.
        bus: Message bus owned by this client, disconnected by close().
    """

    def __init__(
        self,
        transport: Transport,
        version: str = "",
        bus: MessageBus | None = None,
    ) -> None:
        self.transport = transport
        self.version = version
        self._bus = bus

    @classmethod
    async def create(cls, transport: Transport, bus: MessageBus | None = None) -> Client:
        """Build a Client after verifying ModemManager answers.

        Raises:
            NotFoundError: If ModemManager is not running on the bus.
            PropertyError: If the Version property is not a string.
        """
        # D-Bus reports "service unknown" when ModemManager is not running.
        with _classified(to_not_found, SERVICE_UNKNOWN_ERROR):
            value = await transport.get_property(BASE_PATH, SERVICE, "Version")

        vp = ValueParser(value)
        version = vp.string()
        if vp.err is not None:
            raise PropertyError("Version", vp.err)

        logger.debug("Connected to ModemManager %s", version)
        return cls(transport, version=version, bus=bus)

    async def close(self) -> None:
        """Disconnect the message bus if this client opened it."""
        if self._bus is not None:
            bus, self._bus = self._bus, None
            bus.disconnect()
            await bus.wait_for_disconnect()

    async def __aenter__(self) -> Client:
        return self

    async def __aexit__(self, *_exc) -> None:
        await self.close()

    async def modem(self, index: int) -> ModemHandle:
        """Fetch the modem at index.

        Raises:
            NotFoundError: If no modem exists at index.
            PropertyError: If a modem property could not be decoded.
        """
        # ModemManager answers "unknown method" for a missing modem.
        with _classified(to_not_found, UNKNOWN_METHOD_ERROR):
            properties = await self.transport.get_all_properties(
                object_path("Modem", index), interface_name("Modem"),
            )

        modem = parse_modem(index, properties)
        logger.debug("Modem %d: %s %s", index, modem.manufacturer, modem.model)
        return ModemHandle(self, modem)


class ModemHandle:
    """A decoded Modem plus the operations that can be invoked on it.

    Calling methods on a modem requires elevated privileges; a refusal
    raises PermissionDeniedError.
    """

    def __init__(self, client: Client, modem: Modem) -> None:
        self._client = client
        self.modem = modem

    @property
    def index(self) -> int:
        return self.modem.index

    @property
    def _path(self) -> str:
        return object_path("Modem", self.modem.index)

    async def signal(self) -> Signal:
        """Fetch extended signal quality.

        The refresh rate of the data is controlled with signal_setup().
        """
        properties = await self._client.transport.get_all_properties(
            self._path, interface_name("Modem", "Signal"),
        )
        return parse_signal(properties)

    async def signal_setup(self, rate: timedelta) -> None:
        """Set the extended signal quality refresh rate.

        The rate is sent in whole seconds, rounded to the nearest second
        with halves rounded up.

        Raises:
            ValueError: If rate is negative or too long for a uint32.
        """
        if rate < timedelta(0):
            raise ValueError(f"signal refresh rate must not be negative, got {rate}")
        seconds, remainder = divmod(rate, _SECOND)
        if remainder >= _HALF_SECOND:
            seconds += 1
        if seconds > _MAX_UINT32:
            raise ValueError(f"signal refresh rate too long: {rate}")
        with _classified(to_permission_denied):
            await self._client.transport.call_method(
                self._path,
                method_name("Modem", "Signal", "Setup"),
                Variant("u", seconds),
            )

    async def network_time(self) -> datetime:
        """Fetch the current time from the modem's network.

        See parse_network_time() for how the reported time is normalised.
        """
        with _classified(to_permission_denied):
            value = await self._client.transport.call_method(
                self._path, method_name("Modem", "Time", "GetNetworkTime"),
            )
        if value is None:
            raise ValueTypeError("GetNetworkTime returned no value")

        vp = ValueParser(value)
        text = vp.string()
        if vp.err is not None:
            raise vp.err
        return parse_network_time(text)

    async def bearers(self) -> list[Bearer]:
        """Fetch this modem's bearers in the order the modem lists them."""
        bearers = []
        for path in self.modem.bearer_paths:
            properties = await self._client.transport.get_all_properties(
                path, interface_name("Bearer"),
            )
            bearers.append(parse_bearer(path, properties))
        return bearers


async def dial(config: ClientConfig | None = None) -> Client:
    """Connect to the configured bus and return a Client that owns it.

    Raises:
        NotFoundError: If ModemManager is not running on the bus.
    """
    if config is None:
        config = ClientConfig()

    if config.bus_address:
        bus = MessageBus(bus_address=config.bus_address)
    else:
        bus = MessageBus(bus_type=config.bus_type)
    await bus.connect()

    try:
        return await Client.create(DBusTransport(bus, service=config.service), bus=bus)
    except BaseException:
        bus.disconnect()
        await bus.wait_for_disconnect()
        raise
