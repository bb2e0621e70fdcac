"""ModemManager client library over D-Bus.

Queries and controls modems managed by ModemManager
(org.freedesktop.ModemManager1). D-Bus property values are variants;
this package decodes them into typed, immutable Python objects and maps
D-Bus errors onto NotFoundError and PermissionDeniedError.

Quick start:
    import asyncio
    from modemmanager import dial

    async def main():
        async with await dial() as client:
            handle = await client.modem(0)
            print(handle.modem.manufacturer, handle.modem.model)
            for bearer in await handle.bearers():
                print(bearer.interface, bearer.ipv4_config)

    asyncio.run(main())

The parsers can also be used on their own with property maps obtained
elsewhere, e.g. parse_modem(0, properties).
"""

from modemmanager.client import Client, ModemHandle, dial
from modemmanager.config import ClientConfig, load_config
from modemmanager.errors import (
    DecodeError,
    ModemManagerError,
    NotFoundError,
    PermissionDeniedError,
    PropertyError,
    TransportError,
    ValueFormatError,
    ValueStructureError,
    ValueTypeError,
    to_not_found,
    to_permission_denied,
)
from modemmanager.parsers import (
    parse_bearer,
    parse_ip_config,
    parse_lte_signal,
    parse_modem,
    parse_network_time,
    parse_signal,
)
from modemmanager.transport import DBusTransport, Transport
from modemmanager.types import (
    Bearer,
    BearerIPMethod,
    IPConfig,
    IPNetwork,
    LTESignal,
    Modem,
    Port,
    PortType,
    PowerState,
    Signal,
    State,
)
from modemmanager.values import ValueParser

__all__ = [
    "Bearer",
    "BearerIPMethod",
    "Client",
    "ClientConfig",
    "DBusTransport",
    "DecodeError",
    "IPConfig",
    "IPNetwork",
    "LTESignal",
    "Modem",
    "ModemHandle",
    "ModemManagerError",
    "NotFoundError",
    "PermissionDeniedError",
    "Port",
    "PortType",
    "PowerState",
    "PropertyError",
    "Signal",
    "State",
    "Transport",
    "TransportError",
    "ValueFormatError",
    "ValueParser",
    "ValueStructureError",
    "ValueTypeError",
    "dial",
    "load_config",
    "parse_bearer",
    "parse_ip_config",
    "parse_lte_signal",
    "parse_modem",
    "parse_network_time",
    "parse_signal",
    "to_not_found",
    "to_permission_denied",
]
