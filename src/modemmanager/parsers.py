"""Property map parsers.

Each function turns a D-Bus property map (property name -> variant) into
one of the dataclasses in modemmanager.types. Keys are matched exactly;
unknown keys are skipped so newer ModemManager releases keep working.
Every known key is decoded with a fresh ValueParser, and the first
failure stops the parse with a PropertyError naming the key. Callers
never get a partially populated object.

parse_network_time() handles the string returned by
Modem.Time.GetNetworkTime, which needs its own normalisation.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import datetime, timedelta, timezone
from typing import Any

from modemmanager.errors import PropertyError, ValueFormatError
from modemmanager.ip import IPAddress, ip_sort_key
from modemmanager.paths import path_index
from modemmanager.types import (
    Bearer,
    BearerIPMethod,
    IPConfig,
    IPNetwork,
    LTESignal,
    Modem,
    PowerState,
    Signal,
    State,
)
from modemmanager.values import ValueParser

Properties = Mapping[str, Any]

_MODEM_STRING_FIELDS = {
    "CarrierConfiguration": "carrier_configuration",
    "CarrierConfigurationRevision": "carrier_configuration_revision",
    "Device": "device",
    "DeviceIdentifier": "device_identifier",
    "EquipmentIdentifier": "equipment_identifier",
    "HardwareRevision": "hardware_revision",
    "Manufacturer": "manufacturer",
    "Model": "model",
    "Plugin": "plugin",
    "PrimaryPort": "primary_port",
    "Revision": "revision",
}

_LTE_FIELDS = ("rsrp", "rsrq", "rssi", "snr")

_RFC3339 = re.compile(
    r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(?:\.\d+)?(?:Z|[+-]\d{2}:\d{2})"
)


def _check(key: str, vp: ValueParser) -> None:
    if vp.err is not None:
        raise PropertyError(key, vp.err)


def parse_modem(index: int, properties: Properties) -> Modem:
    """Parse org.freedesktop.ModemManager1.Modem properties into a Modem.

    Args:
        index: The modem's index in ModemManager.
        properties: Property map from Properties.GetAll.

    Raises:
        PropertyError: If any known property has an unexpected type.
    """
    fields: dict[str, Any] = {}
    for key, value in properties.items():
        vp = ValueParser(value)
        if key in _MODEM_STRING_FIELDS:
            fields[_MODEM_STRING_FIELDS[key]] = vp.string()
        elif key == "Bearers":
            fields["bearer_paths"] = vp.object_paths()
        elif key == "Ports":
            fields["ports"] = vp.ports()
        elif key == "PowerState":
            fields["power_state"] = PowerState.from_int(vp.int())
        elif key == "State":
            fields["state"] = State.from_int(vp.int())
        _check(key, vp)

    return Modem(index=index, **fields)


def parse_lte_signal(properties: Properties) -> LTESignal:
    """Parse the "Lte" signal sub-map (rsrp, rsrq, rssi, snr)."""
    fields: dict[str, float] = {}
    for key, value in properties.items():
        if key not in _LTE_FIELDS:
            continue
        vp = ValueParser(value)
        fields[key] = vp.float()
        _check(key, vp)
    return LTESignal(**fields)


def parse_signal(properties: Properties) -> Signal:
    """Parse org.freedesktop.ModemManager1.Modem.Signal properties.

    Only LTE data is decoded; the maps of other access technologies are
    skipped like any other unknown key.
    """
    rate = timedelta(0)
    lte = LTESignal()
    for key, value in properties.items():
        vp = ValueParser(value)
        if key == "Rate":
            rate = timedelta(seconds=vp.int())
        elif key == "Lte":
            sub = vp.properties()
            if vp.err is None:
                try:
                    lte = parse_lte_signal(sub)
                except PropertyError as e:
                    raise PropertyError(key, e) from e
        _check(key, vp)

    return Signal(rate=rate, lte=lte)


def parse_ip_config(properties: Properties, bits: int) -> IPConfig:
    """Parse a bearer "Ip4Config" or "Ip6Config" map.

    The "address" and "prefix" keys are merged into one IPNetwork. Either
    may be absent; the result then holds only the half that was present.

    Args:
        properties: The configuration map.
        bits: Address width used for the prefix mask, 32 or 128.
    """
    address: IPAddress | None = None
    mask: IPAddress | None = None
    have_network = False
    dns: list[IPAddress] = []
    gateway: IPAddress | None = None
    method: BearerIPMethod | int = BearerIPMethod.UNKNOWN
    mtu = 0

    for key, value in properties.items():
        vp = ValueParser(value)
        if key == "address":
            address = vp.ip()
            have_network = True
        elif key == "prefix":
            mask = vp.mask(bits)
            have_network = True
        elif key in ("dns1", "dns2", "dns3"):
            server = vp.ip()
            if server is not None:
                dns.append(server)
        elif key == "gateway":
            gateway = vp.ip()
        elif key == "method":
            method = BearerIPMethod.from_int(vp.int())
        elif key == "mtu":
            mtu = vp.int()
        _check(key, vp)

    return IPConfig(
        address=IPNetwork(address=address, mask=mask) if have_network else None,
        dns=tuple(sorted(dns, key=ip_sort_key)),
        gateway=gateway,
        method=method,
        mtu=mtu,
    )


def parse_bearer(path: str, properties: Properties) -> Bearer:
    """Parse org.freedesktop.ModemManager1.Bearer properties.

    Args:
        path: The bearer's object path; its trailing segment is the index.
        properties: Property map from Properties.GetAll.

    Raises:
        ValueStructureError: If the path does not end in a number.
        PropertyError: If any known property has an unexpected type.
    """
    index = path_index(path)
    fields: dict[str, Any] = {}
    for key, value in properties.items():
        vp = ValueParser(value)
        if key == "Connected":
            fields["connected"] = vp.bool()
        elif key == "Interface":
            fields["interface"] = vp.string()
        elif key == "IpTimeout":
            fields["ip_timeout"] = timedelta(seconds=vp.int())
        elif key == "Suspended":
            fields["suspended"] = vp.bool()
        elif key in ("Ip4Config", "Ip6Config"):
            sub = vp.properties()
            if vp.err is None:
                v6 = key == "Ip6Config"
                try:
                    config = parse_ip_config(sub, bits=128 if v6 else 32)
                except PropertyError as e:
                    raise PropertyError(key, e) from e
                fields["ipv6_config" if v6 else "ipv4_config"] = config
        _check(key, vp)

    return Bearer(index=index, **fields)


def parse_network_time(value: str) -> datetime:
    """Parse the timestamp returned by Modem.Time.GetNetworkTime.

    Modems report an ISO 8601 time with a zone offset, e.g.
    "2020-07-15T16:31:02-04:00", but the date and clock fields are
    actually UTC. The fields are therefore re-read as a UTC time and the
    result converted to the reported offset:

    >>> parse_network_time("2020-07-15T16:31:02-04:00").isoformat()
    '2020-07-15T12:31:02-04:00'

    This is a workaround for the observed modem behaviour rather than
    standard ISO 8601 semantics, and callers rely on it.

    Only the RFC 3339 form is accepted: extended date and time joined by
    "T", optional fractional seconds, and "Z" or a "+hh:mm" offset.

    Raises:
        ValueFormatError: If value is not an RFC 3339 time with an offset.
    """
    if _RFC3339.fullmatch(value) is None:
        raise ValueFormatError(f"invalid network time {value!r}: not RFC 3339")
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as e:
        raise ValueFormatError(f"invalid network time {value!r}: {e}") from e

    as_utc = parsed.replace(microsecond=0, tzinfo=timezone.utc)
    return as_utc.astimezone(parsed.tzinfo)
