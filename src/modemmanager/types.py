"""ModemManager data types.

These frozen dataclasses represent the objects ModemManager exposes on
D-Bus once their property maps have been decoded. Enumeration values are
taken from the ModemManager API reference ("Flags and Enumerations").

Enumerated properties are stored as the matching IntEnum member when the
value is known, and as a plain int otherwise: ModemManager may add values
that postdate this package, and those must not make decoding fail.
"""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass, field
from datetime import timedelta
from enum import IntEnum

from modemmanager.ip import IPAddress


class _OpaqueIntEnum(IntEnum):
    @classmethod
    def from_int(cls, value: int):
        """Return the member for value, or value itself if it is unknown."""
        try:
            return cls(value)
        except ValueError:
            return value


class PortType(_OpaqueIntEnum):
    """Type of a modem port (MMModemPortType)."""

    UNKNOWN = 1
    NET = 2
    AT = 3
    QCDM = 4
    GPS = 5
    QMI = 6
    MBIM = 7
    AUDIO = 8


class PowerState(_OpaqueIntEnum):
    """Power state of a modem (MMModemPowerState)."""

    UNKNOWN = 0
    OFF = 1
    LOW = 2
    ON = 3


class State(_OpaqueIntEnum):
    """Overall state of a modem (MMModemState)."""

    FAILED = -1
    UNKNOWN = 0
    INITIALIZING = 1
    LOCKED = 2
    DISABLED = 3
    DISABLING = 4
    ENABLING = 5
    ENABLED = 6
    SEARCHING = 7
    REGISTERED = 8
    DISCONNECTING = 9
    CONNECTING = 10
    CONNECTED = 11


class BearerIPMethod(_OpaqueIntEnum):
    """How a bearer obtains its IP configuration (MMBearerIpMethod)."""

    UNKNOWN = 0
    PPP = 1
    STATIC = 2
    DHCP = 3


@dataclass(frozen=True)
class Port:
    """A single modem port, e.g. ("cdc-wdm0", PortType.MBIM).

    Attributes:
        name: Kernel device name of the port.
        type: Port type; a plain int if the code is not a known PortType.
    """

    name: str
    type: PortType | int


@dataclass(frozen=True)
class Modem:
    """A modem device as reported by org.freedesktop.ModemManager1.Modem.

    Attributes:
        index: Position of the modem in ModemManager's modem list, taken
            from its object path (/org/freedesktop/ModemManager1/Modem/N).
        ports: Ports in the order ModemManager reported them.
        power_state: Power state; a plain int if unknown.
        state: Modem state; a plain int if unknown.
        bearer_paths: Object paths of the modem's bearers. Bearer data is
            fetched separately on request.
    """

    index: int
    carrier_configuration: str = ""
    carrier_configuration_revision: str = ""
    device: str = ""
    device_identifier: str = ""
    equipment_identifier: str = ""
    hardware_revision: str = ""
    manufacturer: str = ""
    model: str = ""
    plugin: str = ""
    ports: tuple[Port, ...] = ()
    power_state: PowerState | int = PowerState.UNKNOWN
    primary_port: str = ""
    revision: str = ""
    state: State | int = State.UNKNOWN
    bearer_paths: tuple[str, ...] = ()


@dataclass(frozen=True)
class LTESignal:
    """LTE extended signal quality. All zeros means no LTE data."""

    rsrp: float = 0.0
    rsrq: float = 0.0
    rssi: float = 0.0
    snr: float = 0.0


@dataclass(frozen=True)
class Signal:
    """Extended signal quality from org.freedesktop.ModemManager1.Modem.Signal.

    Attributes:
        rate: Refresh rate of the signal data (zero when disabled).
        lte: LTE signal quality.
    """

    rate: timedelta = timedelta(0)
    lte: LTESignal = field(default_factory=LTESignal)


@dataclass(frozen=True)
class IPNetwork:
    """An address and its network mask.

    ModemManager reports the address and the prefix length as separate
    properties, so either may be missing.
    """

    address: IPAddress | None = None
    mask: IPAddress | None = None

    @property
    def prefixlen(self) -> int | None:
        """Number of leading one bits in mask, or None without a mask."""
        if self.mask is None:
            return None
        bits = self.mask.max_prefixlen
        return bits - (int(self.mask) ^ ((1 << bits) - 1)).bit_length()

    @property
    def interface(self) -> ipaddress.IPv4Interface | ipaddress.IPv6Interface | None:
        """The address as an ipaddress interface, when both halves are known."""
        if self.address is None or self.mask is None:
            return None
        return ipaddress.ip_interface(f"{self.address}/{self.prefixlen}")


@dataclass(frozen=True)
class IPConfig:
    """IPv4 or IPv6 configuration of a bearer.

    Attributes:
        address: Address and mask, or None if neither was reported.
        dns: DNS servers, sorted byte-wise (not in wire order).
        gateway: Default gateway.
        method: IP configuration method; a plain int if unknown.
        mtu: Link MTU, 0 if not reported.
    """

    address: IPNetwork | None = None
    dns: tuple[IPAddress, ...] = ()
    gateway: IPAddress | None = None
    method: BearerIPMethod | int = BearerIPMethod.UNKNOWN
    mtu: int = 0


@dataclass(frozen=True)
class Bearer:
    """A modem bearer (org.freedesktop.ModemManager1.Bearer).

    Attributes:
        index: Bearer number, from the trailing segment of its object path.
        ip_timeout: Maximum time to wait for IP configuration.
        ipv4_config: IPv4 configuration, None if not reported.
        ipv6_config: IPv6 configuration, None if not reported.
    """

    index: int
    connected: bool = False
    interface: str = ""
    ip_timeout: timedelta = timedelta(0)
    ipv4_config: IPConfig | None = None
    ipv6_config: IPConfig | None = None
    suspended: bool = False
