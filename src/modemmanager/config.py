"""Load client configuration from modemmanager.toml."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path

from dbus_fast import BusType

from modemmanager.paths import SERVICE

_BUS_TYPES = {
    "system": BusType.SYSTEM,
    "session": BusType.SESSION,
}


@dataclass(frozen=True)
class ClientConfig:
    """How to reach ModemManager.

    Attributes:
        bus: Which well-known bus to connect to ("system" or "session").
        bus_address: Explicit bus address; overrides bus when set.
        service: Bus name of the ModemManager service.
    """

    bus: str = "system"
    bus_address: str = ""
    service: str = SERVICE

    def __post_init__(self) -> None:
        if self.bus not in _BUS_TYPES:
            raise ValueError(
                f"Unknown bus {self.bus!r} (expected one of {sorted(_BUS_TYPES)})"
            )

    @property
    def bus_type(self) -> BusType:
        return _BUS_TYPES[self.bus]


def load_config(config_path: Path | str | None = None) -> ClientConfig:
    """Load client configuration from a TOML file.

    Settings are read from the [modemmanager] table; missing keys take
    their ClientConfig defaults. If config_path is None, looks for
    modemmanager.toml in the current directory.
    """
    if config_path is None:
        config_path = Path("modemmanager.toml")
    else:
        config_path = Path(config_path)

    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    section = data.get("modemmanager", {})
    return ClientConfig(
        bus=section.get("bus", "system"),
        bus_address=section.get("bus_address", ""),
        service=section.get("service", SERVICE),
    )
