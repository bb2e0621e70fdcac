"""Object paths and interface names for ModemManager.

Every path and name used by this package is composed from the fixed
ModemManager prefixes below plus literal components and integer indices,
so a result that fails D-Bus validation means the calling code is wrong.
Such a result raises AssertionError instead of a ModemManagerError:
there is nothing a caller could do to recover from it.
"""

from __future__ import annotations

import posixpath

from dbus_fast.validators import (
    is_interface_name_valid,
    is_member_name_valid,
    is_object_path_valid,
)

from modemmanager.errors import ValueStructureError

SERVICE = "org.freedesktop.ModemManager1"
BASE_PATH = "/org/freedesktop/ModemManager1"

PROPERTIES_INTERFACE = "org.freedesktop.DBus.Properties"


def object_path(*parts: str | int) -> str:
    """Join parts under BASE_PATH.

    >>> object_path("Modem", 0)
    '/org/freedesktop/ModemManager1/Modem/0'
    """
    path = posixpath.join(BASE_PATH, *(str(p) for p in parts))
    if not is_object_path_valid(path):
        raise AssertionError(f"modemmanager: bad D-Bus object path: {path!r}")
    return path


def interface_name(*parts: str) -> str:
    """Join parts under SERVICE.

    >>> interface_name("Modem", "Signal")
    'org.freedesktop.ModemManager1.Modem.Signal'
    """
    name = ".".join((SERVICE, *parts))
    if not is_interface_name_valid(name):
        raise AssertionError(f"modemmanager: bad D-Bus interface name: {name!r}")
    return name


def method_name(*parts: str) -> str:
    """Join parts under SERVICE, the last part being a method name.

    >>> method_name("Modem", "Time", "GetNetworkTime")
    'org.freedesktop.ModemManager1.Modem.Time.GetNetworkTime'
    """
    if not parts:
        raise AssertionError("modemmanager: method name requires a member")
    *iface, member = parts
    if not is_member_name_valid(member):
        raise AssertionError(f"modemmanager: bad D-Bus member name: {member!r}")
    return f"{interface_name(*iface)}.{member}"


def split_method(method: str) -> tuple[str, str]:
    """Split "interface.Member" into its interface and member parts.

    >>> split_method("org.freedesktop.DBus.Properties.Get")
    ('org.freedesktop.DBus.Properties', 'Get')
    """
    interface, _, member = method.rpartition(".")
    return interface, member


def path_index(path: str) -> int:
    """Parse the trailing segment of an object path as an index.

    Raises ValueStructureError if the segment is not a decimal number.

    >>> path_index("/org/freedesktop/ModemManager1/Bearer/3")
    3
    """
    segment = posixpath.basename(path)
    if not segment.isascii() or not segment.isdigit():
        raise ValueStructureError(
            f"object path {path!r} does not end in a numeric index"
        )
    return int(segment)
