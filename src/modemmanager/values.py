"""Typed decoding of D-Bus variant values.

A ValueParser wraps one variant (anything with ``signature`` and
``value`` attributes, normally a dbus_fast.Variant) and exposes one
accessor per Python type. Accessors never raise on bad wire data: they
return the zero value of their type and record the first failure in
``ValueParser.err``. Once an error is recorded every later accessor is
a no-op, so callers may chain several accessors and check ``err`` once.

    vp = ValueParser(variant)
    mtu = vp.int()
    if vp.err is not None:
        raise PropertyError("mtu", vp.err)
"""

from __future__ import annotations

import ipaddress
from typing import Any

from modemmanager.errors import (
    DecodeError,
    ValueFormatError,
    ValueStructureError,
    ValueTypeError,
)
from modemmanager.ip import IPAddress, cidr_mask
from modemmanager.types import Port, PortType

# D-Bus type signatures understood by the accessors.
SIG_STRING = "s"
SIG_INT32 = "i"
SIG_UINT32 = "u"
SIG_UINT64 = "t"
SIG_DOUBLE = "d"
SIG_BOOLEAN = "b"
SIG_OBJECT_PATHS = "ao"
SIG_PORTS = "a(su)"
SIG_PROPERTIES = "a{sv}"


class ValueParser:
    """A decode session over a single variant.

    Attributes:
        err: The first DecodeError encountered, or None.
    """

    def __init__(self, variant: Any) -> None:
        self._signature: str = variant.signature
        self._value: Any = variant.value
        self.err: DecodeError | None = None

    def _expect(self, *signatures: str) -> bool:
        """Check the variant signature, recording a type error on mismatch."""
        if self.err is not None:
            return False
        if self._signature not in signatures:
            want = " or ".join(repr(s) for s in signatures)
            self.err = ValueTypeError(
                f"value of type {self._signature!r} is not {want}"
            )
            return False
        return True

    def string(self) -> str:
        if not self._expect(SIG_STRING):
            return ""
        return self._value

    def int(self) -> int:
        """Decode an int32 or uint32."""
        if not self._expect(SIG_INT32, SIG_UINT32):
            return 0
        return self._value

    def uint64(self) -> int:
        if not self._expect(SIG_UINT64):
            return 0
        return self._value

    def float(self) -> float:
        if not self._expect(SIG_DOUBLE):
            return 0.0
        return self._value

    def bool(self) -> bool:
        if not self._expect(SIG_BOOLEAN):
            return False
        return self._value

    def ip(self) -> IPAddress | None:
        """Decode a string holding an IPv4 or IPv6 address literal."""
        if not self._expect(SIG_STRING):
            return None
        try:
            return ipaddress.ip_address(self._value)
        except ValueError:
            self.err = ValueFormatError(f"invalid IP address: {self._value!r}")
            return None

    def mask(self, bits: int) -> IPAddress | None:
        """Decode a uint32 prefix length as a network mask.

        Args:
            bits: Address width, 32 for IPv4 or 128 for IPv6.

        Raises:
            ValueError: If bits is neither 32 nor 128. This is a bug in
                the caller, not a property of the wire data.
        """
        if bits not in (32, 128):
            raise ValueError(f"mask width must be 32 or 128 bits, got {bits}")
        if not self._expect(SIG_UINT32):
            return None
        try:
            return cidr_mask(self._value, bits)
        except ValueError as e:
            self.err = ValueFormatError(str(e))
            return None

    def object_paths(self) -> tuple[str, ...]:
        if not self._expect(SIG_OBJECT_PATHS):
            return ()
        return tuple(self._value)

    def ports(self) -> tuple[Port, ...]:
        """Decode a list of (name, type) port tuples.

        The list is decoded as a whole: one malformed entry fails the
        accessor and no ports are returned.
        """
        if not self._expect(SIG_PORTS):
            return ()

        ports = []
        for entry in self._value:
            if not isinstance(entry, (list, tuple)) or len(entry) != 2:
                self.err = ValueStructureError(f"invalid port entry: {entry!r}")
                return ()
            name, code = entry
            if not isinstance(name, str):
                self.err = ValueStructureError(f"invalid port name: {name!r}")
                return ()
            if not isinstance(code, int) or isinstance(code, bool):
                self.err = ValueStructureError(f"invalid port type: {code!r}")
                return ()
            ports.append(Port(name=name, type=PortType.from_int(code)))
        return tuple(ports)

    def properties(self) -> dict[str, Any]:
        """Decode a nested a{sv} property map (values stay variants)."""
        if not self._expect(SIG_PROPERTIES):
            return {}
        return self._value
