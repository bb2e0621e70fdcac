"""Exception types and D-Bus error classification.

Decoding failures fall into three kinds, all subclasses of DecodeError
(and therefore of ValueError, like the rest of the parsing code):

  - ValueTypeError: a variant's signature does not match the accessor.
  - ValueFormatError: a string failed domain parsing (IP literal, time).
  - ValueStructureError: a composite value has the wrong shape.

Errors reported by D-Bus are named (e.g.
"org.freedesktop.DBus.Error.ServiceUnknown"). The classifier functions
map a small set of those names onto two generic categories,
NotFoundError and PermissionDeniedError, which callers test with
isinstance() rather than by inspecting error names or text.
"""

from __future__ import annotations

from dbus_fast.errors import DBusError

UNKNOWN_METHOD_ERROR = "org.freedesktop.DBus.Error.UnknownMethod"
SERVICE_UNKNOWN_ERROR = "org.freedesktop.DBus.Error.ServiceUnknown"
UNAUTHORIZED_ERROR = "org.freedesktop.ModemManager1.Error.Core.Unauthorized"


class ModemManagerError(Exception):
    """Base class for all errors raised by this package."""


class DecodeError(ModemManagerError, ValueError):
    """A D-Bus value could not be decoded into the expected type."""


class ValueTypeError(DecodeError):
    """A variant's D-Bus signature does not match the requested type."""


class ValueFormatError(DecodeError):
    """A string value failed domain-specific parsing."""


class ValueStructureError(DecodeError):
    """A composite value does not have the expected shape."""


class PropertyError(DecodeError):
    """Decoding a single named property failed.

    Attributes:
        key: The property name that could not be decoded.
        cause: The underlying decode error.
    """

    def __init__(self, key: str, cause: BaseException) -> None:
        super().__init__(f"error parsing {key!r}: {cause}")
        self.key = key
        self.cause = cause
        self.__cause__ = cause


class TransportError(ModemManagerError):
    """A remote call on the bus failed."""


class _CategoryError(ModemManagerError):
    """Wraps an original error, adding a category to it.

    The original error stays available as ``error`` (and as
    ``__cause__``) so its text can still be logged.
    """

    prefix = ""

    def __init__(self, error: BaseException) -> None:
        super().__init__(f"{self.prefix}: {error}")
        self.error = error
        self.__cause__ = error


class NotFoundError(_CategoryError, LookupError):
    """The requested object or service does not exist."""

    prefix = "not found"


class PermissionDeniedError(_CategoryError, PermissionError):
    """The caller is not authorized to perform the operation."""

    prefix = "permission denied"


# Default D-Bus error names for each category.
NOT_FOUND_ERRORS = frozenset({UNKNOWN_METHOD_ERROR, SERVICE_UNKNOWN_ERROR})
PERMISSION_DENIED_ERRORS = frozenset({UNAUTHORIZED_ERROR})


def dbus_error_name(err: BaseException) -> str | None:
    """Return the D-Bus error name carried by err, if any.

    Follows the ``__cause__``/``__context__`` chain so errors re-raised
    by the transport with ``raise ... from`` are still recognised.
    """
    seen: set[int] = set()
    current: BaseException | None = err
    while current is not None and id(current) not in seen:
        if isinstance(current, DBusError):
            return current.type
        seen.add(id(current))
        current = current.__cause__ or current.__context__
    return None


def _classify(
    err: BaseException,
    names: frozenset[str],
    category: type[_CategoryError],
) -> BaseException:
    name = dbus_error_name(err)
    if name is None or name not in names:
        return err
    return category(err)


def to_not_found(err: BaseException, *names: str) -> BaseException:
    """Classify err as NotFoundError if its D-Bus name is one of names.

    With no names given, NOT_FOUND_ERRORS is used. The match is exact:
    the same name that callers pass must also be the one on the wire.
    Any other error, including one that carries no D-Bus name at all,
    is returned unchanged.
    """
    return _classify(err, frozenset(names) or NOT_FOUND_ERRORS, NotFoundError)


def to_permission_denied(err: BaseException) -> BaseException:
    """Classify err as PermissionDeniedError if ModemManager refused it."""
    return _classify(err, PERMISSION_DENIED_ERRORS, PermissionDeniedError)
