"""Tests for DBusTransport.

Uses a fake message bus so no D-Bus daemon is needed.
"""

import asyncio

import pytest
from dbus_fast import Message, MessageType, Variant
from dbus_fast.errors import DBusError

from modemmanager.errors import SERVICE_UNKNOWN_ERROR, TransportError, dbus_error_name
from modemmanager.transport import DBusTransport

MODEM_0 = "/org/freedesktop/ModemManager1/Modem/0"


class FakeBus:
    """Records sent messages and answers with queued replies."""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.sent = []

    async def call(self, message):
        self.sent.append(message)
        return self.replies.pop(0)


def _reply(signature="", body=()):
    return Message(
        message_type=MessageType.METHOD_RETURN,
        reply_serial=1,
        signature=signature,
        body=list(body),
    )


def _error(name, text):
    return Message(
        message_type=MessageType.ERROR,
        reply_serial=1,
        error_name=name,
        signature="s",
        body=[text],
    )


class TestGetProperty:
    def test_sends_properties_get(self):
        bus = FakeBus(_reply("v", [Variant("s", "1.14.0")]))
        transport = DBusTransport(bus)

        value = asyncio.run(transport.get_property(
            "/org/freedesktop/ModemManager1", "org.freedesktop.ModemManager1", "Version",
        ))

        assert value == Variant("s", "1.14.0")
        (msg,) = bus.sent
        assert msg.destination == "org.freedesktop.ModemManager1"
        assert msg.path == "/org/freedesktop/ModemManager1"
        assert msg.interface == "org.freedesktop.DBus.Properties"
        assert msg.member == "Get"
        assert msg.signature == "ss"
        assert msg.body == ["org.freedesktop.ModemManager1", "Version"]

    def test_error_reply(self):
        bus = FakeBus(_error(SERVICE_UNKNOWN_ERROR, "The name is not activatable"))
        transport = DBusTransport(bus)

        with pytest.raises(TransportError, match="'Version'") as excinfo:
            asyncio.run(transport.get_property(
                "/org/freedesktop/ModemManager1", "org.freedesktop.ModemManager1", "Version",
            ))
        assert isinstance(excinfo.value.__cause__, DBusError)
        assert dbus_error_name(excinfo.value) == SERVICE_UNKNOWN_ERROR
        assert "not activatable" in str(excinfo.value)

    def test_custom_service(self):
        bus = FakeBus(_reply("v", [Variant("s", "1.20.0")]))
        transport = DBusTransport(bus, service="org.example.ModemManager1")
        asyncio.run(transport.get_property("/", "org.example.ModemManager1", "Version"))
        assert bus.sent[0].destination == "org.example.ModemManager1"


class TestGetAllProperties:
    def test_returns_map(self):
        props = {"Device": Variant("s", "X"), "State": Variant("i", 8)}
        bus = FakeBus(_reply("a{sv}", [props]))
        transport = DBusTransport(bus)

        got = asyncio.run(transport.get_all_properties(
            MODEM_0, "org.freedesktop.ModemManager1.Modem",
        ))

        assert got == props
        (msg,) = bus.sent
        assert msg.member == "GetAll"
        assert msg.signature == "s"
        assert msg.body == ["org.freedesktop.ModemManager1.Modem"]

    def test_error_reply(self):
        bus = FakeBus(_error("org.freedesktop.DBus.Error.UnknownMethod", "no such object"))
        transport = DBusTransport(bus)

        with pytest.raises(TransportError, match="failed to get all properties") as excinfo:
            asyncio.run(transport.get_all_properties(
                MODEM_0, "org.freedesktop.ModemManager1.Modem",
            ))
        assert dbus_error_name(excinfo.value) == "org.freedesktop.DBus.Error.UnknownMethod"


class TestCallMethod:
    def test_splits_interface_and_member(self):
        bus = FakeBus(_reply())
        transport = DBusTransport(bus)

        result = asyncio.run(transport.call_method(
            MODEM_0, "org.freedesktop.ModemManager1.Modem.Signal.Setup", Variant("u", 10),
        ))

        assert result is None
        (msg,) = bus.sent
        assert msg.interface == "org.freedesktop.ModemManager1.Modem.Signal"
        assert msg.member == "Setup"
        assert msg.signature == "u"
        assert msg.body == [10]

    def test_single_output(self):
        bus = FakeBus(_reply("s", ["2020-07-15T16:31:02-04:00"]))
        transport = DBusTransport(bus)

        result = asyncio.run(transport.call_method(
            MODEM_0, "org.freedesktop.ModemManager1.Modem.Time.GetNetworkTime",
        ))

        assert result == Variant("s", "2020-07-15T16:31:02-04:00")
        assert bus.sent[0].signature == ""

    def test_multiple_outputs_as_struct(self):
        bus = FakeBus(_reply("su", ["ttyUSB0", 4]))
        transport = DBusTransport(bus)

        result = asyncio.run(transport.call_method(
            MODEM_0, "org.freedesktop.ModemManager1.Modem.Example",
        ))

        assert result.signature == "(su)"
        assert result.value == ["ttyUSB0", 4]

    def test_error_reply(self):
        bus = FakeBus(_error(
            "org.freedesktop.ModemManager1.Error.Core.Unauthorized", "not allowed",
        ))
        transport = DBusTransport(bus)

        with pytest.raises(TransportError, match="Setup") as excinfo:
            asyncio.run(transport.call_method(
                MODEM_0, "org.freedesktop.ModemManager1.Modem.Signal.Setup", Variant("u", 0),
            ))
        assert (
            dbus_error_name(excinfo.value)
            == "org.freedesktop.ModemManager1.Error.Core.Unauthorized"
        )
