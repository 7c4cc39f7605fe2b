import pytest

from socks_relay.core.exceptions import DecodeError, UnsupportedCommandError
from socks_relay.core.lib.dispatcher import MAX_REQUEST_SIZE, handle_request
from socks_relay.core.lib.request import AddressType, Command, Request

from .utils import DOMAIN_REQUEST, IPV4_REQUEST, FakeStream, RecordingDialer


def test_max_request_size_fits_longest_domain() -> None:
    assert MAX_REQUEST_SIZE == 262


def test_connect_domain_is_dialed() -> None:
    dialer = RecordingDialer()
    request = handle_request(FakeStream(DOMAIN_REQUEST), dialer)
    assert request.command == Command.CONNECT
    assert dialer.calls == [(b"google.se", AddressType.DOMAIN, b"\x00\x50")]


def test_connect_ipv4_is_dialed() -> None:
    dialer = RecordingDialer()
    handle_request(FakeStream(IPV4_REQUEST), dialer)
    assert dialer.calls == [(bytes([8, 8, 8, 8]), AddressType.IPV4, b"\x00\x50")]


def test_longest_domain_fits_in_one_read() -> None:
    domain = b"a" * 255
    frame = b"\x05\x01\x00\x03\xff" + domain + b"\x01\xbb"
    dialer = RecordingDialer()
    handle_request(FakeStream(frame), dialer)
    assert dialer.calls == [(domain, AddressType.DOMAIN, b"\x01\xbb")]


def test_invalid_request_is_not_dialed() -> None:
    dialer = RecordingDialer()
    with pytest.raises(DecodeError):
        handle_request(FakeStream(b"\x05\x02\x00\x01\x08\x08\x08\x08\x00\x50"), dialer)
    assert dialer.calls == []


def test_dial_errors_propagate() -> None:
    dialer = RecordingDialer(error=ConnectionRefusedError("refused"))
    with pytest.raises(ConnectionRefusedError):
        handle_request(FakeStream(IPV4_REQUEST), dialer)


def test_commands_without_handler_are_refused(mocker) -> None:
    bind = Request(5, Command.BIND, AddressType.IPV4, bytes([8, 8, 8, 8]), b"\x00\x50")
    mocker.patch("socks_relay.core.lib.dispatcher.decode", return_value=bind)
    dialer = RecordingDialer()
    with pytest.raises(UnsupportedCommandError):
        handle_request(FakeStream(IPV4_REQUEST), dialer)
    assert dialer.calls == []
