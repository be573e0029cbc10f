import pytest

from azmq.errors import ProtocolViolation
from azmq.zmtp.greeting import (
    AS_SERVER_OFFSET,
    GREETING_LENGTH,
    GREETING_PREFIX,
    GREETING_SUFFIX,
    MECHANISM_LENGTH,
    MECHANISM_OFFSET,
    ZmtpGreeting,
)


def test_encode_layout():
    wire = ZmtpGreeting.encode(b"NULL", as_server=True)
    assert len(wire) == GREETING_LENGTH
    assert wire.startswith(GREETING_PREFIX)
    assert wire.endswith(GREETING_SUFFIX)
    assert wire[10] == 0x30
    assert wire[MECHANISM_OFFSET : MECHANISM_OFFSET + MECHANISM_LENGTH] == b"NULL".ljust(
        MECHANISM_LENGTH, b"\x00"
    )
    assert wire[AS_SERVER_OFFSET] == 1


def test_client_flag_is_zero():
    assert ZmtpGreeting.encode("PLAIN", as_server=False)[AS_SERVER_OFFSET] == 0


@pytest.mark.parametrize("as_server", [True, False])
@pytest.mark.parametrize("name", ["NULL", "PLAIN", "CURVE"])
def test_round_trip(name, as_server):
    buffer = bytearray(ZmtpGreeting.encode(name, as_server))
    greeting = ZmtpGreeting.decode(buffer)
    assert greeting.version == (3, 0)
    assert greeting.as_server is as_server
    assert greeting.mechanism_name() == name
    assert buffer == bytearray()


def test_decode_incomplete_leaves_buffer():
    wire = ZmtpGreeting.encode("NULL", False)
    buffer = bytearray(wire[:-1])
    assert ZmtpGreeting.decode(buffer) is None
    assert bytes(buffer) == wire[:-1]


def test_decode_consumes_only_greeting():
    buffer = bytearray(ZmtpGreeting.encode("NULL", False) + b"rest")
    assert ZmtpGreeting.decode(buffer).mechanism_name() == "NULL"
    assert buffer == bytearray(b"rest")


def test_decode_accepts_minor_version():
    wire = bytearray(ZmtpGreeting.encode("NULL", False))
    wire[10] = (3 << 4) | 1
    assert ZmtpGreeting.decode(wire).version == (3, 1)


def test_decode_bad_prefix():
    wire = bytearray(ZmtpGreeting.encode("NULL", False))
    wire[0] = 0
    with pytest.raises(ProtocolViolation, match="signature"):
        ZmtpGreeting.decode(wire)


def test_decode_bad_suffix():
    wire = bytearray(ZmtpGreeting.encode("NULL", False))
    wire[-1] = 0
    with pytest.raises(ProtocolViolation, match="signature"):
        ZmtpGreeting.decode(wire)


def test_decode_old_version():
    wire = bytearray(ZmtpGreeting.encode("NULL", False))
    wire[10] = 2 << 4
    with pytest.raises(ProtocolViolation, match="Unsupported ZMTP version 2.0"):
        ZmtpGreeting.decode(wire)


def test_decode_bad_as_server_flag():
    wire = bytearray(ZmtpGreeting.encode("NULL", False))
    wire[AS_SERVER_OFFSET] = 2
    with pytest.raises(ProtocolViolation, match="as-server"):
        ZmtpGreeting.decode(wire)


def test_mechanism_name_invalid_utf8():
    greeting = ZmtpGreeting((3, 0), b"\xff\xfe".ljust(MECHANISM_LENGTH, b"\x00"), False)
    assert greeting.mechanism_name() == "<invalid_utf8>"


def test_mechanism_name_full_length():
    greeting = ZmtpGreeting((3, 0), b"A" * MECHANISM_LENGTH, False)
    assert greeting.mechanism_name() == "A" * MECHANISM_LENGTH


def test_encode_rejects_long_mechanism():
    with pytest.raises(ValueError):
        ZmtpGreeting.encode(b"X" * (MECHANISM_LENGTH + 1), False)