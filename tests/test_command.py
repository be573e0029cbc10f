import pytest

from azmq.errors import ProtocolViolation
from azmq.message import Msg, MsgFlags
from azmq.zmtp.command import (
    ErrorCommand,
    Ping,
    Pong,
    UnknownCommand,
    ZmtpReady,
    create_ping,
    create_pong,
    parse_command,
)


def test_create_ping_wire_bytes():
    msg = create_ping(0, b"")
    assert msg.data == b"\x04PING\x00\x00"
    assert msg.is_command()
    assert not msg.is_more()


def test_ping_round_trip():
    msg = create_ping(300, b"ctx")
    assert parse_command(msg) == Ping(300, b"ctx")


def test_create_pong_wire_bytes():
    msg = create_pong(b"abc")
    assert msg.data == b"\x04PONGabc"
    assert msg.is_command()


def test_pong_round_trip():
    assert parse_command(create_pong(b"hello")) == Pong(b"hello")


def test_ready_round_trip():
    props = {"Socket-Type": b"DEALER", "Identity": b"peer-1"}
    msg = ZmtpReady.create_msg(props)
    assert msg.is_command()
    assert msg.data.startswith(b"\x05READY")
    parsed = parse_command(msg)
    assert isinstance(parsed, ZmtpReady)
    assert parsed.properties == props


def test_ready_with_no_properties():
    parsed = parse_command(ZmtpReady.create_msg({}))
    assert parsed == ZmtpReady({})


def test_non_command_is_not_parsed():
    assert parse_command(Msg(b"\x04PING\x00\x00")) is None


def test_multi_frame_command_is_not_parsed():
    msg = Msg(b"\x04PING\x00\x00", MsgFlags.COMMAND | MsgFlags.MORE)
    assert parse_command(msg) is None


def test_command_without_data_is_not_parsed():
    assert parse_command(Msg(None, MsgFlags.COMMAND)) is None


def test_error_command():
    msg = Msg(b"\x05ERRORsomething", MsgFlags.COMMAND)
    assert parse_command(msg) == ErrorCommand()


def test_unknown_command_keeps_body():
    body = b"\x09SUBSCRIBEtopic"
    assert parse_command(Msg(body, MsgFlags.COMMAND)) == UnknownCommand(body)


def test_truncated_ping_is_not_parsed():
    assert parse_command(Msg(b"\x04PING\x00", MsgFlags.COMMAND)) is None


def test_malformed_ready_is_not_parsed():
    msg = Msg(b"\x05READY\x05ab", MsgFlags.COMMAND)
    assert parse_command(msg) is None


def test_encode_properties_wire_bytes():
    assert ZmtpReady({"A": b"b"}).encode_properties() == b"\x01A\x00\x00\x00\x01b"


def test_encode_properties_skips_long_names():
    ready = ZmtpReady({"x" * 256: b"v", "ok": b"1"})
    parsed = ZmtpReady.parse_properties(ready.encode_properties())
    assert parsed.properties == {"ok": b"1"}


def test_parse_properties_empty():
    assert ZmtpReady.parse_properties(b"").properties == {}


def test_parse_properties_bad_name_length():
    with pytest.raises(ProtocolViolation, match="name length"):
        ZmtpReady.parse_properties(b"\x05ab")


def test_parse_properties_invalid_utf8_name():
    with pytest.raises(ProtocolViolation, match="UTF-8"):
        ZmtpReady.parse_properties(b"\x01\xff\x00\x00\x00\x00")


def test_parse_properties_missing_value_length():
    with pytest.raises(ProtocolViolation, match="value length"):
        ZmtpReady.parse_properties(b"\x01A\x00\x00")


def test_parse_properties_truncated_value():
    with pytest.raises(ProtocolViolation, match="value length"):
        ZmtpReady.parse_properties(b"\x01A\x00\x00\x00\x05ab")