import struct

import pytest

from curious_presence.exc import ConnectionClosed, ProtocolViolation, SerializationFailure
from curious_presence.ipc.packet import IPCOpcode, IPCPacket, encode, pack_json


def test_encode_layout():
    data = encode(IPCOpcode.FRAME, b'{"a":1}')

    assert data[:4] == b"\x01\x00\x00\x00"
    assert data[4:8] == b"\x07\x00\x00\x00"
    assert data[8:] == b'{"a":1}'


def test_length_counts_utf8_bytes():
    packet = IPCPacket.from_json(IPCOpcode.FRAME, {"state": "café ☕"})
    data = packet.serialize()

    _, length = struct.unpack("<II", data[:8])
    assert length == len(data) - 8
    assert IPCPacket.deserialize(data).data == {"state": "café ☕"}


def test_pack_json_is_compact():
    assert pack_json({"v": 1, "client_id": "123"}) == b'{"v":1,"client_id":"123"}'


@pytest.mark.parametrize("value", [{"bad": object()}, {"nan": float("nan")}])
def test_pack_json_rejects_unserializable(value):
    with pytest.raises(SerializationFailure):
        pack_json(value)


@pytest.mark.parametrize("opcode", list(IPCOpcode))
def test_read_packet_round_trip(fake_transport, opcode):
    payload = b'{"cmd":"SET_ACTIVITY"}'
    transport = fake_transport(encode(opcode, payload))

    packet = IPCPacket.read_packet(transport)

    assert packet.opcode is opcode
    assert packet.payload == payload


@pytest.mark.parametrize("length", [0, 1, 8, 4096, 70000])
def test_read_packet_reads_exactly_header_and_length(fake_transport, length):
    trailing = b"next frame"
    transport = fake_transport(encode(IPCOpcode.FRAME, b"x" * length) + trailing)

    IPCPacket.read_packet(transport)

    assert transport.bytes_read == 8 + length
    assert bytes(transport.inbound) == trailing


def test_unknown_opcode_consumes_only_header(fake_transport):
    transport = fake_transport(struct.pack("<II", 99, 4) + b"abcd")

    with pytest.raises(ProtocolViolation):
        IPCPacket.read_packet(transport)

    assert transport.bytes_read == 8
    assert bytes(transport.inbound) == b"abcd"


def test_max_length_rejected_before_payload(fake_transport):
    transport = fake_transport(struct.pack("<II", 1, 2 ** 31))

    with pytest.raises(ProtocolViolation):
        IPCPacket.read_packet(transport, max_length=1024)

    assert transport.read_calls == [8]


def test_truncated_payload_raises_connection_closed(fake_transport):
    transport = fake_transport(struct.pack("<II", 1, 10) + b"short")

    with pytest.raises(ConnectionClosed):
        IPCPacket.read_packet(transport)


def test_deserialize_rejects_length_mismatch():
    data = struct.pack("<II", 1, 10) + b"{}"

    with pytest.raises(ProtocolViolation):
        IPCPacket.deserialize(data)


def test_packet_accessors():
    packet = IPCPacket.from_json(IPCOpcode.FRAME, {
        "cmd": "DISPATCH",
        "evt": "READY",
        "nonce": "c0ffee00-0000-4000-8000-000000000000",
    })

    assert packet.cmd == "DISPATCH"
    assert packet.event == "READY"
    assert str(packet.nonce) == "c0ffee00-0000-4000-8000-000000000000"


def test_invalid_json_payload():
    packet = IPCPacket(IPCOpcode.FRAME, b"\xff\xfe")

    with pytest.raises(ProtocolViolation):
        packet.data
