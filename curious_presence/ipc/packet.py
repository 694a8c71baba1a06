# This file is part of curious-presence.
#
# curious-presence is free software: you can redistribute it and/or modify
# it under the terms of the GNU Lesser General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# curious-presence is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Lesser General Public License for more details.
#
# You should have received a copy of the GNU Lesser General Public License
# along with curious-presence.  If not, see <http://www.gnu.org/licenses/>.

"""
Represents a Discord IPC packet.

Every packet is an 8 byte header followed by a UTF-8 JSON payload. The header is two little-endian
unsigned 32-bit integers: the opcode, then the length of the payload in bytes.

.. currentmodule:: curious_presence.ipc.packet
"""
import enum
import json
import logging
import struct
import uuid
from typing import Any

from curious_presence.exc import ProtocolViolation, SerializationFailure

logger = logging.getLogger("curious_presence.ipc")

HEADER = struct.Struct("<II")


class IPCOpcode(enum.IntEnum):
    """
    Represents an IPC opcode.
    """
    HANDSHAKE = 0
    FRAME = 1
    CLOSE = 2
    PING = 3
    PONG = 4


def pack_json(data: Any) -> bytes:
    """
    Packs JSON in a compact representation.

    :param data: The data to pack.
    :raises SerializationFailure: If the data is not representable as JSON.
    """
    try:
        text = json.dumps(data, indent=None, separators=(',', ':'), allow_nan=False)
    except (TypeError, ValueError) as e:
        raise SerializationFailure("Cannot serialize payload: {}".format(e)) from e

    return text.encode("utf-8")


def encode(opcode: int, payload: bytes) -> bytes:
    """
    Encodes a single frame.

    :param opcode: The opcode of the frame.
    :param payload: The already-encoded payload.
    """
    return HEADER.pack(opcode, len(payload)) + payload


def _parse_opcode(value: int) -> IPCOpcode:
    try:
        return IPCOpcode(value)
    except ValueError:
        raise ProtocolViolation("Unknown IPC opcode {}".format(value)) from None


class IPCPacket(object):
    """
    Represents an IPC packet.
    """

    __slots__ = "opcode", "payload"

    def __init__(self, opcode: IPCOpcode, payload: bytes):
        """
        :param opcode: The :class:`.IPCOpcode` for this packet.
        :param payload: The raw payload bytes of this packet.
        """
        self.opcode = opcode
        self.payload = payload

    @classmethod
    def from_json(cls, opcode: IPCOpcode, data: Any) -> 'IPCPacket':
        """
        Creates a new packet with a JSON payload.
        """
        return cls(opcode, pack_json(data))

    def __eq__(self, other) -> bool:
        if not isinstance(other, IPCPacket):
            return NotImplemented

        return self.opcode == other.opcode and self.payload == other.payload

    def __repr__(self) -> str:
        return "<IPCPacket opcode={!r} length={}>".format(self.opcode, len(self.payload))

    # properties
    @property
    def data(self) -> Any:
        """
        Gets the decoded JSON payload of this packet.
        """
        try:
            return json.loads(self.payload.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as e:
            raise ProtocolViolation("Packet payload is not valid JSON: {}".format(e)) from e

    @property
    def event(self) -> str:
        """
        Gets the event for this packet. Received packets only.
        """
        return self.data.get("evt")

    @property
    def cmd(self) -> str:
        """
        Gets the command for this packet.
        """
        return self.data.get("cmd")

    @property
    def nonce(self) -> uuid.UUID:
        """
        Gets the nonce for this packet.
        """
        nonce = self.data.get("nonce")
        if nonce is None:
            return None

        return uuid.UUID(nonce)

    def serialize(self) -> bytes:
        """
        Serializes this packet into a series of bytes.
        """
        return encode(self.opcode, self.payload)

    @classmethod
    def deserialize(cls, data: bytes) -> 'IPCPacket':
        """
        Deserializes a full packet.

        This method is not usually what you want.
        """
        if len(data) < HEADER.size:
            raise ProtocolViolation("Packet is shorter than the header")

        opcode, length = HEADER.unpack_from(data)
        payload = data[HEADER.size:]

        if len(payload) != length:
            raise ProtocolViolation(
                "Header claims {} payload bytes, got {}".format(length, len(payload))
            )

        return cls(_parse_opcode(opcode), bytes(payload))

    @classmethod
    def read_packet(cls, transport, *, max_length: int = None) -> 'IPCPacket':
        """
        Reads a packet off of the transport.

        Exactly ``8 + length`` bytes are read. If the opcode is unknown, or the length is larger
        than ``max_length``, only the header has been consumed when the
        :class:`.ProtocolViolation` is raised; the payload is left unread and the connection
        should be discarded.

        :param transport: The transport to read from. Must provide ``read_exact``.
        :param max_length: The maximum payload length to accept. ``None`` for no limit.
        """
        header = transport.read_exact(HEADER.size)
        # unpack header so we can get the length
        raw_opcode, length = HEADER.unpack(header)
        opcode = _parse_opcode(raw_opcode)

        if max_length is not None and length > max_length:
            raise ProtocolViolation(
                "Packet length {} exceeds the maximum of {}".format(length, max_length)
            )

        payload = transport.read_exact(length)
        logger.debug("Received {} packet ({} bytes)".format(opcode.name, length))
        return cls(opcode, payload)
