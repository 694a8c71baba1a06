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
The connection lifecycle of an IPC session, including the handshake.

.. currentmodule:: curious_presence.ipc.session
"""
import enum
import logging
from typing import Any, Callable, Optional, Sequence

from curious_presence.exc import ConnectionClosed, HandshakeRejected, IPCError, NotConnected, \
    ProtocolViolation
from curious_presence.ipc.endpoint import Endpoint
from curious_presence.ipc.packet import IPCOpcode, IPCPacket, pack_json
from curious_presence.ipc.transport import IPCTransport

logger = logging.getLogger("curious_presence.ipc")

#: The largest inbound payload accepted, in bytes.
MAX_PAYLOAD_SIZE = 1024 * 1024


class SessionState(enum.Enum):
    """
    Represents the state of an :class:`.IPCSession`.
    """
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    HANDSHAKING = "handshaking"
    READY = "ready"
    CLOSED = "closed"
    FAILED = "failed"


class IPCSession(object):
    """
    Drives a single IPC connection through connect, handshake, and close.

    The session is not thread-safe; state transitions happen only inside its own method calls.
    """
    VERSION = 1

    def __init__(self, client_id: str, *, max_payload_size: int = MAX_PAYLOAD_SIZE,
                 transport_factory: Callable[[], IPCTransport] = IPCTransport):
        """
        :param client_id: The application ID to send in the handshake.
        :param max_payload_size: The largest inbound payload to accept.
        :param transport_factory: A callable that creates a new, unconnected transport.
        """
        self.client_id = str(client_id)
        self.max_payload_size = max_payload_size

        #: The current :class:`.SessionState`.
        self.state = SessionState.DISCONNECTED

        self._transport_factory = transport_factory
        self._transport = None  # type: Optional[IPCTransport]

    @property
    def endpoint(self) -> Optional[Endpoint]:
        """
        :return: The endpoint the current transport is connected to, if any.
        """
        if self._transport is None:
            return None

        return getattr(self._transport, "endpoint", None)

    def _release(self) -> None:
        if self._transport is None:
            return

        transport, self._transport = self._transport, None
        transport.close()

    def _fail(self) -> None:
        self.state = SessionState.FAILED
        self._release()

    # Writer methods
    def _write_packet(self, packet: IPCPacket) -> None:
        """
        Writes an IPC packet.

        :param packet: The :class:`.IPCPacket` to write.
        """
        self._transport.write(packet.serialize())
        logger.debug("Sent {} packet ({} bytes)".format(packet.opcode.name, len(packet.payload)))

    def _write_handshake(self) -> None:
        """
        Writes an IPC handshake.
        """
        data = {
            "v": IPCSession.VERSION,
            "client_id": self.client_id
        }

        self._write_packet(IPCPacket.from_json(IPCOpcode.HANDSHAKE, data))

    # Reader methods
    def read_packet(self) -> IPCPacket:
        """
        Reads a packet from the connection.
        """
        if self._transport is None:
            raise NotConnected("IPC session is {}, not connected".format(self.state.value))

        return IPCPacket.read_packet(self._transport, max_length=self.max_payload_size)

    def recv(self) -> IPCPacket:
        """
        Reads the next packet on a ready session.

        A CLOSE packet from Discord, or a packet that cannot be decoded, fails the session.

        :raises NotConnected: If the session is not ready. Nothing is read.
        """
        if self.state is not SessionState.READY:
            raise NotConnected("IPC session is {}, not ready".format(self.state.value))

        data = None
        try:
            packet = self.read_packet()
            if packet.opcode in (IPCOpcode.FRAME, IPCOpcode.CLOSE):
                data = packet.data
        except IPCError:
            self._fail()
            raise

        if packet.opcode == IPCOpcode.CLOSE:
            self._fail()
            if not isinstance(data, dict):
                data = {}

            raise ConnectionClosed("Discord closed the IPC connection ({}): {}"
                                   .format(data.get("code"), data.get("message")))

        return packet

    def _handshake(self) -> None:
        self._write_handshake()
        next_pack = self.read_packet()

        if next_pack.opcode == IPCOpcode.CLOSE:
            try:
                data = next_pack.data
            except ProtocolViolation:
                data = None

            if not isinstance(data, dict):
                data = {}

            raise HandshakeRejected(data.get("code"), data.get("message"))

        if next_pack.opcode != IPCOpcode.FRAME:
            raise ProtocolViolation(
                "Expected a FRAME in response to the handshake, got {}".format(next_pack.opcode.name)
            )

        try:
            event = next_pack.event
        except (ProtocolViolation, AttributeError):
            event = None

        logger.debug("Handshake acknowledged with event {} ({} bytes)"
                     .format(event, len(next_pack.payload)))

    def connect(self, endpoints: Sequence[Endpoint]) -> None:
        """
        Connects to the first available endpoint, then performs the handshake.

        An existing connection is closed first.

        :param endpoints: The candidate endpoints, highest priority first.
        """
        if self._transport is not None:
            self.close()

        self.state = SessionState.CONNECTING
        transport = self._transport_factory()
        try:
            transport.connect(endpoints)
        except IPCError:
            self.state = SessionState.FAILED
            raise

        self._transport = transport
        self.state = SessionState.HANDSHAKING
        try:
            self._handshake()
        except IPCError:
            self._fail()
            raise

        self.state = SessionState.READY
        logger.info("IPC handshake complete with client ID {}".format(self.client_id))

    def send(self, opcode: IPCOpcode, data: Any) -> None:
        """
        Sends a JSON payload on a ready session.

        :param opcode: The :class:`.IPCOpcode` to send with.
        :param data: The JSON-serializable payload.
        :raises NotConnected: If the session is not ready. Nothing is written.
        """
        if self.state is not SessionState.READY:
            raise NotConnected("IPC session is {}, not ready".format(self.state.value))

        packet = IPCPacket.from_json(opcode, data)
        try:
            self._write_packet(packet)
        except IPCError:
            self._fail()
            raise

    def close(self) -> None:
        """
        Closes this session. A CLOSE packet is sent if possible, but errors sending it are ignored.
        """
        if self.state in (SessionState.READY, SessionState.HANDSHAKING) \
                and self._transport is not None:
            try:
                self._write_packet(IPCPacket.from_json(IPCOpcode.CLOSE, {}))
            except IPCError:
                logger.debug("Failed to send CLOSE packet", exc_info=True)

        if self._transport is None:
            return

        self._release()
        self.state = SessionState.CLOSED
        logger.info("IPC connection closed")
