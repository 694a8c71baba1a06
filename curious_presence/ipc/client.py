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
The client for an IPC connection.

.. currentmodule:: curious_presence.ipc.client
"""
import os
import uuid
from typing import Any, Callable, List, Optional, Sequence

from curious_presence.exc import CommandError, NotConnected
from curious_presence.ipc.endpoint import Endpoint, get_ipc_endpoints
from curious_presence.ipc.packet import IPCOpcode, IPCPacket
from curious_presence.ipc.session import MAX_PAYLOAD_SIZE, IPCSession, SessionState
from curious_presence.ipc.transport import IPCTransport


def get_nonce() -> str:
    """
    Gets a random nonce.
    """
    return str(uuid.uuid4())


class IPCClient(object):
    """
    Represents an IPC (interprocess communication) client. This connects to the Discord client on
    the IPC socket.

    To use, create a new instance with your app's client ID:

    .. code-block:: python3

        ipc = IPCClient(323578534763298816)

    Make sure to connect the client before doing anything with it:

    .. code-block:: python3

        ipc.connect()
        ipc.set_activity({"state": "In a match", "details": "Ranked"})
        ipc.close()

    The client can also be used as a context manager, which connects on entry and closes on exit.
    """

    def __init__(self, client_id, *, endpoints: Sequence[Endpoint] = None,
                 max_payload_size: int = MAX_PAYLOAD_SIZE,
                 transport_factory: Callable[[], IPCTransport] = IPCTransport):
        """
        :param client_id: The client ID to authenticate with.
        :param endpoints: The endpoints to try, in order. If not provided, they are discovered \
            from the environment every time :meth:`.connect` is called.
        :param max_payload_size: The largest payload to accept from Discord, in bytes.
        :param transport_factory: A callable that creates a new, unconnected transport.
        """
        self.client_id = str(client_id)

        self._endpoints = list(endpoints) if endpoints is not None else None
        self._session = IPCSession(self.client_id, max_payload_size=max_payload_size,
                                   transport_factory=transport_factory)

    def __repr__(self) -> str:
        return "<IPCClient client_id={} state={}>".format(self.client_id, self.state.value)

    def __enter__(self) -> 'IPCClient':
        return self.connect()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @property
    def state(self) -> SessionState:
        """
        :return: The :class:`.SessionState` of the underlying session.
        """
        return self._session.state

    @property
    def connected(self) -> bool:
        """
        :return: If this client is connected and has completed the handshake.
        """
        return self._session.state is SessionState.READY

    @property
    def endpoint(self) -> Endpoint:
        """
        :return: The :class:`.Endpoint` this client is connected to, if any.
        """
        return self._session.endpoint

    def get_endpoints(self) -> List[Endpoint]:
        """
        :return: The endpoints the next connection attempt will try.
        """
        if self._endpoints is not None:
            return list(self._endpoints)

        return get_ipc_endpoints()

    def connect(self) -> 'IPCClient':
        """
        Connects to Discord and performs the handshake.

        This can be called again after :meth:`.close`, or after a failure, to retry.
        """
        self._session.connect(self.get_endpoints())
        return self

    def reconnect(self) -> 'IPCClient':
        """
        Closes the current connection, if any, and connects again.
        """
        self.close()
        return self.connect()

    # Low-level methods
    def send(self, opcode: IPCOpcode, data: Any) -> None:
        """
        Sends a raw JSON payload to Discord.

        :param opcode: The :class:`.IPCOpcode` to send with.
        :param data: The JSON-serializable payload.
        """
        if not self.connected:
            raise NotConnected("IPC client is not connected")

        self._session.send(IPCOpcode(opcode), data)

    def recv(self) -> IPCPacket:
        """
        Reads the next packet sent by Discord.

        :return: The :class:`.IPCPacket` received.
        :raises CommandError: If Discord replied with an ERROR event.
        """
        if not self.connected:
            raise NotConnected("IPC client is not connected")

        packet = self._session.recv()
        if packet.opcode == IPCOpcode.FRAME:
            data = packet.data
            if isinstance(data, dict) and data.get("evt") == "ERROR":
                error = data.get("data")
                if not isinstance(error, dict):
                    error = {}

                raise CommandError(error.get("code"), error.get("message"))

        return packet

    # Convenience methods
    def set_activity(self, payload: Any, *, wait: bool = False) -> Optional[IPCPacket]:
        """
        Sets the Rich Presence activity shown in Discord.

        :param payload: The activity. Either a JSON-serializable value, or an object with a \
            ``to_dict()`` method such as :class:`.RichPresence`. ``None`` clears the activity.
        :param wait: If Discord's reply should be read. A rejected activity then raises \
            :class:`.CommandError`.
        :return: The reply packet, if ``wait`` was set.
        """
        if not self.connected:
            raise NotConnected("IPC client is not connected")

        if payload is not None and hasattr(payload, "to_dict"):
            payload = payload.to_dict()

        data = {
            "cmd": "SET_ACTIVITY",
            "args": {
                "pid": os.getpid(),
                "activity": payload
            },
            "nonce": get_nonce()
        }
        self._session.send(IPCOpcode.FRAME, data)

        if wait:
            return self.recv()

    def clear_activity(self, *, wait: bool = False) -> Optional[IPCPacket]:
        """
        Clears the Rich Presence activity shown in Discord.
        """
        return self.set_activity(None, wait=wait)

    def close(self) -> None:
        """
        Closes the connection to Discord. This never raises for I/O errors.
        """
        self._session.close()
