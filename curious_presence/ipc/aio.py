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
A trio wrapper around :class:`.IPCClient`.

Each call runs the blocking client method in a worker thread, so the event loop is never
blocked on IPC.

.. currentmodule:: curious_presence.ipc.aio
"""
import functools
from typing import Any, Optional

import trio

from curious_presence.ipc.client import IPCClient
from curious_presence.ipc.packet import IPCOpcode, IPCPacket
from curious_presence.ipc.session import SessionState


class AsyncIPCClient(object):
    """
    Wraps an :class:`.IPCClient` for use from trio.

    .. code-block:: python3

        async with AsyncIPCClient(323578534763298816) as ipc:
            await ipc.set_activity({"state": "In a match"})

    """

    def __init__(self, client_id, **kwargs):
        """
        :param client_id: The client ID to authenticate with.
        :param kwargs: Passed to :class:`.IPCClient`.
        """
        #: The wrapped synchronous client.
        self.client = IPCClient(client_id, **kwargs)

        self._lock = trio.Lock()

    async def __aenter__(self) -> 'AsyncIPCClient':
        return await self.connect()

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    @property
    def state(self) -> SessionState:
        return self.client.state

    @property
    def connected(self) -> bool:
        return self.client.connected

    async def _run(self, fn, *args, **kwargs) -> Any:
        async with self._lock:
            return await trio.to_thread.run_sync(functools.partial(fn, *args, **kwargs))

    async def connect(self) -> 'AsyncIPCClient':
        """
        Connects to Discord and performs the handshake.
        """
        await self._run(self.client.connect)
        return self

    async def reconnect(self) -> 'AsyncIPCClient':
        await self._run(self.client.reconnect)
        return self

    async def send(self, opcode: IPCOpcode, data: Any) -> None:
        await self._run(self.client.send, opcode, data)

    async def recv(self) -> IPCPacket:
        """
        Reads the next packet sent by Discord.
        """
        return await self._run(self.client.recv)

    async def set_activity(self, payload: Any, *, wait: bool = False) -> Optional[IPCPacket]:
        """
        Sets the Rich Presence activity shown in Discord.
        """
        return await self._run(self.client.set_activity, payload, wait=wait)

    async def clear_activity(self, *, wait: bool = False) -> Optional[IPCPacket]:
        return await self._run(self.client.clear_activity, wait=wait)

    async def aclose(self) -> None:
        """
        Closes the connection to Discord.
        """
        await self._run(self.client.close)
