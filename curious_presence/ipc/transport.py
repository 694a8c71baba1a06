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
The byte-stream transport underneath an IPC connection.

.. currentmodule:: curious_presence.ipc.transport
"""
import logging
import socket
from typing import Optional, Sequence

from curious_presence.exc import ConnectionClosed, IoFailure, NoEndpointAvailable
from curious_presence.ipc.endpoint import Endpoint

logger = logging.getLogger("curious_presence.ipc")


class _SocketStream(object):
    """
    Wraps a connected Unix domain socket.
    """

    def __init__(self, sock: socket.socket):
        self._sock = sock

    @classmethod
    def open(cls, path: str) -> '_SocketStream':
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        try:
            sock.connect(path)
        except OSError:
            sock.close()
            raise

        return cls(sock)

    def send(self, data: memoryview) -> int:
        return self._sock.send(data)

    def recv_into(self, buffer: memoryview) -> int:
        return self._sock.recv_into(buffer)

    def close(self) -> None:
        try:
            self._sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            # already disconnected
            pass

        self._sock.close()


class _PipeStream(object):
    """
    Wraps an open Windows named pipe.
    """

    def __init__(self, file):
        self._file = file

    @classmethod
    def open(cls, path: str) -> '_PipeStream':
        return cls(open(path, "r+b", buffering=0))

    def send(self, data: memoryview) -> int:
        written = self._file.write(data)
        # raw files return None when the write would block
        return written or 0

    def recv_into(self, buffer: memoryview) -> int:
        return self._file.readinto(buffer) or 0

    def close(self) -> None:
        self._file.close()


class IPCTransport(object):
    """
    Owns a single bidirectional byte stream to one of the Discord IPC endpoints.

    .. code-block:: python3

        transport = IPCTransport().connect(get_ipc_endpoints())
        transport.write(b"...")
        header = transport.read_exact(8)
        transport.close()

    """

    def __init__(self):
        #: The endpoint this transport is connected to.
        self.endpoint = None  # type: Optional[Endpoint]

        self._stream = None

    @staticmethod
    def _open_stream(endpoint: Endpoint):
        if endpoint.is_pipe:
            return _PipeStream.open(endpoint.path)

        return _SocketStream.open(endpoint.path)

    @property
    def closed(self) -> bool:
        """
        :return: If this transport has no open stream.
        """
        return self._stream is None

    def connect(self, endpoints: Sequence[Endpoint]) -> 'IPCTransport':
        """
        Connects to the first endpoint that accepts a connection.

        :param endpoints: The candidate endpoints, highest priority first.
        :return: This transport, now connected.
        :raises NoEndpointAvailable: If every endpoint failed.
        """
        failures = []

        for endpoint in endpoints:
            try:
                stream = self._open_stream(endpoint)
            except OSError as e:
                logger.debug("Failed to connect to {}: {}".format(endpoint, e))
                failures.append((endpoint, e))
                continue

            self._stream = stream
            self.endpoint = endpoint
            logger.info("Connected to IPC endpoint {}".format(endpoint))
            return self

        raise NoEndpointAvailable(failures)

    def write(self, data: bytes) -> None:
        """
        Writes all of the data, retrying partial writes until everything has been sent.

        :param data: The bytes to write.
        """
        stream = self._stream
        if stream is None:
            raise ConnectionClosed("Transport is closed")

        view = memoryview(data)
        while view:
            try:
                sent = stream.send(view)
            except OSError as e:
                raise IoFailure("Failed to write to IPC: {}".format(e)) from e

            view = view[sent:]
            # close() may have been called from another thread
            if view and self._stream is not stream:
                raise ConnectionClosed("Transport was closed during a write")

    def read_exact(self, n: int) -> bytes:
        """
        Reads exactly ``n`` bytes, blocking until they have all arrived.

        :param n: The number of bytes to read.
        :raises ConnectionClosed: If the stream ends before ``n`` bytes were read.
        """
        if n == 0:
            return b""

        stream = self._stream
        if stream is None:
            raise ConnectionClosed("Transport is closed")

        buf = bytearray(n)
        view = memoryview(buf)
        received = 0
        while received < n:
            try:
                count = stream.recv_into(view[received:])
            except OSError as e:
                raise IoFailure("Failed to read from IPC: {}".format(e)) from e

            if count == 0:
                raise ConnectionClosed(
                    "IPC connection closed after {} of {} bytes".format(received, n)
                )

            received += count
            # close() may have been called from another thread
            if received < n and self._stream is not stream:
                raise ConnectionClosed(
                    "Transport was closed after {} of {} bytes".format(received, n)
                )

        return bytes(buf)

    def close(self) -> None:
        """
        Closes the underlying handle. Closing an already closed transport does nothing.
        """
        if self._stream is None:
            return

        stream, self._stream = self._stream, None
        try:
            stream.close()
        except OSError:
            logger.debug("Error closing IPC stream", exc_info=True)
