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
Exceptions raised from within the library.

.. currentmodule:: curious_presence.exc
"""
from typing import List, Tuple


class IPCError(Exception):
    """
    The base class for all curious-presence exceptions.
    """


class NoEndpointAvailable(IPCError, ConnectionError):
    """
    Raised when every candidate IPC endpoint failed to connect.

    This usually means the Discord client is not running.

    :ivar failures: A list of (endpoint, error) tuples, in the order they were attempted.
    """

    def __init__(self, failures: List[Tuple[object, OSError]]):
        self.failures = failures

    @property
    def endpoints(self) -> list:
        """
        :return: The endpoints that were attempted.
        """
        return [endpoint for endpoint, _ in self.failures]

    def __str__(self) -> str:
        if not self.failures:
            return "No IPC endpoints to connect to"

        return "Could not connect to any of {} IPC endpoint(s): {}".format(
            len(self.failures), ", ".join(str(endpoint) for endpoint in self.endpoints)
        )


class IoFailure(IPCError, ConnectionError):
    """
    Raised when reading from or writing to the IPC connection fails.

    The connection this happened on is no longer usable.
    """


class ConnectionClosed(IoFailure):
    """
    Raised when the IPC connection was closed, either by the peer or locally, while an operation
    was in progress.
    """


class ProtocolViolation(IPCError):
    """
    Raised when the peer sends something that does not follow the IPC protocol.
    """


class HandshakeRejected(ProtocolViolation):
    """
    Raised when Discord answers the handshake with a CLOSE frame.

    :ivar code: The close code sent by Discord, if any.
    :ivar message: The close message sent by Discord, if any.
    """

    def __init__(self, code: int = None, message: str = None):
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return "Handshake rejected ({}): {}".format(self.code, self.message)

    __repr__ = __str__


class NotConnected(IPCError):
    """
    Raised when an operation needs a ready connection, but the client is not connected.
    """


class SerializationFailure(IPCError, ValueError):
    """
    Raised when a payload cannot be encoded as JSON.
    """


class CommandError(IPCError):
    """
    Raised when Discord answers a command with an ERROR event. The connection stays usable.

    :ivar code: The error code sent by Discord.
    :ivar message: The error message sent by Discord.
    """

    def __init__(self, code: int = None, message: str = None):
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return "{} ({}): {}".format(type(self).__name__, self.code, self.message)

    __repr__ = __str__
