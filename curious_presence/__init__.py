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
curious-presence - Discord Rich Presence over local IPC, for Python 3.

.. currentmodule:: curious_presence

.. autosummary::
    :toctree:

    ipc
    dataclasses

    exc
"""
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("curious-presence")
except PackageNotFoundError:
    __version__ = "0.0.0"

from curious_presence.dataclasses.presence import ActivityType, RichPresence
from curious_presence.exc import CommandError, ConnectionClosed, HandshakeRejected, IoFailure, \
    IPCError, NoEndpointAvailable, NotConnected, ProtocolViolation, SerializationFailure
from curious_presence.ipc.client import IPCClient
from curious_presence.ipc.endpoint import Endpoint, get_ipc_endpoints
from curious_presence.ipc.session import SessionState
