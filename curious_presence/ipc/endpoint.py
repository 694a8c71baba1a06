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
Discovery of the local IPC endpoints the Discord client listens on.

.. currentmodule:: curious_presence.ipc.endpoint
"""
import os
import sys
from dataclasses import dataclass
from typing import List, Mapping

#: The environment variables searched, in order, for the Unix socket directory.
ENV_KEYS = ("XDG_RUNTIME_DIR", "TMPDIR", "TMP", "TEMP")

#: The number of numbered IPC slots Discord may use.
SLOT_COUNT = 10

PIPE_PREFIXES = ("\\\\?\\pipe\\", "\\\\.\\pipe\\")


@dataclass(frozen=True)
class Endpoint:
    """
    Represents a single local IPC address, either a Unix domain socket path or a Windows named
    pipe.
    """

    #: The path of this endpoint.
    path: str

    @property
    def is_pipe(self) -> bool:
        """
        :return: If this endpoint is a Windows named pipe.
        """
        return self.path.startswith(PIPE_PREFIXES)

    def __str__(self) -> str:
        return self.path


def get_ipc_dir(environ: Mapping[str, str] = None) -> str:
    """
    Gets the directory the Discord IPC sockets live in, on Unix-like systems.
    """
    if environ is None:
        environ = os.environ

    for key in ENV_KEYS:
        value = environ.get(key)
        if value:
            return value

    return "/tmp"


def get_ipc_endpoints(slots: int = SLOT_COUNT, *, environ: Mapping[str, str] = None,
                      platform: str = None) -> List[Endpoint]:
    """
    Gets the ordered list of IPC endpoints to try, lowest slot first.

    :param slots: The number of slots to enumerate.
    :param environ: The environment to read from. Defaults to :data:`os.environ`.
    :param platform: The platform to generate endpoints for. Defaults to :data:`sys.platform`.
    """
    if platform is None:
        platform = sys.platform

    if platform == "win32":
        return [Endpoint(f"\\\\?\\pipe\\discord-ipc-{slot}") for slot in range(slots)]

    base = get_ipc_dir(environ)
    return [Endpoint(os.path.join(base, f"discord-ipc-{slot}")) for slot in range(slots)]
