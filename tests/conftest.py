"""Shared fixtures: an in-memory transport and a fake Discord IPC server."""

import socket
import struct
import threading

import pytest

from curious_presence.exc import ConnectionClosed, IoFailure, NoEndpointAvailable
from curious_presence.ipc.packet import IPCOpcode, IPCPacket, encode

READY = encode(
    IPCOpcode.FRAME,
    b'{"cmd":"DISPATCH","data":{"v":1,"config":{}},"evt":"READY","nonce":null}',
)


class FakeTransport:
    """Transport stub that records writes and serves reads from a byte buffer."""

    def __init__(self, inbound=b"", *, fail_write=False, refuse=False):
        self.inbound = bytearray(inbound)
        self.written = []
        self.read_calls = []
        self.bytes_read = 0
        self.closed = 0
        self.connect_calls = 0
        self.fail_write = fail_write
        self.refuse = refuse
        self.endpoint = None

    def connect(self, endpoints):
        self.connect_calls += 1
        if self.refuse:
            raise NoEndpointAvailable([(e, ConnectionRefusedError()) for e in endpoints])
        self.endpoint = endpoints[0]
        return self

    def write(self, data):
        if self.fail_write:
            raise IoFailure("write failed")
        self.written.append(bytes(data))

    def read_exact(self, n):
        self.read_calls.append(n)
        if len(self.inbound) < n:
            raise ConnectionClosed("eof")
        chunk = bytes(self.inbound[:n])
        del self.inbound[:n]
        self.bytes_read += n
        return chunk

    def close(self):
        self.closed += 1

    def packets(self):
        return [IPCPacket.deserialize(data) for data in self.written]


class FakeDiscord:
    """A single-connection Discord IPC server running in a background thread."""

    def __init__(self, path, reply=READY):
        self.path = str(path)
        self.reply = reply
        self.received = []
        self.connections = 0
        self._sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        self._sock.bind(self.path)
        self._sock.listen(1)
        self._thread = threading.Thread(target=self._serve, daemon=True)

    def start(self):
        self._thread.start()
        return self

    @staticmethod
    def _recv_exact(conn, n):
        buf = b""
        while len(buf) < n:
            chunk = conn.recv(n - len(buf))
            if not chunk:
                return None
            buf += chunk
        return buf

    def _serve(self):
        conn, _ = self._sock.accept()
        self.connections += 1
        with conn:
            while True:
                header = self._recv_exact(conn, 8)
                if header is None:
                    break
                opcode, length = struct.unpack("<II", header)
                payload = self._recv_exact(conn, length) if length else b""
                if payload is None:
                    break
                self.received.append(IPCPacket(IPCOpcode(opcode), payload))
                if opcode == IPCOpcode.HANDSHAKE:
                    conn.sendall(self.reply)

    def stop(self):
        self._thread.join(timeout=5)
        self._sock.close()


@pytest.fixture
def fake_transport():
    return FakeTransport


@pytest.fixture
def ready_frame():
    return READY


@pytest.fixture
def fake_discord(tmp_path):
    servers = []

    def _start(name="ipc-0", reply=READY):
        server = FakeDiscord(tmp_path / name, reply=reply).start()
        servers.append(server)
        return server

    yield _start

    for server in servers:
        server.stop()
