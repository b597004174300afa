"""
Shared fixtures: a fake mpv JSON IPC server on a unix socket.
"""

import json
import os
import shutil
import socket
import tempfile
import threading

import pytest


def ack(request_id):
    return {"request_id": request_id, "error": "success"}


class FakeMpv:
    """Minimal mpv stand-in answering JSON IPC lines on a unix socket.

    Set ``handler`` to a callable(request) returning a list of reply lines
    (dicts or raw strings), or None to stay silent.
    """

    def __init__(self, socket_path):
        self.socket_path = socket_path
        self.properties = {
            "path": "/movies/Heat.mkv",
            "filename": "Heat.mkv",
            "pause": False,
            "time-pos": 4499.6,
            "duration": 10200.2,
            "aid": 1,
            "sid": False,
            "volume": 100.0,
            "sub-visibility": True,
            "loop-file": "no",
        }
        self.commands = []
        self.handler = None
        self.quit_received = False
        self._stop = threading.Event()
        self._server = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        self._server.bind(socket_path)
        self._server.listen(8)
        self._server.settimeout(0.1)
        self._thread = threading.Thread(target=self._serve, daemon=True)

    def start(self):
        self._thread.start()

    def stop(self):
        self._stop.set()
        self._thread.join(timeout=5)
        self._server.close()
        if os.path.exists(self.socket_path):
            os.unlink(self.socket_path)

    def _serve(self):
        while not self._stop.is_set():
            try:
                conn, _ = self._server.accept()
            except socket.timeout:
                continue
            except OSError:
                return
            self._handle(conn)

    def _handle(self, conn):
        with conn:
            conn.settimeout(5)
            buffer = b""
            while True:
                try:
                    chunk = conn.recv(4096)
                except OSError:
                    return
                if not chunk:
                    return
                buffer += chunk
                while b"\n" in buffer:
                    line, buffer = buffer.split(b"\n", 1)
                    request = json.loads(line)
                    self.commands.append(request["command"])
                    replies = (self.handler or self.respond)(request)
                    for reply in replies or []:
                        text = reply if isinstance(reply, str) else json.dumps(reply)
                        try:
                            conn.sendall(text.encode("utf-8") + b"\n")
                        except OSError:
                            return

    def respond(self, request):
        """Default behaviour: a small model of mpv's property commands."""
        request_id = request.get("request_id")
        name, *args = request["command"]

        if name == "get_property":
            prop = args[0]
            if prop not in self.properties or self.properties[prop] is None:
                return [{"request_id": request_id, "error": "property unavailable"}]
            return [{"data": self.properties[prop], "request_id": request_id, "error": "success"}]

        if name == "set_property":
            self.properties[args[0]] = args[1]
            return [ack(request_id)]

        if name == "cycle":
            prop = {"sub": "sid", "audio": "aid"}.get(args[0], args[0])
            if prop == "pause":
                self.properties["pause"] = not self.properties["pause"]
            elif prop == "loop-file":
                self.properties["loop-file"] = "inf" if self.properties["loop-file"] == "no" else "no"
            return [ack(request_id)]

        if name == "add":
            self.properties[args[0]] = self.properties.get(args[0], 0) + args[1]
            return [ack(request_id)]

        if name == "quit":
            # Stop accepting connections, like mpv shutting down
            self.quit_received = True
            self._server.close()
            return [ack(request_id)]

        if name == "seek":
            return [ack(request_id)]

        return [{"request_id": request_id, "error": "invalid parameter"}]


@pytest.fixture
def socket_dir():
    """Short temporary directory for unix sockets (path length is limited)."""
    path = tempfile.mkdtemp(prefix="cin", dir="/tmp")
    yield path
    shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def mpv_factory():
    """Create fake mpv servers on demand; all are stopped after the test."""
    servers = []

    def create(socket_path):
        server = FakeMpv(socket_path)
        server.start()
        servers.append(server)
        return server

    yield create
    for server in servers:
        server.stop()


@pytest.fixture
def fake_mpv(socket_dir, mpv_factory):
    """Running fake mpv server; stopped after the test."""
    return mpv_factory(os.path.join(socket_dir, "mpv.sock"))
