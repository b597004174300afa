"""
mpv JSON IPC client for Cinema Pi.

Every request owns its own connection for the full round trip
(connect, send one line, read the matching reply, close), so concurrent
invocations never interleave their reads and writes on a shared socket.
"""

import itertools
import json
import os
import socket
from typing import Any, NamedTuple, Optional

from loguru import logger

from cinema_pi.core.exceptions import (
    EngineCommandFailed,
    EngineProtocolError,
    EngineTimeout,
    EngineUnreachable,
    PropertyUnavailable,
)

DEFAULT_TIMEOUT = 2.0

_request_ids = itertools.count(1)


class Reply(NamedTuple):
    """Decoded mpv reply envelope.

    mpv answers every command with {"data": ..., "request_id": n, "error": "..."}.
    Acknowledgement-only replies carry no data (key absent or null); property
    values travel in data, so a string property that reads "success" is still
    data, never an acknowledgement.
    """

    data: Any = None
    error: str = "success"
    request_id: Optional[int] = None
    has_data: bool = False

    @classmethod
    def from_envelope(cls, envelope: Any) -> "Reply":
        """Build a Reply from a parsed JSON object.

        Raises:
            EngineProtocolError: If the object is not a reply envelope
        """
        if not isinstance(envelope, dict):
            raise EngineProtocolError(f"Reply is not an object: {envelope!r}")
        error = envelope.get("error")
        if not isinstance(error, str):
            raise EngineProtocolError(f"Reply has no error field: {envelope!r}")

        data = envelope.get("data")
        if data is not None and not isinstance(data, (bool, int, float, str, list, dict)):
            raise EngineProtocolError(f"Reply data has unsupported type: {type(data).__name__}")

        request_id = envelope.get("request_id")
        return cls(
            data=data,
            error=error,
            request_id=request_id if isinstance(request_id, int) else None,
            has_data="data" in envelope and data is not None,
        )

    @property
    def ok(self) -> bool:
        return self.error == "success"

    @property
    def is_ack(self) -> bool:
        """True for a bare success marker with no data payload."""
        return self.ok and not self.has_data

    @property
    def kind(self) -> str:
        """Tag of the data payload: null, boolean, number, string, list or map."""
        if not self.has_data:
            return "null"
        if isinstance(self.data, bool):
            return "boolean"
        if isinstance(self.data, (int, float)):
            return "number"
        if isinstance(self.data, str):
            return "string"
        if isinstance(self.data, list):
            return "list"
        return "map"


class ControlChannel:
    """Request/response client for one mpv control socket."""

    def __init__(self, socket_path: str, timeout: float = DEFAULT_TIMEOUT):
        self.socket_path = socket_path
        self.timeout = timeout

    def _connect(self) -> socket.socket:
        if not os.path.exists(self.socket_path):
            raise EngineUnreachable(f"Control socket {self.socket_path} does not exist")

        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        sock.settimeout(self.timeout)
        try:
            sock.connect(self.socket_path)
        except socket.timeout:
            sock.close()
            raise EngineTimeout(f"Timed out connecting to {self.socket_path}")
        except OSError as e:
            sock.close()
            raise EngineUnreachable(f"Cannot connect to {self.socket_path}: {e}") from e
        return sock

    def is_connectable(self) -> bool:
        """Whether the engine currently accepts connections on the socket."""
        try:
            sock = self._connect()
        except EngineUnreachable:
            return False
        sock.close()
        return True

    def request(self, command: str, *args: Any) -> Reply:
        """
        Send one command and wait for its reply.

        Args:
            command: mpv command name (e.g., 'get_property', 'seek')
            *args: Command arguments

        Returns:
            Decoded reply (error replies are returned, not raised)

        Raises:
            EngineUnreachable: Socket missing or refusing connections
            EngineTimeout: No reply within the timeout
            EngineProtocolError: Connection closed early or malformed reply
        """
        request_id = next(_request_ids)
        payload = {"command": [command, *args], "request_id": request_id}
        message = json.dumps(payload) + "\n"

        sock = self._connect()
        try:
            try:
                sock.sendall(message.encode("utf-8"))
            except socket.timeout:
                raise EngineTimeout(f"Timed out sending '{command}'")
            except OSError as e:
                raise EngineUnreachable(f"Connection lost sending '{command}': {e}") from e

            buffer = b""
            while True:
                while b"\n" in buffer:
                    line, buffer = buffer.split(b"\n", 1)
                    reply = self._parse_line(line, request_id)
                    if reply is not None:
                        logger.debug(f"mpv {payload['command']} -> {reply.error} {reply.data!r}")
                        return reply

                try:
                    chunk = sock.recv(4096)
                except socket.timeout:
                    raise EngineTimeout(f"mpv did not answer '{command}' within {self.timeout}s")
                except OSError as e:
                    raise EngineUnreachable(f"Connection lost waiting for '{command}': {e}") from e

                if not chunk:
                    raise EngineProtocolError(f"mpv closed the connection before answering '{command}'")
                buffer += chunk
        finally:
            sock.close()

    @staticmethod
    def _parse_line(line: bytes, request_id: int) -> Optional[Reply]:
        """Decode one line; None for events and replies to other requests."""
        line = line.strip()
        if not line:
            return None
        try:
            envelope = json.loads(line.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise EngineProtocolError(f"Invalid JSON from mpv: {e}") from e

        if isinstance(envelope, dict) and "event" in envelope:
            return None

        reply = Reply.from_envelope(envelope)
        if reply.request_id not in (None, request_id):
            return None
        return reply

    def get_property(self, name: str) -> Any:
        """
        Read a property value.

        Raises:
            PropertyUnavailable: If mpv reports an error or sends no data
        """
        reply = self.request("get_property", name)
        if not reply.ok:
            raise PropertyUnavailable(name, f"unavailable ({reply.error})")
        if not reply.has_data:
            raise PropertyUnavailable(name)
        return reply.data

    def set_property(self, name: str, value: Any) -> None:
        """Set a property; raises EngineCommandFailed on an error reply."""
        reply = self.request("set_property", name, value)
        if not reply.ok:
            raise EngineCommandFailed(f"set_property {name}", reply.error)

    def run_action(self, name: str, *args: Any) -> None:
        """Run an mpv command such as cycle, seek, add or quit."""
        reply = self.request(name, *args)
        if not reply.ok:
            raise EngineCommandFailed(" ".join([name, *map(str, args)]), reply.error)
