# © Copyright 2025 Stuart Parmenter
# SPDX-License-Identifier: MIT

"""Blocking connection to a Music Player Daemon.

One ``MpdConnection`` is one daemon session. The MPD protocol answers every
command with a block of ``key: value`` lines terminated by ``OK`` or by an
``ACK`` error line, so only one response can be read at a time. The
connection keeps that as explicit state (``pending_command``) and refuses to
send a new command while a response is still open.

Failures are recorded as the connection's last error, the way libmpdclient
does it: command methods return ``False`` (or ``None`` for pulls) and the
caller reads ``last_error()`` to find out why. Server ``ACK`` errors can be
cleared and the session reused; transport errors close the socket and stick.
"""

import logging
import socket
from typing import Any

from ..utils.helpers import format_command, parse_ack, parse_pair
from .exceptions import (
    AckCode,
    ConnectionBusyError,
    ConnectionClosedError,
    ConnectionFault,
    FaultKind,
    MpdConnectError,
)


logger = logging.getLogger("mpd")

GREETING_PREFIX = "OK MPD "


class RawOutput:
    """One ``outputs`` record as received from the daemon.

    The record is owned by whoever pulled it and must be released exactly
    once. Releasing twice is an error, the same as freeing twice.
    """

    def __init__(self, output_id: int, owner: "MpdConnection | None" = None):
        self._id = output_id
        self._name = ""
        self._enabled = False
        self._plugin: str | None = None
        self._attributes: dict[str, str] = {}
        self._owner = owner
        self._released = False
        self._has_name = False
        self._has_enabled = False
        if owner is not None:
            owner._outstanding += 1

    def feed(self, key: str, value: str) -> None:
        """Apply one response pair belonging to this record."""
        if key == "outputname":
            self._name = value
            self._has_name = True
        elif key == "outputenabled":
            self._enabled = value == "1"
            self._has_enabled = True
        elif key == "plugin":
            self._plugin = value
        elif key == "attribute":
            name, _, attr_value = value.partition("=")
            self._attributes[name] = attr_value

    def get_id(self) -> int:
        return self._id

    def get_name(self) -> str:
        return self._name

    def get_enabled(self) -> bool:
        return self._enabled

    def get_plugin(self) -> str | None:
        return self._plugin

    def get_attributes(self) -> dict[str, str]:
        return dict(self._attributes)

    @property
    def complete(self) -> bool:
        """True once the name and enabled flag have been received."""
        return self._has_name and self._has_enabled

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        if self._released:
            raise RuntimeError(f"output record {self._id} released twice")
        self._released = True
        if self._owner is not None:
            self._owner._outstanding -= 1
            self._owner = None


class MpdConnection:
    """A single blocking session with the daemon."""

    def __init__(self, sock: socket.socket, name: str = "mpd"):
        """Wrap an already-connected socket and read the daemon greeting.

        Args:
            sock: Connected stream socket (TCP or Unix)
            name: Label used in log messages

        Raises:
            MpdConnectError: If the greeting is missing or malformed
        """
        self.name = name
        self._sock: socket.socket | None = sock
        self._reader = sock.makefile("rb")
        self._pending: str | None = None
        self._pushback: tuple[str, str] | None = None
        self._error: ConnectionFault | None = None
        self._closed = False
        self._outstanding = 0
        self.server_version: tuple[int, ...] = ()

        line = self._read_line()
        if line is None or not line.startswith(GREETING_PREFIX):
            fault = self._error or ConnectionFault(FaultKind.MALFORMED, f"unexpected greeting: {line!r}")
            self.close()
            raise MpdConnectError(f"{name}: not an MPD server ({fault})", fault)

        try:
            self.server_version = tuple(int(p) for p in line[len(GREETING_PREFIX):].split("."))
        except ValueError:
            self.server_version = ()
        logger.info(f"{name}: connected, protocol {'.'.join(map(str, self.server_version)) or 'unknown'}")

    @classmethod
    def connect(
        cls,
        host: str = "localhost",
        port: int = 6600,
        timeout: float | None = 30.0,
        password: str | None = None,
    ) -> "MpdConnection":
        """Open a session to the daemon.

        A host starting with ``/`` is a Unix socket path; one starting with
        ``@`` names an abstract socket (Linux).

        Raises:
            MpdConnectError: If the daemon cannot be reached, does not greet
                like MPD, or rejects the password
        """
        local = host.startswith(("/", "@"))
        label = host if local else f"{host}:{port}"
        try:
            if local:
                address = "\0" + host[1:] if host.startswith("@") else host
                sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
                try:
                    sock.settimeout(timeout)
                    sock.connect(address)
                except OSError:
                    sock.close()
                    raise
            else:
                sock = socket.create_connection((host, port), timeout=timeout)
        except socket.gaierror as e:
            fault = ConnectionFault(FaultKind.RESOLVER, str(e))
            raise MpdConnectError(f"{label}: cannot resolve host ({e})", fault) from e
        except TimeoutError as e:
            fault = ConnectionFault(FaultKind.TIMEOUT, str(e) or "timed out")
            raise MpdConnectError(f"{label}: connect timed out", fault) from e
        except OSError as e:
            fault = ConnectionFault(FaultKind.SYSTEM, str(e))
            raise MpdConnectError(f"{label}: connect failed ({e})", fault) from e

        conn = cls(sock, name=label)
        if password and not conn.run_password(password):
            fault = conn.last_error()
            conn.close()
            raise MpdConnectError(f"{label}: password rejected ({fault})", fault)
        return conn

    # State

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending_command(self) -> str | None:
        """Name of the command whose response is still being read, if any."""
        return self._pending

    @property
    def outstanding_records(self) -> int:
        """Number of received output records not yet released."""
        return self._outstanding

    def last_error(self) -> ConnectionFault | None:
        return self._error

    def clear_error(self) -> bool:
        """Forget a recoverable error. Returns False if the error is sticky."""
        if self._error is None:
            return True
        if not self._error.recoverable:
            return False
        self._error = None
        return True

    def _set_error(self, fault: ConnectionFault) -> None:
        self._error = fault
        self._pending = None
        self._pushback = None
        logger.warning(f"{self.name}: {fault}")
        if not fault.recoverable:
            self._shutdown()

    def _check_ready(self, command: str) -> bool:
        if self._closed and self._error is None:
            raise ConnectionClosedError(f"{self.name}: connection is closed")
        if self._pending is not None:
            raise ConnectionBusyError(self._pending, command)
        return self._error is None

    # Wire I/O

    def _read_line(self) -> str | None:
        if self._closed:
            return None
        try:
            raw = self._reader.readline()
        except TimeoutError:
            self._set_error(ConnectionFault(FaultKind.TIMEOUT, "timed out waiting for the daemon"))
            return None
        except OSError as e:
            self._set_error(ConnectionFault(FaultKind.SYSTEM, str(e)))
            return None

        if not raw.endswith(b"\n"):
            self._set_error(ConnectionFault(FaultKind.CLOSED, "connection closed by the daemon"))
            return None
        try:
            return raw[:-1].decode("utf-8")
        except UnicodeDecodeError as e:
            self._set_error(ConnectionFault(FaultKind.MALFORMED, f"invalid UTF-8 in response: {e}"))
            return None

    def send_command(self, name: str, *args: Any) -> bool:
        """Write one command line and open its response.

        Raises:
            ConnectionBusyError: If another response is still pending
            ConnectionClosedError: If the connection was closed by the caller
        """
        if not self._check_ready(name):
            return False
        try:
            line = format_command(name, *args)
        except ValueError as e:
            self._set_error(ConnectionFault(FaultKind.ARGUMENT, str(e)))
            return False

        try:
            self._sock.sendall(line.encode("utf-8") + b"\n")
        except TimeoutError:
            self._set_error(ConnectionFault(FaultKind.TIMEOUT, f"timed out sending '{name}'"))
            return False
        except OSError as e:
            self._set_error(ConnectionFault(FaultKind.SYSTEM, str(e)))
            return False

        logger.debug(f"{self.name}: > {line}")
        self._pending = name
        return True

    def recv_pair(self) -> tuple[str, str] | None:
        """Read the next pair of the open response.

        Returns None at the end of the response, which is either the ``OK``
        terminator or a failure recorded in ``last_error()``.
        """
        if self._pushback is not None:
            pair, self._pushback = self._pushback, None
            return pair
        if self._pending is None:
            return None

        line = self._read_line()
        if line is None:
            return None
        if line == "OK":
            self._pending = None
            return None
        if line.startswith("ACK "):
            parsed = parse_ack(line)
            if parsed is None:
                self._set_error(ConnectionFault(FaultKind.MALFORMED, f"malformed ACK line: {line!r}"))
            else:
                code, index, command, message = parsed
                self._set_error(
                    ConnectionFault(
                        FaultKind.SERVER,
                        message,
                        ack=AckCode.from_code(code),
                        command_index=index,
                        command=command,
                    )
                )
            return None

        pair = parse_pair(line)
        if pair is None:
            self._set_error(ConnectionFault(FaultKind.MALFORMED, f"malformed response line: {line!r}"))
        return pair

    def enqueue_pair(self, pair: tuple[str, str]) -> None:
        """Push one pair back so the next ``recv_pair`` returns it again."""
        self._pushback = pair

    def response_finish(self) -> bool:
        """Discard the rest of the open response. Returns False on failure."""
        while self.recv_pair() is not None:
            pass
        return self._error is None

    def run_command(self, name: str, *args: Any) -> bool:
        return self.send_command(name, *args) and self.response_finish()

    def run_password(self, password: str) -> bool:
        return self.run_command("password", password)

    # Outputs command family

    def send_outputs(self) -> bool:
        return self.send_command("outputs")

    def recv_output(self) -> RawOutput | None:
        """Receive the next output record of an ``outputs`` response."""
        pair = self.recv_pair()
        while pair is not None and pair[0] != "outputid":
            pair = self.recv_pair()
        if pair is None:
            return None

        try:
            output_id = int(pair[1])
        except ValueError:
            self._set_error(ConnectionFault(FaultKind.MALFORMED, f"invalid output id: {pair[1]!r}"))
            return None
        if output_id < 0:
            self._set_error(ConnectionFault(FaultKind.MALFORMED, f"negative output id: {output_id}"))
            return None

        output = RawOutput(output_id, owner=self)
        while (pair := self.recv_pair()) is not None:
            if pair[0] == "outputid":
                self.enqueue_pair(pair)
                break
            output.feed(*pair)

        # A complete record is still delivered; the recorded error surfaces on the next pull
        if self._error is not None and not output.complete:
            output.release()
            return None
        return output

    def run_enable_output(self, output_id: int) -> bool:
        return self.run_command("enableoutput", output_id)

    def run_disable_output(self, output_id: int) -> bool:
        return self.run_command("disableoutput", output_id)

    def run_toggle_output(self, output_id: int) -> bool:
        return self.run_command("toggleoutput", output_id)

    # Lifecycle

    def _shutdown(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._pending = None
        try:
            self._reader.close()
        finally:
            if self._sock is not None:
                self._sock.close()
                self._sock = None

    def close(self) -> None:
        """Close the session. Safe to call more than once."""
        if self._closed:
            return
        logger.info(f"{self.name}: closing")
        self._shutdown()

    def __enter__(self) -> "MpdConnection":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self):
        state = "closed" if self._closed else (f"pending={self._pending}" if self._pending else "idle")
        return f"MpdConnection({self.name}, {state})"
