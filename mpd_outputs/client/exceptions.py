# © Copyright 2025 Stuart Parmenter
# SPDX-License-Identifier: MIT

"""Client-layer exceptions for the MPD connection and the outputs commands.

Two families live here:

- ``MpdError`` and subclasses describe failures reported by the daemon or the
  transport. They carry the ``ConnectionFault`` read from the connection's
  last-error state so callers can branch on ``fault.kind`` or ``fault.ack``.
- ``RuntimeError`` subclasses flag misuse of the API (issuing a command while
  another response is still being read, using a closed connection or a
  released handle). These are programming errors and are never produced by
  the daemon.

Design Pattern:
    Diagnostic detail is logged where the fault is recorded (in the
    connection). The exception only carries the structured fault.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum


class FaultKind(Enum):
    """Category of the last error recorded on a connection."""

    ARGUMENT = "argument"  # bad argument passed by the caller
    STATE = "state"  # command not valid in the current connection state
    TIMEOUT = "timeout"  # socket timed out
    SYSTEM = "system"  # OS-level socket error
    RESOLVER = "resolver"  # host name could not be resolved
    MALFORMED = "malformed"  # daemon sent something unparseable
    CLOSED = "closed"  # daemon closed the connection
    SERVER = "server"  # daemon answered with ACK


class AckCode(IntEnum):
    """Error codes carried by ``ACK [code@index]`` lines."""

    UNKNOWN = -1
    NOT_LIST = 1
    ARG = 2
    PASSWORD = 3
    PERMISSION = 4
    UNKNOWN_CMD = 5
    NO_EXIST = 50
    PLAYLIST_MAX = 51
    SYSTEM = 52
    PLAYLIST_LOAD = 53
    UPDATE_ALREADY = 54
    PLAYER_SYNC = 55
    EXIST = 56

    @classmethod
    def from_code(cls, code: int) -> "AckCode":
        try:
            return cls(code)
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class ConnectionFault:
    """Snapshot of a connection's last error.

    Attributes:
        kind: Error category
        message: Human-readable description (daemon text for ACK errors)
        ack: ACK error code, only set for SERVER faults
        command_index: Position of the failing command in a command list
        command: Name of the command the daemon rejected
    """

    kind: FaultKind
    message: str
    ack: AckCode | None = None
    command_index: int | None = None
    command: str | None = None

    @property
    def recoverable(self) -> bool:
        """Server errors leave the connection usable; transport errors do not."""
        return self.kind in (FaultKind.SERVER, FaultKind.ARGUMENT, FaultKind.STATE)

    def __str__(self) -> str:
        if self.kind is FaultKind.SERVER:
            return f"[{self.ack.name if self.ack else 'UNKNOWN'}] {{{self.command}}} {self.message}"
        return f"{self.kind.value}: {self.message}"


class MpdError(Exception):
    """Base exception for failures reported by the daemon or the transport.

    Attributes:
        fault: Connection fault that caused the error, if one was recorded
    """

    def __init__(self, message: str, fault: ConnectionFault | None = None):
        super().__init__(message)
        self.fault = fault

    @classmethod
    def from_fault(cls, fault: ConnectionFault | None, action: str) -> "MpdError":
        """Build an error describing ``action`` from the connection's fault."""
        if fault is None:
            return cls(f"{action} failed", None)
        return cls(f"{action} failed: {fault}", fault)


class MpdConnectError(MpdError):
    """Connecting or greeting the daemon failed."""


class RequestFailedError(MpdError):
    """A command could not be sent or the daemon rejected it.

    Raised for:
    - ``outputs`` request that could not be written
    - ``enableoutput`` / ``disableoutput`` / ``toggleoutput`` failures
    - ``password`` rejected
    """


class StreamError(MpdError):
    """The response stream ended abnormally in the middle of an enumeration.

    Surfaced once, as the last event of the enumeration.
    """


class ConnectionBusyError(RuntimeError):
    """A command was issued while another response is still in flight."""

    def __init__(self, pending: str, attempted: str):
        super().__init__(
            f"cannot send '{attempted}' while the '{pending}' response is still being read; "
            "drain or close the enumerator first"
        )
        self.pending = pending
        self.attempted = attempted


class ConnectionClosedError(RuntimeError):
    """The connection was used after ``close()``."""


class HandleReleasedError(RuntimeError):
    """An output handle was used after it was released."""
