# © Copyright 2025 Stuart Parmenter
# SPDX-License-Identifier: MIT

"""MPD connection and its error types."""

from .connection import MpdConnection, RawOutput
from .exceptions import (
    AckCode,
    ConnectionBusyError,
    ConnectionClosedError,
    ConnectionFault,
    FaultKind,
    HandleReleasedError,
    MpdConnectError,
    MpdError,
    RequestFailedError,
    StreamError,
)


__all__ = [
    "AckCode",
    "ConnectionBusyError",
    "ConnectionClosedError",
    "ConnectionFault",
    "FaultKind",
    "HandleReleasedError",
    "MpdConnectError",
    "MpdConnection",
    "MpdError",
    "RawOutput",
    "RequestFailedError",
    "StreamError",
]
