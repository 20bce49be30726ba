# © Copyright 2025 Stuart Parmenter
# SPDX-License-Identifier: MIT

"""List, inspect, and switch the audio outputs of a Music Player Daemon."""

from .client import (
    ConnectionBusyError,
    ConnectionClosedError,
    ConnectionFault,
    FaultKind,
    HandleReleasedError,
    MpdConnectError,
    MpdConnection,
    MpdError,
    RequestFailedError,
    StreamError,
)
from .outputs import OutputEnumerator, OutputHandle, encode_outputs, find_output


__all__ = [
    "ConnectionBusyError",
    "ConnectionClosedError",
    "ConnectionFault",
    "FaultKind",
    "HandleReleasedError",
    "MpdConnectError",
    "MpdConnection",
    "MpdError",
    "OutputEnumerator",
    "OutputHandle",
    "RequestFailedError",
    "StreamError",
    "encode_outputs",
    "find_output",
]
