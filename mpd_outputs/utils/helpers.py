# © Copyright 2025 Stuart Parmenter
# SPDX-License-Identifier: MIT

import re
from typing import Optional, Tuple


_ACK_RE = re.compile(r"^ACK \[(\d+)@(\d+)\] \{([^}]*)\}\s?(.*)$")


def quote_arg(arg) -> str:
    """Quote a command argument for the MPD line protocol.

    Integers go out bare; everything else is wrapped in double quotes with
    backslash and quote characters escaped.
    """
    if isinstance(arg, bool):
        return "1" if arg else "0"
    if isinstance(arg, int):
        return str(arg)
    s = str(arg)
    if "\n" in s:
        raise ValueError("MPD command arguments cannot contain newlines")
    return '"' + s.replace("\\", "\\\\").replace('"', '\\"') + '"'


def format_command(name: str, *args) -> str:
    """Build one command line (without the trailing newline)."""
    parts = [name]
    parts.extend(quote_arg(a) for a in args)
    return " ".join(parts)


def parse_pair(line: str) -> Optional[Tuple[str, str]]:
    """Split a ``key: value`` response line. Returns None if it is not a pair."""
    key, sep, value = line.partition(": ")
    if not sep or not key:
        return None
    return key, value


def parse_ack(line: str) -> Optional[Tuple[int, int, str, str]]:
    """Parse ``ACK [code@index] {command} message`` into its four fields."""
    m = _ACK_RE.match(line)
    if not m:
        return None
    return int(m.group(1)), int(m.group(2)), m.group(3), m.group(4)


def parse_mpd_host(value: str) -> Tuple[Optional[str], str]:
    """Split an ``MPD_HOST`` value into (password, host).

    MPD clients accept ``password@host``; a leading ``@`` marks an abstract
    socket name and is kept as part of the host.
    """
    if not value:
        return None, value
    if value.startswith("@"):
        return None, value
    password, sep, host = value.rpartition("@")
    if not sep or not password:
        return None, value
    return password, host
