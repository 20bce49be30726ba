# © Copyright 2025 Stuart Parmenter
# SPDX-License-Identifier: MIT

"""Protocol helpers for quoting commands and parsing responses."""

from .helpers import format_command, parse_ack, parse_mpd_host, parse_pair, quote_arg


__all__ = [
    "format_command",
    "parse_ack",
    "parse_mpd_host",
    "parse_pair",
    "quote_arg",
]
