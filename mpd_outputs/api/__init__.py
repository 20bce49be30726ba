# © Copyright 2025 Stuart Parmenter
# SPDX-License-Identifier: MIT

"""HTTP API for listing and switching outputs."""

from .server import create_app, start_server

__all__ = [
    "create_app",
    "start_server",
]
