# © Copyright 2025 Stuart Parmenter
# SPDX-License-Identifier: MIT

"""Enumeration and control of the daemon's audio outputs."""

from .encoding import OUTPUT_FIELDS, encode_output, encode_outputs, outputs_to_json
from .enumerator import OutputEnumerator, find_output
from .handle import OutputHandle


__all__ = [
    "OUTPUT_FIELDS",
    "OutputEnumerator",
    "OutputHandle",
    "encode_output",
    "encode_outputs",
    "find_output",
    "outputs_to_json",
]
