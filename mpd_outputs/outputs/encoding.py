# © Copyright 2025 Stuart Parmenter
# SPDX-License-Identifier: MIT

"""Structured encoding of output handles.

Each output encodes as a mapping with exactly the keys ``name``, ``id`` and
``enabled``, in that order. A collection encodes as a list of such mappings
in enumeration order.
"""

import json
from collections.abc import Callable, Iterable
from typing import Any

from .handle import OutputHandle


OUTPUT_FIELDS = ("name", "id", "enabled")


def encode_output(output: OutputHandle, encoder: Callable[[dict[str, Any]], Any] | None = None) -> Any:
    """Encode one output; ``encoder`` receives the ordered mapping if given."""
    record = output.to_dict()
    return encoder(record) if encoder else record


def encode_outputs(
    outputs: Iterable[OutputHandle],
    encoder: Callable[[dict[str, Any]], Any] | None = None,
    release: bool = False,
) -> list[Any]:
    """Encode a sequence of outputs in order.

    Args:
        outputs: Handles or an ``OutputEnumerator``
        encoder: Optional per-record encoder applied to each mapping
        release: Release each handle right after it is encoded
    """
    encoded = []
    for output in outputs:
        try:
            encoded.append(encode_output(output, encoder))
        finally:
            if release:
                output.release()
    return encoded


def outputs_to_json(outputs: Iterable[OutputHandle], release: bool = False, **dumps_kwargs) -> str:
    """Serialize outputs as a JSON array."""
    return json.dumps(encode_outputs(outputs, release=release), **dumps_kwargs)
