# © Copyright 2025 Stuart Parmenter
# SPDX-License-Identifier: MIT

import logging
from collections.abc import Iterator
from enum import Enum

from ..client.connection import MpdConnection
from ..client.exceptions import ConnectionFault, RequestFailedError, StreamError
from .encoding import encode_outputs
from .handle import OutputHandle


class _PullState(Enum):
    RECORD = "record"
    END = "end"
    FAILED = "failed"


class OutputEnumerator:
    """Lazy, forward-only sequence over the response of an ``outputs`` request.

    Iterating yields one ``OutputHandle`` per configured output. A clean end
    of the response stops the iteration. If the connection fails mid-stream,
    the next pull raises ``StreamError`` once and every later pull stops.

    The enumerator keeps the connection busy until the response is fully
    read. Use it as a context manager (or call ``close()``) to drain any
    unread records before issuing other commands on the same connection.
    """

    def __init__(self, conn: MpdConnection):
        self._conn = conn
        self._done = False
        self._count = 0
        self._deferred: ConnectionFault | None = None
        self._finished = False  # own response ended with OK

    @classmethod
    def start(cls, conn: MpdConnection) -> "OutputEnumerator":
        """Send the ``outputs`` request and return the enumerator for its response.

        Raises:
            RequestFailedError: If the request could not be sent
            ConnectionBusyError: If another response is still being read
        """
        if not conn.send_outputs():
            fault = conn.last_error()
            conn.clear_error()
            raise RequestFailedError.from_fault(fault, "outputs request")
        return cls(conn)

    @property
    def done(self) -> bool:
        return self._done

    def _pull(self) -> tuple[_PullState, OutputHandle | ConnectionFault | None]:
        """Receive one record and resolve an empty read into end or failure."""
        if self._deferred is not None:
            fault, self._deferred = self._deferred, None
            return _PullState.FAILED, fault

        if self._finished:
            return _PullState.END, None

        raw = self._conn.recv_output()
        if raw is not None:
            # The stream can break right after a complete record
            self._deferred = self._conn.last_error()
            if self._deferred is not None:
                self._conn.clear_error()
            elif self._conn.pending_command != "outputs":
                # OK already read; later connection errors belong to other commands
                self._finished = True
            return _PullState.RECORD, OutputHandle(raw, self._conn)

        fault = self._conn.last_error()
        if fault is None:
            return _PullState.END, None
        self._conn.clear_error()
        return _PullState.FAILED, fault

    def __iter__(self) -> Iterator[OutputHandle]:
        return self

    def __next__(self) -> OutputHandle:
        if self._done:
            raise StopIteration

        state, value = self._pull()
        if state is _PullState.RECORD:
            self._count += 1
            return value

        self._done = True
        if state is _PullState.END:
            logging.getLogger("outputs").debug(f"outputs: {self._count} record(s)")
            raise StopIteration
        raise StreamError.from_fault(value, f"outputs stream after {self._count} record(s)")

    def close(self) -> None:
        """Drain and release any unread records so the connection can be reused.

        Raises:
            StreamError: If the connection failed while draining
        """
        if self._done:
            return
        skipped = 0
        for handle in self:
            handle.release()
            skipped += 1
        if skipped:
            logging.getLogger("outputs").debug(f"outputs: discarded {skipped} unread record(s)")

    def __enter__(self) -> "OutputEnumerator":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.close()
            return
        # Already unwinding; a drain failure must not mask the original error
        try:
            self.close()
        except StreamError as e:
            logging.getLogger("outputs").warning(f"outputs: drain after error failed: {e}")

    def to_list(self) -> list[OutputHandle]:
        """Collect the remaining records in enumeration order."""
        return list(self)

    def encode(self) -> list[dict]:
        """Encode the remaining records, releasing each handle once encoded."""
        return encode_outputs(self, release=True)


def find_output(conn: MpdConnection, output_id: int) -> OutputHandle | None:
    """Enumerate all outputs and return the one with ``output_id``.

    The enumeration is fully drained before returning, so the handle's
    mutators can be called right away. Non-matching handles are released.
    """
    found = None
    try:
        with OutputEnumerator.start(conn) as outputs:
            for output in outputs:
                if found is None and output.id == output_id:
                    found = output
                else:
                    output.release()
    except BaseException:
        if found is not None:
            found.release()
        raise
    return found
