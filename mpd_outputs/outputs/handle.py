# © Copyright 2025 Stuart Parmenter
# SPDX-License-Identifier: MIT

import logging
import weakref
from typing import Any

from ..client.connection import MpdConnection, RawOutput
from ..client.exceptions import ConnectionClosedError, HandleReleasedError, RequestFailedError


def _release_raw(raw: RawOutput) -> None:
    """Finalizer target; must not reference the handle itself."""
    raw.release()


class OutputHandle:
    """One audio output reported by the daemon.

    The handle owns a received output record and releases it exactly once:
    on ``release()``, when a ``with`` block exits, or when the handle is
    garbage collected. The values read at enumeration time are cached on the
    record; the mutators send a fresh command and do not update them.
    """

    def __init__(self, raw: RawOutput, conn: MpdConnection):
        self._raw = raw
        self._conn = conn
        self._finalizer = weakref.finalize(self, _release_raw, raw)

    # Lifecycle

    @property
    def released(self) -> bool:
        return not self._finalizer.alive

    def release(self) -> None:
        """Release the underlying record. Later calls do nothing."""
        # finalize runs its callback at most once
        self._finalizer()

    def __enter__(self) -> "OutputHandle":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    def _record(self) -> RawOutput:
        if self.released:
            raise HandleReleasedError("output handle used after release")
        return self._raw

    # Accessors

    @property
    def id(self) -> int:
        return self._record().get_id()

    @property
    def name(self) -> str:
        return self._record().get_name()

    @property
    def enabled(self) -> bool:
        """Enabled state as reported when the output was enumerated."""
        return self._record().get_enabled()

    @property
    def plugin(self) -> str | None:
        return self._record().get_plugin()

    @property
    def attributes(self) -> dict[str, str]:
        return self._record().get_attributes()

    # Mutators

    def _run(self, action: str, runner) -> None:
        output_id = self.id
        if self._conn.closed and self._conn.last_error() is None:
            raise ConnectionClosedError(f"cannot {action} output {output_id}: connection is closed")

        logging.getLogger("outputs").debug(f"{action} output {output_id} ({self.name})")
        if not runner(output_id):
            fault = self._conn.last_error()
            self._conn.clear_error()
            raise RequestFailedError.from_fault(fault, f"{action} output {output_id}")

    def set_enabled(self, enabled: bool) -> None:
        """Enable or disable this output on the daemon.

        Raises:
            RequestFailedError: If the daemon rejected the command or the
                connection failed
            ConnectionBusyError: If another response is still being read
        """
        if enabled:
            self._run("enable", self._conn.run_enable_output)
        else:
            self._run("disable", self._conn.run_disable_output)

    def enable(self) -> None:
        self.set_enabled(True)

    def disable(self) -> None:
        self.set_enabled(False)

    def toggle(self) -> None:
        """Flip this output's enabled state on the daemon."""
        self._run("toggle", self._conn.run_toggle_output)

    # Representation

    def to_dict(self) -> dict[str, Any]:
        """Structured form with the keys name, id, enabled in that order."""
        return {"name": self.name, "id": self.id, "enabled": self.enabled}

    def __repr__(self):
        if self.released:
            return "MpdOutput(<released>)"
        return f"MpdOutput(name={self.name!r}, id={self.id}, enabled={self.enabled})"
