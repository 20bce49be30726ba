from __future__ import annotations

import socket

import pytest

from mpd_outputs.client.connection import MpdConnection


class FakeDaemon:
    """Scripted MPD peer on the other end of a socketpair.

    Responses are written up front; the client reads them in order. Whatever
    the client sends can be inspected afterwards with ``received()``.
    """

    def __init__(self, greeting: str = "OK MPD 0.23.5") -> None:
        self.client_sock, self.server_sock = socket.socketpair()
        self.client_sock.settimeout(2.0)
        self._sent = b""
        if greeting is not None:
            self.reply(greeting)

    def reply(self, *lines: str) -> "FakeDaemon":
        self.server_sock.sendall("".join(f"{line}\n" for line in lines).encode("utf-8"))
        return self

    def outputs(self, *records: tuple, terminate: bool = True) -> "FakeDaemon":
        for record in records:
            self.reply(*output_block(*record))
        if terminate:
            self.reply("OK")
        return self

    def hang_up(self) -> None:
        self.server_sock.shutdown(socket.SHUT_WR)

    def received(self) -> list[str]:
        self.server_sock.setblocking(False)
        try:
            while True:
                chunk = self.server_sock.recv(65536)
                if not chunk:
                    break
                self._sent += chunk
        except BlockingIOError:
            pass
        finally:
            self.server_sock.setblocking(True)
        return [line for line in self._sent.decode("utf-8").split("\n") if line]

    def connect(self) -> MpdConnection:
        return MpdConnection(self.client_sock, name="fake")

    def close(self) -> None:
        self.server_sock.close()
        self.client_sock.close()


def output_block(output_id: int, name: str, enabled: bool, plugin: str | None = None, attributes=None) -> list[str]:
    lines = [f"outputid: {output_id}", f"outputname: {name}"]
    if plugin is not None:
        lines.append(f"plugin: {plugin}")
    lines.append(f"outputenabled: {1 if enabled else 0}")
    for key, value in (attributes or {}).items():
        lines.append(f"attribute: {key}={value}")
    return lines


SPEAKERS = (2, "Speakers", True)
HEADPHONES = (3, "Headphones", False)
HDMI = (4, "HDMI", True)


@pytest.fixture
def daemon():
    d = FakeDaemon()
    yield d
    d.close()
