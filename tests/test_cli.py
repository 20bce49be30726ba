from __future__ import annotations

import json

import pytest

from conftest import HDMI, HEADPHONES, SPEAKERS, FakeDaemon
from mpd_outputs import main as cli
from mpd_outputs.client.exceptions import MpdConnectError


@pytest.fixture
def scripted(monkeypatch):
    """Route MpdConnection.connect to a scripted daemon and record its arguments."""
    monkeypatch.delenv("MPD_HOST", raising=False)
    monkeypatch.delenv("MPD_PORT", raising=False)
    daemon = FakeDaemon()
    calls = []

    def fake_connect(**kwargs):
        calls.append(kwargs)
        return daemon.connect()

    monkeypatch.setattr(cli.MpdConnection, "connect", staticmethod(fake_connect))
    yield daemon, calls
    daemon.close()


def test_list_plain(scripted, capsys) -> None:
    daemon, calls = scripted
    daemon.outputs(SPEAKERS, HEADPHONES)

    assert cli.main(["--host", "music.lan", "list"]) == 0

    out = capsys.readouterr().out
    assert out.splitlines() == ["2\tenabled\tSpeakers", "3\tdisabled\tHeadphones"]
    assert calls[0]["host"] == "music.lan"
    assert calls[0]["port"] == 6600


def test_list_json(scripted, capsys) -> None:
    daemon, _ = scripted
    daemon.outputs(SPEAKERS, HDMI)

    assert cli.main(["list", "--json"]) == 0

    assert json.loads(capsys.readouterr().out) == [
        {"name": "Speakers", "id": 2, "enabled": True},
        {"name": "HDMI", "id": 4, "enabled": True},
    ]


def test_toggle(scripted, capsys) -> None:
    daemon, _ = scripted
    daemon.outputs(SPEAKERS, HEADPHONES).reply("OK")

    assert cli.main(["toggle", "3"]) == 0

    assert "toggled output 3 (Headphones)" in capsys.readouterr().out
    assert daemon.received() == ["outputs", "toggleoutput 3"]


def test_disable_unknown_id(scripted) -> None:
    daemon, _ = scripted
    daemon.outputs(SPEAKERS)

    assert cli.main(["disable", "8"]) == 1
    assert daemon.received() == ["outputs"]


def test_enable_rejected(scripted) -> None:
    daemon, _ = scripted
    daemon.outputs(HEADPHONES).reply("ACK [50@0] {enableoutput} No such audio output")

    assert cli.main(["enable", "3"]) == 1


def test_connect_failure(monkeypatch) -> None:
    def refuse(**kwargs):
        raise MpdConnectError("localhost:6600: connect failed", None)

    monkeypatch.setattr(cli.MpdConnection, "connect", staticmethod(refuse))

    assert cli.main(["list"]) == 1


def test_config_file_and_port_flag(scripted, tmp_path) -> None:
    daemon, calls = scripted
    daemon.outputs()
    path = tmp_path / "outputs.yaml"
    path.write_text("mpd:\n  host: from-file\n  password: pw\n", encoding="utf-8")

    assert cli.main(["--config", str(path), "--port", "6610", "list"]) == 0

    assert calls[0] == {"host": "from-file", "port": 6610, "timeout": 30.0, "password": "pw"}
