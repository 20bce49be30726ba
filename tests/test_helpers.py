from __future__ import annotations

import pytest

from mpd_outputs.utils.helpers import format_command, parse_ack, parse_mpd_host, parse_pair, quote_arg


def test_quote_arg() -> None:
    assert quote_arg(3) == "3"
    assert quote_arg(True) == "1"
    assert quote_arg('say "hi" \\o/') == '"say \\"hi\\" \\\\o/"'
    with pytest.raises(ValueError):
        quote_arg("two\nlines")


def test_format_command() -> None:
    assert format_command("outputs") == "outputs"
    assert format_command("toggleoutput", 2) == "toggleoutput 2"


def test_parse_pair() -> None:
    assert parse_pair("outputname: My ALSA: Device") == ("outputname", "My ALSA: Device")
    assert parse_pair("outputname:") is None
    assert parse_pair("OK") is None


def test_parse_ack() -> None:
    assert parse_ack("ACK [50@1] {enableoutput} No such audio output") == (50, 1, "enableoutput", "No such audio output")
    assert parse_ack("ACK [2@0] {} bad") == (2, 0, "", "bad")
    assert parse_ack("ACK nonsense") is None


@pytest.mark.parametrize(
    "value, expected",
    [
        ("localhost", (None, "localhost")),
        ("secret@music.lan", ("secret", "music.lan")),
        ("p@ss@host", ("p@ss", "host")),
        ("@mpd-socket", (None, "@mpd-socket")),
        ("/run/mpd/socket", (None, "/run/mpd/socket")),
    ],
)
def test_parse_mpd_host(value, expected) -> None:
    assert parse_mpd_host(value) == expected
