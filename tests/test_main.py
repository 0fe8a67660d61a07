import pytest

import gaana_cli.__main__ as entry
from gaana_cli.crypto.stream_decoder import HLS_BASE_URL, encode_stream_path
from gaana_cli.exceptions import ConfigurationError


def test_successful_command_exits_zero(capsys):
    field = encode_stream_path("hls/main/ok.m3u8", offset=1)
    with pytest.raises(SystemExit) as exc_info:
        entry.main(["decode", field])
    assert exc_info.value.code == 0
    assert capsys.readouterr().out.strip() == HLS_BASE_URL + "hls/main/ok.m3u8"


def test_application_error_renders_panel(monkeypatch, capsys):
    def failing_app(**kwargs):
        raise ConfigurationError("bad timeout")

    monkeypatch.setattr(entry, "app", failing_app)
    with pytest.raises(SystemExit) as exc_info:
        entry.main([])

    assert exc_info.value.code == 1
    err = capsys.readouterr().err
    assert "ConfigurationError" in err
    assert "bad timeout" in err


def test_interrupt_exits_with_sigint_status(monkeypatch):
    def interrupted_app(**kwargs):
        raise KeyboardInterrupt

    monkeypatch.setattr(entry, "app", interrupted_app)
    with pytest.raises(SystemExit) as exc_info:
        entry.main([])
    assert exc_info.value.code == entry.EXIT_INTERRUPTED
