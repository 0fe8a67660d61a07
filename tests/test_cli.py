import json

import pytest
from typer.testing import CliRunner

import gaana_cli.cli.app as app_module
from gaana_cli.crypto.stream_decoder import HLS_BASE_URL, encode_stream_path

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    monkeypatch.setattr(app_module, "CONFIG_DIR", tmp_path)
    monkeypatch.setattr(app_module, "CONFIG_FILE", tmp_path / "config.ini")
    return tmp_path


@pytest.fixture
def patch_client(monkeypatch, fake_client):
    def _patch(responses):
        clients = []

        def factory(max_workers, timeout):
            client = fake_client(responses, max_workers, timeout)
            clients.append(client)
            return client

        monkeypatch.setattr(app_module, "GaanaAPIClient", factory)
        return clients

    return _patch


def test_decode_prints_url():
    field = encode_stream_path("junk hls/abc/def.m3u8", offset=5)
    result = runner.invoke(app_module.app, ["decode", field])
    assert result.exit_code == 0
    assert result.stdout.strip() == HLS_BASE_URL + "hls/abc/def.m3u8"


def test_decode_reports_failure_kind():
    result = runner.invoke(app_module.app, ["decode", "zzzzzzzzzzzzzzzzzzzz"])
    assert result.exit_code == 1
    assert "MalformedOffset" in result.output


def test_encode_output_decodes():
    encoded = runner.invoke(app_module.app, ["encode", "hls/x.m3u8", "--offset", "8"])
    assert encoded.exit_code == 0
    field = encoded.stdout.strip()
    assert field.startswith("8")

    decoded = runner.invoke(app_module.app, ["decode", field])
    assert decoded.stdout.strip() == HLS_BASE_URL + "hls/x.m3u8"


def test_resolve_json_output(patch_client, envelope):
    clients = patch_client({"high": envelope(bit_rate="320")})

    result = runner.invoke(app_module.app, ["resolve", "29827401", "--json"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload == [
        {
            "trackId": "29827401",
            "mediaUrls": [
                {
                    "quality": "high",
                    "bitRate": "320",
                    "url": HLS_BASE_URL + "hls/abc/def.m3u8",
                    "format": "mp4",
                }
            ],
        }
    ]
    assert clients[0].closed


def test_resolve_uses_config_and_options(isolated_config, patch_client, envelope):
    (isolated_config / "config.ini").write_text(
        "[DEFAULT]\nfallback = true\nmax_workers = 3\n", encoding="utf-8"
    )
    clients = patch_client({"low": envelope()})

    result = runner.invoke(app_module.app, ["resolve", "1", "-q", "medium", "--json"])

    assert result.exit_code == 0
    assert [call[1] for call in clients[0].calls] == ["medium", "low"]
    assert clients[0].max_workers == 3


def test_resolve_without_results_exits_nonzero(patch_client):
    patch_client({})
    result = runner.invoke(app_module.app, ["resolve", "1"])
    assert result.exit_code == 1


def test_resolve_rejects_unknown_quality(patch_client):
    patch_client({})
    result = runner.invoke(app_module.app, ["resolve", "1", "-q", "lossless"])
    assert result.exit_code == 1
    assert "Quality must be one of" in result.output


def test_init_then_validate(isolated_config):
    result = runner.invoke(app_module.app, ["init"])
    assert result.exit_code == 0
    assert (isolated_config / "config.ini").is_file()

    result = runner.invoke(app_module.app, ["validate"])
    assert result.exit_code == 0
    assert "Validated Settings" in result.output


def test_version():
    result = runner.invoke(app_module.app, ["--version"])
    assert result.exit_code == 0
    assert "gaana-cli" in result.output


def test_decode_does_not_trim_input():
    field = encode_stream_path("hls/abc/def.m3u8", offset=5)
    result = runner.invoke(app_module.app, ["decode", " " + field])
    assert result.exit_code == 1
    assert "MalformedOffset" in result.output
