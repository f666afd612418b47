import hashlib

import httpx
import pytest
import structlog

from regclient import main as cli_main
from regclient.config import RegistryConfig
from regclient.modules.cli import parse_args

from conftest import challenge_response, token_response

BLOB = b"layer"
BLOB_DIGEST = "sha256:" + hashlib.sha256(BLOB).hexdigest()


def test_no_mode_prints_help(capsys):
    with pytest.raises(SystemExit) as excinfo:
        parse_args([])
    assert excinfo.value.code == 0
    assert "usage" in capsys.readouterr().out


def test_parses_modes():
    args = parse_args(["-r", "localhost:5000", "--insecure", "--tags", "team/app", "--page-size", "10"])
    assert args.registry == "localhost:5000"
    assert args.insecure
    assert args.tags == "team/app"
    assert args.page_size == 10


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    # main() binds structlog to this test's captured stderr.
    structlog.reset_defaults()


@pytest.fixture
def offline_build(monkeypatch, registry):
    original = RegistryConfig.build

    def build(self, transport=None):
        transport = httpx.AsyncClient(transport=httpx.MockTransport(registry.handler), follow_redirects=True)
        return original(self, transport=transport)

    monkeypatch.setattr(RegistryConfig, "build", build)


def test_catalog_and_tags(registry, offline_build, capsys):
    registry.add("GET", "/v2/_catalog", challenge_response(), httpx.Response(200, json={"repositories": ["team/app"]}))
    registry.add("GET", "/token", token_response())
    registry.add("GET", "/v2/team/app/tags/list", httpx.Response(200, json={"name": "team/app", "tags": ["v1", "v2"]}))

    cli_main.main(["-r", "registry.test", "--catalog", "--tags", "team/app"])

    out = capsys.readouterr().out
    assert "1. team/app" in out
    assert "2. v2" in out


def test_blob_download(registry, offline_build, capsys, tmp_path):
    registry.add("GET", f"/v2/team/app/blobs/{BLOB_DIGEST}", httpx.Response(200, content=BLOB))

    cli_main.main(["-r", "registry.test", "--blob", f"team/app@{BLOB_DIGEST}", "-o", str(tmp_path)])

    assert (tmp_path / BLOB_DIGEST.replace(":", "_")).read_bytes() == BLOB
    assert "[+] Saved blob" in capsys.readouterr().out


def test_errors_exit_nonzero(registry, offline_build, capsys):
    registry.add("HEAD", "/v2/team/app/manifests/v1", httpx.Response(500))

    with pytest.raises(SystemExit) as excinfo:
        cli_main.main(["-r", "registry.test", "--exists", "team/app:v1"])

    assert excinfo.value.code == 1
    assert "[!] Error" in capsys.readouterr().out


def test_manifest_reports_tag_or_digest(registry, offline_build, capsys):
    body = b'{"schemaVersion": 2}'
    digest = "sha256:" + hashlib.sha256(body).hexdigest()
    registry.add("GET", "/v2/team/app/manifests/v1", httpx.Response(200, content=body, headers={"Docker-Content-Digest": digest}))
    registry.add("GET", f"/v2/team/app/manifests/{digest}", httpx.Response(200, content=body))

    cli_main.main(["-r", "registry.test", "--manifest", "team/app:v1"])
    out = capsys.readouterr().out
    assert "by:     tag" in out
    assert f"digest: {digest}" in out

    cli_main.main(["-r", "registry.test", "--manifest", f"team/app@{digest}"])
    out = capsys.readouterr().out
    assert "by:     digest" in out
    assert "digest: (not reported)" in out
