from __future__ import annotations

import json
import zipfile

import httpx
import pytest

from packager import cli
from packager.publish_app import ContentPublisher, PublisherConfig


def test_build_sign_verify_commands(app_dir, tmp_path, capsys):
  archive = tmp_path / "dist.zip"
  assert cli.main(["build", str(app_dir), str(archive)]) == 0
  with zipfile.ZipFile(archive) as built:
    assert sorted(built.namelist()) == ["index.html", "manifest.json"]

  keys = tmp_path / "keys"
  assert cli.main(["sign", "gen-keys", "--out-dir", str(keys)]) == 0
  signature = tmp_path / "manifest.sig"
  manifest = app_dir / "manifest.json"
  assert cli.main(["sign", "sign", str(manifest), str(signature), str(keys / "private.key")]) == 0
  assert cli.main(["verify", str(manifest), str(signature), str(keys / "public.key")]) == 0
  assert "verified? true" in capsys.readouterr().out

  manifest.write_text(manifest.read_text(encoding="utf-8").replace("Test App", "Evil App"), encoding="utf-8")
  assert cli.main(["verify", str(manifest), str(signature), str(keys / "public.key")]) == 1
  assert "verified? false" in capsys.readouterr().out


def test_build_reports_schema_errors(make_app, tmp_path, capsys):
  source = make_app(manifest={"name": "x", "entry": "index.html", "permissions": ["nope"]})
  assert cli.main(["build", str(source), str(tmp_path / "dist.zip")]) == 1
  err = capsys.readouterr().err
  assert "description is required" in err
  assert "invalid permissions: nope" in err
  assert cli.main(["build", str(source), str(tmp_path / "dist.zip"), "--legacy"]) == 0


def test_missing_files_exit_nonzero(tmp_path, capsys):
  assert cli.main(["build", str(tmp_path / "nope"), str(tmp_path / "dist.zip")]) == 1
  assert cli.main(["sign", "sign", str(tmp_path / "manifest.json")]) == 1
  assert cli.main(["publish", str(tmp_path / "dist.zip")]) == 1
  assert "not found" in capsys.readouterr().err


def test_test_command(app_dir, capsys):
  assert cli.main(["test", str(app_dir / "manifest.json")]) == 0
  (app_dir / "manifest.json").write_text(json.dumps({"name": "x"}), encoding="utf-8")
  assert cli.main(["test", str(app_dir / "manifest.json")]) == 1
  assert "version is required and must be a string" in capsys.readouterr().out


def test_publish_command(app_dir, tmp_path, monkeypatch, capsys):
  archive = tmp_path / "dist.zip"
  assert cli.main(["build", str(app_dir), str(archive)]) == 0
  transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"Hash": "QmCliCid"}))
  monkeypatch.setattr(cli, "make_publisher", lambda: ContentPublisher(PublisherConfig(), transport=transport))
  assert cli.main(["publish", str(archive)]) == 0
  out = capsys.readouterr().out
  assert "CID: QmCliCid" in out
  assert "/QmCliCid" in out


def test_init_command(tmp_path, monkeypatch):
  monkeypatch.chdir(tmp_path)
  assert cli.main(["init", "demo"]) == 0
  assert (tmp_path / "demo" / "manifest.json").is_file()
  assert cli.main(["init", "demo"]) == 1


def test_unknown_command_exits_with_usage():
  with pytest.raises(SystemExit) as excinfo:
    cli.main(["frobnicate"])
  assert excinfo.value.code == 2


def test_binary_key_file_is_reported_not_raised(app_dir, tmp_path, capsys):
  key = tmp_path / "private.key"
  key.write_bytes(b"\xff\xfe\xfd")
  assert cli.main(["sign", "sign", str(app_dir / "manifest.json"), str(tmp_path / "m.sig"), str(key)]) == 1
  assert "Private key must be hex encoded" in capsys.readouterr().err
