from __future__ import annotations

import json
from pathlib import Path
from typing import Callable, Dict, Optional

import pytest

TEST_MANIFEST = {
  "name": "Test App",
  "version": "1.0.0",
  "entry": "index.html",
  "description": "d",
  "developer": "dev",
}


@pytest.fixture
def manifest_data() -> Dict[str, object]:
  return dict(TEST_MANIFEST)


@pytest.fixture
def make_app(tmp_path: Path) -> Callable[..., Path]:
  def make(name: str = "app", manifest: Optional[Dict[str, object]] = None) -> Path:
    root = tmp_path / name
    root.mkdir(parents=True, exist_ok=True)
    data = TEST_MANIFEST if manifest is None else manifest
    (root / "manifest.json").write_text(json.dumps(data, indent=2), encoding="utf-8")
    (root / "index.html").write_text("<h1>hello</h1>\n", encoding="utf-8")
    return root

  return make


@pytest.fixture
def app_dir(make_app) -> Path:
  return make_app()
