"""Creates a new mini app project from the bundled starter template."""
from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path

from .errors import PackagingError
from .manifest import MANIFEST_FILENAME

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates" / "starter"
DEFAULT_APP_NAME = "my-miniapp"


def init_app(name: str = DEFAULT_APP_NAME, parent_dir: Path = Path(".")) -> Path:
  target = Path(parent_dir) / name
  if target.exists() and (not target.is_dir() or any(target.iterdir())):
    raise PackagingError(f"{target} already exists and is not empty")

  shutil.copytree(TEMPLATE_DIR, target, dirs_exist_ok=True)
  manifest_path = target / MANIFEST_FILENAME
  manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
  manifest["name"] = name
  manifest_path.write_text(json.dumps(manifest, indent=2) + "\n", encoding="utf-8")
  logger.info("Created %s from %s", target, TEMPLATE_DIR)
  return target
