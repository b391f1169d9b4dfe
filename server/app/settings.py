from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional


@dataclass
class Settings:
  app_dir: Path
  port: int = 3000
  public_key_path: Optional[Path] = None

  @classmethod
  def from_env(cls) -> "Settings":
    app_dir = os.getenv("MCJ_APP_DIR")
    port = os.getenv("MCJ_DEV_PORT")
    public_key = os.getenv("MCJ_PUBLIC_KEY")
    return cls(
      app_dir=Path(app_dir).expanduser() if app_dir else Path.cwd(),
      port=int(port) if port else 3000,
      public_key_path=Path(public_key).expanduser() if public_key else None,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
  return Settings.from_env()
