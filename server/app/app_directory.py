from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

from packager.build_app import is_signing_material
from packager.errors import MiniAppError, MissingResourceError
from packager.manifest import MANIFEST_FILENAME, ValidationResult, missing_assets, read_manifest, validate_manifest


class AppDirectory:
  """Reads a mini app's manifest from disk and resolves its static files."""

  def __init__(self, root: Path) -> None:
    self.root = Path(root).resolve()
    self.manifest_path = self.root / MANIFEST_FILENAME
    self._manifest: Optional[Dict[str, Any]] = None
    self._load_error: Optional[str] = None
    self.refresh()

  def refresh(self) -> None:
    try:
      self._manifest = read_manifest(self.manifest_path)
      self._load_error = None
    except MiniAppError as exc:
      self._manifest = None
      self._load_error = str(exc)

  @property
  def manifest(self) -> Optional[Dict[str, Any]]:
    return self._manifest

  def validation(self) -> ValidationResult:
    if self._manifest is None:
      return ValidationResult(ok=False, errors=[self._load_error or "manifest not loaded"])
    return validate_manifest(self._manifest)

  def missing_assets(self) -> List[str]:
    if self._manifest is None:
      return []
    return missing_assets(self._manifest, self.root)

  def manifest_bytes(self) -> bytes:
    if not self.manifest_path.is_file():
      raise MissingResourceError("Manifest", self.manifest_path)
    return self.manifest_path.read_bytes()

  def resolve(self, relative: str) -> Optional[Path]:
    """Path of a servable file inside the app directory, or None.

    Keys and signatures are never served even when they sit in the app directory.
    """
    candidate = (self.root / relative).resolve()
    if not candidate.is_relative_to(self.root) or not candidate.is_file():
      return None
    if is_signing_material(candidate.name):
      return None
    return candidate

  def entry_file(self) -> Optional[Path]:
    entry = (self._manifest or {}).get("entry")
    if not isinstance(entry, str) or not entry:
      entry = "index.html"
    return self.resolve(entry)
