"""Packages a mini app directory into a reproducible zip archive."""
from __future__ import annotations

import fnmatch
import hashlib
import logging
import os
import tempfile
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from .errors import MissingResourceError, PackagingError, SchemaError
from .manifest import MANIFEST_FILENAME, Manifest, parse_manifest, read_manifest

logger = logging.getLogger(__name__)

COMPRESS_LEVEL = 9
# Zip timestamps cannot predate 1980; every entry gets this one so rebuilds match byte for byte.
ENTRY_TIMESTAMP = (1980, 1, 1, 0, 0, 0)
ENTRY_MODE = 0o100644
# Key and detached-signature files never ship inside an app archive.
SIGNING_MATERIAL = ("*.key", "*.sig")


def is_signing_material(name: str) -> bool:
  return any(fnmatch.fnmatch(name, pattern) for pattern in SIGNING_MATERIAL)


@dataclass
class ArchiveResult:
  path: Path
  entries: List[str] = field(default_factory=list)
  size: int = 0
  sha256: str = ""
  manifest: Optional[Manifest] = None


def _collect_files(source_dir: Path, exclude: Iterable[Path]) -> List[Tuple[str, Path]]:
  """Regular files under source_dir keyed by POSIX relative path, sorted.

  Symlinks (to files or directories) and signing material are skipped.
  """
  excluded = {path.resolve() for path in exclude}
  files: List[Tuple[str, Path]] = []
  for dirpath, _, filenames in os.walk(source_dir, followlinks=False):
    for name in filenames:
      path = Path(dirpath) / name
      if path.is_symlink() or not path.is_file():
        logger.debug("Skipping %s (not a regular file)", path)
        continue
      if is_signing_material(name):
        logger.warning("Leaving %s out of the archive (key or signature file)", path)
        continue
      if path.resolve() in excluded:
        continue
      files.append((path.relative_to(source_dir).as_posix(), path))
  files.sort(key=lambda item: item[0])
  return files


def _check_manifest(source_dir: Path, strict: bool) -> Optional[Manifest]:
  manifest = read_manifest(source_dir / MANIFEST_FILENAME)
  missing = [name for name in ("name", "entry") if not manifest.get(name)]
  if missing:
    raise SchemaError([f"{name} is required" for name in missing])
  if strict:
    return parse_manifest(manifest)
  return None


def _entry_info(arcname: str) -> zipfile.ZipInfo:
  info = zipfile.ZipInfo(arcname, date_time=ENTRY_TIMESTAMP)
  info.compress_type = zipfile.ZIP_DEFLATED
  info.create_system = 3
  info.external_attr = ENTRY_MODE << 16
  return info


def build_app(
  source_dir: Path,
  output_path: Path,
  strict: bool = True,
  exclude: Sequence[Path] = (),
) -> ArchiveResult:
  """Zip every file of source_dir into output_path.

  With ``strict`` the manifest must pass full schema validation; without it
  only ``name`` and ``entry`` are required. Files named in ``exclude``, the
  output itself and any ``*.key``/``*.sig`` file are left out. The archive is
  written to a scratch file beside the destination and moved into place once
  complete, so a failed build never leaves a truncated archive behind.
  """
  source_dir = Path(source_dir)
  output_path = Path(output_path).absolute()
  if not source_dir.is_dir():
    raise MissingResourceError("Source directory", source_dir)
  manifest = _check_manifest(source_dir, strict)

  files = _collect_files(source_dir, exclude=[output_path, *exclude])
  try:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fd, scratch = tempfile.mkstemp(prefix=f".{output_path.name}.", suffix=".tmp", dir=output_path.parent)
  except OSError as exc:
    raise PackagingError(f"Cannot create archive at {output_path}: {exc}") from exc

  try:
    with os.fdopen(fd, "wb") as handle, zipfile.ZipFile(handle, "w", zipfile.ZIP_DEFLATED) as archive:
      for arcname, path in files:
        archive.writestr(_entry_info(arcname), path.read_bytes(), compresslevel=COMPRESS_LEVEL)
        logger.debug("Added %s", arcname)
    os.chmod(scratch, 0o644)
    os.replace(scratch, output_path)
  except OSError as exc:
    raise PackagingError(f"Failed to write archive {output_path}: {exc}") from exc
  finally:
    if os.path.exists(scratch):
      os.unlink(scratch)

  data = output_path.read_bytes()
  result = ArchiveResult(
    path=output_path,
    entries=[arcname for arcname, _ in files],
    size=len(data),
    sha256=hashlib.sha256(data).hexdigest(),
    manifest=manifest,
  )
  logger.info("Packaged %d files into %s (%d bytes)", len(result.entries), output_path, result.size)
  return result


def list_entries(archive_path: Path) -> List[str]:
  if not Path(archive_path).is_file():
    raise MissingResourceError("Archive", archive_path)
  with zipfile.ZipFile(archive_path) as archive:
    return archive.namelist()
