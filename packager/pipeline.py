"""Build, sign, self-verify and publish a mini app in one step."""
from __future__ import annotations

import logging
import threading
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .build_app import ArchiveResult, build_app
from .errors import PackagingError, SigningError
from .keys import encode_hex, load_private_key, load_public_key
from .manifest import MANIFEST_FILENAME
from .publish_app import ContentPublisher
from .sign_app import sign
from .verify_app import verify

logger = logging.getLogger(__name__)


@dataclass
class ReleaseResult:
  archive: ArchiveResult
  signature_path: Path
  cid: str
  gateway_url: str


def _archived_manifest(archive_path: Path) -> bytes:
  try:
    with zipfile.ZipFile(archive_path) as archive:
      return archive.read(MANIFEST_FILENAME)
  except (KeyError, zipfile.BadZipFile) as exc:
    raise PackagingError(f"{archive_path} has no readable {MANIFEST_FILENAME}: {exc}") from exc


def release_app(
  source_dir: Path,
  output_path: Path,
  private_key_path: Path,
  public_key_path: Path,
  publisher: ContentPublisher,
  signature_path: Optional[Path] = None,
  cancel_event: Optional[threading.Event] = None,
) -> ReleaseResult:
  """Nothing is uploaded unless the fresh signature checks out against public_key_path.

  The signature covers the manifest bytes stored in the archive, so an edit to
  the source manifest after packaging cannot split the two apart.
  """
  source_dir = Path(source_dir)
  signature_path = Path(signature_path) if signature_path else Path(output_path).with_suffix(".sig")
  private_key = load_private_key(private_key_path)
  public_key = load_public_key(public_key_path)

  archive = build_app(
    source_dir,
    output_path,
    strict=True,
    exclude=[Path(private_key_path), Path(public_key_path), signature_path],
  )
  manifest_bytes = _archived_manifest(archive.path)
  signature = sign(manifest_bytes, private_key)
  if not verify(manifest_bytes, signature, public_key):
    raise SigningError(f"Signature over {archive.path} does not verify with {public_key_path}; refusing to publish")
  signature_path.parent.mkdir(parents=True, exist_ok=True)
  signature_path.write_text(encode_hex(signature), encoding="utf-8")
  logger.info("Signed %s from %s into %s", MANIFEST_FILENAME, archive.path, signature_path)

  cid = publisher.publish(archive.path, cancel_event=cancel_event)
  logger.info("Released %s as %s", source_dir, cid)
  return ReleaseResult(
    archive=archive,
    signature_path=signature_path,
    cid=cid,
    gateway_url=publisher.config.gateway_link(cid),
  )
