"""Signs mini app manifests with an Ed25519 private key."""
from __future__ import annotations

import logging
from pathlib import Path

from nacl.signing import SigningKey

from .errors import MissingResourceError, SigningError
from .keys import PRIVATE_KEY_SIZE, encode_hex, load_private_key

logger = logging.getLogger(__name__)

DEFAULT_SIGNATURE_PATH = Path("manifest.sig")
DEFAULT_PRIVATE_KEY_PATH = Path("private.key")


def _signing_key(private_key: bytes) -> SigningKey:
  if len(private_key) != PRIVATE_KEY_SIZE:
    raise SigningError(f"Ed25519 private keys must be {PRIVATE_KEY_SIZE} bytes, got {len(private_key)}")
  signing_key = SigningKey(private_key[:32])
  if signing_key.verify_key.encode() != private_key[32:]:
    raise SigningError("Private key is corrupt: its public half does not match the seed")
  return signing_key


def sign(message: bytes, private_key: bytes) -> bytes:
  """Detached signature over the exact message bytes."""
  return _signing_key(private_key).sign(message).signature


def sign_manifest(
  manifest_path: Path,
  signature_path: Path = DEFAULT_SIGNATURE_PATH,
  private_key_path: Path = DEFAULT_PRIVATE_KEY_PATH,
) -> Path:
  manifest_path = Path(manifest_path)
  private_key_path = Path(private_key_path)
  signature_path = Path(signature_path)
  if not manifest_path.is_file():
    raise MissingResourceError("Manifest", manifest_path)
  if not private_key_path.is_file():
    raise MissingResourceError("Private key", private_key_path)

  signature = sign(manifest_path.read_bytes(), load_private_key(private_key_path))
  signature_path.write_text(encode_hex(signature), encoding="utf-8")
  logger.info("Signed %s -> %s", manifest_path, signature_path)
  return signature_path
