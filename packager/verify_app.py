"""Verifies detached manifest signatures against a publisher's public key."""
from __future__ import annotations

import logging
from pathlib import Path

from nacl.exceptions import BadSignatureError
from nacl.signing import VerifyKey

from .errors import MalformedEncodingError, MissingResourceError
from .keys import PUBLIC_KEY_SIZE, SIGNATURE_SIZE, load_public_key, load_signature

logger = logging.getLogger(__name__)

DEFAULT_SIGNATURE_PATH = Path("manifest.sig")
DEFAULT_PUBLIC_KEY_PATH = Path("public.key")


def verify(message: bytes, signature: bytes, public_key: bytes) -> bool:
  """True iff signature was made over message by the holder of public_key.

  A wrong signature, altered message or different key all return False. Inputs
  of the wrong size raise MalformedEncodingError instead.
  """
  if len(signature) != SIGNATURE_SIZE:
    raise MalformedEncodingError(f"Signatures must be {SIGNATURE_SIZE} bytes, got {len(signature)}")
  if len(public_key) != PUBLIC_KEY_SIZE:
    raise MalformedEncodingError(f"Ed25519 public keys must be {PUBLIC_KEY_SIZE} bytes, got {len(public_key)}")
  try:
    VerifyKey(public_key).verify(message, signature)
  except BadSignatureError:
    return False
  return True


def verify_manifest(
  manifest_path: Path,
  signature_path: Path = DEFAULT_SIGNATURE_PATH,
  public_key_path: Path = DEFAULT_PUBLIC_KEY_PATH,
) -> bool:
  manifest_path = Path(manifest_path)
  if not manifest_path.is_file():
    raise MissingResourceError("Manifest", manifest_path)
  signature = load_signature(signature_path)
  public_key = load_public_key(public_key_path)
  verified = verify(manifest_path.read_bytes(), signature, public_key)
  logger.info("Verification of %s: %s", manifest_path, "ok" if verified else "FAILED")
  return verified
