"""Ed25519 key pairs and the hex text format they are stored in."""
from __future__ import annotations

import binascii
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

from nacl.signing import SigningKey

from .errors import MalformedEncodingError, MissingResourceError

logger = logging.getLogger(__name__)

PUBLIC_KEY_SIZE = 32
# Seed followed by the public key, the layout NaCl-compatible tools use for secret keys.
PRIVATE_KEY_SIZE = 64
SIGNATURE_SIZE = 64

PUBLIC_KEY_FILENAME = "public.key"
PRIVATE_KEY_FILENAME = "private.key"


@dataclass(frozen=True)
class KeyPair:
  public_key: bytes
  private_key: bytes


def generate_key_pair() -> KeyPair:
  signing_key = SigningKey.generate()
  public_key = signing_key.verify_key.encode()
  return KeyPair(public_key=public_key, private_key=signing_key.encode() + public_key)


def encode_hex(value: bytes) -> str:
  return value.hex()


def decode_hex(text: str, length: int, label: str = "value") -> bytes:
  """Decode hex text into exactly ``length`` bytes.

  Surrounding whitespace is ignored. Anything that is not hex, or decodes to a
  different size, is rejected here rather than by the signature primitive.
  """
  data = text.strip()
  try:
    value = binascii.unhexlify(data)
  except (binascii.Error, ValueError) as exc:
    raise MalformedEncodingError(f"{label} must be hex encoded") from exc
  if len(value) != length:
    raise MalformedEncodingError(f"{label} must be {length} bytes ({length * 2} hex characters), got {len(value)}")
  return value


def read_hex_file(path: Path, length: int, label: str) -> bytes:
  path = Path(path)
  if not path.is_file():
    raise MissingResourceError(label, path)
  try:
    text = path.read_text(encoding="utf-8")
  except UnicodeDecodeError as exc:
    raise MalformedEncodingError(f"{label} must be hex encoded") from exc
  return decode_hex(text, length, label)


def load_public_key(path: Path) -> bytes:
  return read_hex_file(path, PUBLIC_KEY_SIZE, "Public key")


def load_private_key(path: Path) -> bytes:
  return read_hex_file(path, PRIVATE_KEY_SIZE, "Private key")


def load_signature(path: Path) -> bytes:
  return read_hex_file(path, SIGNATURE_SIZE, "Signature")


def write_key_pair(pair: KeyPair, directory: Path) -> Tuple[Path, Path]:
  directory = Path(directory)
  directory.mkdir(parents=True, exist_ok=True)
  public_path = directory / PUBLIC_KEY_FILENAME
  private_path = directory / PRIVATE_KEY_FILENAME
  public_path.write_text(encode_hex(pair.public_key), encoding="utf-8")
  private_path.write_text(encode_hex(pair.private_key), encoding="utf-8")
  os.chmod(private_path, 0o600)
  logger.info("Wrote key pair to %s", directory)
  return public_path, private_path
