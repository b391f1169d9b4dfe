"""Error types raised by the packaging, signing and publishing tools."""
from __future__ import annotations

from pathlib import Path
from typing import List, Optional


class MiniAppError(RuntimeError):
  pass


class MissingResourceError(MiniAppError):
  def __init__(self, what: str, path: Path) -> None:
    super().__init__(f"{what} not found at {path}")
    self.path = Path(path)


class MalformedEncodingError(MiniAppError):
  pass


class SchemaError(MiniAppError):
  def __init__(self, errors: List[str]) -> None:
    super().__init__("invalid manifest: " + "; ".join(errors))
    self.errors = list(errors)


class PackagingError(MiniAppError):
  pass


class SigningError(MiniAppError):
  pass


class PublishError(MiniAppError):
  pass


class TransportError(PublishError):
  """The content store could not be reached. Safe to retry."""


class StoreRejectionError(PublishError):
  """The content store answered but refused the upload. Not retryable."""

  def __init__(self, message: str, status_code: Optional[int] = None, body: str = "") -> None:
    super().__init__(message)
    self.status_code = status_code
    self.body = body


class PublishCancelledError(PublishError):
  pass
