"""Publishes packaged mini apps to an IPFS HTTP API and returns their CID."""
from __future__ import annotations

import json
import logging
import threading
import time
from pathlib import Path
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel, Field, field_validator

from .errors import MissingResourceError, PublishCancelledError, StoreRejectionError, TransportError

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://ipfs.infura.io:5001"
DEFAULT_GATEWAY_URL = "https://ipfs.io/ipfs"
ADD_PATH = "/api/v0/add"
UPLOAD_FILENAME = "miniapp.zip"
UPLOAD_CONTENT_TYPE = "application/zip"


class PublisherConfig(BaseModel):
  """Where and how to upload archives.

  Only connection-level failures are retried, up to ``max_attempts`` in total,
  with exponential backoff between ``base_delay_s`` and ``max_delay_s``. A
  response from the store, even an error, ends the attempt loop.
  """

  model_config = {"frozen": True}

  api_url: str = DEFAULT_API_URL
  gateway_url: str = DEFAULT_GATEWAY_URL
  timeout_s: float = Field(default=60.0, gt=0.0)
  max_attempts: int = Field(default=3, ge=1)
  base_delay_s: float = Field(default=0.5, ge=0.0)
  max_delay_s: float = Field(default=8.0, ge=0.0)
  error_body_limit: int = Field(default=4096, ge=0)

  @field_validator("api_url", "gateway_url")
  @classmethod
  def validate_url(cls, value: str) -> str:
    if not value.startswith(("http://", "https://")):
      raise ValueError("URL must start with http:// or https://")
    return value.rstrip("/")

  def compute_delay(self, attempt: int) -> float:
    return min(self.max_delay_s, self.base_delay_s * (2 ** (attempt - 1)))

  def gateway_link(self, cid: str) -> str:
    return f"{self.gateway_url}/{cid}"


def _parse_add_response(text: str) -> Dict[str, Any]:
  # Some nodes stream one JSON object per line; the last one describes the upload.
  try:
    data = json.loads(text)
  except json.JSONDecodeError:
    lines = [line for line in text.splitlines() if line.strip()]
    if not lines:
      raise
    data = json.loads(lines[-1])
  if not isinstance(data, dict):
    raise ValueError("expected a JSON object")
  return data


class ContentPublisher:
  def __init__(self, config: Optional[PublisherConfig] = None, *, transport: Optional[httpx.BaseTransport] = None) -> None:
    self.config = config or PublisherConfig()
    self._transport = transport

  def publish(self, archive_path: Path, cancel_event: Optional[threading.Event] = None) -> str:
    """Upload the archive and return the content identifier the store assigned.

    Setting ``cancel_event`` stops further attempts: it is checked before every
    request and interrupts the wait between retries.
    """
    archive_path = Path(archive_path)
    if not archive_path.is_file():
      raise MissingResourceError("Archive", archive_path)
    payload = archive_path.read_bytes()

    with httpx.Client(base_url=self.config.api_url, timeout=self.config.timeout_s, transport=self._transport) as client:
      attempt = 0
      while True:
        attempt += 1
        if cancel_event is not None and cancel_event.is_set():
          raise PublishCancelledError(f"Publishing {archive_path} was cancelled")
        try:
          response = client.post(ADD_PATH, files={"file": (UPLOAD_FILENAME, payload, UPLOAD_CONTENT_TYPE)})
        except httpx.TransportError as exc:
          if attempt >= self.config.max_attempts:
            raise TransportError(
              f"Cannot reach content store at {self.config.api_url} after {attempt} attempt(s): {exc}"
            ) from exc
          delay = self.config.compute_delay(attempt)
          logger.warning("Content store unreachable (%s), retrying in %.2fs", exc, delay)
          if cancel_event is not None:
            if cancel_event.wait(delay):
              raise PublishCancelledError(f"Publishing {archive_path} was cancelled") from exc
          else:
            time.sleep(delay)
          continue
        cid = self._read_cid(response)
        logger.info("Published %s as %s", archive_path, cid)
        return cid

  def _read_cid(self, response: httpx.Response) -> str:
    body = response.text[: self.config.error_body_limit]
    if not response.is_success:
      raise StoreRejectionError(
        f"Content store rejected upload ({response.status_code}): {body}",
        status_code=response.status_code,
        body=body,
      )
    try:
      data = _parse_add_response(response.text)
    except ValueError as exc:
      raise StoreRejectionError(
        f"Content store returned an unreadable response: {body}", status_code=response.status_code, body=body
      ) from exc
    cid = data.get("Hash")
    if not isinstance(cid, str) or not cid:
      raise StoreRejectionError(
        "Content store response did not include a content hash", status_code=response.status_code, body=body
      )
    return cid
