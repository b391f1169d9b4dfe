from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from .publish_app import DEFAULT_API_URL, DEFAULT_GATEWAY_URL, PublisherConfig


@dataclass
class Settings:
  ipfs_api: str = DEFAULT_API_URL
  gateway_url: str = DEFAULT_GATEWAY_URL
  publish_timeout: float = 60.0
  publish_attempts: int = 3

  @classmethod
  def from_env(cls) -> "Settings":
    api = os.getenv("MCJ_IPFS_API") or os.getenv("IPFS_API")
    gateway = os.getenv("MCJ_GATEWAY_URL")
    timeout = os.getenv("MCJ_PUBLISH_TIMEOUT")
    attempts = os.getenv("MCJ_PUBLISH_ATTEMPTS")
    return cls(
      ipfs_api=api or DEFAULT_API_URL,
      gateway_url=gateway or DEFAULT_GATEWAY_URL,
      publish_timeout=float(timeout) if timeout else 60.0,
      publish_attempts=int(attempts) if attempts else 3,
    )

  def publisher_config(self) -> PublisherConfig:
    return PublisherConfig(
      api_url=self.ipfs_api,
      gateway_url=self.gateway_url,
      timeout_s=self.publish_timeout,
      max_attempts=self.publish_attempts,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
  return Settings.from_env()
