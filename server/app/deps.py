from __future__ import annotations

from fastapi import Request

from .app_directory import AppDirectory
from .settings import Settings


def get_app_directory(request: Request) -> AppDirectory:
  return request.app.state.app_directory


def get_app_settings(request: Request) -> Settings:
  return request.app.state.settings
