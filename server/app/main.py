from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from .app_directory import AppDirectory
from .routers import manifest, static, verify
from .settings import Settings, get_settings


def create_app(settings: Optional[Settings] = None) -> FastAPI:
  settings = settings or get_settings()

  @asynccontextmanager
  async def lifespan(app: FastAPI):
    app.state.app_directory.refresh()
    yield

  app = FastAPI(title="Mini App Dev Server", version="0.1.0", lifespan=lifespan)
  app.state.settings = settings
  app.state.app_directory = AppDirectory(settings.app_dir)

  @app.get("/healthz")
  def healthcheck():
    directory: AppDirectory = app.state.app_directory
    directory.refresh()
    data = directory.manifest or {}
    return {"status": "ok", "app": data.get("name"), "version": data.get("version")}

  app.include_router(manifest.router)
  app.include_router(verify.router)
  # Catch-all; must be registered last.
  app.include_router(static.router)
  return app


app = create_app()
