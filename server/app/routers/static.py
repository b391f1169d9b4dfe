from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse

from ..app_directory import AppDirectory
from ..deps import get_app_directory

router = APIRouter(tags=["static"])


@router.get("/{path:path}")
def serve_file(path: str, directory: AppDirectory = Depends(get_app_directory)):
  target = directory.resolve(path) if path else None
  if target is None:
    # Client-side routes fall back to the app's entry page.
    target = directory.entry_file()
  if target is None:
    raise HTTPException(status_code=404, detail=f"{path or 'entry page'} not found")
  return FileResponse(target, headers={"Cache-Control": "no-store"})
