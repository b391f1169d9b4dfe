from __future__ import annotations

from fastapi import APIRouter, Depends

from ..app_directory import AppDirectory
from ..deps import get_app_directory
from ..models import ManifestReportModel

router = APIRouter(prefix="/_mcj", tags=["manifest"])


@router.get("/manifest", response_model=ManifestReportModel)
def get_manifest(directory: AppDirectory = Depends(get_app_directory)):
  directory.refresh()
  return ManifestReportModel(
    manifest=directory.manifest,
    validation=directory.validation(),
    missing_assets=directory.missing_assets(),
  )
