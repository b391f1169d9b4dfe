from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from packager.errors import MalformedEncodingError, MissingResourceError
from packager.keys import PUBLIC_KEY_SIZE, SIGNATURE_SIZE, decode_hex, load_public_key
from packager.verify_app import verify

from ..app_directory import AppDirectory
from ..deps import get_app_directory, get_app_settings
from ..models import VerifyRequestModel, VerifyResponseModel
from ..settings import Settings

router = APIRouter(prefix="/_mcj", tags=["verify"])


@router.post("/verify", response_model=VerifyResponseModel)
def verify_signature(
  body: VerifyRequestModel,
  directory: AppDirectory = Depends(get_app_directory),
  settings: Settings = Depends(get_app_settings),
):
  try:
    signature = decode_hex(body.signature, SIGNATURE_SIZE, "Signature")
    if body.public_key:
      public_key = decode_hex(body.public_key, PUBLIC_KEY_SIZE, "Public key")
    elif settings.public_key_path is not None:
      public_key = load_public_key(settings.public_key_path)
    else:
      raise HTTPException(status_code=404, detail="No public key supplied or configured")
    message = directory.manifest_bytes()
  except MalformedEncodingError as exc:
    raise HTTPException(status_code=422, detail=str(exc)) from exc
  except MissingResourceError as exc:
    raise HTTPException(status_code=404, detail=str(exc)) from exc
  return VerifyResponseModel(verified=verify(message, signature, public_key))
