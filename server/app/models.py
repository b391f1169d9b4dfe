from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from packager.manifest import ValidationResult


class ManifestReportModel(BaseModel):
  manifest: Optional[Dict[str, Any]]
  validation: ValidationResult
  missing_assets: List[str] = Field(default_factory=list)


class VerifyRequestModel(BaseModel):
  signature: str
  public_key: Optional[str] = None

  @field_validator("signature")
  @classmethod
  def validate_signature(cls, value: str) -> str:  # noqa: D401
    """Reject empty signatures before any decoding."""
    if not value.strip():
      raise ValueError("signature must not be empty")
    return value


class VerifyResponseModel(BaseModel):
  verified: bool
