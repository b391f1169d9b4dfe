"""Mini app manifest schema and validation."""
from __future__ import annotations

import json
from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .errors import MissingResourceError, PackagingError, SchemaError

MANIFEST_FILENAME = "manifest.json"


class Permission(str, Enum):
  WALLET = "wallet"
  USERNAME = "username"
  SIGN = "sign"
  CAMERA = "camera"
  LOCATION = "location"
  STORAGE = "storage"
  NOTIFICATIONS = "notifications"
  MICROPHONE = "microphone"
  CONTACTS = "contacts"
  BIOMETRICS = "biometrics"


VALID_PERMISSIONS = frozenset(item.value for item in Permission)


class Manifest(BaseModel):
  name: str
  version: str
  entry: str
  description: str
  developer: str
  permissions: List[Permission] = Field(default_factory=list)
  icons: Optional[Dict[str, Any]] = None
  punchline: Optional[Any] = None
  category: Optional[Any] = None
  screenshots: Optional[Any] = None
  website: Optional[Any] = None
  supportUrl: Optional[Any] = None
  termsUrl: Optional[Any] = None
  privacyUrl: Optional[Any] = None

  model_config = ConfigDict(frozen=True, extra="ignore")


class ValidationResult(BaseModel):
  ok: bool
  errors: Optional[List[str]] = None

  @model_validator(mode="after")
  def _errors_match_ok(self) -> "ValidationResult":
    if self.ok and self.errors:
      raise ValueError("a passing result cannot carry errors")
    if not self.ok and not self.errors:
      raise ValueError("a failing result must carry at least one error")
    return self


Check = Callable[[Mapping], Optional[str]]


def _is_text(value: object) -> bool:
  return isinstance(value, str) and bool(value)


def _required_string(field: str, message: str) -> Check:
  def check(manifest: Mapping) -> Optional[str]:
    if not _is_text(manifest.get(field)):
      return message
    return None

  return check


# Only null counts as absent here; "", 0 and false are present and must have the right type.
def _check_permissions(manifest: Mapping) -> Optional[str]:
  permissions = manifest.get("permissions")
  if permissions is None:
    return None
  if not isinstance(permissions, (list, tuple)):
    return "permissions must be an array"
  invalid = [
    str(item) for item in permissions if not isinstance(item, str) or item not in VALID_PERMISSIONS
  ]
  if invalid:
    return f"invalid permissions: {', '.join(invalid)}"
  return None


def _check_icons(manifest: Mapping) -> Optional[str]:
  icons = manifest.get("icons")
  if icons is not None and not isinstance(icons, Mapping):
    return "icons must be an object"
  return None


# Order is part of the contract: errors are reported in this sequence.
CHECKS: List[Check] = [
  _required_string("name", "name is required and must be a string"),
  _required_string("version", "version is required and must be a string"),
  _required_string("entry", "entry is required and must be a string"),
  _required_string("description", "description is required"),
  _required_string("developer", "developer is required"),
  _check_permissions,
  _check_icons,
]


def validate_manifest(manifest: Mapping) -> ValidationResult:
  """Run every schema check and collect all failures.

  Never raises for schema problems; the caller gets the full list so an author
  can fix everything in one pass.
  """
  if not isinstance(manifest, Mapping):
    return ValidationResult(ok=False, errors=["manifest must be a JSON object"])
  errors = [message for message in (check(manifest) for check in CHECKS) if message]
  if errors:
    return ValidationResult(ok=False, errors=errors)
  return ValidationResult(ok=True)


def parse_manifest(data: Mapping) -> Manifest:
  result = validate_manifest(data)
  if not result.ok:
    raise SchemaError(result.errors or [])
  # JSON null is treated as an omitted key so optional fields take their defaults.
  return Manifest.model_validate({key: value for key, value in data.items() if value is not None})


def read_manifest(path: Path) -> Dict[str, Any]:
  """Load a manifest file as a plain mapping without validating its schema."""
  if not path.is_file():
    raise MissingResourceError("Manifest", path)
  try:
    data = json.loads(path.read_text(encoding="utf-8"))
  except (UnicodeDecodeError, json.JSONDecodeError) as exc:
    raise PackagingError(f"{path} is not valid UTF-8 JSON: {exc}") from exc
  if not isinstance(data, dict):
    raise PackagingError(f"{path} must contain a JSON object")
  return data


def load_manifest(path: Path) -> Manifest:
  return parse_manifest(read_manifest(path))


def missing_assets(manifest: Mapping, app_dir: Path) -> List[str]:
  """Relative paths referenced by the manifest that are absent from app_dir.

  Informational only; a missing icon never fails validation.
  """
  referenced: List[str] = []
  entry = manifest.get("entry")
  if _is_text(entry):
    referenced.append(entry)
  icons = manifest.get("icons")
  if isinstance(icons, Mapping):
    referenced.extend(value for value in icons.values() if _is_text(value))
  return [item for item in referenced if not (app_dir / item).is_file()]
