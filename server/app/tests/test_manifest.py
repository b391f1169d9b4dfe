from __future__ import annotations

import pytest

from packager.errors import MissingResourceError, PackagingError, SchemaError
from packager.manifest import Permission, load_manifest, missing_assets, parse_manifest, read_manifest, validate_manifest

REQUIRED_ERRORS = [
  "name is required and must be a string",
  "version is required and must be a string",
  "entry is required and must be a string",
  "description is required",
  "developer is required",
]


def test_minimal_manifest_is_valid(manifest_data):
  result = validate_manifest(manifest_data)
  assert result.ok
  assert result.errors is None


def test_empty_manifest_reports_every_required_field_in_order():
  result = validate_manifest({})
  assert not result.ok
  assert result.errors == REQUIRED_ERRORS


@pytest.mark.parametrize("field,index", [("name", 0), ("version", 1), ("entry", 2), ("description", 3), ("developer", 4)])
def test_single_missing_field(manifest_data, field, index):
  manifest = {key: value for key, value in manifest_data.items() if key != field}
  result = validate_manifest(manifest)
  assert result.errors == [REQUIRED_ERRORS[index]]


def test_wrong_types_and_empty_strings_are_rejected(manifest_data):
  manifest = dict(manifest_data, name="", version=1, developer=["x"])
  result = validate_manifest(manifest)
  assert result.errors == [REQUIRED_ERRORS[0], REQUIRED_ERRORS[1], REQUIRED_ERRORS[4]]


def test_invalid_permissions_are_combined_in_input_order(manifest_data):
  manifest = dict(manifest_data, permissions=["wallet", "telepathy", "camera", "root", "telepathy"])
  result = validate_manifest(manifest)
  assert result.errors == ["invalid permissions: telepathy, root, telepathy"]


def test_all_known_permissions_pass(manifest_data):
  manifest = dict(manifest_data, permissions=[item.value for item in Permission])
  assert validate_manifest(manifest).ok


def test_permissions_must_be_a_sequence(manifest_data):
  result = validate_manifest(dict(manifest_data, permissions="wallet"))
  assert result.errors == ["permissions must be an array"]


def test_icons_must_be_a_mapping(manifest_data):
  assert validate_manifest(dict(manifest_data, icons={"64": "icon.png"})).ok
  result = validate_manifest(dict(manifest_data, icons=["icon.png"]))
  assert result.errors == ["icons must be an object"]


def test_checks_do_not_short_circuit():
  result = validate_manifest({"name": "x", "permissions": ["nope"], "icons": "icon.png"})
  assert result.errors == REQUIRED_ERRORS[1:] + ["invalid permissions: nope", "icons must be an object"]


def test_parse_manifest_returns_typed_record(manifest_data):
  manifest = parse_manifest(dict(manifest_data, permissions=["wallet"], website="https://example.test"))
  assert manifest.name == "Test App"
  assert manifest.permissions == [Permission.WALLET]
  assert manifest.icons is None
  assert manifest.website == "https://example.test"


def test_parse_manifest_raises_with_all_errors():
  with pytest.raises(SchemaError) as excinfo:
    parse_manifest({"name": "x"})
  assert excinfo.value.errors == REQUIRED_ERRORS[1:]


def test_parse_manifest_treats_null_optionals_as_absent(manifest_data):
  manifest = parse_manifest(dict(manifest_data, permissions=None, icons=None, website=None))
  assert manifest.permissions == []
  assert manifest.icons is None


def test_falsy_permissions_and_icons_are_still_checked(manifest_data):
  assert validate_manifest(dict(manifest_data, permissions="")).errors == ["permissions must be an array"]
  assert validate_manifest(dict(manifest_data, icons=False)).errors == ["icons must be an object"]
  assert validate_manifest(dict(manifest_data, permissions=[])).ok


def test_read_manifest_failures(tmp_path):
  with pytest.raises(MissingResourceError):
    read_manifest(tmp_path / "manifest.json")
  path = tmp_path / "manifest.json"
  path.write_text("{not json", encoding="utf-8")
  with pytest.raises(PackagingError):
    read_manifest(path)
  path.write_text("[1, 2]", encoding="utf-8")
  with pytest.raises(PackagingError):
    read_manifest(path)


def test_load_manifest_from_app_dir(app_dir):
  assert load_manifest(app_dir / "manifest.json").entry == "index.html"


def test_missing_assets_is_advisory(app_dir, manifest_data):
  manifest = dict(manifest_data, icons={"64": "icons/64.png"})
  assert missing_assets(manifest, app_dir) == ["icons/64.png"]
  assert validate_manifest(manifest).ok
