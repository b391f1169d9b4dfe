"""Command line entry point: mcj init|build|sign|verify|publish|release|dev|test."""
from __future__ import annotations

import argparse
import logging
import socket
import sys
from pathlib import Path
from typing import List, Optional

from .build_app import build_app
from .errors import MiniAppError, SchemaError
from .keys import generate_key_pair, write_key_pair
from .manifest import MANIFEST_FILENAME, missing_assets, read_manifest, validate_manifest
from .pipeline import release_app
from .publish_app import ContentPublisher
from .scaffold import DEFAULT_APP_NAME, init_app
from .settings import get_settings
from .sign_app import DEFAULT_PRIVATE_KEY_PATH, DEFAULT_SIGNATURE_PATH, sign_manifest
from .verify_app import DEFAULT_PUBLIC_KEY_PATH, verify_manifest

DEFAULT_ARCHIVE = "dist.zip"


def _local_ip() -> str:
  try:
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as probe:
      probe.connect(("10.255.255.255", 1))
      return probe.getsockname()[0]
  except OSError:
    return "localhost"


def cmd_init(args: argparse.Namespace) -> int:
  target = init_app(args.name, Path.cwd())
  print(f"Created {target}")
  print(f"\nNext steps:\n  cd {args.name}\n  # Edit manifest.json and index.html\n  mcj build")
  return 0


def cmd_build(args: argparse.Namespace) -> int:
  result = build_app(Path(args.dir), Path(args.output), strict=not args.legacy)
  print(f"Build complete: {result.path} ({len(result.entries)} files, sha256 {result.sha256[:16]}…)")
  return 0


def cmd_gen_keys(args: argparse.Namespace) -> int:
  public_path, private_path = write_key_pair(generate_key_pair(), Path(args.out_dir))
  print(f"keys written: {public_path}, {private_path}")
  return 0


def cmd_sign(args: argparse.Namespace) -> int:
  signature_path = sign_manifest(Path(args.manifest), Path(args.sig_out), Path(args.private_key))
  print(f"signed -> {signature_path}")
  return 0


def cmd_verify(args: argparse.Namespace) -> int:
  ok = verify_manifest(Path(args.manifest), Path(args.signature), Path(args.public_key))
  print(f"verified? {str(ok).lower()}")
  return 0 if ok else 1


def make_publisher() -> ContentPublisher:
  return ContentPublisher(get_settings().publisher_config())


def cmd_publish(args: argparse.Namespace) -> int:
  publisher = make_publisher()
  config = publisher.config
  print(f"Publishing to IPFS via {config.api_url}")
  cid = publisher.publish(Path(args.file))
  print(f"CID: {cid}")
  print(f"Gateway URL: {config.gateway_link(cid)}")
  return 0


def cmd_release(args: argparse.Namespace) -> int:
  publisher = make_publisher()
  result = release_app(
    Path(args.dir),
    Path(args.output),
    Path(args.private_key),
    Path(args.public_key),
    publisher,
  )
  print(f"Archive: {result.archive.path}")
  print(f"Signature: {result.signature_path}")
  print(f"CID: {result.cid}")
  print(f"Gateway URL: {result.gateway_url}")
  return 0


def cmd_dev(args: argparse.Namespace) -> int:
  import uvicorn

  from server.app.main import create_app
  from server.app.settings import Settings as DevSettings

  app_dir = Path(args.dir).resolve()
  network_url = f"http://{_local_ip()}:{args.port}"
  print("Dev server running!")
  print(f"  Local:   http://localhost:{args.port}")
  print(f"  Network: {network_url}")
  if args.qr:
    import qrcode

    qr = qrcode.QRCode(border=1)
    qr.add_data(network_url)
    qr.print_ascii(invert=True)
  print("Press Ctrl+C to stop")
  app = create_app(DevSettings(app_dir=app_dir, port=args.port))
  uvicorn.run(app, host="0.0.0.0", port=args.port, log_level="warning")
  return 0


def cmd_test(args: argparse.Namespace) -> int:
  manifest_path = Path(args.manifest)
  manifest = read_manifest(manifest_path)
  result = validate_manifest(manifest)
  for item in missing_assets(manifest, manifest_path.parent):
    print(f"warning: {item} is referenced by the manifest but does not exist", file=sys.stderr)
  if not result.ok:
    print("Manifest has errors:")
    for error in result.errors or []:
      print(f"  - {error}")
    return 1
  print("Manifest is valid")
  return 0


def build_parser() -> argparse.ArgumentParser:
  parser = argparse.ArgumentParser(prog="mcj", description="Mini app packaging, signing and publishing")
  parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
  commands = parser.add_subparsers(dest="command", required=True)

  init = commands.add_parser("init", help="create a new mini app")
  init.add_argument("name", nargs="?", default=DEFAULT_APP_NAME)
  init.set_defaults(handler=cmd_init)

  build = commands.add_parser("build", help="package an app directory into a zip")
  build.add_argument("dir", nargs="?", default=".")
  build.add_argument("output", nargs="?", default=DEFAULT_ARCHIVE)
  build.add_argument("--legacy", action="store_true", help="only require name and entry in the manifest")
  build.set_defaults(handler=cmd_build)

  sign = commands.add_parser("sign", help="key generation and manifest signing")
  sign_commands = sign.add_subparsers(dest="sign_command", required=True)
  gen_keys = sign_commands.add_parser("gen-keys", help="write public.key and private.key")
  gen_keys.add_argument("--out-dir", default=".")
  gen_keys.set_defaults(handler=cmd_gen_keys)
  sign_manifest_cmd = sign_commands.add_parser("sign", help="write a detached manifest signature")
  sign_manifest_cmd.add_argument("manifest")
  sign_manifest_cmd.add_argument("sig_out", nargs="?", default=str(DEFAULT_SIGNATURE_PATH))
  sign_manifest_cmd.add_argument("private_key", nargs="?", default=str(DEFAULT_PRIVATE_KEY_PATH))
  sign_manifest_cmd.set_defaults(handler=cmd_sign)

  verify = commands.add_parser("verify", help="check a manifest signature")
  verify.add_argument("manifest")
  verify.add_argument("signature", nargs="?", default=str(DEFAULT_SIGNATURE_PATH))
  verify.add_argument("public_key", nargs="?", default=str(DEFAULT_PUBLIC_KEY_PATH))
  verify.set_defaults(handler=cmd_verify)

  publish = commands.add_parser("publish", help="upload an archive to IPFS")
  publish.add_argument("file")
  publish.set_defaults(handler=cmd_publish)

  release = commands.add_parser("release", help="build, sign, verify and publish")
  release.add_argument("dir", nargs="?", default=".")
  release.add_argument("output", nargs="?", default=DEFAULT_ARCHIVE)
  release.add_argument("--private-key", default=str(DEFAULT_PRIVATE_KEY_PATH))
  release.add_argument("--public-key", default=str(DEFAULT_PUBLIC_KEY_PATH))
  release.set_defaults(handler=cmd_release)

  dev = commands.add_parser("dev", help="serve an app directory locally")
  dev.add_argument("dir", nargs="?", default=".")
  dev.add_argument("--port", type=int, default=3000)
  dev.add_argument("--qr", action="store_true", help="print a QR code of the network URL")
  dev.set_defaults(handler=cmd_dev)

  test = commands.add_parser("test", help="validate a manifest")
  test.add_argument("manifest", nargs="?", default=MANIFEST_FILENAME)
  test.set_defaults(handler=cmd_test)
  return parser


def main(argv: Optional[List[str]] = None) -> int:
  args = build_parser().parse_args(argv)
  logging.basicConfig(
    level=logging.DEBUG if args.verbose else logging.WARNING,
    format="%(levelname)s %(name)s: %(message)s",
  )
  try:
    return args.handler(args)
  except SchemaError as exc:
    print("Manifest has errors:", file=sys.stderr)
    for error in exc.errors:
      print(f"  - {error}", file=sys.stderr)
    return 1
  except (MiniAppError, OSError) as exc:
    print(f"error: {exc}", file=sys.stderr)
    return 1


if __name__ == "__main__":
  sys.exit(main())
