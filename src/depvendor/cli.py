"""depvendor command line: install the dependencies listed in a manifest into _vendor/src."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from loguru import logger

from depvendor.config import Settings
from depvendor.core.commands import CommandRunner
from depvendor.core.exceptions import (
    DepVendorError,
    InstallError,
    ManifestParseError,
    ManifestReadError,
)
from depvendor.core.installer import DependencyInstaller, ReconcileOutcome
from depvendor.environment import VENDOR_SRC, create_vendor, write_env
from depvendor.manifest import DEFAULT_MANIFEST, load_manifest

DONE_MESSAGE = f"Dependencies written into {VENDOR_SRC.as_posix()}"


def configure_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level)


def run(
    manifest_path: Path,
    work_dir: Path,
    runner: CommandRunner | None = None,
    settings: Settings | None = None,
) -> list[ReconcileOutcome]:
    """Read the manifest, write .env, create the vendor root and install every dependency.

    Stops at the first failing dependency; earlier checkouts stay on disk.
    """
    settings = settings or Settings()
    work_dir = Path(work_dir)
    manifest_path = Path(manifest_path)
    if not manifest_path.is_absolute():
        manifest_path = work_dir / manifest_path

    specs = load_manifest(manifest_path)
    write_env(work_dir)
    vendor_root = create_vendor(work_dir)

    installer = DependencyInstaller(vendor_root, runner=runner, timeout=settings.command_timeout)
    return installer.install_all(specs)


def _describe(error: DepVendorError, manifest_path: Path) -> str:
    if isinstance(error, (ManifestReadError, ManifestParseError)):
        return f"Invalid dependency file {manifest_path}: {error}"
    if isinstance(error, InstallError):
        return f"Failed to install {error.repo}: {error}"
    return str(error)


def main(argv: list[str] | None = None) -> None:
    p = argparse.ArgumentParser(
        prog="depvendor",
        description="Install VCS dependencies pinned in a manifest into _vendor/src",
    )
    p.add_argument(
        "manifest",
        nargs="?",
        type=Path,
        default=Path(DEFAULT_MANIFEST),
        help=f"dependency manifest (default: {DEFAULT_MANIFEST})",
    )
    args = p.parse_args(argv)

    try:
        settings = Settings.from_env()
        configure_logging(settings.log_level)
        run(args.manifest, Path.cwd(), settings=settings)
    except DepVendorError as e:
        logger.error(_describe(e, args.manifest))
        raise SystemExit(1) from None

    print(DONE_MESSAGE)


if __name__ == "__main__":
    main()
