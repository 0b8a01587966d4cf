"""depvendor: マニフェストに従って依存リポジトリを _vendor/src に固定リビジョンで展開する."""

from depvendor.cli import run
from depvendor.core import DependencyInstaller, DependencySpec, ReconcileOutcome, VcsKind, reconcile
from depvendor.environment import create_vendor, write_env
from depvendor.manifest import load_manifest, parse_manifest

__version__ = "0.1.0"

__all__ = [
    # core
    "DependencySpec",
    "VcsKind",
    "DependencyInstaller",
    "ReconcileOutcome",
    "reconcile",
    # manifest
    "load_manifest",
    "parse_manifest",
    # environment
    "create_vendor",
    "write_env",
    # cli
    "run",
]
