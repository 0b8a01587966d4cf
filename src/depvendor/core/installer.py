"""依存関係をvendorディレクトリへ固定リビジョンで展開する.

gitの場合は既存チェックアウトを可能な限り再利用する:

- チェックアウトが無ければ clone（bootstrap）
- HEAD が目標リビジョンと一致すればネットワークアクセスなしで終了
- 一致しなければローカル履歴で reset、失敗したら fetch してから再度 reset

hgの場合は常に目標リビジョンで clone し直す。
"""

from __future__ import annotations

import functools
import shutil
from collections.abc import Iterable
from enum import Enum
from pathlib import Path

from loguru import logger

from .commands import CommandRunner, run_command
from .dependency import DependencySpec, VcsKind
from .exceptions import (
    BootstrapError,
    CommandError,
    DirectoryError,
    FetchError,
    ResetError,
    RevisionReadError,
    UnsupportedVcsKindError,
)


class ReconcileOutcome(str, Enum):
    """reconcile の結果."""

    UP_TO_DATE = "up_to_date"
    CLONED = "cloned"
    RESET = "reset"
    FETCHED = "fetched"


class DependencyInstaller:
    """vendorルート配下のチェックアウトをマニフェストの状態に合わせる.

    外部コマンドは常に cwd を明示して実行し、プロセスのカレントディレクトリは変更しない。
    """

    def __init__(
        self,
        vendor_root: Path,
        runner: CommandRunner | None = None,
        timeout: float | None = None,
    ) -> None:
        """インストーラを初期化.

        Args:
            vendor_root: vendorルート（存在している必要がある）
            runner: コマンド実行関数（テストで差し替える）
            timeout: runner 未指定時の1コマンドあたりのタイムアウト秒数
        """
        self.vendor_root = Path(vendor_root).resolve()
        self._run: CommandRunner = runner or functools.partial(run_command, timeout=timeout)

    def install_all(self, specs: Iterable[DependencySpec]) -> list[ReconcileOutcome]:
        """マニフェスト順に全依存関係を reconcile する.

        最初の失敗で例外を送出し、残りの依存関係は処理しない。
        """
        return [self.reconcile(spec) for spec in specs]

    def reconcile(self, spec: DependencySpec) -> ReconcileOutcome:
        """1つの依存関係をチェックアウトして目標リビジョンに合わせる.

        Args:
            spec: 依存関係

        Returns:
            実行した処理の種類

        Raises:
            InstallError: ディレクトリ準備、clone、リビジョン取得、fetch、reset のいずれかの失敗
            UnsupportedVcsKindError: 未対応のVCS種別
        """
        logger.info(f"Installing {spec.repo}")
        target = self._prepare_dir(spec)

        if spec.vcs is VcsKind.GIT:
            return self._reconcile_git(spec, target)
        if spec.vcs is VcsKind.MERCURIAL:
            return self._reconcile_hg(spec, target)
        raise UnsupportedVcsKindError(None, spec.vcs, [k.value for k in VcsKind])

    def _prepare_dir(self, spec: DependencySpec) -> Path:
        target = spec.target_dir(self.vendor_root)
        if not target.resolve().is_relative_to(self.vendor_root):
            raise DirectoryError(
                spec.repo,
                spec.revision,
                f"{spec.path} resolves outside the vendor root {self.vendor_root}",
            )
        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DirectoryError(spec.repo, spec.revision, f"Failed to mkdir {spec.path}: {e}") from e
        return target

    def _clear_dir(self, spec: DependencySpec, target: Path) -> None:
        """clone 先を空にする（clone は空でないディレクトリへは行えない）."""
        try:
            children = list(target.iterdir())
            if children:
                logger.warning(f"Removing existing contents before clone: {target}")
            for child in children:
                if child.is_dir() and not child.is_symlink():
                    shutil.rmtree(child)
                else:
                    child.unlink()
        except OSError as e:
            raise DirectoryError(spec.repo, spec.revision, f"Failed to clear {spec.path}: {e}") from e

    def _bootstrap(self, spec: DependencySpec, target: Path) -> None:
        logger.info(f"Bootstrapping {target}")
        self._clear_dir(spec, target)
        self._run(["git", "clone", "--quiet", spec.repo, str(target)], self.vendor_root)

    def _git(self, target: Path, *args: str) -> str:
        # git-dir と work-tree は常に target 配下に固定し、親ディレクトリのリポジトリは探索させない
        return self._run(
            ["git", f"--git-dir={target / '.git'}", f"--work-tree={target}", *args],
            target,
        )

    def _git_head(self, target: Path) -> str:
        return self._git(target, "rev-parse", "HEAD")

    def _git_reset(self, spec: DependencySpec, target: Path) -> None:
        self._git(target, "reset", "--quiet", "--hard", spec.revision)

    def _reconcile_git(self, spec: DependencySpec, target: Path) -> ReconcileOutcome:
        cloned = False
        if not (target / ".git").exists():
            try:
                self._bootstrap(spec, target)
            except CommandError as e:
                raise BootstrapError(spec.repo, spec.revision, f"Failed to clone git {spec.path}: {e}") from e
            cloned = True

        try:
            current = self._git_head(target)
        except CommandError as e:
            # 壊れたチェックアウトや無関係なディレクトリは clone し直す
            logger.warning(f"Cannot read revision of {target} ({e}), bootstrapping again")
            try:
                self._bootstrap(spec, target)
                current = self._git_head(target)
            except CommandError as retry_error:
                raise RevisionReadError(
                    spec.repo,
                    spec.revision,
                    f"Failed to read revision of {spec.path}: {retry_error}",
                ) from retry_error
            cloned = True

        if current == spec.revision:
            logger.info(f"{spec.repo} already installed")
            return ReconcileOutcome.CLONED if cloned else ReconcileOutcome.UP_TO_DATE

        try:
            self._git_reset(spec, target)
        except CommandError as e:
            logger.info(f"Revision {spec.revision} not available locally ({e}), fetching {spec.repo}")
        else:
            logger.info(f"Reset {spec.path} to {spec.revision}")
            return ReconcileOutcome.RESET

        try:
            self._git(target, "fetch", "--quiet", "--tags", "origin")
        except CommandError as e:
            raise FetchError(spec.repo, spec.revision, f"Failed to fetch latest revisions: {e}") from e
        try:
            self._git_reset(spec, target)
        except CommandError as e:
            raise ResetError(spec.repo, spec.revision, f"Failed to change to git rev {spec.revision}: {e}") from e

        logger.info(f"Fetched and reset {spec.path} to {spec.revision}")
        return ReconcileOutcome.FETCHED

    def _reconcile_hg(self, spec: DependencySpec, target: Path) -> ReconcileOutcome:
        self._clear_dir(spec, target)
        try:
            self._run(
                ["hg", "clone", "--quiet", "--updaterev", spec.revision, spec.repo, str(target)],
                self.vendor_root,
            )
        except CommandError as e:
            raise BootstrapError(spec.repo, spec.revision, f"Failed to clone hg {spec.path}: {e}") from e
        return ReconcileOutcome.CLONED


def reconcile(
    spec: DependencySpec,
    vendor_root: Path,
    runner: CommandRunner | None = None,
) -> ReconcileOutcome:
    """DependencyInstaller を使わずに1件だけ reconcile する."""
    return DependencyInstaller(vendor_root, runner=runner).reconcile(spec)
