"""depvendor exceptions.

実行を中断させる例外クラスを定義します。CLIは DepVendorError を捕捉して
1行のエラーログを出力し、終了コード1で終了します。
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path


class DepVendorError(Exception):
    """depvendor が送出する例外の基底クラス."""


class ConfigError(DepVendorError):
    """環境変数による設定値が不正."""


class ManifestReadError(DepVendorError):
    """マニフェストファイルを読み込めない."""

    def __init__(self, manifest_path: Path, cause: OSError) -> None:
        self.manifest_path = manifest_path
        super().__init__(f"Cannot read manifest {manifest_path}: {cause}")


class ManifestParseError(DepVendorError):
    """マニフェストの構文またはトップレベルの形が不正."""


class ManifestValidationError(ManifestParseError):
    """マニフェストのエントリが不正.

    Attributes:
        index: 問題のあるエントリの位置（0始まり）。マニフェスト外で検出した場合は None
    """

    def __init__(self, index: int | None, message: str) -> None:
        self.index = index
        super().__init__(message if index is None else f"Entry #{index}: {message}")


class UnsupportedVcsKindError(ManifestValidationError):
    """未対応のVCS種別."""

    def __init__(self, index: int | None, vcs: object, supported: Sequence[str]) -> None:
        self.vcs = vcs
        super().__init__(index, f"unsupported vcs {vcs!r} (supported: {', '.join(supported)})")


class VendorCreateError(DepVendorError):
    """vendorディレクトリを作成できない."""


class EnvFileError(DepVendorError):
    """.env ファイルを書き込めない."""


class CommandError(DepVendorError):
    """外部コマンドが失敗またはタイムアウトした.

    Attributes:
        command: 実行したコマンドライン
        returncode: 終了コード（タイムアウト時は None）
        output: 標準出力と標準エラー出力
    """

    def __init__(self, command: Sequence[str], returncode: int | None, output: str = "") -> None:
        self.command = tuple(command)
        self.returncode = returncode
        self.output = output.strip()
        line = " ".join(self.command)
        if returncode is None:
            message = f"`{line}` timed out"
        else:
            message = f"`{line}` exited with status {returncode}"
        if self.output:
            message = f"{message}: {self.output.splitlines()[-1]}"
        super().__init__(message)


class InstallError(DepVendorError):
    """依存関係のインストールに失敗した.

    Attributes:
        repo: 依存関係のリポジトリ
        revision: 目標リビジョン
    """

    def __init__(self, repo: str, revision: str, message: str) -> None:
        self.repo = repo
        self.revision = revision
        super().__init__(message)


class DirectoryError(InstallError):
    """チェックアウト先ディレクトリを用意できない."""


class BootstrapError(InstallError):
    """初回クローンに失敗した."""


class RevisionReadError(InstallError):
    """現在のリビジョンを読み取れず、再ブートストラップも失敗した."""


class FetchError(InstallError):
    """リモートからの fetch に失敗した."""


class ResetError(InstallError):
    """fetch 後も目標リビジョンへ reset できない."""
