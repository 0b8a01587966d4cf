"""依存関係レコードのデータモデル."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePosixPath, PureWindowsPath
from typing import Any

from .exceptions import ManifestValidationError, UnsupportedVcsKindError

REQUIRED_KEYS = ("vcs", "repo", "rev", "path")


class VcsKind(str, Enum):
    """対応しているバージョン管理システム."""

    GIT = "git"
    MERCURIAL = "hg"

    @classmethod
    def parse(cls, value: str, index: int = 0) -> VcsKind:
        """マニフェストの vcs 値を VcsKind に変換.

        "mercurial" は "hg" の別名として受け付ける。

        Raises:
            UnsupportedVcsKindError: 未対応の値
        """
        aliases = {"mercurial": cls.MERCURIAL}
        normalized = value.strip().lower()
        if normalized in aliases:
            return aliases[normalized]
        try:
            return cls(normalized)
        except ValueError:
            raise UnsupportedVcsKindError(index, value, [k.value for k in cls]) from None


def _check_relative_path(raw: str, index: int) -> str:
    """path がvendorルート配下に収まる相対パスであることを検証し、正規化した形を返す."""
    if PurePosixPath(raw).is_absolute() or PureWindowsPath(raw).is_absolute() or PureWindowsPath(raw).drive:
        raise ManifestValidationError(index, f"path must be relative, got {raw!r}")

    parts: list[str] = []
    for part in PurePosixPath(raw.replace("\\", "/")).parts:
        if part == ".":
            continue
        if part == "..":
            if not parts:
                raise ManifestValidationError(index, f"path escapes the vendor root: {raw!r}")
            parts.pop()
            continue
        parts.append(part)

    if not parts:
        raise ManifestValidationError(index, f"path must name a directory below the vendor root, got {raw!r}")
    return "/".join(parts)


@dataclass(frozen=True)
class DependencySpec:
    """マニフェスト1エントリ分の依存関係.

    Attributes:
        vcs: VCS種別
        repo: 取得元リポジトリ
        revision: 固定するリビジョン（gitはコミットハッシュ、hgはリビジョンID）
        path: vendorルートからの相対パス
    """

    vcs: VcsKind
    repo: str
    revision: str
    path: str

    @classmethod
    def from_record(cls, record: Any, index: int = 0) -> DependencySpec:
        """マニフェストのレコード（dict）から DependencySpec を生成.

        未知のキーは無視する。

        Args:
            record: マニフェストの1要素
            index: マニフェスト内の位置（エラーメッセージ用）

        Raises:
            ManifestValidationError: 必須キーの欠落、型の不一致、不正なパス
            UnsupportedVcsKindError: 未対応のVCS種別
        """
        if not isinstance(record, dict):
            raise ManifestValidationError(index, f"expected an object, got {type(record).__name__}")

        values: dict[str, str] = {}
        for key in REQUIRED_KEYS:
            value = record.get(key)
            if value is None:
                raise ManifestValidationError(index, f"missing required key '{key}'")
            if not isinstance(value, str) or not value.strip():
                raise ManifestValidationError(index, f"'{key}' must be a non-empty string")
            values[key] = value.strip()

        return cls(
            vcs=VcsKind.parse(values["vcs"], index),
            repo=values["repo"],
            revision=values["rev"],
            path=_check_relative_path(values["path"], index),
        )

    def target_dir(self, vendor_root: Path) -> Path:
        """チェックアウト先の絶対パス."""
        return vendor_root / self.path
