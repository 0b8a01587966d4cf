"""依存関係インストールのコア処理群.

- DependencySpec（マニフェスト1件分のデータモデル）
- DependencyInstaller（チェックアウトを目標リビジョンに合わせる）
- 外部VCSコマンドの実行
"""

from .dependency import DependencySpec, VcsKind
from .installer import DependencyInstaller, ReconcileOutcome, reconcile

__all__ = [
    "DependencySpec",
    "VcsKind",
    "DependencyInstaller",
    "ReconcileOutcome",
    "reconcile",
]
