"""外部VCSコマンドの実行."""

from __future__ import annotations

import subprocess
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from loguru import logger

from .exceptions import CommandError


class CommandRunner(Protocol):
    """cwd を指定してコマンドを実行し、標準出力を返す呼び出し可能オブジェクト.

    失敗時は CommandError を送出する。
    """

    def __call__(self, command: Sequence[str], cwd: Path) -> str: ...


def run_command(command: Sequence[str], cwd: Path, timeout: float | None = None) -> str:
    """コマンドを cwd で実行して標準出力を返す.

    プロセスのカレントディレクトリは変更しない。

    Args:
        command: 実行するコマンドライン
        cwd: 作業ディレクトリ
        timeout: タイムアウト秒数（None なら無制限）

    Returns:
        標準出力（前後の空白を除去）

    Raises:
        CommandError: 終了コードが0以外、実行ファイルが見つからない、またはタイムアウト
    """
    logger.debug(f"Running {' '.join(command)} in {cwd}")
    try:
        result = subprocess.run(
            list(command),
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        raise CommandError(command, None) from e
    except OSError as e:
        # 実行ファイルが見つからない場合はシェルと同じ127を使う
        raise CommandError(command, 127, str(e)) from e

    if result.returncode != 0:
        raise CommandError(command, result.returncode, result.stderr or result.stdout)
    return result.stdout.strip()
