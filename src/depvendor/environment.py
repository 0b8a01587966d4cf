"""vendorディレクトリと .env ヒントファイルの作成."""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from depvendor.core.exceptions import EnvFileError, VendorCreateError

VENDOR_SRC = Path("_vendor") / "src"
ENV_FILE = ".env"
ENV_EXPORT = "export GOPATH=$(pwd)/_vendor:$GOPATH"
ENV_TIPS = f"""Written "{ENV_EXPORT}" into {ENV_FILE}
You can autoload {ENV_FILE} file with "https://github.com/kennethreitz/autoenv"
"""


def create_vendor(work_dir: Path) -> Path:
    """work_dir 配下に _vendor/src を作成して絶対パスを返す.

    Raises:
        VendorCreateError: ディレクトリを作成できない
    """
    src_path = Path(work_dir) / VENDOR_SRC
    try:
        src_path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise VendorCreateError(f"Failed to create {VENDOR_SRC} directory: {e}") from e
    return src_path.resolve()


def write_env(work_dir: Path) -> bool:
    """.env が無ければ GOPATH の export 行を書き込む.

    既に存在する場合は内容に触れない。

    Args:
        work_dir: .env を置くディレクトリ

    Returns:
        新たに書き込んだ場合 True

    Raises:
        EnvFileError: 書き込みに失敗した
    """
    env_path = Path(work_dir) / ENV_FILE
    if env_path.exists():
        logger.info(f"{ENV_FILE} exists. Skipping...")
        return False

    try:
        env_path.write_text(ENV_EXPORT, encoding="utf-8")
    except OSError as e:
        raise EnvFileError(f"Failed to write {ENV_FILE} file: {e}") from e
    print(ENV_TIPS)
    return True
