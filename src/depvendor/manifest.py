"""依存関係マニフェスト（deps.json）の読み込みと検証."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml
from loguru import logger

from depvendor.core.dependency import DependencySpec
from depvendor.core.exceptions import ManifestParseError, ManifestReadError

DEFAULT_MANIFEST = "deps.json"
YAML_SUFFIXES = {".yml", ".yaml"}


def _decode(manifest_path: Path, text: str) -> Any:
    if manifest_path.suffix.lower() in YAML_SUFFIXES:
        try:
            # 全フィールドが文字列のため、数字だけのハッシュ（例: 0123456）もそのまま文字列で読む
            return yaml.load(text, Loader=yaml.BaseLoader)
        except yaml.YAMLError as e:
            raise ManifestParseError(f"Invalid YAML in {manifest_path}: {e}") from e
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ManifestParseError(f"Invalid JSON in {manifest_path}: {e}") from e


def parse_manifest(records: Any) -> list[DependencySpec]:
    """デコード済みのマニフェストを検証して DependencySpec のリストに変換.

    インストール開始前に全エントリを検証するため、未対応のVCS種別があれば
    ここで失敗する。

    Args:
        records: JSON/YAMLをデコードした値（配列である必要がある）

    Returns:
        マニフェスト順の DependencySpec リスト

    Raises:
        ManifestParseError: トップレベルが配列でない
        ManifestValidationError: エントリが不正
    """
    if not isinstance(records, list):
        raise ManifestParseError(f"Manifest must contain a JSON array, got {type(records).__name__}")

    specs = [DependencySpec.from_record(record, index) for index, record in enumerate(records)]

    seen: dict[str, int] = {}
    for index, spec in enumerate(specs):
        if spec.path in seen:
            logger.warning(f"Entry #{index} reuses path '{spec.path}' from entry #{seen[spec.path]}")
        else:
            seen[spec.path] = index
    return specs


def load_manifest(manifest_path: Path) -> list[DependencySpec]:
    """マニフェストファイルを読み込む.

    拡張子が .yml/.yaml の場合はYAML、それ以外はJSONとして読む。

    Args:
        manifest_path: マニフェストファイルのパス

    Returns:
        マニフェスト順の DependencySpec リスト

    Raises:
        ManifestReadError: ファイルを読めない
        ManifestParseError: 構文エラーまたは不正なエントリ
    """
    try:
        text = Path(manifest_path).read_text(encoding="utf-8")
    except OSError as e:
        raise ManifestReadError(manifest_path, e) from e
    except UnicodeDecodeError as e:
        raise ManifestParseError(f"Invalid encoding in {manifest_path}: {e}") from e

    specs = parse_manifest(_decode(Path(manifest_path), text))
    logger.info(f"Loaded {len(specs)} dependencies from {manifest_path}")
    return specs
