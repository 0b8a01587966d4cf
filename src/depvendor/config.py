"""環境変数からの実行時設定."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from depvendor.core.exceptions import ConfigError

LOG_LEVEL_ENV = "DEPVENDOR_LOG_LEVEL"
TIMEOUT_ENV = "DEPVENDOR_COMMAND_TIMEOUT"
LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Settings:
    log_level: str = "INFO"
    command_timeout: float | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """DEPVENDOR_* 環境変数から設定を読み込む.

        Raises:
            ConfigError: 値が不正
        """
        env = os.environ if environ is None else environ

        log_level = env.get(LOG_LEVEL_ENV, "INFO").strip().upper() or "INFO"
        if log_level not in LOG_LEVELS:
            raise ConfigError(f"{LOG_LEVEL_ENV} must be one of {', '.join(LOG_LEVELS)}, got {log_level!r}")

        command_timeout = None
        raw_timeout = env.get(TIMEOUT_ENV, "").strip()
        if raw_timeout:
            try:
                command_timeout = float(raw_timeout)
            except ValueError:
                raise ConfigError(f"{TIMEOUT_ENV} must be a number of seconds, got {raw_timeout!r}") from None
            if command_timeout <= 0:
                raise ConfigError(f"{TIMEOUT_ENV} must be positive, got {raw_timeout!r}")

        return cls(log_level=log_level, command_timeout=command_timeout)
