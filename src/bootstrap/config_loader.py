"""
環境変数から検証済みの ConfigBundle を生成するローダ。
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from infrastructure.metrics import DEFAULT_PATH, DEFAULT_SUBSYSTEM

from .container import (
    ConfigBundle,
    ConfigLoader,
    InvalidConfigurationError,
    MissingConfigurationError,
)

ENV_PORT = "PROMETHEUS_PORT"
ENV_PATH = "PROMETHEUS_PATH"
ENV_HOST = "PROMETHEUS_HOST"
ENV_NAMESPACE = "PROMETHEUS_NAMESPACE"
ENV_SUBSYSTEM = "PROMETHEUS_SUBSYSTEM"
ENV_LOGGING_CONFIG = "SKYDNS_METRICS_LOGGING_CONFIG"


class MetricsSettings(BaseModel):
    """
    メトリクス公開設定。

    port が None の場合は公開サーバを起動しない。0 は OS による自動割り当て。
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    port: int | None = None
    path: str = DEFAULT_PATH
    host: str = "0.0.0.0"
    namespace: str = ""
    subsystem: str = DEFAULT_SUBSYSTEM

    @field_validator("port")
    @classmethod
    def _check_port(cls, value: int | None) -> int | None:
        if value is not None and not 0 <= value <= 65535:
            raise ValueError("port は 0〜65535 の範囲である必要があります。")
        return value

    @field_validator("path")
    @classmethod
    def _check_path(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError("path は '/' で始まる必要があります。")
        return value

    @property
    def exposition_enabled(self) -> bool:
        return self.port is not None


class LoggingConfigModel(BaseModel):
    """logging 設定の最小検証モデル。"""

    model_config = ConfigDict(extra="allow")

    version: int


class EnvironmentConfigLoader(ConfigLoader):
    """
    ``PROMETHEUS_*`` 環境変数と任意のロギング YAML から設定を構築する実装。
    空文字列の環境変数は未設定として扱う。
    """

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self._environ = environ if environ is not None else os.environ

    def load(self) -> ConfigBundle:
        return ConfigBundle(metrics=self.load_metrics(), logging=self.load_logging())

    def load_metrics(self) -> MetricsSettings:
        values: dict[str, Any] = {"port": _parse_port(self._get(ENV_PORT))}
        for key, env in (
            ("path", ENV_PATH),
            ("host", ENV_HOST),
            ("namespace", ENV_NAMESPACE),
            ("subsystem", ENV_SUBSYSTEM),
        ):
            raw = self._get(env)
            if raw is not None:
                values[key] = raw

        try:
            return MetricsSettings(**values)
        except ValidationError as exc:
            raise InvalidConfigurationError(f"メトリクス設定の検証に失敗しました: {exc}") from exc

    def load_logging(self) -> Mapping[str, Any]:
        """ロギング YAML を読み込む。未指定の場合は空の Mapping（既定設定を意味する）を返す。"""

        raw_path = self._get(ENV_LOGGING_CONFIG)
        if raw_path is None:
            return {}

        file_path = Path(raw_path)
        if not file_path.is_file():
            raise MissingConfigurationError(f"logging 設定ファイル ({file_path}) が存在しません。")

        content = _load_yaml(file_path)
        try:
            validated = LoggingConfigModel(**content)
        except ValidationError as exc:
            raise InvalidConfigurationError(f"logging 設定の検証に失敗しました: {file_path}") from exc
        return validated.model_dump()

    def _get(self, key: str) -> str | None:
        value = self._environ.get(key, "")
        value = value.strip()
        return value or None


def _parse_port(raw: str | None) -> int | None:
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise InvalidConfigurationError(f"{ENV_PORT} の値が不正です: '{raw}'") from exc


def _load_yaml(file_path: Path) -> Mapping[str, Any]:
    try:
        with file_path.open("r", encoding="utf-8") as fh:
            content = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        raise InvalidConfigurationError(f"YAML の解析に失敗しました: {file_path}") from exc

    if content is None:
        raise InvalidConfigurationError(f"YAML ファイルが空です: {file_path}")

    if not isinstance(content, Mapping):
        raise InvalidConfigurationError(
            f"YAML ファイルのトップレベルは Mapping である必要があります: {file_path}"
        )

    return content
