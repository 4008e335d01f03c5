"""
ロギング初期化ロジック。
"""

from __future__ import annotations

import logging.config
from typing import Any, Mapping

from .container import InvalidConfigurationError, LoggingConfigurator

DEFAULT_LOGGING_CONFIG: Mapping[str, Any] = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
            "stream": "ext://sys.stderr",
        },
    },
    "loggers": {
        "skydns_metrics": {
            "level": "INFO",
            "handlers": ["console"],
        },
    },
}


class DictConfigLoggingConfigurator(LoggingConfigurator):
    """
    ``logging.config.dictConfig`` を用いたロギング初期化。

    空の設定が渡された場合は default_config を適用する。既存ロガーは
    明示されない限り無効化しない（prometheus-client 等のロガーを残すため）。
    """

    def __init__(self, default_config: Mapping[str, Any] | None = None) -> None:
        self._default_config = default_config if default_config is not None else DEFAULT_LOGGING_CONFIG

    def configure(self, config: Mapping[str, Any]) -> None:
        effective = _copy_nested(config or self._default_config)
        if "version" not in effective:
            raise InvalidConfigurationError("logging 設定に 'version' が存在しません。")
        effective.setdefault("disable_existing_loggers", False)

        try:
            logging.config.dictConfig(effective)
        except (ValueError, TypeError, AttributeError, ImportError) as exc:
            raise InvalidConfigurationError("logging 設定の適用に失敗しました。") from exc
        logging.getLogger("skydns_metrics.bootstrap").debug(
            "Logging configured (default=%s)", not config
        )


def _copy_nested(value: Mapping[str, Any]) -> dict[str, Any]:
    return {key: _copy_nested(item) if isinstance(item, Mapping) else item for key, item in value.items()}
