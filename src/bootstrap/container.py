"""
メトリクス基盤全体の初期化を担うDIコンテナ。

設定値は環境変数から起動時に 1 回だけ読み込む。DI コンテナは設定ロード、
ロギング初期化、メトリクス初期化を統括し、利用側には初期化済みの
コンテキストを返す。解決エンジンはコンテキストが保持する recorder を
明示的な依存として受け取る。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Mapping, Protocol

if TYPE_CHECKING:
    from .config_loader import MetricsSettings
    from .metrics_setup import MetricsRuntime


class ConfigLoader(Protocol):
    """設定を読み込み、検証済みの構成を返すインターフェース。"""

    def load(self) -> "ConfigBundle":
        raise NotImplementedError


class LoggingConfigurator(Protocol):
    """ロギング設定を適用するインターフェース。"""

    def configure(self, config: Mapping[str, Any]) -> None:
        raise NotImplementedError


class MetricsConfigurator(Protocol):
    """メトリクスの登録と公開サーバの起動を行うインターフェース。"""

    def configure(self, settings: "MetricsSettings") -> "MetricsRuntime":
        raise NotImplementedError


class BootstrapError(RuntimeError):
    """ブートストラップ処理でのエラーを表す基底例外。"""


class MissingConfigurationError(BootstrapError):
    """必須設定が欠落している場合の例外。"""


class InvalidConfigurationError(BootstrapError):
    """設定値が期待する形式ではない場合の例外。"""


@dataclass(frozen=True)
class ConfigBundle:
    """環境変数から構築された設定。"""

    metrics: "MetricsSettings"
    logging: Mapping[str, Any]

    def to_dict(self) -> dict[str, Any]:
        """設定を JSON 化可能な辞書として返す。"""

        return {"metrics": self.metrics.model_dump(), "logging": dict(self.logging)}


@dataclass(frozen=True)
class BootstrapContext:
    """
    ブートストラップ処理後に利用側へ渡すコンテキスト。
    """

    config: ConfigBundle
    metrics: "MetricsRuntime"

    def shutdown(self, timeout: float | None = 5.0) -> None:
        self.metrics.shutdown(timeout)


@dataclass
class BootstrapContainer:
    """
    メトリクス基盤の初期化を司るコンテナ。

    Attributes:
        environ: 設定の読み込み元となる環境変数。
        config_loader_factory: ConfigLoader を生成するファクトリ。
        logging_configurator: ロギング設定適用オブジェクト。
        metrics_configurator: メトリクス設定適用オブジェクト。
    """

    environ: Mapping[str, str]
    config_loader_factory: Callable[[Mapping[str, str]], ConfigLoader]
    logging_configurator: LoggingConfigurator
    metrics_configurator: MetricsConfigurator

    def initialize(self) -> BootstrapContext:
        """
        設定ロード・ロギング初期化・メトリクス初期化を順に実行する。

        Returns:
            BootstrapContext: 初期化済みのコンテキスト。

        Raises:
            BootstrapError: 設定の検証エラー。この場合リスナは起動しない。
            MetricsRegistrationError: メトリクスの重複登録。
        """

        config_loader = self.config_loader_factory(self.environ)
        config_bundle = config_loader.load()

        self.logging_configurator.configure(config_bundle.logging)
        runtime = self.metrics_configurator.configure(config_bundle.metrics)

        return BootstrapContext(config=config_bundle, metrics=runtime)
