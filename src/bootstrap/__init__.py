"""
ブートストラップ関連の公開API。
"""

from .container import (
    BootstrapContainer,
    BootstrapContext,
    BootstrapError,
    ConfigBundle,
    InvalidConfigurationError,
    LoggingConfigurator,
    MetricsConfigurator,
    MissingConfigurationError,
)
from .config_loader import EnvironmentConfigLoader, LoggingConfigModel, MetricsSettings
from .logging_setup import DEFAULT_LOGGING_CONFIG, DictConfigLoggingConfigurator
from .metrics_setup import MetricsRuntime, PrometheusMetricsConfigurator, create_bootstrap_container

__all__ = [
    "BootstrapContainer",
    "BootstrapContext",
    "BootstrapError",
    "ConfigBundle",
    "DEFAULT_LOGGING_CONFIG",
    "DictConfigLoggingConfigurator",
    "EnvironmentConfigLoader",
    "InvalidConfigurationError",
    "LoggingConfigModel",
    "LoggingConfigurator",
    "MetricsConfigurator",
    "MetricsRuntime",
    "MetricsSettings",
    "MissingConfigurationError",
    "PrometheusMetricsConfigurator",
    "create_bootstrap_container",
]
