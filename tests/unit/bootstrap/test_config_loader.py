from __future__ import annotations

from pathlib import Path

import pytest

from bootstrap.config_loader import EnvironmentConfigLoader, MetricsSettings
from bootstrap.container import InvalidConfigurationError, MissingConfigurationError


def test_defaults_disable_exposition() -> None:
    bundle = EnvironmentConfigLoader({}).load()

    assert bundle.metrics == MetricsSettings()
    assert bundle.metrics.port is None
    assert bundle.metrics.exposition_enabled is False
    assert bundle.metrics.path == "/metrics"
    assert bundle.metrics.namespace == ""
    assert bundle.metrics.subsystem == "skydns"
    assert bundle.logging == {}


def test_environment_values_are_applied() -> None:
    settings = EnvironmentConfigLoader(
        {
            "PROMETHEUS_PORT": "9153",
            "PROMETHEUS_PATH": "/scrape",
            "PROMETHEUS_HOST": "127.0.0.1",
            "PROMETHEUS_NAMESPACE": "edge",
            "PROMETHEUS_SUBSYSTEM": "resolver",
        }
    ).load_metrics()

    assert settings.port == 9153
    assert settings.exposition_enabled is True
    assert settings.path == "/scrape"
    assert settings.host == "127.0.0.1"
    assert settings.namespace == "edge"
    assert settings.subsystem == "resolver"


def test_empty_values_are_treated_as_unset() -> None:
    settings = EnvironmentConfigLoader({"PROMETHEUS_PORT": "", "PROMETHEUS_SUBSYSTEM": ""}).load_metrics()

    assert settings.port is None
    assert settings.subsystem == "skydns"


@pytest.mark.parametrize("raw_port", ["http", "91.53", "-1", "70000"])
def test_invalid_port_is_rejected(raw_port: str) -> None:
    with pytest.raises(InvalidConfigurationError):
        EnvironmentConfigLoader({"PROMETHEUS_PORT": raw_port}).load()


def test_path_must_be_absolute() -> None:
    with pytest.raises(InvalidConfigurationError):
        EnvironmentConfigLoader({"PROMETHEUS_PATH": "metrics"}).load_metrics()


def test_logging_config_is_loaded_from_yaml(tmp_path: Path) -> None:
    target = tmp_path / "logging.yaml"
    target.write_text(
        "version: 1\n"
        "disable_existing_loggers: false\n"
        "loggers:\n"
        "  skydns_metrics:\n"
        "    level: DEBUG\n",
        encoding="utf-8",
    )

    logging_config = EnvironmentConfigLoader({"SKYDNS_METRICS_LOGGING_CONFIG": str(target)}).load_logging()

    assert logging_config["version"] == 1
    assert logging_config["loggers"]["skydns_metrics"]["level"] == "DEBUG"


def test_missing_logging_file_is_reported(tmp_path: Path) -> None:
    loader = EnvironmentConfigLoader({"SKYDNS_METRICS_LOGGING_CONFIG": str(tmp_path / "absent.yaml")})

    with pytest.raises(MissingConfigurationError):
        loader.load_logging()


@pytest.mark.parametrize("content", ["", "- not\n- a mapping\n", "disable_existing_loggers: false\n", "a: [1, 2\n"])
def test_invalid_logging_yaml_is_rejected(tmp_path: Path, content: str) -> None:
    target = tmp_path / "logging.yaml"
    target.write_text(content, encoding="utf-8")

    with pytest.raises(InvalidConfigurationError):
        EnvironmentConfigLoader({"SKYDNS_METRICS_LOGGING_CONFIG": str(target)}).load_logging()
