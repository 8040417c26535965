import logging
from typing import Any

import pytest

from wwsvc.common.config import Config
from wwsvc.common.exceptions import ConfigurationError
from wwsvc.common.logging_utils import resolve_log_level, setup_logger
from wwsvc.common.models import ClientConfig, TlsMode

VALID = {
    "base_url": "https://example.test",
    "vendor_hash": "V1",
    "app_hash": "A1",
    "secret": "s3cr3t",
    "revision": 1,
}


def test_config_protocol_constants() -> None:
    config = Config()
    assert config.WWSVC_PATH == "/WWSVC/"
    assert config.EXECUTE_MODE == "SYNCHRON"
    assert config.RESULT_TYPE == "JSON"
    assert config.SUCCESS_STATUS == 200  # noqa: PLR2004
    assert 401 in config.TICKET_EXPIRED_STATUSES  # noqa: PLR2004


def test_config_env_overrides(monkeypatch: Any) -> None:
    monkeypatch.setenv("WWSVC_TIMEOUT", "5")
    monkeypatch.setenv("WWSVC_LOG_LEVEL", "debug")

    config = Config()

    assert config.DEFAULT_TIMEOUT == 5.0  # noqa: PLR2004
    assert config.LOG_LEVEL == logging.DEBUG


def test_config_unknown_log_level_falls_back_to_info(monkeypatch: Any) -> None:
    monkeypatch.setenv("WWSVC_LOG_LEVEL", "verbose")

    assert Config().LOG_LEVEL == logging.INFO


def test_setup_logger_accepts_unknown_level_name() -> None:
    logger = setup_logger(logging.getLogger("wwsvc.tests.levels"), "chatty")

    assert logger.level == logging.INFO
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    assert resolve_log_level(" warning ") == logging.WARNING
    assert resolve_log_level(logging.DEBUG) == logging.DEBUG


def test_client_config_defaults() -> None:
    config = ClientConfig.build(**VALID)

    assert config.tls_mode is TlsMode.SYSTEM
    assert config.result_max_lines == Config().RESULT_MAX_LINES
    assert config.service_url == "https://example.test/WWSVC/"
    assert config.credentials is None


def test_service_url_drops_base_path() -> None:
    config = ClientConfig.build(**{**VALID, "base_url": "https://example.test:8443/shop"})
    assert config.service_url == "https://example.test:8443/WWSVC/"


@pytest.mark.parametrize(
    ("field", "value"),
    [
        ("base_url", "not a url"),
        ("vendor_hash", ""),
        ("app_hash", ""),
        ("secret", ""),
        ("revision", -1),
        ("timeout", 0),
    ],
)
def test_invalid_values_raise_configuration_error(field: str, value: Any) -> None:
    with pytest.raises(ConfigurationError) as exc_info:
        ClientConfig.build(**{**VALID, field: value})
    assert not exc_info.value.retryable


def test_missing_field_raises_configuration_error() -> None:
    values = dict(VALID)
    del values["secret"]
    with pytest.raises(ConfigurationError, match="secret"):
        ClientConfig.build(**values)


def test_pinned_tls_requires_ca_bundle(tmp_path: Any) -> None:
    with pytest.raises(ConfigurationError, match="ca_bundle"):
        ClientConfig.build(**VALID, tls_mode="pinned")

    bundle = tmp_path / "ca.pem"
    config = ClientConfig.build(**VALID, tls_mode="pinned", ca_bundle=bundle)
    assert config.ca_bundle == bundle


def test_client_config_is_frozen() -> None:
    config = ClientConfig.build(**VALID)
    with pytest.raises(ValueError):
        config.secret = "other"  # type: ignore[misc]


def test_from_env(monkeypatch: Any) -> None:
    monkeypatch.setenv("WWSVC_URL", "https://env.test")
    monkeypatch.setenv("WWSVC_VENDOR_HASH", "V9")
    monkeypatch.setenv("WWSVC_APP_HASH", "A9")
    monkeypatch.setenv("WWSVC_SECRET", "env-secret")
    monkeypatch.setenv("WWSVC_REVISION", "3")

    config = ClientConfig.from_env(app_hash="A1", secret=None)

    assert str(config.base_url) == "https://env.test/"
    assert config.vendor_hash == "V9"
    assert config.app_hash == "A1"
    assert config.secret == "env-secret"
    assert config.revision == 3  # noqa: PLR2004


def test_from_env_without_environment(monkeypatch: Any) -> None:
    for name in ("WWSVC_URL", "WWSVC_VENDOR_HASH", "WWSVC_APP_HASH", "WWSVC_SECRET", "WWSVC_REVISION"):
        monkeypatch.delenv(name, raising=False)

    with pytest.raises(ConfigurationError):
        ClientConfig.from_env()
