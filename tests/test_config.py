import logging

from drivewise import config
from drivewise.config import Settings, configure_logging, get_settings


def test_settings_read_prefixed_env(monkeypatch):
    monkeypatch.setenv("DRIVEWISE_LLM_MODEL", "test-model")
    monkeypatch.setenv("DRIVEWISE_LLM_TIMEOUT", "2.5")
    s = Settings()
    assert s.llm_model == "test-model"
    assert s.llm_timeout == 2.5


def test_get_settings_is_cached(monkeypatch):
    get_settings.cache_clear()
    monkeypatch.setenv("DRIVEWISE_LOG_LEVEL", "DEBUG")
    first = get_settings()
    monkeypatch.setenv("DRIVEWISE_LOG_LEVEL", "ERROR")
    assert get_settings() is first
    assert first.log_level == "DEBUG"
    get_settings.cache_clear()


def test_configure_logging_sets_level():
    root = logging.getLogger()
    previous = root.level
    try:
        configure_logging("warning")
        assert root.level == logging.WARNING
    finally:
        root.setLevel(previous)
    assert config.LOG_FORMAT
