import logging

import pytest

from srs_core.errors import ConfigurationError
from srs_core.settings import configure_logging, get_database_url, load_settings

ENV_VARS = [
    "FSRS_REQUEST_RETENTION",
    "FSRS_MAXIMUM_INTERVAL",
    "FSRS_EASY_BONUS",
    "FSRS_HARD_FACTOR",
    "FSRS_ENABLE_FUZZ",
    "FSRS_IS_REVIEW",
    "FSRS_WEIGHTS",
    "DATABASE_URL",
    "FSRS_LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = load_settings()
    params = settings.to_parameters()

    assert params.request_retention == 0.9
    assert params.maximum_interval == 36500
    assert not params.enable_fuzz
    assert not settings.is_review
    assert settings.database_url is None
    assert settings.log_level == "WARNING"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("FSRS_REQUEST_RETENTION", "0.85")
    monkeypatch.setenv("FSRS_MAXIMUM_INTERVAL", "365")
    monkeypatch.setenv("FSRS_ENABLE_FUZZ", "true")
    monkeypatch.setenv("FSRS_IS_REVIEW", "1")
    monkeypatch.setenv("FSRS_WEIGHTS", "1,2,5,-0.5,-0.5,0.2,1.4,-0.12,0.8,2,-0.2,0.2,1")
    monkeypatch.setenv("FSRS_LOG_LEVEL", "debug")

    settings = load_settings()
    params = settings.to_parameters()

    assert params.request_retention == 0.85
    assert params.maximum_interval == 365
    assert params.enable_fuzz
    assert settings.is_review
    assert params.weights.init_stability_grade_gain == 2.0
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize("name, value", [
    ("FSRS_REQUEST_RETENTION", "high"),
    ("FSRS_MAXIMUM_INTERVAL", "1.5"),
    ("FSRS_ENABLE_FUZZ", "maybe"),
    ("FSRS_WEIGHTS", "1,2,x"),
])
def test_unparseable_values(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ConfigurationError):
        load_settings()


def test_wrong_weight_count(monkeypatch):
    monkeypatch.setenv("FSRS_WEIGHTS", "1,2,3")
    with pytest.raises(ConfigurationError):
        load_settings().to_parameters()


def test_out_of_range_retention(monkeypatch):
    monkeypatch.setenv("FSRS_REQUEST_RETENTION", "1.5")
    with pytest.raises(ConfigurationError):
        load_settings().to_parameters()


def test_database_url(monkeypatch):
    with pytest.raises(ConfigurationError):
        get_database_url()
    monkeypatch.setenv("DATABASE_URL", "sqlite:///cards.db")
    assert get_database_url() == "sqlite:///cards.db"


def test_configure_logging():
    root = logging.getLogger()
    previous_level, previous_handlers = root.level, list(root.handlers)
    try:
        configure_logging("debug")
        assert root.level == logging.DEBUG
        with pytest.raises(ConfigurationError):
            configure_logging("chatty")
    finally:
        root.handlers[:] = previous_handlers
        root.setLevel(previous_level)
