"""Unit tests for bndy_calendar.config_loader."""

import logging

import pytest

from bndy_calendar.config_loader import Config, load_config

pytestmark = pytest.mark.unit


def test_load_config_missing_file_returns_defaults(tmp_path):
    cfg = load_config(str(tmp_path / "missing.yaml"))

    assert cfg == Config()


def test_load_config_reads_yaml(tmp_path):
    path = tmp_path / "calendar.yaml"
    path.write_text(
        "api_base_url: https://staging.bndy.test/\n"
        "request_timeout: 10\n"
        "uid_domain: staging.bndy.test\n"
        "default_event_minutes: 90\n"
        "log_level: debug\n"
    )

    cfg = load_config(str(path))

    assert cfg.api_base_url == "https://staging.bndy.test"
    assert cfg.request_timeout == 10.0
    assert cfg.uid_domain == "staging.bndy.test"
    assert cfg.default_event_minutes == 90
    assert cfg.minimum_event_minutes == 60
    assert cfg.log_level == "DEBUG"


def test_load_config_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")

    assert load_config(str(path)) == Config()


def test_load_config_rejects_non_mapping(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n")

    with pytest.raises(ValueError, match="mapping"):
        load_config(str(path))


def test_load_config_path_from_env(tmp_path, monkeypatch):
    path = tmp_path / "env.yaml"
    path.write_text("organizer_email: calendar@bndy.test\n")
    monkeypatch.setenv("BNDY_CALENDAR_CONFIG", str(path))

    assert load_config().organizer_email == "calendar@bndy.test"


def test_env_overrides_file_values(tmp_path, monkeypatch):
    path = tmp_path / "calendar.yaml"
    path.write_text("api_base_url: https://file.bndy.test\nlog_level: INFO\n")
    monkeypatch.setenv("BNDY_API_BASE_URL", "https://env.bndy.test")
    monkeypatch.setenv("BNDY_LOG_LEVEL", "warning")

    cfg = load_config(str(path))

    assert cfg.api_base_url == "https://env.bndy.test"
    assert cfg.log_level == "WARNING"


def test_env_overrides_apply_without_file(tmp_path, monkeypatch):
    monkeypatch.setenv("BNDY_API_BASE_URL", "https://env.bndy.test")

    assert load_config(str(tmp_path / "missing.yaml")).api_base_url == "https://env.bndy.test"


@pytest.mark.parametrize(
    "raw,expected",
    [(0.2, 1.0), (500, 120.0), ("15", 15.0), ("soon", 30.0)],
)
def test_request_timeout_coercion(raw, expected):
    assert Config.from_dict({"request_timeout": raw}).request_timeout == expected


def test_durations_are_coerced(caplog):
    with caplog.at_level(logging.WARNING, logger="bndy_calendar.config_loader"):
        cfg = Config.from_dict({"minimum_event_minutes": 0, "default_event_minutes": "x"})

    assert cfg.minimum_event_minutes == 1
    assert cfg.default_event_minutes == 120
    assert "not an int" in caplog.text


def test_default_duration_never_below_minimum():
    cfg = Config.from_dict({"minimum_event_minutes": 90, "default_event_minutes": 30})

    assert cfg.default_event_minutes == 90
