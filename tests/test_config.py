import os

import pytest

from config import Settings, load_settings

ENV_VARS = (
    "SERVICE_LOGBOOK_STATE_PATH",
    "SERVICE_LOGBOOK_AUTOSAVE_MS",
    "SERVICE_LOGBOOK_ROWS_PER_PAGE",
    "SERVICE_LOGBOOK_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("USERPROFILE", str(tmp_path))


def test_defaults(tmp_path) -> None:
    s = load_settings()
    assert s == Settings(
        state_path=os.path.join(str(tmp_path), "Documents", "ServiceLogbook_STATE.json"),
        autosave_delay_ms=600,
        rows_per_page=10,
        log_level="INFO",
    )


def test_env_overrides(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("SERVICE_LOGBOOK_STATE_PATH", str(tmp_path / "x.json"))
    monkeypatch.setenv("SERVICE_LOGBOOK_AUTOSAVE_MS", "250")
    monkeypatch.setenv("SERVICE_LOGBOOK_ROWS_PER_PAGE", "25")
    monkeypatch.setenv("SERVICE_LOGBOOK_LOG_LEVEL", "debug")

    s = load_settings()
    assert s.state_path == str(tmp_path / "x.json")
    assert s.autosave_delay_ms == 250
    assert s.rows_per_page == 25
    assert s.log_level == "DEBUG"


@pytest.mark.parametrize(
    "name,value,attr,expected",
    [
        ("SERVICE_LOGBOOK_AUTOSAVE_MS", "soon", "autosave_delay_ms", 600),
        ("SERVICE_LOGBOOK_AUTOSAVE_MS", "-5", "autosave_delay_ms", 600),
        ("SERVICE_LOGBOOK_ROWS_PER_PAGE", "7", "rows_per_page", 10),
        ("SERVICE_LOGBOOK_LOG_LEVEL", "chatty", "log_level", "INFO"),
        ("SERVICE_LOGBOOK_STATE_PATH", "   ", "state_path", None),
    ],
)
def test_bad_values_fall_back(monkeypatch, tmp_path, name, value, attr, expected) -> None:
    monkeypatch.setenv(name, value)
    s = load_settings()
    if expected is None:
        expected = os.path.join(str(tmp_path), "Documents", "ServiceLogbook_STATE.json")
    assert getattr(s, attr) == expected
