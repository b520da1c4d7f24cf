import pytest

from filetwin.environment import EnvironmentConfig, EnvironmentError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove any FILETWIN_* variables, including ones a .env file sets during a test."""
    for name in ("FILETWIN_DEBUG", "FILETWIN_LOG_LEVEL", "FILETWIN_LOG_FILE", "FILETWIN_DEBOUNCE_SECONDS"):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


def test_defaults():
    config = EnvironmentConfig.load(dotenv=False)
    assert config.FILETWIN_DEBUG is False
    assert config.FILETWIN_LOG_LEVEL == "INFO"
    assert config.FILETWIN_LOG_FILE is None
    assert config.FILETWIN_DEBOUNCE_SECONDS == 0.5
    assert config.log_level == "INFO"


def test_load_from_system(monkeypatch):
    monkeypatch.setenv("FILETWIN_LOG_LEVEL", "warning")
    monkeypatch.setenv("FILETWIN_DEBOUNCE_SECONDS", "1.25")

    config = EnvironmentConfig.load(dotenv=False)

    assert config.FILETWIN_LOG_LEVEL == "WARNING"
    assert config.FILETWIN_DEBOUNCE_SECONDS == 1.25


def test_debug_forces_debug_level(monkeypatch):
    monkeypatch.setenv("FILETWIN_DEBUG", "yes")
    monkeypatch.setenv("FILETWIN_LOG_LEVEL", "ERROR")

    config = EnvironmentConfig.load(dotenv=False)

    assert config.FILETWIN_DEBUG is True
    assert config.log_level == "DEBUG"


@pytest.mark.parametrize(
    "name, value",
    [
        ("FILETWIN_LOG_LEVEL", "LOUD"),
        ("FILETWIN_DEBOUNCE_SECONDS", "-1"),
        ("FILETWIN_DEBOUNCE_SECONDS", "soon"),
    ],
)
def test_invalid_values(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(EnvironmentError):
        EnvironmentConfig.load(dotenv=False)


def test_load_from_dotenv(monkeypatch, tmp_path):
    (tmp_path / ".env").write_text("FILETWIN_DEBOUNCE_SECONDS=2\n")
    monkeypatch.chdir(tmp_path)

    config = EnvironmentConfig.load()

    assert config.FILETWIN_DEBOUNCE_SECONDS == 2.0


def test_load_configures_timing_logger(monkeypatch):
    levels = []
    monkeypatch.setattr("filetwin.environment.configure_logging", levels.append)
    monkeypatch.setenv("FILETWIN_DEBUG", "1")

    EnvironmentConfig.load(dotenv=False)

    assert levels == ["DEBUG"]
