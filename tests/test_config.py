import pytest

from waiting_room.core.config import SchedulerConfig, Settings


def test_defaults(monkeypatch):
    for name in ("REDIS_URL", "SCHEDULER_ENABLED", "SCHEDULER_BATCH_SIZE", "TOKEN_COOKIE_MAX_AGE"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings.load_from_env()

    assert settings.REDIS_URL == "redis://localhost:6379/0"
    assert settings.SCHEDULER_ENABLED is False
    assert settings.SCHEDULER_BATCH_SIZE == 3
    assert settings.TOKEN_COOKIE_MAX_AGE == 300

def test_scheduler_values_from_env(monkeypatch):
    monkeypatch.setenv("SCHEDULER_ENABLED", "true")
    monkeypatch.setenv("SCHEDULER_BATCH_SIZE", "10")
    monkeypatch.setenv("SCHEDULER_INITIAL_DELAY_SECONDS", "1.5")
    monkeypatch.setenv("SCHEDULER_INTERVAL_SECONDS", "2")

    config = Settings.load_from_env().scheduler_config()

    assert isinstance(config, SchedulerConfig)
    assert config.enabled is True
    assert config.batch_size == 10
    assert config.initial_delay_seconds == 1.5
    assert config.interval_seconds == 2.0

def test_cors_origins_split(monkeypatch):
    monkeypatch.setenv("CORS_ORIGINS", "https://a.example, https://b.example")
    assert Settings.load_from_env().CORS_ORIGINS == ["https://a.example", "https://b.example"]

@pytest.mark.parametrize("name,value", [
    ("SCHEDULER_ENABLED", "maybe"),
    ("SCHEDULER_BATCH_SIZE", "three"),
    ("SCHEDULER_BATCH_SIZE", "-1"),
    ("SCHEDULER_INTERVAL_SECONDS", "0"),
])
def test_invalid_values_fail_fast(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError):
        Settings.load_from_env()
