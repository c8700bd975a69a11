import pytest

from backend.config import load_settings, normalize_database_url
from backend.utils import is_valid_email, utc_timestamp


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in ("DATABASE_URL", "HOST", "PORT", "APP_ENV", "LOG_LEVEL", "FRONTEND_DIR", "CORS_ORIGINS"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("DATA_DIR", str(tmp_path / "data"))
    return tmp_path


def test_defaults(clean_env):
    settings = load_settings()
    assert settings.database_configured is False
    assert settings.database_url.startswith("sqlite:///")
    assert settings.database_url.endswith("thinkbright.db")
    assert settings.data_dir.is_dir()
    assert settings.host == "0.0.0.0"
    assert settings.port == 5000
    assert settings.environment == "development"
    assert settings.log_level == "INFO"
    assert settings.cors_origins == ["*"]
    assert settings.frontend_dir.name == "frontend"


def test_overrides(clean_env, monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgres://user:pw@db.example.com/site")
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("APP_ENV", "production")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("CORS_ORIGINS", "https://a.example, https://b.example")
    monkeypatch.setenv("FRONTEND_DIR", str(clean_env / "public"))

    settings = load_settings()
    assert settings.database_configured is True
    assert settings.database_url == "postgresql://user:pw@db.example.com/site"
    assert settings.port == 8080
    assert settings.environment == "production"
    assert settings.log_level == "DEBUG"
    assert settings.cors_origins == ["https://a.example", "https://b.example"]
    assert settings.frontend_dir == (clean_env / "public").resolve()


def test_invalid_port(clean_env, monkeypatch):
    monkeypatch.setenv("PORT", "abc")
    with pytest.raises(ValueError):
        load_settings()


def test_normalize_database_url():
    assert normalize_database_url("postgres://h/db") == "postgresql://h/db"
    assert normalize_database_url("postgresql://h/db") == "postgresql://h/db"
    assert normalize_database_url("sqlite:///x.db") == "sqlite:///x.db"


@pytest.mark.parametrize(
    "value, expected",
    [
        ("ann@example.com", True),
        ("a.b+c@sub.example.co", True),
        ("ann@example", False),
        ("ann example@x.io", False),
        ("@example.com", False),
        ("a@b.co\n", False),
        ("", False),
        (None, False),
    ],
)
def test_is_valid_email(value, expected):
    assert is_valid_email(value) is expected


def test_utc_timestamp_shape():
    stamp = utc_timestamp()
    assert stamp.endswith("Z")
    assert len(stamp) == len("2024-01-01T00:00:00.000Z")
