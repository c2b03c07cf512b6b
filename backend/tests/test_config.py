"""
Tests for application settings
"""
from addressbook.core.config import Settings, get_settings


def test_test_environment_settings():
    settings = get_settings()

    assert settings.database_url == "sqlite://"
    assert settings.db_create_tables_on_startup is False
    assert settings.app_env == "test"


def test_defaults(monkeypatch):
    for name in ("DATABASE_URL", "POSTGRES_HOST", "CONTACTS_DEFAULT_PAGE_LIMIT", "SESSION_DURATION_HOURS"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(_env_file=None)

    assert settings.contacts_default_page_limit == 20
    assert settings.contacts_max_page_limit == 100
    assert settings.session_duration_hours == 24
    assert settings.database_url.startswith("sqlite:///")
    assert settings.database_url.endswith("addressbook.db")


def test_postgres_url(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.setenv("POSTGRES_HOST", "db.internal")
    monkeypatch.setenv("POSTGRES_USER", "book")
    monkeypatch.setenv("POSTGRES_PASSWORD", "pw")
    monkeypatch.setenv("POSTGRES_DB", "contacts")

    settings = Settings(_env_file=None)

    assert settings.database_url == "postgresql://book:pw@db.internal:5432/contacts"


def test_database_url_takes_precedence(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite:///explicit.db")
    monkeypatch.setenv("POSTGRES_HOST", "db.internal")

    assert Settings(_env_file=None).database_url == "sqlite:///explicit.db"


def test_allowed_origins_list(monkeypatch):
    monkeypatch.setenv("ALLOWED_ORIGINS", "http://a.example, http://b.example,")

    assert Settings(_env_file=None).allowed_origins_list == ["http://a.example", "http://b.example"]
