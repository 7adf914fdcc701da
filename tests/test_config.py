from leadwatch.config import Settings
from leadwatch.infrastructure.database import normalize_database_url
from leadwatch.scripts.create_admin_token import main as create_admin_token
from leadwatch.infrastructure.services.auth_service import decode_access_token


def test_csv_lists_are_normalized():
    settings = Settings(admin_emails=" Admin@Example.com,, ops@example.com ", notification_emails="")

    assert settings.admin_email_list == ["admin@example.com", "ops@example.com"]
    assert settings.notification_email_list == []



def test_normalize_database_url():
    assert normalize_database_url("postgres://u:p@host/db") == "postgresql+asyncpg://u:p@host/db"
    assert (
        normalize_database_url("postgresql://u:p@host/db?sslmode=require&application_name=lw")
        == "postgresql+asyncpg://u:p@host/db?application_name=lw"
    )
    assert normalize_database_url("postgresql://u:p@host/db?sslmode=require") == "postgresql+asyncpg://u:p@host/db"
    assert normalize_database_url("sqlite+aiosqlite:///./x.db") == "sqlite+aiosqlite:///./x.db"


def test_create_admin_token_script(capsys):
    assert create_admin_token(["ops@example.com", "--days", "2"]) == 0

    token = capsys.readouterr().out.strip()
    assert decode_access_token(token)["sub"] == "ops@example.com"


def test_create_admin_token_rejects_unknown_email(capsys):
    assert create_admin_token(["stranger@example.com"]) == 1


def test_json_log_formatter_includes_exception():
    import json
    import logging
    import sys

    from leadwatch.infrastructure.logging_config import JSONFormatter

    try:
        raise RuntimeError("fub down")
    except RuntimeError:
        record = logging.LogRecord(
            "leadwatch.engine", logging.ERROR, __file__, 10, "cycle failed: %s", ("pond",), sys.exc_info()
        )

    payload = json.loads(JSONFormatter().format(record))

    assert payload["level"] == "ERROR"
    assert payload["message"] == "cycle failed: pond"
    assert payload["logger"] == "leadwatch.engine"
    assert "RuntimeError: fub down" in payload["exception"]
