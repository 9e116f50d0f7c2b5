import pytest
from pydantic import ValidationError

from finance_ingest.config.settings import Settings


class TestSettingsDefaults:
    def test_default_app_env(self) -> None:
        s = Settings()
        assert s.app_env == "dev"

    def test_default_db_port(self) -> None:
        s = Settings()
        assert s.db_port == 5432

    def test_default_pdf_engine(self) -> None:
        s = Settings()
        assert s.pdf_engine == "pdftotext"

    def test_default_ai_provider(self) -> None:
        s = Settings()
        assert s.ai_provider == "openai"

    def test_default_ai_timeout(self) -> None:
        s = Settings()
        assert s.ai_timeout_seconds == 30

    def test_default_csv_options(self) -> None:
        s = Settings()
        assert s.csv_delimiter == ";"
        assert s.csv_encoding == "utf-8-sig"

    def test_default_processing_options(self) -> None:
        s = Settings()
        assert s.document_type == "bill"
        assert s.categorization_enabled is True
        assert s.max_workers == 1
        assert s.processing_deadline_seconds is None


class TestSettingsFromEnv:
    def test_loads_app_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("APP_ENV", "production")
        s = Settings()
        assert s.app_env == "production"

    def test_loads_log_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        s = Settings()
        assert s.log_level == "DEBUG"

    def test_loads_db_host(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DB_HOST", "db.example.com")
        s = Settings()
        assert s.db_host == "db.example.com"

    def test_loads_ai_provider(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AI_PROVIDER", "example")
        s = Settings()
        assert s.ai_provider == "example"

    def test_loads_categorization_flag(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CATEGORIZATION_ENABLED", "false")
        s = Settings()
        assert s.categorization_enabled is False

    def test_loads_deadline(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PROCESSING_DEADLINE_SECONDS", "12.5")
        s = Settings()
        assert s.processing_deadline_seconds == 12.5


class TestSettingsValidation:
    def test_invalid_db_port_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DB_PORT", "not_a_number")
        with pytest.raises(ValidationError):
            Settings()

    def test_invalid_max_workers_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MAX_WORKERS", "abc")
        with pytest.raises(ValidationError):
            Settings()
