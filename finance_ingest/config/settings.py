from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "localhost"
    db_port: int = 5432
    db_database: str = "budget"
    db_username: str = "budget"
    db_password: str = "secret"

    pdf_engine: str = "pdftotext"
    pdftotext_binary: str = "pdftotext"

    ai_provider: str = "openai"
    ai_api_key: str = ""
    ai_model_name: str = "gpt-4o-mini"
    ai_base_url: str = ""
    ai_timeout_seconds: int = 30
    ai_temperature: float = 0.0

    document_type: str = "bill"
    transaction_insights: str = ""
    category_insights: str = ""
    categorization_enabled: bool = True

    csv_delimiter: str = ";"
    csv_encoding: str = "utf-8-sig"

    max_workers: int = 1
    processing_deadline_seconds: float | None = None
