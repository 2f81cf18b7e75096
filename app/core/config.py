from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # PostgreSQL
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "faculty_eval"
    postgres_password: str = "changeme"
    postgres_db: str = "faculty_evaluation"

    @property
    def postgres_url(self) -> str:
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    # App
    app_env: str = "development"
    app_debug: bool = True
    app_host: str = "0.0.0.0"
    app_port: int = 8000

    # CORS
    allowed_origins: str = "*"  # comma-separated, e.g. "https://eval.example.edu"

    # Analytics
    analytics_min_responses: int = 5
    analytics_comment_limit: int = 20
    analytics_lexicon_path: str = ""  # JSON file overriding the built-in comment keyword lists
    # None = inspect the users table at startup for the optional user_type column
    users_have_user_type: bool | None = None

    # Logging
    log_level: str = "INFO"
    log_json: bool = False  # set True in production for structured JSON logs

    # Sentry
    sentry_dsn: str = ""  # leave empty to disable
    sentry_traces_sample_rate: float = 0.1


settings = Settings()


def validate_settings_for_production() -> None:
    """Validate critical settings. Called on startup in non-test environments."""
    errors: list[str] = []

    if settings.analytics_min_responses < 0:
        errors.append("ANALYTICS_MIN_RESPONSES must be >= 0")

    if settings.analytics_comment_limit < 0:
        errors.append("ANALYTICS_COMMENT_LIMIT must be >= 0")

    if not 0.0 <= settings.sentry_traces_sample_rate <= 1.0:
        errors.append("SENTRY_TRACES_SAMPLE_RATE must be between 0 and 1")

    if settings.app_env == "production":
        if settings.allowed_origins == "*":
            errors.append("ALLOWED_ORIGINS must not be '*' in production")
        if settings.app_debug:
            errors.append("APP_DEBUG must be false in production")
        if settings.postgres_password in ("changeme", ""):
            errors.append("POSTGRES_PASSWORD must be set in production")

    if errors:
        raise SystemExit("Configuration errors:\n  - " + "\n  - ".join(errors))
