from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application configuration loaded from environment variables / .env file."""

    app_name: str = Field(default="scopeguard", alias="APP_NAME")
    app_env: str = Field(default="development", alias="APP_ENV")
    app_port: int = Field(default=8000, alias="APP_PORT")
    frontend_url: str = Field(default="http://localhost:3000", alias="FRONTEND_URL")

    # Database (PostgreSQL via asyncpg in production, SQLite for local dev)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./scopeguard_dev.db",
        alias="DATABASE_URL",
    )

    # Multi-tenancy default, used when no X-Tenant-ID header is sent
    default_tenant_id: str = Field(default="default", alias="DEFAULT_TENANT_ID")

    # Request recording into tech_event_log
    tech_event_log_enabled: bool = Field(default=True, alias="TECH_EVENT_LOG_ENABLED")

    # Blocklist limits
    blocklist_max_text_length: int = Field(
        default=2000, alias="BLOCKLIST_MAX_TEXT_LENGTH",
    )
    blocklist_max_pattern_length: int = Field(
        default=512, alias="BLOCKLIST_MAX_PATTERN_LENGTH",
    )
    blocklist_default_replacement: str = Field(
        default="***", alias="BLOCKLIST_DEFAULT_REPLACEMENT",
    )

    # Organization tree
    subsidiary_max_depth: int = Field(default=10, alias="SUBSIDIARY_MAX_DEPTH")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
        "extra": "ignore",
    }

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

settings = Settings()
