from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Storage service used when the request carries no x-okapi-url header
    storage_url: str = Field(default="http://localhost:9130", alias="STORAGE_URL")
    storage_timeout: float = Field(default=30.0, alias="STORAGE_TIMEOUT")

    # Event bus
    event_queue_size: int = Field(default=1000, alias="EVENT_QUEUE_SIZE")

    # Upper bound used when loading every line of one invoice
    invoice_lines_limit: int = Field(default=10000, alias="INVOICE_LINES_LIMIT")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    @field_validator("storage_url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Endpoints are appended as absolute paths."""
        if isinstance(v, str):
            return v.rstrip("/")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str | None) -> str:
        """Convert empty strings to the default level."""
        if not v:
            return "INFO"
        return str(v).upper()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()
