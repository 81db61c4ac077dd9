"""Configuration management"""
from datetime import datetime, time
from pathlib import Path
from typing import Optional
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

OUTPUT_FORMATS = ("csv", "html", "pdf")


class Settings(BaseSettings):
    # Logging
    log_level: str = "INFO"

    # Database (SQLite for local use, PostgreSQL in production)
    database_url: str = "sqlite+aiosqlite:///./fieldreports.db"

    # Scheduling
    default_delivery_time: time = time(9, 0, 0)
    # Fail fast on unknown frequency / report type instead of falling back
    strict_enums: bool = False
    scheduled_format: str = "pdf"

    # Presentation (HTML and PDF only; CSV stays raw)
    date_format: str = "%m/%d/%Y"
    datetime_format: str = "%m/%d/%Y, %I:%M:%S %p"
    currency_symbol: str = "$"
    pdf_attribution: str = "Generated by Field Management System"

    # Paths
    project_root: Path = Field(default_factory=lambda: Path(__file__).parent.parent.parent)
    output_dir: Path = Path("outputs")
    logs_dir: Optional[Path] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator('default_delivery_time', mode='before')
    @classmethod
    def parse_delivery_time(cls, v):
        if isinstance(v, str):
            for fmt in ("%H:%M:%S", "%H:%M"):
                try:
                    return datetime.strptime(v.strip(), fmt).time()
                except ValueError:
                    continue
            raise ValueError(f"default_delivery_time must be HH:MM[:SS], got {v!r}")
        return v

    @field_validator('scheduled_format')
    @classmethod
    def validate_scheduled_format(cls, v: str) -> str:
        v = v.lower()
        if v not in OUTPUT_FORMATS:
            raise ValueError(f"scheduled_format must be one of {', '.join(OUTPUT_FORMATS)}")
        return v

    @model_validator(mode='after')
    def setup_paths(self):
        if self.logs_dir is None:
            self.logs_dir = self.project_root / "logs"
        return self

    @property
    def async_database_url(self) -> str:
        url = self.database_url
        if url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return url


settings = Settings()
