"""
Configuration management using Pydantic models, YAML and environment overrides.
"""

import os
from datetime import time
from pathlib import Path
from typing import Mapping, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.models import WorkingHours
from .domain.timezones import is_valid_timezone

# Environment variable -> AppConfig field
ENV_OVERRIDES = {
    "PRIMARY_CALENDAR_ID": "calendar_id",
    "TIME_ZONE": "timezone",
    "GOOGLE_APPLICATION_CREDENTIALS": "credentials_file",
    "GOOGLE_CREDENTIALS": "credentials_json",
}


class ServerConfig(BaseModel):
    """HTTP server settings."""
    host: str = "0.0.0.0"
    port: int = 3000

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate port is a usable TCP port."""
        if not 0 < v < 65536:
            raise ValueError(f"Port must be between 1 and 65535, got {v}")
        return v


class AppConfig(BaseModel):
    """Application configuration."""
    calendar_id: str = "primary"
    timezone: str = "Europe/Madrid"
    work_start: time = time(9, 0)
    work_end: time = time(18, 0)
    slot_granularity: int = 30
    strict_busy_data: bool = False
    summary_template: str = "Cita - {name}"
    default_description: str = "Reservado vía Al Norte AI"
    credentials_file: Optional[Path] = None
    credentials_json: Optional[str] = Field(default=None, repr=False)
    server: ServerConfig = Field(default_factory=ServerConfig)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Ensure the timezone is a known IANA identifier."""
        if not is_valid_timezone(value):
            raise ValueError(f"Unknown timezone: {value!r}")
        return value

    @field_validator("work_start", "work_end", mode="before")
    @classmethod
    def coerce_sexagesimal(cls, value):
        """
        YAML 1.1 reads an unquoted 18:00 as the base-60 integer 1080,
        i.e. minutes since midnight.
        """
        if isinstance(value, int) and not isinstance(value, bool):
            hours, minutes = divmod(value, 60)
            return time(hours, minutes)
        return value

    @field_validator("slot_granularity")
    @classmethod
    def validate_granularity(cls, value: int) -> int:
        """Ensure slot duration is positive."""
        if value <= 0:
            raise ValueError("slot_granularity must be greater than zero")
        return value

    @field_validator("summary_template")
    @classmethod
    def validate_summary_template(cls, value: str) -> str:
        if "{name}" not in value:
            raise ValueError("summary_template must contain '{name}'")
        return value

    @model_validator(mode="after")
    def validate_hours_order(self) -> "AppConfig":
        """Ensure the configured window opens before it closes."""
        if self.work_end <= self.work_start:
            raise ValueError("work_end must be later than work_start")
        return self

    def working_hours(self, timezone: Optional[str] = None) -> WorkingHours:
        """Build the domain working hours, optionally in another timezone."""
        return WorkingHours(
            start_time=self.work_start,
            end_time=self.work_end,
            timezone=timezone or self.timezone,
        )

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        return cls(**_read_yaml(config_path))


def load_config(
    config_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> AppConfig:
    """
    Build the effective configuration.

    YAML values (explicit path, or the default path when it exists) are
    overlaid with environment variables. Without any file the defaults apply.

    Raises:
        FileNotFoundError: If an explicit ``config_path`` doesn't exist
        ValueError: If the merged config is invalid
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    if config_path is not None and not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    path = config_path or get_default_config_path()
    data = _read_yaml(path) if path.exists() else {}

    for env_name, field_name in ENV_OVERRIDES.items():
        value = environ.get(env_name)
        if value:
            data[field_name] = value

    port = environ.get("PORT")
    if port:
        server = dict(data.get("server") or {})
        server["port"] = port
        data["server"] = server

    return AppConfig(**data)


def _read_yaml(config_path: Path) -> dict:
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ValueError("Config file must contain a mapping at the root level.")

    return data


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
