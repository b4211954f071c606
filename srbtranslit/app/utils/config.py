import os
from pathlib import Path
from typing import Optional

import toml
from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..exceptions import ConfigurationError


class StorageConfig(BaseModel):
    """Where rules and throttle timestamps are persisted."""

    backend: str = "database"
    dsn: str = "sqlite+aiosqlite:///srbtranslit.db"
    echo: bool = False

    @field_validator('backend')
    @classmethod
    def validate_backend(cls, v: str) -> str:
        if v not in ("memory", "database"):
            raise ConfigurationError(f"Unsupported storage backend: {v}")
        return v

    @field_validator('dsn')
    @classmethod
    def validate_dsn(cls, v: str) -> str:
        if not v.startswith(('mysql', 'postgresql', 'sqlite')):
            raise ConfigurationError(f"Unsupported database driver: {v.split(':')[0]}")
        return v


class DomainsConfig(BaseModel):
    known_second_level: list[str] = Field(default_factory=lambda: [
        "co", "com", "net", "org", "gov", "edu", "ac"
    ])

    @field_validator('known_second_level')
    @classmethod
    def validate_labels(cls, v: list[str]) -> list[str]:
        labels = [label.strip().lower() for label in v]
        if any(not label or "." in label for label in labels):
            raise ConfigurationError("known_second_level entries must be single labels")
        return labels


class ThrottleConfig(BaseModel):
    window_hours: float = 6

    @field_validator('window_hours')
    @classmethod
    def validate_window(cls, v: float) -> float:
        if v <= 0:
            raise ConfigurationError("window_hours must be positive")
        return v

    @property
    def window_ms(self) -> int:
        return int(self.window_hours * 60 * 60 * 1000)


class PermissionsConfig(BaseModel):
    # Retry with the wildcard-only and exact-only pattern when the pair is refused
    fallback_requests: bool = True


class NotificationsConfig(BaseModel):
    title: str = "srbTranslit needs permission"
    message: str = (
        "Click the srbTranslit toolbar icon to grant access to {domain} "
        "so it can auto-transliterate."
    )
    icon: str = "is-on.png"

    @model_validator(mode='after')
    def validate_message(self):
        """The message template must name the domain it is about."""
        if "{domain}" not in self.message:
            raise ConfigurationError("notifications.message must contain {domain}")
        return self


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file_path: Optional[str] = None
    max_bytes: int = 10485760
    backup_count: int = 5

    @field_validator('level')
    @classmethod
    def validate_level(cls, v: str) -> str:
        v = v.upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ConfigurationError(f"Unknown log level: {v}")
        return v


class Config(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="SRB_",
        env_nested_delimiter="__",
    )

    storage: StorageConfig = Field(default_factory=StorageConfig)
    domains: DomainsConfig = Field(default_factory=DomainsConfig)
    throttle: ThrottleConfig = Field(default_factory=ThrottleConfig)
    permissions: PermissionsConfig = Field(default_factory=PermissionsConfig)
    notifications: NotificationsConfig = Field(default_factory=NotificationsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_toml(cls, path: str | Path) -> "Config":
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, "r") as f:
            data = toml.load(f)

        return cls(**data)


_config: Optional[Config] = None


def load_config(path: Optional[str | Path] = None) -> Config:
    global _config
    if _config is None:
        if path is None:
            path = os.environ.get("SRB_CONFIG", "srbtranslit.toml")

        config_path = Path(path)
        if config_path.exists():
            _config = Config.from_toml(config_path)
        else:
            _config = Config()

    return _config


def get_config() -> Config:
    if _config is None:
        return load_config()
    return _config
