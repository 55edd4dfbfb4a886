"""
Configuration management for the crontab editor.
"""

import os
from typing import Dict, Any, Optional, List
from pathlib import Path
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class StoreConfig(BaseModel):
    """Configuration for the crontab backing store."""
    model_config = ConfigDict(validate_assignment=True)

    backend: str = "command"  # command | memory
    crontab_binary: str = "crontab"
    user: Optional[str] = None  # passed as `crontab -u <user>` when set
    timeout: float = 10.0  # seconds per crontab invocation
    empty_markers: List[str] = Field(default_factory=lambda: ["no crontab for"])
    temp_dir: Optional[Path] = None

    @field_validator('backend')
    @classmethod
    def validate_backend(cls, v):
        v = (v or "command").strip().lower()
        if v not in ("command", "memory"):
            raise ValueError(f"Unknown store backend: {v}")
        return v

    @field_validator('timeout')
    @classmethod
    def validate_timeout(cls, v):
        if v <= 0:
            raise ValueError("Store timeout must be positive")
        return v

    def base_command(self) -> List[str]:
        """Binary plus the optional user selector."""
        cmd = [self.crontab_binary]
        if self.user:
            cmd += ["-u", self.user]
        return cmd


class WebConfig(BaseModel):
    """Configuration for web application."""
    host: str = "0.0.0.0"
    port: int = 8080
    debug: bool = False
    max_content_length: int = 1024 * 1024  # 1MB, a crontab is small
    cors_origins: str = "*"


class LoggingConfig(BaseModel):
    """Configuration for loguru sinks."""
    level: str = "INFO"
    file: Optional[Path] = None
    rotation: str = "10 MB"
    format: str = "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{message}</cyan>"

    @field_validator('level')
    @classmethod
    def normalize_level(cls, v):
        return (v or "INFO").upper()


class AppConfig(BaseSettings):
    """Main application configuration."""
    store: StoreConfig = Field(default_factory=StoreConfig)
    web: WebConfig = Field(default_factory=WebConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        env_prefix='CRONEDIT_',
        extra='ignore',
    )

    @classmethod
    def from_env(cls) -> 'AppConfig':
        """Create configuration from environment variables."""
        config = cls()

        if os.getenv('CRONEDIT_STORE_BACKEND'):
            config.store.backend = os.getenv('CRONEDIT_STORE_BACKEND')
        if os.getenv('CRONEDIT_CRONTAB_BINARY'):
            config.store.crontab_binary = os.getenv('CRONEDIT_CRONTAB_BINARY')
        if os.getenv('CRONEDIT_CRONTAB_USER'):
            config.store.user = os.getenv('CRONEDIT_CRONTAB_USER')
        if os.getenv('CRONEDIT_TEMP_DIR'):
            config.store.temp_dir = Path(os.getenv('CRONEDIT_TEMP_DIR'))
        if os.getenv('CRONEDIT_EMPTY_MARKERS'):
            markers = os.getenv('CRONEDIT_EMPTY_MARKERS')
            config.store.empty_markers = [m.strip() for m in markers.split(',') if m.strip()]
        for key_env, section, attr, cast in [
            ('CRONEDIT_STORE_TIMEOUT', config.store, 'timeout', float),
            ('CRONEDIT_PORT', config.web, 'port', int),
            ('CRONEDIT_MAX_CONTENT_LENGTH', config.web, 'max_content_length', int),
        ]:
            if os.getenv(key_env):
                try:
                    value = cast(os.getenv(key_env))
                except ValueError:
                    raise ValueError(f"{key_env} must be a number, got {os.getenv(key_env)!r}")
                setattr(section, attr, value)

        if os.getenv('CRONEDIT_HOST'):
            config.web.host = os.getenv('CRONEDIT_HOST')
        if os.getenv('CRONEDIT_DEBUG'):
            config.web.debug = os.getenv('CRONEDIT_DEBUG').lower() == 'true'
        if os.getenv('CRONEDIT_CORS_ORIGINS'):
            config.web.cors_origins = os.getenv('CRONEDIT_CORS_ORIGINS')

        if os.getenv('CRONEDIT_LOG_LEVEL'):
            config.logging.level = os.getenv('CRONEDIT_LOG_LEVEL').upper()
        if os.getenv('CRONEDIT_LOG_FILE'):
            config.logging.file = Path(os.getenv('CRONEDIT_LOG_FILE'))

        return config

    @classmethod
    def from_yaml(cls, path: Path) -> 'AppConfig':
        """Create configuration from YAML file."""
        import yaml

        with open(path, 'r') as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            'store': {
                **self.store.model_dump(),
                'temp_dir': str(self.store.temp_dir) if self.store.temp_dir else None,
            },
            'web': self.web.model_dump(),
            'logging': {
                **self.logging.model_dump(),
                'file': str(self.logging.file) if self.logging.file else None,
            },
        }


# Global configuration instance
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = AppConfig.from_env()
    return _config


def set_config(config: AppConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset the global configuration instance."""
    global _config
    _config = None
