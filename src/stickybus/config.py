"""Configuration management for bus instances."""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
import os
from pathlib import Path
from typing import Any, Protocol

from pydantic import BaseModel, Field
import yaml  # type: ignore[import-untyped]

from stickybus.dispatch.executor import DEFAULT_KEEPALIVE_SECONDS, DEFAULT_THREAD_NAME_PREFIX

ENV_PREFIX = "STICKYBUS_"


class ConfigSource(Protocol):
    """Strategy interface for pulling configuration values from a backing store."""

    def get(self, key: str) -> str | None: ...


class EnvConfigSource:
    """Process environment; always consulted first."""

    def get(self, key: str) -> str | None:
        return os.environ.get(key)


def parse_dotenv(text: str) -> dict[str, str]:
    """Parse ``KEY=value`` lines, skipping blanks and comments.

    A value wrapped in matching single or double quotes is unwrapped.
    """
    values: dict[str, str] = {}
    for line in text.splitlines():
        key, sep, value = line.strip().partition("=")
        if not sep or key.startswith("#"):
            continue
        value = value.strip()
        if value[:1] in {'"', "'"} and value.endswith(value[0]) and len(value) > 1:
            value = value[1:-1]
        values[key.strip()] = value
    return values


@dataclass(slots=True)
class DotEnvConfigSource:
    """Settings file for bus tunables; a missing file yields no values."""

    path: Path = Path(".env")
    _values: dict[str, str] | None = field(default=None, init=False)

    def get(self, key: str) -> str | None:
        if self._values is None:
            text = self.path.read_text(encoding="utf-8") if self.path.is_file() else ""
            self._values = parse_dotenv(text)
        return self._values.get(key)


@dataclass(slots=True)
class ConfigAdapter:
    """First non-None value across ``sources``, in order."""

    sources: tuple[ConfigSource, ...]

    def get(self, key: str, default: str | None = None) -> str | None:
        for source in self.sources:
            value = source.get(key)
            if value is not None:
                return value
        return default


@lru_cache
def _config_adapter() -> ConfigAdapter:
    dotenv_path = Path(os.getenv(f"{ENV_PREFIX}DOTENV_PATH", ".env"))
    return ConfigAdapter((EnvConfigSource(), DotEnvConfigSource(path=dotenv_path)))


def get_config_value(key: str, default: str | None = None) -> str | None:
    return _config_adapter().get(key, default)


class BusSettings(BaseModel):
    """Tunables for an EventBus and its background executor."""

    executor_keepalive_seconds: float = Field(default=DEFAULT_KEEPALIVE_SECONDS, gt=0)
    thread_name_prefix: str = Field(default=DEFAULT_THREAD_NAME_PREFIX, min_length=1)
    log_level: str = "INFO"

    @classmethod
    def load(cls, path: Path) -> BusSettings:
        """Load settings from a YAML mapping; missing keys keep their defaults."""
        data: Any = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{path} must contain a mapping of settings")
        return cls.model_validate(data)

    @classmethod
    def from_config(cls) -> BusSettings:
        config_path = get_config_value(f"{ENV_PREFIX}CONFIG")
        base = cls.load(Path(config_path)) if config_path else cls()
        overrides: dict[str, Any] = {}
        for name in cls.model_fields:
            value = get_config_value(f"{ENV_PREFIX}{name.upper()}")
            if value is not None:
                overrides[name] = value
        if not overrides:
            return base
        return cls.model_validate({**base.model_dump(), **overrides})


@lru_cache
def get_bus_settings() -> BusSettings:
    return BusSettings.from_config()
