"""Configuration loading with pydantic-settings.

Supports loading configuration from multiple sources with precedence:
1. Direct kwargs (highest priority, used for CLI overrides)
2. Environment variables (BARRELWATCH__KEY, BARRELWATCH__LOGGING__LEVEL)
3. Project config (barrelwatch.yaml or .barrelwatch.yaml)
4. Built-in defaults (lowest priority)

The YAML file may use ``log_level`` and ``enable_timestamp`` at the top level
as shorthands for ``logging.level`` and ``logging.timestamps``.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from barrelwatch.config.constants import (
    CONFIG_FILENAMES,
    DEFAULT_DEBOUNCE_MS,
    DEFAULT_EXTENSIONS,
    DEFAULT_INDEX_EXTENSION,
    DEFAULT_MAX_SCAN_DEPTH,
)
from barrelwatch.config.models import (
    BarrelWatchConfig,
    DirectoryEntry,
    ExportMode,
    LoggingConfig,
)
from barrelwatch.core.errors import ConfigError


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open() as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError.parse_error(str(path), str(e)) from e
    if not isinstance(data, dict):
        raise ConfigError.parse_error(str(path), "top level must be a mapping")
    return data


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


_SHORTHANDS = {
    "log_level": "level",
    "enable_timestamp": "timestamps",
}


def _apply_shorthands(data: dict[str, Any]) -> dict[str, Any]:
    """Fold top-level ``log_level`` / ``enable_timestamp`` into ``logging``."""
    if not any(key in data for key in _SHORTHANDS):
        return data
    data = data.copy()
    logging_overrides = {
        target: data.pop(key) for key, target in _SHORTHANDS.items() if key in data
    }
    return _deep_merge(data, {"logging": logging_overrides})


class _YamlSource(PydanticBaseSettingsSource):
    """Settings source that reads from pre-loaded YAML config."""

    def __init__(self, settings_cls: type[BaseSettings], yaml_config: dict[str, Any]) -> None:
        super().__init__(settings_cls)
        self._yaml_config = yaml_config

    def get_field_value(
        self,
        field: Any,  # noqa: ARG002
        field_name: str,
    ) -> tuple[Any, str, bool]:
        val = self._yaml_config.get(field_name)
        return val, field_name, val is not None

    def __call__(self) -> dict[str, Any]:
        return self._yaml_config


def _make_settings_class(yaml_config: dict[str, Any]) -> type[BaseSettings]:
    """Create a Settings class with instance-based YAML source."""

    class BarrelWatchSettings(BaseSettings):
        """Root config. Env vars: BARRELWATCH__DEBOUNCE_MS, BARRELWATCH__LOGGING__LEVEL, etc."""

        model_config = SettingsConfigDict(
            env_prefix="BARRELWATCH__",
            env_nested_delimiter="__",
            case_sensitive=False,
        )

        dirs: list[str | DirectoryEntry] = []
        extensions: list[str] = list(DEFAULT_EXTENSIONS)
        debounce_ms: int = DEFAULT_DEBOUNCE_MS
        min_debounce_ms: int = 0
        mode: ExportMode = ExportMode.EXPORTS_ONLY
        index_extension: str = DEFAULT_INDEX_EXTENSION
        max_scan_depth: int = DEFAULT_MAX_SCAN_DEPTH
        logging: LoggingConfig = LoggingConfig()

        @classmethod
        def settings_customise_sources(
            cls,
            settings_cls: type[BaseSettings],
            init_settings: PydanticBaseSettingsSource,
            env_settings: PydanticBaseSettingsSource,
            dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
            file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        ) -> tuple[PydanticBaseSettingsSource, ...]:
            # Precedence (first wins): init kwargs > env vars > yaml file
            return (init_settings, env_settings, _YamlSource(settings_cls, yaml_config))

    return BarrelWatchSettings


def find_config_file(project_root: Path) -> Path | None:
    """Return the first config file present in ``project_root``."""
    for name in CONFIG_FILENAMES:
        candidate = project_root / name
        if candidate.is_file():
            return candidate
    return None


def load_config(
    project_root: Path | None = None,
    *,
    config_path: Path | None = None,
    **kwargs: Any,
) -> BarrelWatchConfig:
    """Load config: defaults < YAML file < env vars < kwargs.

    Args:
        project_root: Directory searched for barrelwatch.yaml.
                      Defaults to current working directory.
        config_path: Explicit config file; must exist when given.
        **kwargs: Override values (highest precedence).

    Returns:
        Fully resolved configuration object.

    Raises:
        ConfigError: On missing explicit file, invalid YAML or validation errors.
    """
    project_root = project_root or Path.cwd()

    if config_path is not None and not config_path.is_file():
        raise ConfigError.file_not_found(str(config_path))

    path = config_path or find_config_file(project_root)
    yaml_config = _apply_shorthands(_load_yaml(path)) if path else {}

    settings_cls = _make_settings_class(yaml_config)
    overrides = {key: value for key, value in kwargs.items() if value is not None}
    try:
        settings = settings_cls(**overrides)
        return BarrelWatchConfig.model_validate(settings.model_dump())
    except ValidationError as e:
        err = e.errors()[0]
        field = ".".join(str(loc) for loc in err["loc"])
        raise ConfigError.invalid_value(field, err.get("input"), err["msg"]) from e
