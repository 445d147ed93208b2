"""
Pydantic Settings for muxops configuration.

Provides settings loading from TOML files, environment variables, and defaults.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

try:
    import tomllib
except ImportError:
    import tomli as tomllib

from pydantic import Field, PrivateAttr, ValidationError, model_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from .exceptions import ConfigFileError, ConfigValidationError
from .models.config import (
    ComposeConfig,
    CoverageConfig,
    ExecutionConfig,
    LoggingConfig,
    MuxopsConfig,
    ProjectConfig,
    ServiceConfig,
    ToolchainConfig,
    default_services,
)

CONFIG_DIR_NAME = ".muxops"
CONFIG_FILE_NAME = "config.toml"


def _get_logger():
    from ..services.logging import NullLogger
    from .di import resolve_or_default
    from .interfaces.logger import ILogger

    return resolve_or_default(ILogger, NullLogger)


def find_config_file(start_dir: str | None = None) -> Path | None:
    """
    Find .muxops/config.toml by walking up from start_dir (or cwd).

    Returns:
        Path to config file, or None if not found.
    """
    start = Path(start_dir) if start_dir else Path.cwd()

    for parent in [start, *list(start.parents)]:
        config_path = parent / CONFIG_DIR_NAME / CONFIG_FILE_NAME
        if config_path.exists():
            return config_path

        # Also check for pyproject.toml with [tool.muxops] section
        pyproject = parent / "pyproject.toml"
        if pyproject.exists():
            try:
                with open(pyproject, "rb") as f:
                    data = tomllib.load(f)
                if "tool" in data and "muxops" in data["tool"]:
                    return pyproject
            except tomllib.TOMLDecodeError as e:
                _get_logger().debug("Failed to parse pyproject.toml at %s: %s", pyproject, e)
            except OSError as e:
                _get_logger().debug("Failed to read pyproject.toml at %s: %s", pyproject, e)

    return None


def project_root_for(config_path: Path | None, start_dir: str | None = None) -> Path:
    """Directory the configured relative paths are resolved against."""
    if config_path is None:
        return (Path(start_dir) if start_dir else Path.cwd()).resolve()
    if config_path.name == "pyproject.toml":
        return config_path.parent.resolve()
    return config_path.parent.parent.resolve()


def read_config_file(path: Path) -> dict[str, Any]:
    """
    Read a config file, unwrapping [tool.muxops] for pyproject.toml.

    Raises:
        ConfigFileError: If the file cannot be read or parsed
    """
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigFileError(
            f"Failed to parse config file: {e}", file_path=str(path), cause=e
        ) from e
    except OSError as e:
        raise ConfigFileError(
            f"Failed to read config file: {e}", file_path=str(path), cause=e
        ) from e

    if path.name == "pyproject.toml":
        data = data.get("tool", {}).get("muxops", {})
    return data


class TomlConfigSource(PydanticBaseSettingsSource):
    """Custom settings source that loads from TOML config files."""

    def __init__(
        self,
        settings_cls: type[BaseSettings],
        config_path: Path | None = None,
        start_dir: str | None = None,
    ):
        super().__init__(settings_cls)
        self._config_path = config_path
        self._start_dir = start_dir
        self._data: dict[str, Any] | None = None

    def _load_toml(self) -> dict[str, Any]:
        """Load and cache TOML data."""
        if self._data is not None:
            return self._data

        path = self._config_path
        if path is None:
            path = find_config_file(self._start_dir)

        self._data = read_config_file(path) if path is not None else {}
        return self._data

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Get field value from TOML data."""
        data = self._load_toml()
        field_value = data.get(field_name)
        return field_value, field_name, False

    def __call__(self) -> dict[str, Any]:
        """Return all TOML data for settings initialization."""
        return self._load_toml()


class MuxopsSettings(BaseSettings):
    """muxops configuration settings with TOML and environment variable support.

    Priority (highest to lowest):
    1. Explicit init values
    2. Environment variables (MUXOPS_<section>__<field>)
    3. TOML config file (.muxops/config.toml or pyproject.toml [tool.muxops])
    4. Model defaults
    """

    model_config = {
        "env_prefix": "MUXOPS_",
        "env_nested_delimiter": "__",
        "extra": "ignore",
        "frozen": True,
    }

    project: ProjectConfig = Field(default_factory=ProjectConfig)
    services: list[ServiceConfig] = Field(default_factory=default_services)
    toolchain: ToolchainConfig = Field(default_factory=ToolchainConfig)
    compose: ComposeConfig = Field(default_factory=ComposeConfig)
    coverage: CoverageConfig = Field(default_factory=CoverageConfig)
    execution: ExecutionConfig = Field(default_factory=ExecutionConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    # Internal fields (not from config)
    _config_file: Path | None = PrivateAttr(default=None)
    _project_root: Path = PrivateAttr(default_factory=Path.cwd)

    @model_validator(mode="after")
    def check_unique_services(self) -> MuxopsSettings:
        names = [s.name for s in self.services]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"duplicate service name(s): {', '.join(duplicates)}")
        return self

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources to add TOML loading.

        Note: We can't pass config_path/start_dir here easily, so we use
        a module-level variable as a workaround.
        """
        toml_source = TomlConfigSource(
            settings_cls,
            config_path=_current_config_path,
            start_dir=_current_start_dir,
        )
        return (
            init_settings,
            env_settings,
            toml_source,
        )

    @property
    def config_file(self) -> Path | None:
        return self._config_file

    @property
    def project_root(self) -> Path:
        return self._project_root

    def to_config(self) -> MuxopsConfig:
        """Snapshot the settings as a plain MuxopsConfig."""
        return MuxopsConfig.model_validate(self.to_dict())

    def to_dict(self) -> dict[str, Any]:
        """Convert settings to a nested dict."""
        return {
            "project": self.project.model_dump(),
            "services": [s.model_dump() for s in self.services],
            "toolchain": self.toolchain.model_dump(),
            "compose": self.compose.model_dump(),
            "coverage": self.coverage.model_dump(),
            "execution": self.execution.model_dump(),
            "logging": self.logging.model_dump(),
        }


# Module-level variables for passing to settings_customise_sources
_current_config_path: Path | None = None
_current_start_dir: str | None = None


def load_settings(
    config_path: Path | None = None,
    start_dir: str | None = None,
    **overrides: Any,
) -> MuxopsSettings:
    """Load muxops settings from config file and environment.

    Args:
        config_path: Explicit path to config file
        start_dir: Directory to start searching from (if config_path not given)
        **overrides: Explicit values taking precedence over every other source

    Returns:
        MuxopsSettings instance with all sources merged

    Raises:
        ConfigFileError: If the config file cannot be read or parsed
        ConfigValidationError: If a configured value is invalid
    """
    global _current_config_path, _current_start_dir

    resolved_path = config_path if config_path is not None else find_config_file(start_dir)
    if resolved_path is not None:
        # Surface unreadable files as ConfigFileError before pydantic sees them
        read_config_file(resolved_path)

    _current_config_path = resolved_path
    _current_start_dir = start_dir

    try:
        settings = MuxopsSettings(**overrides)
    except ValidationError as e:
        first = e.errors()[0] if e.errors() else {}
        key = ".".join(str(part) for part in first.get("loc", ()))
        raise ConfigValidationError(
            f"Invalid configuration: {first.get('msg', e)}",
            key=key or None,
            context={"file_path": str(resolved_path)} if resolved_path else None,
            cause=e,
        ) from e
    finally:
        # Reset module-level vars
        _current_config_path = None
        _current_start_dir = None

    settings._config_file = resolved_path
    settings._project_root = project_root_for(resolved_path, start_dir)
    _get_logger().debug(
        "Loaded settings: config_file=%s project_root=%s", resolved_path, settings.project_root
    )
    return settings
