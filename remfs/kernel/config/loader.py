"""Configuration loader for remfs.

Supports two config sources:

1. **kind: Config YAML**: loaded via explicit path or ``REMFS_CONFIG_PATH``.
2. **pyproject.toml [tool.remfs]**: auto-discovery fallback.

``${VAR}`` placeholders are substituted from the environment, then the
``REMFS_*`` environment overrides are applied on top.

Example YAML::

    kind: Config
    spec:
      client:
        base_url: https://files.example.com
        token: ${REMFS_TOKEN}
      logging:
        level: INFO
"""

from __future__ import annotations

import os
import re
import tomllib
from pathlib import Path
from typing import Any, Literal, cast

import yaml

from remfs.kernel.config.models import ClientConfig, LoggingConfig, RemFSConfig
from remfs.kernel.exceptions import ConfigurationError, ValidationError
from remfs.kernel.logging import get_logger

_TRUTHY_VALUES = frozenset({"true", "1", "yes", "on", "enabled"})
_FALSY_VALUES = frozenset({"false", "0", "no", "off", "disabled"})

_CLIENT_ENV = {
    "REMFS_BASE_URL": "base_url",
    "REMFS_TOKEN": "token",
    "REMFS_PRINCIPAL": "principal",
    "REMFS_TIMEOUT": "timeout",
}

logger = get_logger(__name__)


def _parse_bool_env(value: str) -> bool:
    """Parse boolean from environment variable value.

    Raises
    ------
    ValueError
        If value is not a recognized boolean string
    """
    normalized = value.lower().strip()
    if normalized in _TRUTHY_VALUES:
        return True
    if normalized in _FALSY_VALUES:
        return False
    expected = sorted(_TRUTHY_VALUES | _FALSY_VALUES)
    raise ValueError(f"Invalid boolean value: {value!r}. Expected one of: {expected}")


class ConfigLoader:
    """Loads and processes remfs configuration files."""

    ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")

    def load_config_file(self, path: str | Path | None = None) -> RemFSConfig:
        """Load configuration from YAML or pyproject.toml.

        Parameters
        ----------
        path : str | Path | None
            Path to config file. If None, searches using discovery order.

        Raises
        ------
        FileNotFoundError
            If no configuration file is found
        ConfigurationError
            If the file is not a valid configuration
        """
        config_path = self._find_config_file(path)
        logger.info("Loading configuration from {path}", path=config_path)

        if config_path.suffix in (".yaml", ".yml"):
            data = self._load_yaml(config_path)
        else:
            data = self._load_toml(config_path)
        return self._parse_config(self._substitute_env_vars(data))

    def _load_yaml(self, config_path: Path) -> dict[str, Any]:
        with config_path.open("r", encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigurationError(config_path.name, f"invalid YAML: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(
                config_path.name, f"expected a mapping, got {type(data).__name__}"
            )
        if data.get("kind") != "Config":
            raise ConfigurationError(
                config_path.name,
                f"must use 'kind: Config' manifest format, got 'kind: {data.get('kind')}'",
            )
        spec = data.get("spec") or {}
        if not isinstance(spec, dict):
            raise ConfigurationError(config_path.name, "'spec' must be a mapping")
        return spec

    def _load_toml(self, config_path: Path) -> dict[str, Any]:
        with config_path.open("rb") as f:
            try:
                data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ConfigurationError(config_path.name, f"invalid TOML: {e}") from e

        if "tool" in data and "remfs" in data["tool"]:
            return data["tool"]["remfs"]
        if config_path.name == "pyproject.toml":
            logger.warning("No [tool.remfs] section found in pyproject.toml, using defaults")
            return {}
        return data

    def _find_config_file(self, path: str | Path | None) -> Path:
        """Find configuration file.

        Discovery order:
        1. Explicit path argument
        2. ``REMFS_CONFIG_PATH`` env var
        3. ``pyproject.toml`` with ``[tool.remfs]`` in CWD or a parent directory
        """
        if path:
            config_path = Path(path)
            if not config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            return config_path

        if env_path := os.getenv("REMFS_CONFIG_PATH"):
            config_path = Path(env_path)
            if config_path.exists():
                logger.debug("Using config from REMFS_CONFIG_PATH: {}", config_path)
                return config_path
            logger.warning("REMFS_CONFIG_PATH set but file not found: {}", config_path)

        current = Path.cwd()
        for directory in (current, *current.parents):
            pyproject = directory / "pyproject.toml"
            if pyproject.exists():
                with pyproject.open("rb") as f:
                    data = tomllib.load(f)
                if "remfs" in data.get("tool", {}):
                    return pyproject

        raise FileNotFoundError(
            "No configuration file found. Provide a kind: Config YAML path, "
            "set REMFS_CONFIG_PATH, or add [tool.remfs] to pyproject.toml"
        )

    def _substitute_env_vars(self, data: Any) -> Any:
        """Recursively replace ``${VAR}`` with environment values; unknown vars are kept."""
        if isinstance(data, str):

            def replacer(match: re.Match[str]) -> str:
                value = os.environ.get(match.group(1))
                if value is None:
                    logger.debug("Environment variable {} not set, keeping placeholder", match[0])
                    return match.group(0)
                return value

            return self.ENV_VAR_PATTERN.sub(replacer, data)

        if isinstance(data, dict):
            return {key: self._substitute_env_vars(value) for key, value in data.items()}

        if isinstance(data, list):
            return [self._substitute_env_vars(item) for item in data]

        return data

    def _parse_config(self, data: dict[str, Any]) -> RemFSConfig:
        return RemFSConfig(
            client=self._parse_client_config(data.get("client") or {}),
            logging=self._parse_logging_config(data.get("logging") or {}),
        )

    def _parse_client_config(self, client_data: dict[str, Any]) -> ClientConfig:
        """Parse client settings; ``REMFS_BASE_URL``, ``REMFS_TOKEN``,
        ``REMFS_PRINCIPAL`` and ``REMFS_TIMEOUT`` take precedence."""
        known = set(ClientConfig.__dataclass_fields__)
        unknown = set(client_data) - known
        if unknown:
            raise ConfigurationError("client", f"unknown keys: {sorted(unknown)}")

        values = dict(client_data)
        for env_name, key in _CLIENT_ENV.items():
            if env_value := os.getenv(env_name):
                values[key] = env_value
                logger.debug("Overriding client {} from env", key)

        if "timeout" in values:
            try:
                values["timeout"] = float(values["timeout"])
            except (TypeError, ValueError) as e:
                raise ConfigurationError("client", f"timeout is not a number: {e}") from e

        try:
            return ClientConfig(**values)
        except ValidationError as e:
            raise ConfigurationError("client", str(e)) from e

    def _parse_logging_config(self, logging_data: dict[str, Any]) -> LoggingConfig:
        """Parse logging configuration with environment variable overrides.

        - REMFS_LOG_LEVEL: Log level
        - REMFS_LOG_FORMAT: Output format
        - REMFS_LOG_FILE: Optional file path for log output
        - REMFS_LOG_COLOR: Use color output (true/false)
        """
        level = str(logging_data.get("level", "WARNING")).upper()
        format_type = str(logging_data.get("format", "structured")).lower()
        output_file = logging_data.get("output_file")
        use_color = logging_data.get("use_color", True)

        if env_level := os.getenv("REMFS_LOG_LEVEL"):
            level = env_level.upper()
        if env_format := os.getenv("REMFS_LOG_FORMAT"):
            format_type = env_format.lower()
        if env_file := os.getenv("REMFS_LOG_FILE"):
            output_file = env_file
        if env_color := os.getenv("REMFS_LOG_COLOR"):
            try:
                use_color = _parse_bool_env(env_color)
            except ValueError as e:
                logger.warning("Invalid REMFS_LOG_COLOR value: {}", e)

        return LoggingConfig(
            level=cast("Literal['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']", level),
            format=cast("Literal['console', 'json', 'structured', 'rich']", format_type),
            output_file=output_file,
            use_color=use_color,
            include_timestamp=logging_data.get("include_timestamp", True),
            enable_stdlib_bridge=logging_data.get("enable_stdlib_bridge", False),
        )


def get_default_config() -> RemFSConfig:
    """Configuration with every default, still honoring env overrides."""
    return ConfigLoader()._parse_config({})


def load_config(path: str | Path | None = None) -> RemFSConfig:
    """Load configuration from file or return defaults if none is found.

    An explicitly given path that does not exist is an error.
    """
    try:
        return ConfigLoader().load_config_file(path)
    except FileNotFoundError:
        if path:
            raise
        logger.info("No configuration file found, using defaults")
        return get_default_config()


__all__ = ["ConfigLoader", "get_default_config", "load_config"]
