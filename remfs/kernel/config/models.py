"""Configuration data models for remfs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from remfs.kernel.exceptions import ValidationError


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Logging configuration for remfs.

    Attributes
    ----------
    level : str, default="WARNING"
        Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    format : str, default="structured"
        Output format (console, json, structured, rich)
    output_file : str | None, default=None
        Optional file path to write logs to
    use_color : bool, default=True
        Use ANSI color codes (auto-disabled for non-TTY)
    include_timestamp : bool, default=True
        Include timestamp in log output
    enable_stdlib_bridge : bool, default=False
        Route stdlib logging (httpx) through loguru

    Examples
    --------
    TOML configuration:

    ```toml
    [tool.remfs.logging]
    level = "DEBUG"
    format = "rich"
    ```

    Environment variable overrides:

    ```bash
    export REMFS_LOG_LEVEL=DEBUG
    export REMFS_LOG_FORMAT=json
    export REMFS_LOG_FILE=/var/log/remfs/client.log
    ```
    """

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    format: Literal["console", "json", "structured", "rich"] = "structured"
    output_file: str | None = None
    use_color: bool = True
    include_timestamp: bool = True
    enable_stdlib_bridge: bool = False


@dataclass(frozen=True, slots=True)
class ClientConfig:
    """Remote store connection settings.

    Attributes
    ----------
    base_url : str
        Root URL of the file store API.
    token : str | None
        Caller credential, sent as the ``auth_param`` query parameter.
    principal : str | None
        Acting principal; inferred from the index when omitted.
    timeout : float, default=30.0
        Per-request timeout in seconds.
    index_endpoint, records_endpoint, update_endpoint : str
        Paths of the three remote operations.
    auth_param : str, default="auth"
        Query parameter carrying the credential.
    """

    base_url: str = ""
    token: str | None = None
    principal: str | None = None
    timeout: float = 30.0
    index_endpoint: str = "/files/index"
    records_endpoint: str = "/files/records"
    update_endpoint: str = "/files/update"
    auth_param: str = "auth"

    def __post_init__(self) -> None:
        """Validate client settings.

        Raises
        ------
        ValidationError
            If timeout is not positive or an endpoint is not absolute
        """
        if not self.timeout > 0:
            raise ValidationError("timeout", "must be positive", self.timeout)
        for name in ("index_endpoint", "records_endpoint", "update_endpoint"):
            if not getattr(self, name).startswith("/"):
                raise ValidationError(name, "must start with '/'", getattr(self, name))


@dataclass(slots=True)
class RemFSConfig:
    """Complete remfs configuration."""

    client: ClientConfig = field(default_factory=ClientConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


__all__ = ["ClientConfig", "LoggingConfig", "RemFSConfig"]
