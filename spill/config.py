"""
Spill Configuration
"""

from __future__ import annotations
import json
import logging
from dataclasses import dataclass, field, asdict
from typing import List, Optional

from spill.constants import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_CALLBACK_PORT,
    DEFAULT_LISTEN_HOST,
    DEFAULT_TARGET_PORT,
    MAX_PORT,
    MIN_PORT,
    PRINTER_PATH,
)
from spill.core.types import CallbackAddress
from spill.errors import ConfigFileError, InvalidPortError

logger = logging.getLogger(__name__)


def parse_port(value) -> int:
    """
    Parse a port number from text or int.

    Raises:
        InvalidPortError: Not a number, or outside 1..65535
    """
    if isinstance(value, bool):
        raise InvalidPortError(value)
    try:
        port = int(str(value).strip())
    except (TypeError, ValueError):
        raise InvalidPortError(value)
    if not MIN_PORT <= port <= MAX_PORT:
        raise InvalidPortError(value)
    return port


@dataclass
class DispatchConfig:
    """Outbound UDP configuration."""
    target_port: int = DEFAULT_TARGET_PORT
    batch_size: int = DEFAULT_BATCH_SIZE


@dataclass
class ListenerConfig:
    """Callback listener configuration."""
    host: str = DEFAULT_LISTEN_HOST
    port: int = DEFAULT_CALLBACK_PORT
    callback_host: str = ""
    path: str = PRINTER_PATH


@dataclass
class LogConfig:
    """Logging configuration."""
    level: str = "INFO"
    file: Optional[str] = None
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    max_size_mb: int = 100
    backup_count: int = 5


@dataclass
class SpillConfig:
    """
    Complete run configuration.

    All settings for one scan-and-listen run.
    """
    target: str = ""
    wait_forever: bool = True

    # Sub-configurations
    dispatch: DispatchConfig = field(default_factory=DispatchConfig)
    listener: ListenerConfig = field(default_factory=ListenerConfig)
    log: LogConfig = field(default_factory=LogConfig)

    @property
    def callback(self) -> CallbackAddress:
        """Address advertised to targets for their callback."""
        return CallbackAddress(
            host=self.listener.callback_host,
            port=self.listener.port,
            path=self.listener.path,
        )

    def validate(self) -> List[str]:
        """
        Validate configuration.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if not isinstance(self.target, str) or not self.target:
            errors.append("No target specified (address, CIDR block or file)")

        if not _is_int(self.dispatch.target_port) or not MIN_PORT <= self.dispatch.target_port <= MAX_PORT:
            errors.append(f"Invalid target port: {self.dispatch.target_port}")

        if not _is_int(self.dispatch.batch_size) or self.dispatch.batch_size < 1:
            errors.append("batch_size must be at least 1")

        if not _is_int(self.listener.port) or not MIN_PORT <= self.listener.port <= MAX_PORT:
            errors.append(f"Invalid listener port: {self.listener.port}")

        if not self.listener.callback_host:
            errors.append("No callback address specified")

        if not isinstance(self.listener.path, str) or not self.listener.path.startswith("/"):
            errors.append(f"Listener path must start with '/': {self.listener.path}")

        level = self.log.level
        if not isinstance(level, str) or not isinstance(getattr(logging, level.upper(), None), int):
            errors.append(f"Unknown log level: {self.log.level}")

        return errors

    def save(self, path: str) -> None:
        """Save configuration to file."""
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

        logger.info(f"Configuration saved to {path}")

    @classmethod
    def load(cls, path: str) -> "SpillConfig":
        """
        Load configuration from file.

        Raises:
            ConfigFileError: Unreadable file, bad JSON or unknown keys
        """
        try:
            with open(path, 'r') as f:
                data = json.load(f)
        except OSError as e:
            raise ConfigFileError(path, str(e))
        except json.JSONDecodeError as e:
            raise ConfigFileError(path, f"invalid JSON: {e}")

        if not isinstance(data, dict):
            raise ConfigFileError(path, "top level must be an object")

        config = cls(
            target=data.get("target", ""),
            wait_forever=data.get("wait_forever", True),
        )

        try:
            if "dispatch" in data:
                config.dispatch = DispatchConfig(**data["dispatch"])

            if "listener" in data:
                config.listener = ListenerConfig(**data["listener"])

            if "log" in data:
                config.log = LogConfig(**data["log"])
        except TypeError as e:
            raise ConfigFileError(path, str(e))

        _check_loaded(config, path)

        logger.info(f"Configuration loaded from {path}")
        return config

    def to_dict(self) -> dict:
        """Export configuration as dictionary."""
        return {
            "target": self.target,
            "wait_forever": self.wait_forever,
            "dispatch": asdict(self.dispatch),
            "listener": asdict(self.listener),
            "log": asdict(self.log),
        }


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _require(path: str, name: str, ok: bool, value) -> None:
    if not ok:
        raise ConfigFileError(path, f"bad value for {name}: {value!r}")


def _check_loaded(config: SpillConfig, path: str) -> None:
    """
    Normalize values read from JSON.

    Ports may be numbers or numeric strings. Everything else must already
    have the type of its default.
    """
    try:
        config.dispatch.target_port = parse_port(config.dispatch.target_port)
        config.listener.port = parse_port(config.listener.port)
    except InvalidPortError as e:
        raise ConfigFileError(path, e.message)

    _require(path, "target", isinstance(config.target, str), config.target)
    _require(path, "wait_forever", isinstance(config.wait_forever, bool), config.wait_forever)
    _require(path, "batch_size", _is_int(config.dispatch.batch_size), config.dispatch.batch_size)

    for name in ("host", "callback_host", "path"):
        value = getattr(config.listener, name)
        _require(path, name, isinstance(value, str), value)

    log = config.log
    _require(path, "level", isinstance(log.level, str), log.level)
    _require(path, "format", isinstance(log.format, str), log.format)
    _require(path, "file", log.file is None or isinstance(log.file, str), log.file)
    _require(path, "max_size_mb", _is_int(log.max_size_mb), log.max_size_mb)
    _require(path, "backup_count", _is_int(log.backup_count), log.backup_count)


def setup_logging(config: LogConfig) -> None:
    """Configure logging based on config."""
    level = getattr(logging, config.level.upper(), logging.INFO)

    handlers = [logging.StreamHandler()]

    if config.file:
        from logging.handlers import RotatingFileHandler
        file_handler = RotatingFileHandler(
            config.file,
            maxBytes=config.max_size_mb * 1024 * 1024,
            backupCount=config.backup_count,
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        format=config.format,
        handlers=handlers,
    )
