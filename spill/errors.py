"""
Spill Error Handling

All error codes and exception classes.
"""

from enum import IntEnum
from typing import Optional, Any


class ErrorCode(IntEnum):
    """Spill error codes."""

    # 1xxx - General errors
    UNKNOWN_ERROR = 1000
    INVALID_PARAMETER = 1001

    # 2xxx - Configuration errors
    INVALID_TARGET = 2001
    TARGET_FILE_ERROR = 2002
    INVALID_PORT = 2003
    CONFIG_FILE_ERROR = 2004

    # 3xxx - Protocol errors
    MALFORMED_REQUEST = 3001
    UNSUPPORTED_VERSION = 3002
    ATTRIBUTE_TOO_LARGE = 3003

    # 4xxx - Network errors
    SEND_FAILED = 4001
    LISTENER_STARTUP_FAILED = 4002


class SpillError(Exception):
    """Base exception for all Spill errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: Optional[Any] = None
    ):
        self.code = code
        self.message = message
        self.details = details
        super().__init__(f"[{code.value}] {message}")

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        result = {
            "code": self.code.value,
            "name": self.code.name,
            "message": self.message,
        }
        if self.details is not None:
            result["details"] = self.details
        return result


# ==============================================================================
# General Errors (1xxx)
# ==============================================================================

class InvalidParameterError(SpillError):
    def __init__(self, param: str, message: str = ""):
        msg = f"Invalid parameter: {param}"
        if message:
            msg += f" - {message}"
        super().__init__(ErrorCode.INVALID_PARAMETER, msg, {"parameter": param})


# ==============================================================================
# Configuration Errors (2xxx)
# ==============================================================================

class InvalidTargetError(SpillError):
    def __init__(self, target: str, reason: str = "unrecognized target specification"):
        super().__init__(
            ErrorCode.INVALID_TARGET,
            f"Invalid target '{target}': {reason}",
            {"target": target}
        )


class TargetFileError(SpillError):
    def __init__(self, path: str, reason: str):
        super().__init__(
            ErrorCode.TARGET_FILE_ERROR,
            f"Cannot read target file {path}: {reason}",
            {"path": path}
        )


class InvalidPortError(SpillError):
    def __init__(self, value: Any):
        super().__init__(
            ErrorCode.INVALID_PORT,
            f"Invalid port: {value!r}",
            {"value": str(value)}
        )


class ConfigFileError(SpillError):
    def __init__(self, path: str, reason: str):
        super().__init__(
            ErrorCode.CONFIG_FILE_ERROR,
            f"Cannot load configuration {path}: {reason}",
            {"path": path}
        )


# ==============================================================================
# Protocol Errors (3xxx)
# ==============================================================================

class MalformedRequestError(SpillError):
    def __init__(self, reason: str, size: Optional[int] = None):
        details = {"size": size} if size is not None else None
        super().__init__(ErrorCode.MALFORMED_REQUEST, f"Malformed request: {reason}", details)


class UnsupportedVersionError(SpillError):
    def __init__(self, major: int, minor: int):
        super().__init__(
            ErrorCode.UNSUPPORTED_VERSION,
            f"Unsupported IPP version {major}.{minor}",
            {"major": major, "minor": minor}
        )


class AttributeTooLargeError(SpillError):
    def __init__(self, field: str, size: int, limit: int):
        super().__init__(
            ErrorCode.ATTRIBUTE_TOO_LARGE,
            f"Attribute {field} too large: {size} > {limit} bytes",
            {"field": field, "size": size, "limit": limit}
        )


# ==============================================================================
# Network Errors (4xxx)
# ==============================================================================

class SendFailedError(SpillError):
    def __init__(self, destination: str, reason: str):
        super().__init__(
            ErrorCode.SEND_FAILED,
            f"Failed to send UDP packet to {destination}: {reason}",
            {"destination": destination}
        )


class ListenerStartupError(SpillError):
    def __init__(self, host: str, port: int, reason: str):
        super().__init__(
            ErrorCode.LISTENER_STARTUP_FAILED,
            f"Cannot start listener on {host}:{port}: {reason}",
            {"host": host, "port": port}
        )
