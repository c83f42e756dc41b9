"""
Error taxonomy for the build pipeline.

Validation errors are raised before anything touches the disk and carry no
build log. Every other failure is a BuildError that carries the log lines
collected up to the point of failure.
"""

from enum import Enum
from typing import Any, Optional


class GamepkError(Exception):
    """Base class for all service errors."""

    stage = "unknown"


class ValidationErrorKind(str, Enum):
    MISSING_FIELD = "MissingField"
    INVALID_APP_NAME = "InvalidAppName"
    INVALID_PACKAGE_NAME = "InvalidPackageName"


class ValidationError(GamepkError):
    """Malformed build request."""

    stage = "validation"

    def __init__(self, kind: ValidationErrorKind, field: str, message: str):
        super().__init__(message)
        self.kind = kind
        self.field = field
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "Invalid build request",
            "kind": self.kind.value,
            "field": self.field,
            "message": self.message,
        }


class BuildError(GamepkError):
    """A build that got past validation and then failed."""

    def __init__(
        self,
        stage: str,
        message: str,
        logs: list[str],
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.stage = stage
        self.message = message
        self.logs = list(logs)
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "Build failed",
            "message": self.message,
            "logs": self.logs,
            "details": {"stage": self.stage, **self.details},
        }


class ScaffoldError(BuildError):
    def __init__(self, message: str, logs: list[str]):
        super().__init__("scaffold", message, logs)


class StageError(BuildError):
    """A toolchain stage exited non-zero or could not be spawned."""

    def __init__(
        self,
        stage: str,
        message: str,
        logs: list[str],
        exit_code: Optional[int] = None,
    ):
        super().__init__(stage, message, logs, {"exitCode": exit_code})
        self.exit_code = exit_code


class StageTimeoutError(StageError):
    def __init__(self, stage: str, timeout: float, logs: list[str]):
        super().__init__(stage, f"Stage '{stage}' timed out after {timeout:g}s", logs)
        self.details["timeout"] = timeout


class BuildCancelledError(StageError):
    def __init__(self, stage: str, logs: list[str]):
        super().__init__(stage, f"Build cancelled during stage '{stage}'", logs)
        self.details["cancelled"] = True


class ArtifactMissingError(BuildError):
    """Every stage succeeded but the APK is not where Gradle puts it."""

    def __init__(self, expected_path: str, logs: list[str]):
        super().__init__(
            "locate",
            f"Build reported success but no APK was found at {expected_path}",
            logs,
            {"expectedPath": expected_path},
        )


class PublishError(BuildError):
    def __init__(self, message: str, logs: list[str]):
        super().__init__("publish", message, logs)
