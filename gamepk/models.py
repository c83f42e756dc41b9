from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional


@dataclass(frozen=True)
class BuildRequest:
    """A validated build request. Only InputValidator creates these."""

    game_code: str
    app_name: str
    package_name: str

    @property
    def project_name(self) -> str:
        return self.package_name.replace(".", "-")


@dataclass(frozen=True)
class BuildStage:
    name: str
    argv: list[str]
    cwd: Path
    timeout: Optional[float] = None

    def describe(self) -> str:
        return " ".join(self.argv)


@dataclass
class ProcessResult:
    stdout: str
    stderr: str
    exit_code: Optional[int]
    duration: float = 0.0
    timed_out: bool = False
    cancelled: bool = False

    @property
    def ok(self) -> bool:
        return self.exit_code == 0 and not self.timed_out and not self.cancelled


@dataclass
class BuildResult:
    build_id: str
    artifact_path: Path
    logs: list[str]
    download_url: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "buildId": self.build_id,
            "downloadUrl": self.download_url,
            "logs": self.logs,
        }
