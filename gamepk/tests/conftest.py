"""
Pytest fixtures for gamepk tests.
"""

from pathlib import Path
from typing import Optional

import pytest

from ..artifacts import ArtifactLocator
from ..builder import AndroidBuilder
from ..models import ProcessResult
from ..toolchain import ToolchainRunner
from ..workspace import BuildWorkspaces

STAGE_NAMES = ["install", "init", "add-platform", "sync", "compile"]


class FakeExecutor:
    """
    Stands in for run_process.

    Records every invocation. Results are keyed by the stage's argv; anything
    not configured succeeds. When the compile stage runs and produce_apk is
    set, the debug APK is written where Gradle would put it.
    """

    def __init__(self, produce_apk: bool = True):
        self.calls: list[list[str]] = []
        self.results: dict[str, ProcessResult] = {}
        self.raises: dict[str, Exception] = {}
        self.produce_apk = produce_apk
        self.seen_dirs: list[Path] = []

    def fail(self, marker: str, result: ProcessResult) -> None:
        self.results[marker] = result

    def _match(self, argv: list[str], table: dict):
        joined = " ".join(argv)
        for marker, value in table.items():
            if marker in joined:
                return value
        return None

    def __call__(self, argv, cwd, timeout=None, cancel=None) -> ProcessResult:
        self.calls.append(list(argv))
        self.seen_dirs.append(Path(cwd))
        error = self._match(argv, self.raises)
        if error is not None:
            raise error
        result = self._match(argv, self.results)
        if result is not None:
            return result
        if "assembleDebug" in argv and self.produce_apk:
            apk = Path(cwd) / "app/build/outputs/apk/debug/app-debug.apk"
            apk.parent.mkdir(parents=True, exist_ok=True)
            apk.write_bytes(b"PK\x03\x04fake-apk")
        return ProcessResult(stdout=f"ok: {' '.join(argv)}\n", stderr="", exit_code=0, duration=0.01)


@pytest.fixture
def build_data() -> dict:
    return {
        "gameCode": "ctx.fillRect(0,0,10,10);",
        "appName": "Demo",
        "packageName": "com.demo.app",
    }


@pytest.fixture
def fake_executor() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    return tmp_path / "output"


@pytest.fixture
def build_root(tmp_path: Path) -> Path:
    return tmp_path / "builds"


@pytest.fixture
def make_builder(build_root: Path, output_dir: Path):
    def factory(executor: FakeExecutor, keep_failed: bool = False) -> AndroidBuilder:
        return AndroidBuilder(
            workspaces=BuildWorkspaces(build_root, keep_failed=keep_failed),
            runner=ToolchainRunner(executor),
            locator=ArtifactLocator(output_dir),
        )

    return factory


@pytest.fixture
def builder(make_builder, fake_executor: FakeExecutor) -> AndroidBuilder:
    return make_builder(fake_executor)


def stage_of(argv: list[str]) -> Optional[str]:
    joined = " ".join(argv)
    if joined.endswith("install"):
        return "install"
    if " cap init " in f" {joined} ":
        return "init"
    if "cap add" in joined:
        return "add-platform"
    if "cap sync" in joined:
        return "sync"
    if "assembleDebug" in joined:
        return "compile"
    return None
