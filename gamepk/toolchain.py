"""
External toolchain stages: npm, the Capacitor CLI and Gradle.

Every stage is an argument vector run without a shell, one at a time, with
its output captured into the build log before the next stage starts.
"""

import logging
import os
import signal
import subprocess
import threading
import time
from pathlib import Path
from typing import Callable, Optional, Sequence

from . import config
from .build_log import BuildLogger
from .errors import BuildCancelledError, StageError, StageTimeoutError
from .models import BuildRequest, BuildStage, ProcessResult

logger = logging.getLogger(__name__)

# How often a running stage checks for cancellation and timeout
POLL_INTERVAL = 0.25

# Seconds to collect remaining output after a stage is killed
KILL_DRAIN_TIMEOUT = 5

# Lines of tool output quoted in an error message
MAX_ERROR_LINES = 60

Executor = Callable[..., ProcessResult]


def default_stages(
    build_dir: Path,
    request: BuildRequest,
    stage_timeout: float = config.STAGE_TIMEOUT,
    compile_timeout: float = config.COMPILE_TIMEOUT,
) -> list[BuildStage]:
    npm, npx = config.NPM_BIN, config.NPX_BIN
    return [
        BuildStage("install", [npm, "install"], build_dir, stage_timeout),
        BuildStage(
            "init",
            # "--" ends option parsing, the identifiers are always positional
            [npx, "cap", "init", "--web-dir", "www", "--", request.app_name, request.package_name],
            build_dir,
            stage_timeout,
        ),
        BuildStage("add-platform", [npx, "cap", "add", "android"], build_dir, stage_timeout),
        BuildStage("sync", [npx, "cap", "sync", "android"], build_dir, stage_timeout),
        # bash avoids depending on the exec bit of the generated wrapper
        BuildStage(
            "compile",
            ["bash", "gradlew", "assembleDebug"],
            build_dir / "android",
            compile_timeout,
        ),
    ]


def run_process(
    argv: Sequence[str],
    cwd: Path,
    timeout: Optional[float] = None,
    cancel: Optional[threading.Event] = None,
) -> ProcessResult:
    """
    Run one command to completion, or until it times out or is cancelled.

    Raises OSError if the command cannot be spawned.
    """
    env = os.environ.copy()
    # Keep npm and Gradle from prompting or drawing progress bars
    env.setdefault("CI", "true")

    started = time.monotonic()
    # Own process group: npx and npm run the real work in child processes
    process = subprocess.Popen(
        list(argv),
        cwd=cwd,
        env=env,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        errors="replace",
        start_new_session=True,
    )

    timed_out = cancelled = False
    while True:
        try:
            stdout, stderr = process.communicate(timeout=POLL_INTERVAL)
            break
        except subprocess.TimeoutExpired:
            if cancel is not None and cancel.is_set():
                cancelled = True
            elif timeout is not None and time.monotonic() - started > timeout:
                timed_out = True
            else:
                continue
            stdout, stderr = _kill_process_group(process)
            break

    return ProcessResult(
        stdout=stdout or "",
        stderr=stderr or "",
        exit_code=process.returncode,
        duration=time.monotonic() - started,
        timed_out=timed_out,
        cancelled=cancelled,
    )


def _kill_process_group(process: subprocess.Popen) -> tuple[str, str]:
    """Kill the command and everything it spawned, then drain its output."""
    try:
        os.killpg(process.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass
    try:
        return process.communicate(timeout=KILL_DRAIN_TIMEOUT)
    except subprocess.TimeoutExpired:
        # A process that left the group still holds the pipes
        logger.warning("[BUILDER] Output of %s still open after kill, discarding it", process.args[0])
        process.kill()
        process.wait()
        for pipe in (process.stdout, process.stderr):
            if pipe is not None:
                pipe.close()
        return "", ""


def summarize_failure(raw_output: str, max_lines: int = MAX_ERROR_LINES) -> str:
    """Pick the part of a tool's output that explains the failure."""
    lines = raw_output.splitlines()
    # Gradle errors
    for i, line in enumerate(lines):
        if "FAILURE:" in line or "BUILD FAILED" in line:
            return "\n".join(lines[i:i + max_lines])
    # npm / compiler errors
    error_lines = [
        l for l in lines
        if l.strip().startswith("e:") or "error:" in l.lower() or l.startswith("npm ERR!")
    ]
    if error_lines:
        return "\n".join(error_lines[:max_lines])
    return "\n".join(lines[-max_lines:])


class ToolchainRunner:
    """
    Runs stages in order and stops at the first failure.

    The executor is injectable so stages can be stubbed in tests.
    """

    def __init__(self, executor: Executor = run_process):
        self.executor = executor

    def run(
        self,
        stages: Sequence[BuildStage],
        build_log: BuildLogger,
        cancel: Optional[threading.Event] = None,
        on_stage: Optional[Callable[[int, BuildStage], None]] = None,
    ) -> list[ProcessResult]:
        results = []
        for index, stage in enumerate(stages):
            if cancel is not None and cancel.is_set():
                build_log.log(f"Cancelled before stage '{stage.name}'")
                raise BuildCancelledError(stage.name, build_log.snapshot())

            if on_stage is not None:
                on_stage(index, stage)
            results.append(self._run_stage(stage, build_log, cancel))
        return results

    def _run_stage(
        self,
        stage: BuildStage,
        build_log: BuildLogger,
        cancel: Optional[threading.Event],
    ) -> ProcessResult:
        build_log.log(f"[{stage.name}] $ {stage.describe()}", {"cwd": str(stage.cwd)})

        try:
            result = self.executor(stage.argv, stage.cwd, timeout=stage.timeout, cancel=cancel)
        except OSError as e:
            build_log.log(f"[{stage.name}] failed to start: {e}")
            raise StageError(
                stage.name,
                f"Stage '{stage.name}' could not be started: {e}",
                build_log.snapshot(),
            ) from e

        if result.stdout.strip():
            build_log.log(f"[{stage.name}] stdout:\n{result.stdout.rstrip()}")
        if result.stderr.strip():
            build_log.log(f"[{stage.name}] stderr:\n{result.stderr.rstrip()}")

        if result.cancelled:
            build_log.log(f"[{stage.name}] cancelled after {result.duration:.1f}s")
            raise BuildCancelledError(stage.name, build_log.snapshot())

        if result.timed_out:
            build_log.log(f"[{stage.name}] timed out after {result.duration:.1f}s")
            raise StageTimeoutError(stage.name, stage.timeout or result.duration, build_log.snapshot())

        if result.exit_code != 0:
            build_log.log(f"[{stage.name}] failed with exit code {result.exit_code}")
            # Warnings on stderr must not hide an error printed to stdout
            output = "\n".join(part for part in (result.stderr, result.stdout) if part.strip())
            summary = summarize_failure(output)
            raise StageError(
                stage.name,
                f"Stage '{stage.name}' failed with exit code {result.exit_code}: {summary}",
                build_log.snapshot(),
                exit_code=result.exit_code,
            )

        build_log.log(f"[{stage.name}] completed in {result.duration:.1f}s")
        return result
