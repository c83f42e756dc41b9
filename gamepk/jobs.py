"""
Background builds with progress polling and cancellation.

Each job runs on its own daemon thread in its own build directory, so any
number of jobs can run side by side. Finished jobs are kept for polling and
then forgotten once they are older than the retention window or there are
too many of them.
"""

import logging
import threading
import time
import uuid
from typing import Any, Callable, Mapping, Optional

from . import config
from .builder import AndroidBuilder
from .errors import BuildCancelledError, BuildError
from .validation import validate_build_request

logger = logging.getLogger(__name__)

TERMINAL_STATES = {"complete", "error", "cancelled"}


class BuildJobs:
    def __init__(
        self,
        builder: AndroidBuilder,
        retention: float = config.JOB_RETENTION,
        max_finished: int = config.JOB_MAX_FINISHED,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.builder = builder
        self.retention = retention
        self.max_finished = max_finished
        self._clock = clock
        self._states: dict[str, dict[str, Any]] = {}
        self._cancel_events: dict[str, threading.Event] = {}
        self._threads: dict[str, threading.Thread] = {}
        # build_id -> finish time, oldest first
        self._finished: dict[str, float] = {}
        self._lock = threading.Lock()

    def submit(self, data: Mapping[str, Any]) -> str:
        """Validate now, build later. Raises ValidationError."""
        request = validate_build_request(data)

        build_id = uuid.uuid4().hex
        cancel = threading.Event()
        thread = threading.Thread(
            target=self._execute, args=(build_id, request, cancel), daemon=True
        )
        with self._lock:
            self._prune()
            self._states[build_id] = {
                "status": "in_progress",
                "progress": 0,
                "message": "Starting...",
            }
            self._cancel_events[build_id] = cancel
            self._threads[build_id] = thread

        thread.start()
        logger.info("[BUILDER] Job %s queued for %s", build_id, request.package_name)
        return build_id

    def _prune(self) -> None:
        """Forget expired finished jobs. Caller holds the lock."""
        now = self._clock()
        for build_id, finished_at in list(self._finished.items()):
            too_many = len(self._finished) > self.max_finished
            if not too_many and now - finished_at <= self.retention:
                break
            del self._finished[build_id]
            self._states.pop(build_id, None)
            logger.debug("[BUILDER] Forgot job %s", build_id)

    def _update(self, build_id: str, **fields: Any) -> None:
        with self._lock:
            self._states[build_id].update(fields)

    def _finish(self, build_id: str, **fields: Any) -> None:
        with self._lock:
            self._states[build_id].update(fields)
            self._cancel_events.pop(build_id, None)
            self._threads.pop(build_id, None)
            self._finished[build_id] = self._clock()

    def _execute(self, build_id: str, request, cancel: threading.Event) -> None:
        def on_progress(progress: int, message: str) -> None:
            self._update(build_id, progress=progress, message=message, status="in_progress")

        try:
            result = self.builder.build_validated(
                request, build_id=build_id, on_progress=on_progress, cancel=cancel
            )
        except BuildCancelledError as e:
            self._finish(
                build_id, status="cancelled", progress=0,
                message="Build cancelled.", stage=e.stage, logs=e.logs,
            )
        except BuildError as e:
            logger.error("[BUILDER] Job %s failed at %s: %s", build_id, e.stage, e.message)
            self._finish(
                build_id, status="error", progress=0,
                message="Build failed. Check the logs for details.",
                error=e.message, stage=e.stage, logs=e.logs,
            )
        except Exception as e:
            logger.exception("[BUILDER] Job %s crashed", build_id)
            self._finish(build_id, status="error", progress=0, message=f"Error: {e}", error=str(e))
        else:
            self._finish(
                build_id, status="complete", progress=100, message="Done!",
                downloadUrl=result.download_url, logs=result.logs,
            )

    def get(self, build_id: str) -> Optional[dict[str, Any]]:
        with self._lock:
            state = self._states.get(build_id)
            return dict(state) if state is not None else None

    def cancel(self, build_id: str) -> bool:
        with self._lock:
            state = self._states.get(build_id)
            if state is None or state["status"] in TERMINAL_STATES:
                return False
            self._cancel_events[build_id].set()
            state["message"] = "Cancelling..."
        logger.info("[BUILDER] Cancellation requested for job %s", build_id)
        return True

    def wait(self, build_id: str, timeout: Optional[float] = None) -> Optional[dict[str, Any]]:
        with self._lock:
            thread = self._threads.get(build_id)
        if thread is not None:
            thread.join(timeout)
        return self.get(build_id)

    def running(self) -> int:
        with self._lock:
            return len(self._threads)

    def __len__(self) -> int:
        with self._lock:
            return len(self._states)
