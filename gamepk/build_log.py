import json
import logging
from datetime import datetime
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class BuildLogger:
    """
    Append-only, timestamped log for a single build.

    The same snapshot is handed out on success and on failure. Lines are never
    trimmed or rewritten. Each line is mirrored to the process logger.
    """

    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        self._lines: list[str] = []
        self._clock = clock

    def log(self, message: str, details: Optional[Any] = None) -> None:
        line = f"[{self._clock().strftime('%H:%M:%S')}] {message}"
        if details is not None:
            line += " " + json.dumps(details, default=str)
        self._lines.append(line)
        logger.info(line)

    def snapshot(self) -> list[str]:
        return list(self._lines)

    def __len__(self) -> int:
        return len(self._lines)
