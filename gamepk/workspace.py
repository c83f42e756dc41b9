import logging
import shutil
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

from . import config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Workspace:
    build_id: str
    path: Path


class BuildWorkspaces:
    """
    Hands out one isolated build directory per build.

    Directories live under a shared root and are removed when the build
    finishes, whether it succeeded or not. With keep_failed set, the
    directory of a failed build is left behind for inspection.
    """

    def __init__(self, root: Path = config.BUILD_ROOT, keep_failed: bool = config.KEEP_FAILED_BUILDS):
        self.root = Path(root)
        self.keep_failed = keep_failed

    def path_for(self, build_id: str) -> Path:
        return self.root / f"android-build-{build_id}"

    @contextmanager
    def allocate(self, build_id: Optional[str] = None) -> Iterator[Workspace]:
        build_id = build_id or uuid.uuid4().hex
        workspace = Workspace(build_id, self.path_for(build_id))
        self.root.mkdir(parents=True, exist_ok=True)

        try:
            yield workspace
        except BaseException:
            if self.keep_failed:
                logger.warning("[BUILDER] Keeping failed build directory %s", workspace.path)
            else:
                self.release(workspace)
            raise
        else:
            self.release(workspace)

    def release(self, workspace: Workspace) -> None:
        if workspace.path.exists():
            shutil.rmtree(workspace.path, ignore_errors=True)
            logger.debug("[BUILDER] Removed %s", workspace.path)
