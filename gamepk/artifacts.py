import logging
import shutil
from pathlib import Path
from typing import Optional

from . import config
from .build_log import BuildLogger
from .errors import ArtifactMissingError, PublishError
from .models import BuildRequest

logger = logging.getLogger(__name__)

# Where `gradlew assembleDebug` leaves the APK, relative to the build directory
DEBUG_APK_PATH = Path("android/app/build/outputs/apk/debug/app-debug.apk")

DOWNLOAD_PREFIX = "/download/android"
APK_MEDIA_TYPE = "application/vnd.android.package-archive"


class ArtifactLocator:
    """Verifies the compiled APK and publishes it for download."""

    def __init__(self, output_dir: Path = config.OUTPUT_DIR):
        self.output_dir = Path(output_dir)

    def expected_path(self, build_dir: Path) -> Path:
        return build_dir / DEBUG_APK_PATH

    def locate(self, build_dir: Path, build_log: BuildLogger) -> Path:
        # Gradle's exit code alone is not proof the APK exists
        artifact = self.expected_path(build_dir)
        if not artifact.is_file():
            build_log.log(f"APK not found at {artifact}")
            raise ArtifactMissingError(str(artifact), build_log.snapshot())
        build_log.log(f"APK found at {artifact}", {"bytes": artifact.stat().st_size})
        return artifact

    def published_name(self, request: BuildRequest, build_id: str) -> str:
        return f"{request.project_name}-{build_id[:8]}-debug.apk"

    def publish(self, artifact: Path, request: BuildRequest, build_id: str, build_log: BuildLogger) -> Path:
        """Copy the APK out of the build directory before it is released."""
        target = self.output_dir / self.published_name(request, build_id)
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            shutil.copy2(artifact, target)
        except OSError as e:
            build_log.log(f"Could not publish APK: {e}")
            raise PublishError(f"Could not publish APK: {e}", build_log.snapshot()) from e
        build_log.log(f"APK published as {target.name}")
        return target

    def download_url(self, artifact: Path) -> str:
        return f"{DOWNLOAD_PREFIX}/{artifact.name}"

    def resolve(self, filename: str) -> Optional[Path]:
        """Map a download filename to a published APK, or None."""
        if Path(filename).name != filename or not filename.endswith(".apk"):
            return None
        if filename.startswith("."):
            return None
        candidate = self.output_dir / filename
        return candidate if candidate.is_file() else None
