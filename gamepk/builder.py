"""
Android build orchestration.

    Validating -> Scaffolding -> Running(stage 1..N) -> Locating -> Done

Any failure past validation raises a BuildError carrying the log collected
so far. Nothing is retried.
"""

import logging
import threading
from typing import Any, Callable, Mapping, Optional

from .artifacts import ArtifactLocator
from .build_log import BuildLogger
from .errors import ScaffoldError
from .models import BuildRequest, BuildResult, BuildStage
from .scaffold import ProjectScaffolder
from .toolchain import ToolchainRunner, default_stages
from .validation import validate_build_request
from .workspace import BuildWorkspaces

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, str], None]

# Toolchain stages share this slice of the progress bar
STAGES_START = 20
STAGES_END = 90


class AndroidBuilder:
    def __init__(
        self,
        workspaces: Optional[BuildWorkspaces] = None,
        runner: Optional[ToolchainRunner] = None,
        locator: Optional[ArtifactLocator] = None,
        scaffolder: Optional[ProjectScaffolder] = None,
        stage_factory: Callable[..., list[BuildStage]] = default_stages,
    ):
        self.workspaces = workspaces or BuildWorkspaces()
        self.runner = runner or ToolchainRunner()
        self.locator = locator or ArtifactLocator()
        self.scaffolder = scaffolder or ProjectScaffolder()
        self.stage_factory = stage_factory

    def build(
        self,
        data: Mapping[str, Any],
        build_id: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
        cancel: Optional[threading.Event] = None,
    ) -> BuildResult:
        """
        Build a debug APK from a raw request body.

        Raises:
            ValidationError: before any filesystem or process work
            BuildError: ScaffoldError, StageError, ArtifactMissingError or
                PublishError, with the build log attached
        """
        request = validate_build_request(data)
        return self.build_validated(request, build_id, on_progress, cancel)

    def build_validated(
        self,
        request: BuildRequest,
        build_id: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
        cancel: Optional[threading.Event] = None,
    ) -> BuildResult:
        def progress(percent: int, message: str) -> None:
            if on_progress is not None:
                on_progress(percent, message)

        build_log = BuildLogger()

        with self.workspaces.allocate(build_id) as workspace:
            build_log.log(
                f"Starting Android build for {request.package_name}",
                {"appName": request.app_name, "buildId": workspace.build_id},
            )

            progress(10, "Scaffolding project...")
            try:
                self.scaffolder.scaffold(workspace.path, request)
            except OSError as e:
                build_log.log(f"Scaffold failed: {e}")
                raise ScaffoldError(f"Could not create build project: {e}", build_log.snapshot()) from e
            build_log.log(f"Project scaffolded in {workspace.path}")

            stages = self.stage_factory(workspace.path, request)
            span = (STAGES_END - STAGES_START) / max(len(stages), 1)

            def on_stage(index: int, stage: BuildStage) -> None:
                progress(int(STAGES_START + index * span), f"Running {stage.name}...")

            self.runner.run(stages, build_log, cancel=cancel, on_stage=on_stage)

            progress(95, "Verifying APK...")
            artifact = self.locator.locate(workspace.path, build_log)
            published = self.locator.publish(artifact, request, workspace.build_id, build_log)

        download_url = self.locator.download_url(published)
        build_log.log("Build complete", {"downloadUrl": download_url})
        progress(100, "Done!")
        logger.info("[BUILDER] %s built as %s", request.package_name, published.name)

        return BuildResult(
            build_id=workspace.build_id,
            artifact_path=published,
            logs=build_log.snapshot(),
            download_url=download_url,
        )
