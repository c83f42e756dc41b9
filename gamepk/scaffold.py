import logging
import shutil
from pathlib import Path

from . import config
from .models import BuildRequest
from .templates import render_bridge_config, render_host_page, render_manifest

logger = logging.getLogger(__name__)

WEB_DIR = "www"
HOST_PAGE = "index.html"
MANIFEST = "package.json"
BRIDGE_CONFIG = "capacitor.config.json"


class ProjectScaffolder:
    """Writes a fresh Capacitor project into a build directory."""

    def __init__(
        self,
        capacitor_version: str = config.CAPACITOR_VERSION,
        canvas_width: int = config.CANVAS_WIDTH,
        canvas_height: int = config.CANVAS_HEIGHT,
    ):
        self.capacitor_version = capacitor_version
        self.canvas_width = canvas_width
        self.canvas_height = canvas_height

    def scaffold(self, build_dir: Path, request: BuildRequest) -> None:
        """
        Completely regenerates the project to prevent cross-build contamination.

        Only build_dir is touched. OSError propagates to the caller.
        """
        logger.info("[BUILDER] Scaffolding %s in %s", request.package_name, build_dir)

        if build_dir.exists():
            shutil.rmtree(build_dir)
        build_dir.mkdir(parents=True)

        web_dir = build_dir / WEB_DIR
        web_dir.mkdir()
        (web_dir / HOST_PAGE).write_text(
            render_host_page(
                request.game_code,
                request.app_name,
                self.canvas_width,
                self.canvas_height,
            ),
            encoding="utf-8",
        )

        (build_dir / MANIFEST).write_text(
            render_manifest(request.project_name, self.capacitor_version),
            encoding="utf-8",
        )

        (build_dir / BRIDGE_CONFIG).write_text(
            render_bridge_config(request.package_name, request.app_name, WEB_DIR),
            encoding="utf-8",
        )
