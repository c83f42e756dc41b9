"""
Litestar application - HTTP surface of the APK builder.

Endpoints:
    POST   /api/build/android                         Build and wait for the APK
    POST   /api/build/android/jobs                    Start a background build
    GET    /api/build/android/jobs/{build_id}/progress  Server-sent progress events
    DELETE /api/build/android/jobs/{build_id}         Cancel a background build
    GET    /download/android/{filename}               Download a built APK
    GET    /health                                    Toolchain status
"""

import asyncio
import json
import logging
from typing import Annotated, Any, Optional

from litestar import Litestar, Request, Response, delete, get, post
from litestar.config.cors import CORSConfig
from litestar.enums import RequestEncodingType
from litestar.exceptions import NotFoundException
from litestar.params import Body
from litestar.response import File, Stream

from . import config
from .artifacts import APK_MEDIA_TYPE
from .builder import AndroidBuilder
from .errors import BuildError, ValidationError
from .jobs import BuildJobs
from .preflight import check_toolchain, missing_tools

logger = logging.getLogger(__name__)

PROGRESS_POLL_SECONDS = 0.5


def validation_error_handler(request: Request, exc: ValidationError) -> Response:
    return Response(content=exc.to_dict(), status_code=400)


def build_error_handler(request: Request, exc: BuildError) -> Response:
    logger.error("[BUILDER] Build failed at %s: %s", exc.stage, exc.message)
    return Response(content=exc.to_dict(), status_code=500)


def create_app(builder: Optional[AndroidBuilder] = None, jobs: Optional[BuildJobs] = None) -> Litestar:
    """
    Create the Litestar application.

    Args:
        builder: AndroidBuilder to use (a default one if not provided)
        jobs: BuildJobs registry (one wrapping builder if not provided)
    """
    builder = builder or AndroidBuilder()
    jobs = jobs or BuildJobs(builder)

    # --- ROUTES ---

    @post("/api/build/android", status_code=200, sync_to_thread=True)
    def build_android(data: dict[str, Any]) -> dict[str, Any]:
        return builder.build(data).to_dict()

    @post("/api/build/android/jobs")
    async def start_build_job(
        data: Annotated[dict[str, Any], Body(media_type=RequestEncodingType.MULTI_PART)],
    ) -> dict[str, str]:
        fields = {
            "appName": data.get("appName"),
            "packageName": data.get("packageName"),
            "gameCode": data.get("gameCode"),
        }
        if data.get("game_file") is not None:
            raw = await data["game_file"].read()
            fields["gameCode"] = raw.decode("utf-8", errors="replace")
        return {"build_id": jobs.submit(fields)}

    @get("/api/build/android/jobs/{build_id:str}/progress")
    async def stream_progress(build_id: str) -> Stream:
        async def generator():
            last = None
            while True:
                state = jobs.get(build_id)
                if not state:
                    yield f"event: error\ndata: {json.dumps({'error': 'Invalid ID'})}\n\n"
                    break

                if state != last:
                    yield f"data: {json.dumps(state)}\n\n"
                    last = state

                if state["status"] == "complete":
                    yield f"event: complete\ndata: {json.dumps({'build_id': build_id, 'downloadUrl': state['downloadUrl']})}\n\n"
                    break
                if state["status"] == "error":
                    yield f"event: error\ndata: {json.dumps({'error': state.get('error'), 'stage': state.get('stage')})}\n\n"
                    break
                if state["status"] == "cancelled":
                    yield f"event: cancelled\ndata: {json.dumps({'build_id': build_id})}\n\n"
                    break
                await asyncio.sleep(PROGRESS_POLL_SECONDS)

        return Stream(generator(), media_type="text/event-stream")

    @delete("/api/build/android/jobs/{build_id:str}", status_code=200)
    async def cancel_build_job(build_id: str) -> dict[str, bool]:
        return {"cancelled": jobs.cancel(build_id)}

    @get("/download/android/{filename:str}")
    async def download(filename: str) -> File:
        path = builder.locator.resolve(filename)
        if path is None:
            raise NotFoundException(detail=f"No APK named {filename}")
        return File(path=path, filename=path.name, media_type=APK_MEDIA_TYPE)

    @get("/health")
    async def health() -> dict[str, Any]:
        report = check_toolchain()
        return {"status": "degraded" if missing_tools(report) else "ok", **report}

    cors = CORSConfig(allow_origins=config.ALLOWED_ORIGINS)
    return Litestar(
        route_handlers=[
            build_android,
            start_build_job,
            stream_progress,
            cancel_build_job,
            download,
            health,
        ],
        exception_handlers={
            ValidationError: validation_error_handler,
            BuildError: build_error_handler,
        },
        cors_config=cors,
    )


app = create_app()


def main() -> None:
    import uvicorn

    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="[%(levelname)s] %(name)s: %(message)s",
    )
    for problem in config.validate():
        logger.warning("[CONFIG] %s", problem)
    for tool in missing_tools(check_toolchain()):
        logger.warning("[TOOLCHAIN] %s not found, builds will fail", tool)

    logger.info("[BACKEND] http://%s:%d", config.HOST, config.PORT)
    uvicorn.run(app, host=config.HOST, port=config.PORT, log_level=config.LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
