"""
config.py - Environment loading for the APK build service.

Values are read once at import time. A .env file next to the working
directory is honoured.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# --- PATHS ---
BASE_DIR = Path(__file__).parent.parent.absolute()
BUILD_ROOT = Path(os.getenv("GAMEPK_BUILD_ROOT", str(BASE_DIR / "builds")))
OUTPUT_DIR = Path(os.getenv("GAMEPK_OUTPUT_DIR", str(BASE_DIR / "output")))

# --- TOOLCHAIN ---
NPM_BIN: str = os.getenv("GAMEPK_NPM_BIN", "npm")
NPX_BIN: str = os.getenv("GAMEPK_NPX_BIN", "npx")
CAPACITOR_VERSION: str = os.getenv("GAMEPK_CAPACITOR_VERSION", "^6.0.0")

# Seconds. Gradle gets its own budget, the first compile downloads a lot.
STAGE_TIMEOUT: int = int(os.getenv("GAMEPK_STAGE_TIMEOUT", "600"))
COMPILE_TIMEOUT: int = int(os.getenv("GAMEPK_COMPILE_TIMEOUT", "1800"))

KEEP_FAILED_BUILDS: bool = os.getenv("GAMEPK_KEEP_FAILED_BUILDS", "0") == "1"

# --- BACKGROUND JOBS ---
# Finished jobs are forgotten after this many seconds, or once there are more
# than JOB_MAX_FINISHED of them
JOB_RETENTION: int = int(os.getenv("GAMEPK_JOB_RETENTION", "3600"))
JOB_MAX_FINISHED: int = int(os.getenv("GAMEPK_JOB_MAX_FINISHED", "100"))

# --- HOST PAGE ---
CANVAS_WIDTH: int = int(os.getenv("GAMEPK_CANVAS_WIDTH", "800"))
CANVAS_HEIGHT: int = int(os.getenv("GAMEPK_CANVAS_HEIGHT", "600"))

# --- SERVER ---
HOST: str = os.getenv("GAMEPK_HOST", "0.0.0.0")
PORT: int = int(os.getenv("GAMEPK_PORT", "9741"))
ALLOWED_ORIGINS: list[str] = os.getenv("ALLOWED_ORIGINS", "*").split(",")
LOG_LEVEL: str = os.getenv("GAMEPK_LOG_LEVEL", "INFO").upper()


def validate() -> list[str]:
    problems = []
    if STAGE_TIMEOUT <= 0:
        problems.append("GAMEPK_STAGE_TIMEOUT must be positive")
    if COMPILE_TIMEOUT <= 0:
        problems.append("GAMEPK_COMPILE_TIMEOUT must be positive")
    if JOB_RETENTION < 0 or JOB_MAX_FINISHED < 0:
        problems.append("GAMEPK_JOB_RETENTION/MAX_FINISHED must not be negative")
    if CANVAS_WIDTH <= 0 or CANVAS_HEIGHT <= 0:
        problems.append("GAMEPK_CANVAS_WIDTH/HEIGHT must be positive")
    if BUILD_ROOT.resolve() == OUTPUT_DIR.resolve():
        problems.append("GAMEPK_BUILD_ROOT and GAMEPK_OUTPUT_DIR must differ")
    return problems
