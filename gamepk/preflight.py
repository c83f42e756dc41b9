"""
Checks that the external build toolchain is installed.

The service does not provision Node, the JDK or the Android SDK itself; it
only reports what is missing so a broken host fails loudly at startup
instead of halfway through a build.
"""

import os
import shutil
from typing import Any, Optional

from . import config


def check_toolchain() -> dict[str, Any]:
    tools: dict[str, Optional[str]] = {
        "npm": shutil.which(config.NPM_BIN),
        "npx": shutil.which(config.NPX_BIN),
        "java": shutil.which("java"),
        "bash": shutil.which("bash"),
    }
    android_sdk = os.getenv("ANDROID_HOME") or os.getenv("ANDROID_SDK_ROOT")
    if android_sdk and not os.path.isdir(android_sdk):
        android_sdk = None
    return {"tools": tools, "androidSdk": android_sdk}


def missing_tools(report: dict[str, Any]) -> list[str]:
    missing = [name for name, path in report["tools"].items() if path is None]
    if not report["androidSdk"]:
        missing.append("android-sdk")
    return missing
