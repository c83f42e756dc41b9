"""
Templates for the generated Capacitor project.

Placeholders are substituted with str.replace, the game code is embedded
verbatim.
"""

import html
import json

# 1. Host page: fixed-resolution canvas scaled to the device, no native gestures
HOST_PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0, maximum-scale=1.0, user-scalable=no, viewport-fit=cover">
  <title>APP_NAME_PLACEHOLDER</title>
  <style>
    html, body {
      margin: 0;
      padding: 0;
      width: 100%;
      height: 100%;
      overflow: hidden;
      background: #121212;
      touch-action: none;
      -webkit-user-select: none;
      user-select: none;
      -webkit-touch-callout: none;
      -webkit-tap-highlight-color: transparent;
    }
    #container {
      position: fixed;
      inset: 0;
      display: flex;
      align-items: center;
      justify-content: center;
    }
    canvas {
      display: block;
      background-color: #000;
      touch-action: none;
    }
    #errorDisplay {
      position: fixed;
      top: 10px;
      left: 10px;
      right: 10px;
      background: rgba(255, 0, 0, 0.8);
      color: white;
      padding: 12px;
      border-radius: 4px;
      font: 14px monospace;
      z-index: 2000;
      display: none;
      white-space: pre-wrap;
      max-height: 50%;
      overflow-y: auto;
    }
  </style>
</head>
<body>
  <div id="errorDisplay"></div>
  <div id="container">
    <canvas id="gameCanvas" width="CANVAS_WIDTH_PLACEHOLDER" height="CANVAS_HEIGHT_PLACEHOLDER"></canvas>
  </div>

  <script>
    const errorDisplay = document.getElementById('errorDisplay');
    function showError(message) {
      errorDisplay.style.display = 'block';
      errorDisplay.textContent = message;
    }
    window.onerror = function(message, source, lineno) {
      showError('Error: ' + message + '\\nLine: ' + lineno);
      return true;
    };

    // Keep touches inside the game: no scrolling, zooming or long-press menus
    ['touchstart', 'touchmove', 'touchend', 'gesturestart', 'gesturechange'].forEach(function(type) {
      document.addEventListener(type, function(e) { e.preventDefault(); }, { passive: false });
    });
    document.addEventListener('contextmenu', function(e) { e.preventDefault(); });

    const canvas = document.getElementById('gameCanvas');
    const ctx = canvas.getContext('2d');
    window.canvas = canvas;
    window.ctx = ctx;

    function resizeCanvas() {
      const aspectRatio = canvas.width / canvas.height;
      let width = window.innerWidth;
      let height = width / aspectRatio;
      if (height > window.innerHeight) {
        height = window.innerHeight;
        width = height * aspectRatio;
      }
      canvas.style.width = width + 'px';
      canvas.style.height = height + 'px';
    }
    window.addEventListener('resize', resizeCanvas);
    window.addEventListener('orientationchange', resizeCanvas);
    resizeCanvas();

    try {
      // ========== Game Code ==========
GAME_CODE_PLACEHOLDER
      // ===============================
    } catch (error) {
      console.error('Game code execution error:', error);
      showError('Error: ' + error.message);
    }
  </script>
</body>
</html>
"""


def render_host_page(game_code: str, app_name: str, width: int, height: int) -> str:
    # Game code goes in last so placeholder-like text inside it is left alone
    return (
        HOST_PAGE_TEMPLATE.replace("APP_NAME_PLACEHOLDER", html.escape(app_name))
        .replace("CANVAS_WIDTH_PLACEHOLDER", str(width))
        .replace("CANVAS_HEIGHT_PLACEHOLDER", str(height))
        .replace("GAME_CODE_PLACEHOLDER", game_code)
    )


# 2. npm manifest: the Capacitor libraries `npm install` resolves
def render_manifest(project_name: str, capacitor_version: str) -> str:
    manifest = {
        "name": project_name,
        "version": "1.0.0",
        "private": True,
        "description": "Generated game wrapped for Android",
        "dependencies": {
            "@capacitor/android": capacitor_version,
            "@capacitor/core": capacitor_version,
        },
        "devDependencies": {
            "@capacitor/cli": capacitor_version,
        },
    }
    return json.dumps(manifest, indent=2) + "\n"


# 3. Capacitor config. Mixed content and WebView debugging stay on because
# generated games may pull assets over plain HTTP.
def render_bridge_config(package_name: str, app_name: str, web_dir: str) -> str:
    config = {
        "appId": package_name,
        "appName": app_name,
        "webDir": web_dir,
        "server": {
            "androidScheme": "https",
            "cleartext": True,
        },
        "android": {
            "allowMixedContent": True,
            "webContentsDebuggingEnabled": True,
        },
    }
    return json.dumps(config, indent=2) + "\n"
