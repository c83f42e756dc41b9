"""
gamepk - turn a generated HTML5 canvas game into an installable Android APK.

The game script is embedded into a Capacitor WebView host page inside a
disposable build project, then npm, the Capacitor CLI and Gradle are driven
to produce a debug APK.
"""

__version__ = "0.1.0"
