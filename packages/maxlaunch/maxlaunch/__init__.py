"""maxlaunch — launch an application and force its window to maximize.

Layers (bottom to top):
    1. Windowing — X11 queries (xwininfo, xdotool, wmctrl) and wmctrl control
    2. Screen    — display geometry from xrandr
    3. Maximize  — geometry computation and asynchronous dispatch of window actions
    4. Strategies — ByName, ByActiveChangeCount, ByViewableSet acquisition loops
    5. Supervisor — launches the application and stops it when the loop ends
    6. CLI       — typer entry point, option validation, exit codes
"""

__version__ = "0.1.0"
__license__ = "Apache-2.0"

__all__ = ["__version__"]
