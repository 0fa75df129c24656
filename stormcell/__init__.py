"""
Stormcell - Terminal Storm Animation

Drifting storm clouds that discharge fractal lightning bolts, drawn with
curses. A bolt grows down the screen one branch at a time, each fork
waiting for the segment it hangs from, with a patchy glow halo around it.

Basic Usage:
    from stormcell import run_storm
    run_storm()

Headless:
    from stormcell import MemoryScreen, StormApp, StormConfig

    screen = MemoryScreen(80, 24)
    StormApp(screen, StormConfig(seed=1)).run(max_frames=50)
    print(screen.text())
"""

import logging

__version__ = "1.0.0"

# Curses owns the terminal; stay silent unless the app configures logging
logging.getLogger(__name__).addHandler(logging.NullHandler())

# Core classes
from .app import StormApp, run_storm, main
from .config import StormConfig
from .storm import Storm, advance_branch, advance_bolt

# Data models
from .models import (
    Point,
    CloudLayer,
    Cloud,
    Branch,
    Bolt,
    NO_PARENT,
)

# Components
from .geometry import generate_fractal_lightning, attach_subtree, is_forest
from .clouds import CloudSpawner, build_layers, make_cloud
from .renderer import StormRenderer, core_glyph, revealed_points
from .screen import StormScreen, CursesScreen, MemoryScreen, ResizeEvent, KeyEvent
from .colors import Colors
from .utils.error_handling import StormError, ConfigError, TerminalError

__all__ = [
    # Version
    "__version__",
    # Core
    "StormApp",
    "run_storm",
    "main",
    "StormConfig",
    "Storm",
    "advance_branch",
    "advance_bolt",
    # Models
    "Point",
    "CloudLayer",
    "Cloud",
    "Branch",
    "Bolt",
    "NO_PARENT",
    # Components
    "generate_fractal_lightning",
    "attach_subtree",
    "is_forest",
    "CloudSpawner",
    "build_layers",
    "make_cloud",
    "StormRenderer",
    "core_glyph",
    "revealed_points",
    "StormScreen",
    "CursesScreen",
    "MemoryScreen",
    "ResizeEvent",
    "KeyEvent",
    "Colors",
    # Errors
    "StormError",
    "ConfigError",
    "TerminalError",
]
