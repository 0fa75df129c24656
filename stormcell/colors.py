"""
Storm Color Definitions - Curses color pairs for each drawing role.

Styles are resolved once at startup and handed to the renderer as opaque
tokens; nothing re-derives them mid-frame.
"""

from typing import Dict, Tuple

# Handle curses import for Windows compatibility
try:
    import curses
    CURSES_AVAILABLE = True
except ImportError:
    curses = None
    CURSES_AVAILABLE = False


class Colors:
    """Color pairs for curses, one per drawing role."""
    NORMAL = 0
    CLOUD = 1             # Unlit cloud body
    CLOUD_DARK = 2        # Wispy unlit cloud edges
    CLOUD_LIT = 3         # Cloud body lit by its own bolt
    CLOUD_LIT_MEDIUM = 4  # Lit cloud texture and edges
    BOLT = 5              # Bolt core
    BOLT_BRIGHT = 6       # Flickering bolt core
    GLOW = 7              # Outer halo
    GLOW_MEDIUM = 8       # Inner halo

    ROLES = {
        'cloud': CLOUD,
        'cloud_dark': CLOUD_DARK,
        'cloud_lit': CLOUD_LIT,
        'cloud_lit_medium': CLOUD_LIT_MEDIUM,
        'bolt': BOLT,
        'bolt_bright': BOLT_BRIGHT,
        'glow': GLOW,
        'glow_medium': GLOW_MEDIUM,
    }

    @staticmethod
    def _palette(grayscale: bool) -> Dict[int, Tuple[int, int]]:
        """(foreground, extra attribute) per pair, all on black."""
        if grayscale:
            # Warm colors go white, cool colors go gray
            return {
                Colors.CLOUD: (curses.COLOR_WHITE, curses.A_NORMAL),
                Colors.CLOUD_DARK: (curses.COLOR_WHITE, curses.A_DIM),
                Colors.CLOUD_LIT: (curses.COLOR_WHITE, curses.A_BOLD),
                Colors.CLOUD_LIT_MEDIUM: (curses.COLOR_WHITE, curses.A_NORMAL),
                Colors.BOLT: (curses.COLOR_WHITE, curses.A_BOLD),
                Colors.BOLT_BRIGHT: (curses.COLOR_WHITE, curses.A_BOLD),
                Colors.GLOW: (curses.COLOR_WHITE, curses.A_DIM),
                Colors.GLOW_MEDIUM: (curses.COLOR_WHITE, curses.A_NORMAL),
            }
        return {
            Colors.CLOUD: (curses.COLOR_WHITE, curses.A_NORMAL),
            Colors.CLOUD_DARK: (curses.COLOR_WHITE, curses.A_DIM),
            Colors.CLOUD_LIT: (curses.COLOR_WHITE, curses.A_BOLD),
            Colors.CLOUD_LIT_MEDIUM: (curses.COLOR_YELLOW, curses.A_BOLD),
            Colors.BOLT: (curses.COLOR_YELLOW, curses.A_BOLD),
            Colors.BOLT_BRIGHT: (curses.COLOR_WHITE, curses.A_BOLD),
            Colors.GLOW: (curses.COLOR_CYAN, curses.A_DIM),
            Colors.GLOW_MEDIUM: (curses.COLOR_BLUE, curses.A_NORMAL),
        }

    @staticmethod
    def init_colors(grayscale: bool = False) -> Dict[str, int]:
        """
        Initialize curses color pairs.

        Returns:
            Style attribute per role name, ready to pass to the renderer
        """
        if not CURSES_AVAILABLE or curses is None:
            return Colors.plain_styles()

        curses.start_color()
        try:
            curses.use_default_colors()
        except curses.error:
            pass  # Terminal can't report its defaults; black background is fine

        palette = Colors._palette(grayscale)
        styles = {}
        for role, pair in Colors.ROLES.items():
            foreground, extra = palette[pair]
            if curses.has_colors():
                curses.init_pair(pair, foreground, curses.COLOR_BLACK)
                styles[role] = curses.color_pair(pair) | extra
            else:
                styles[role] = extra
        return styles

    @staticmethod
    def plain_styles() -> Dict[str, str]:
        """Role names as their own styles, for screens without curses."""
        return {role: role for role in Colors.ROLES}
