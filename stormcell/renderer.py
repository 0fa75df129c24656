"""
Storm Renderer - Paints clouds, bolt glow and bolt cores onto a screen.

Frame order is fixed: clear, clouds, glow pass, core pass. The glow pass
only fills blank cells; the core pass paints over anything.
"""

import math
import random
from typing import Any, Dict, Iterable, Iterator, Optional, Set, Tuple

from .colors import Colors
from .models import Bolt, Branch, Cloud
from .screen import StormScreen, is_blank


def revealed_points(branch: Branch) -> Iterator[Tuple[float, float]]:
    """
    Sample points along the drawn part of a branch.

    Both passes go through here so they always agree on how much of a
    branch is visible.
    """
    if branch.progress <= 0:
        return
    # Halves round up, not to even
    steps = max(1, int(math.floor(branch.length + 0.5)))
    max_step = int(math.floor(steps * branch.progress))
    dx, dy = branch.dx, branch.dy
    for i in range(max_step + 1):
        t = i / steps
        yield branch.start.x + dx * t, branch.start.y + dy * t


def core_glyph(dx: float, dy: float) -> str:
    """Pick a line character from a segment's direction."""
    if abs(dx) < 0.1:
        return '|'
    steep = abs(dy) >= abs(dx)
    if dx > 0:
        return '\\' if steep else '╲'
    return '/' if steep else '╱'


class StormRenderer:
    """
    Draws one storm frame.

    Args:
        styles: Style token per role name (see Colors.ROLES)
        rng: Random source for texture, halo and flicker
    """

    # Cloud texture, densest first
    CLOUD_CHARS = ('█', '▓', '▒')
    CLOUD_SOLID_CHANCE = 0.6
    CLOUD_MEDIUM_CHANCE = 0.85  # Cumulative
    CLOUD_EDGE_COLUMNS = 2
    CLOUD_EDGE_WISP_CHANCE = 0.5

    GLOW_RADIUS = 2
    GLOW_SKIP_CHANCE = 0.6
    GLOW_INNER = '·'
    GLOW_OUTER = '.'

    FLICKER_CHANCE = 0.3

    def __init__(self, styles: Optional[Dict[str, Any]] = None, rng=None):
        self.styles = styles or Colors.plain_styles()
        self.rng = rng or random

    def draw_frame(self, screen: StormScreen, storm) -> None:
        """Clear the screen and paint clouds, then both bolt passes."""
        width, height = screen.size()
        screen.clear()
        self.draw_clouds(screen, storm.clouds, storm.lit_cloud_indices(), width, height)
        self.render_glow(screen, storm.bolts, width, height)
        self.render_cores(screen, storm.bolts, width, height)

    def draw_clouds(self, screen: StormScreen, clouds: Iterable[Cloud], lit: Set[int],
                    width: int, height: int) -> None:
        """Paint clouds as stacked textured slabs; lit clouds use brighter styles."""
        solid, medium, light = self.CLOUD_CHARS
        for index, cloud in enumerate(clouds):
            if not cloud.active:
                continue
            is_lit = index in lit
            body = self.styles['cloud_lit' if is_lit else 'cloud']
            texture = self.styles['cloud_lit_medium' if is_lit else 'cloud']
            wisp = self.styles['cloud_lit_medium' if is_lit else 'cloud_dark']

            left = int(math.floor(cloud.x))
            top = int(math.floor(cloud.y))
            for layer_index, layer in enumerate(cloud.layers):
                y = top + layer_index
                if y < 0 or y >= height:
                    continue
                start = left + layer.offset
                for dx in range(layer.width):
                    x = start + dx
                    if x < 0 or x >= width:
                        continue

                    roll = self.rng.random()
                    if roll < self.CLOUD_SOLID_CHANCE:
                        glyph, style = solid, body
                    elif roll < self.CLOUD_MEDIUM_CHANCE:
                        glyph, style = medium, texture
                    else:
                        glyph, style = light, wisp

                    # Edges are more wispy
                    at_edge = dx < self.CLOUD_EDGE_COLUMNS or dx >= layer.width - self.CLOUD_EDGE_COLUMNS
                    if at_edge and self.rng.random() < self.CLOUD_EDGE_WISP_CHANCE:
                        glyph, style = light, wisp

                    screen.set_cell(x, y, glyph, style)

    def render_glow(self, screen: StormScreen, bolts: Iterable[Bolt],
                    width: int, height: int) -> None:
        """First pass: a patchy halo around every drawn point, blank cells only."""
        for bolt in bolts:
            if not bolt.active:
                continue
            for branch in bolt.branches:
                for px, py in revealed_points(branch):
                    self._stamp_glow(screen, px, py, width, height)

    def _stamp_glow(self, screen: StormScreen, px: float, py: float,
                    width: int, height: int) -> None:
        cx = int(math.floor(px))
        cy = int(math.floor(py))
        radius = self.GLOW_RADIUS
        for gy in range(-radius, radius + 1):
            for gx in range(-radius, radius + 1):
                distance = math.hypot(gx, gy)
                if distance > radius:
                    continue
                x, y = cx + gx, cy + gy
                if x < 0 or x >= width or y < 0 or y >= height:
                    continue
                # Never paint over clouds, other glow or bolt cores
                if not is_blank(screen.get_cell(x, y)):
                    continue
                if self.rng.random() < self.GLOW_SKIP_CHANCE:
                    continue

                if distance < 1.0:
                    screen.set_cell(x, y, self.GLOW_INNER, self.styles['glow_medium'])
                elif distance < 1.5:
                    screen.set_cell(x, y, self.GLOW_OUTER, self.styles['glow'])
                else:
                    screen.set_cell(x, y, ' ', self.styles['glow'])

    def render_cores(self, screen: StormScreen, bolts: Iterable[Bolt],
                     width: int, height: int) -> None:
        """Second pass: the bolt line itself, painted over whatever is there."""
        bolt_style = self.styles['bolt']
        bright_style = self.styles['bolt_bright']
        for bolt in bolts:
            if not bolt.active:
                continue
            for branch in bolt.branches:
                glyph = core_glyph(branch.dx, branch.dy)
                for px, py in revealed_points(branch):
                    x = int(math.floor(px))
                    y = int(math.floor(py))
                    if x < 0 or x >= width or y < 0 or y >= height:
                        continue
                    style = bright_style if self.rng.random() < self.FLICKER_CHANCE else bolt_style
                    screen.set_cell(x, y, glyph, style)
