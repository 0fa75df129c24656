"""
Storm Controller - Owns clouds and bolts and advances them once per tick.

Per tick: spawn clouds, drift clouds, spawn a bolt, grow and age bolts,
then drop whatever expired. Only this module mutates clouds, bolts or
branch progress; the renderer just reads them.
"""

import logging
import random
import time
from typing import Callable, Dict, List, Optional, Set

from .clouds import CloudSpawner, advance_clouds, retain_clouds
from .config import StormConfig
from .geometry import generate_fractal_lightning
from .models import Bolt, Branch, Cloud, Point

logger = logging.getLogger(__name__)


def advance_branch(bolt: Bolt, branch: Branch, speed: float, threshold: float) -> None:
    """
    Grow one branch by a single tick.

    A branch whose parent resolves waits until that parent has reached
    threshold. Growth is speed / length per tick so every branch appears
    to travel at the same rate; zero-length branches complete at once.
    """
    if branch.progress >= 1.0:
        return

    parent = bolt.parent_of(branch)
    if parent is not None and parent.progress < threshold:
        return

    length = branch.length
    if length == 0:
        branch.progress = 1.0
        return

    branch.progress = min(1.0, branch.progress + speed / length)


def advance_bolt(bolt: Bolt, speed: float, threshold: float) -> None:
    """Grow every branch of a bolt, parents before children."""
    for branch in bolt.branches:
        advance_branch(bolt, branch, speed, threshold)


class Storm:
    """
    Tick-driven storm state.

    Args:
        width: Grid columns
        height: Grid rows
        config: Tunables (defaults when omitted)
        rng: Random source shared by spawning and bolt generation
        clock: Monotonic seconds, used for spawn intervals
    """

    def __init__(self, width: int, height: int, config: Optional[StormConfig] = None,
                 rng=None, clock: Callable[[], float] = time.monotonic):
        self.width = width
        self.height = height
        self.config = config or StormConfig()
        self.rng = rng or random
        self.clock = clock

        self.clouds: List[Cloud] = []
        self.bolts: List[Bolt] = []
        self.frame = 0

        self.cloud_spawner = CloudSpawner(self.config, self.rng, clock)
        self._last_bolt_time = clock()
        self._bolt_interval = self.rng.uniform(*self.config.bolt_interval)

    def tick(self) -> None:
        """Advance the whole storm by one frame."""
        self.frame += 1

        if self.cloud_spawner.ready(len(self.clouds)):
            self.clouds.append(self.cloud_spawner.spawn(self.width, self.height))

        advance_clouds(self.clouds, self.width)
        self._retain_clouds(lambda c: c.active)

        if self._bolt_due():
            self.spawn_bolt()

        self.update_bolts()

    def update_bolts(self) -> None:
        """Age and grow active bolts, then drop the expired ones."""
        for bolt in self.bolts:
            if not bolt.active:
                continue
            bolt.age += 1.0
            advance_bolt(bolt, self.config.bolt_speed, self.config.gate_threshold)

            # Expiry ignores drawing progress; a bolt may vanish mid-reveal
            if bolt.age > bolt.flash_duration:
                bolt.active = False
                logger.debug(f"Bolt expired at age {bolt.age:.0f} "
                             f"(fully drawn: {bolt.is_fully_drawn})")

        self.bolts = [b for b in self.bolts if b.active]

    def _bolt_due(self) -> bool:
        if not self.clouds or len(self.bolts) >= self.config.max_bolts:
            return False
        return self.clock() - self._last_bolt_time >= self._bolt_interval

    def spawn_bolt(self, cloud_index: Optional[int] = None) -> Optional[Bolt]:
        """
        Strike from the bottom of a cloud (random cloud if none is given).

        Returns None when there is no cloud to strike from, including an
        index outside the current cloud list.
        """
        if not self.clouds:
            return None
        if cloud_index is None:
            cloud_index = self.rng.randrange(len(self.clouds))
        elif not 0 <= cloud_index < len(self.clouds):
            logger.debug(f"No cloud at index {cloud_index}, bolt skipped")
            return None

        cloud = self.clouds[cloud_index]
        origin = Point(cloud.x + self.rng.randrange(cloud.width), cloud.y + cloud.layer_count)
        bolt = self.add_bolt(origin, cloud_index)

        self._last_bolt_time = self.clock()
        self._bolt_interval = self.rng.uniform(*self.config.bolt_interval)
        return bolt

    def add_bolt(self, origin: Point, cloud_index: Optional[int] = None,
                 flash_duration: Optional[float] = None) -> Bolt:
        """Generate a bolt's full geometry at origin and start tracking it."""
        if flash_duration is None:
            low, high = self.config.flash_duration
            flash_duration = low + self.rng.random() * (high - low)

        branches = generate_fractal_lightning(origin, self.width, self.height, rng=self.rng)
        bolt = Bolt(origin=origin, branches=branches, flash_duration=flash_duration,
                    cloud_index=cloud_index)
        self.bolts.append(bolt)
        logger.debug(f"Bolt at ({origin.x:.1f}, {origin.y:.1f}) with {len(branches)} branches, "
                     f"flash {flash_duration:.2f} ticks")
        return bolt

    def resize(self, width: int, height: int) -> None:
        """
        Adopt a new grid size.

        Clouds that no longer overlap the grid are dropped. Bolt geometry
        was computed for the old size, so every bolt is dropped too.
        """
        self.width = width
        self.height = height
        before = len(self.clouds)
        self._retain_clouds(lambda c: c.is_visible_in(width, height))
        dropped_bolts = len(self.bolts)
        self.bolts = []
        logger.debug(f"Resized to {width}x{height}: dropped {before - len(self.clouds)} clouds, "
                     f"{dropped_bolts} bolts")

    def _retain_clouds(self, keep: Callable[[Cloud], bool]) -> None:
        """Filter clouds and repoint bolt back-references at the survivors."""
        self.clouds, remap = retain_clouds(self.clouds, keep)
        self._remap_bolt_clouds(remap)

    def _remap_bolt_clouds(self, remap: Dict[int, int]) -> None:
        for bolt in self.bolts:
            if bolt.cloud_index is not None:
                bolt.cloud_index = remap.get(bolt.cloud_index)

    def lit_cloud_indices(self) -> Set[int]:
        """Indices of clouds that are the origin of an active bolt."""
        lit = set()
        for bolt in self.bolts:
            index = bolt.cloud_index
            if bolt.active and index is not None and 0 <= index < len(self.clouds):
                lit.add(index)
        return lit

    def is_lit(self, cloud_index: int) -> bool:
        return cloud_index in self.lit_cloud_indices()
