"""
Storm Clouds - Cloud construction, drift and spawn timing.

Clouds enter from either screen edge, drift across and are dropped once
they have fully left the opposite side.
"""

import logging
import random
import time
from typing import Callable, Dict, List, Optional, Tuple

from .config import StormConfig
from .models import Cloud, CloudLayer

logger = logging.getLogger(__name__)

# New cloud parameters (upper bounds exclusive)
WIDTH_RANGE = (30, 70)
LAYER_RANGE = (4, 8)
SPEED_RANGE = (0.2, 0.5)
MIN_LAYER_WIDTH = 5
TOP_LAYER_SCALE = 0.5  # Top layer is half the base width, bottom layer full


def build_layers(base_width: int, layer_count: int) -> List[CloudLayer]:
    """Stack layers that widen linearly from top to bottom, each centered."""
    layers = []
    for i in range(layer_count):
        if layer_count == 1:
            scale = 1.0
        else:
            scale = TOP_LAYER_SCALE + (i / (layer_count - 1)) * (1.0 - TOP_LAYER_SCALE)
        layer_width = max(MIN_LAYER_WIDTH, int(base_width * scale))
        layers.append(CloudLayer(width=layer_width, offset=(base_width - layer_width) // 2))
    return layers


def make_cloud(screen_width: int, screen_height: int, rng=None) -> Cloud:
    """Create a cloud just off a random edge, heading inward."""
    rng = rng or random
    quarter = screen_height // 4
    y = float(rng.randrange(quarter)) if quarter > 0 else 0.0
    width = rng.randrange(*WIDTH_RANGE)
    layer_count = rng.randrange(*LAYER_RANGE)
    speed = SPEED_RANGE[0] + rng.random() * (SPEED_RANGE[1] - SPEED_RANGE[0])

    if rng.random() < 0.5:
        x = -float(width)  # Off-screen left, drifting right
    else:
        x = float(screen_width)  # Off-screen right, drifting left
        speed = -speed

    return Cloud(x=x, y=y, width=width, speed=speed,
                 layers=build_layers(width, layer_count))


def advance_clouds(clouds: List[Cloud], screen_width: int) -> None:
    """Move every active cloud one tick and deactivate those that left the screen."""
    for cloud in clouds:
        if not cloud.active:
            continue
        cloud.x += cloud.speed
        if cloud.x + cloud.width < 0 or cloud.x > screen_width:
            cloud.active = False
            logger.debug(f"Cloud left the screen at x={cloud.x:.1f}")


def retain_clouds(clouds: List[Cloud],
                  keep: Callable[[Cloud], bool]) -> Tuple[List[Cloud], Dict[int, int]]:
    """
    Filter clouds, reporting where each survivor moved.

    Returns:
        (survivors, remap) where remap maps an old index to its new index.
        Indices of dropped clouds are absent from remap.
    """
    survivors: List[Cloud] = []
    remap: Dict[int, int] = {}
    for index, cloud in enumerate(clouds):
        if keep(cloud):
            remap[index] = len(survivors)
            survivors.append(cloud)
    return survivors, remap


class CloudSpawner:
    """
    Decides when a new cloud may appear.

    A cloud spawns when fewer than max_clouds exist and the current
    randomized interval has elapsed since the previous spawn. The first
    interval is short and backdated so a cloud shows up on the first tick.
    """

    def __init__(self, config: Optional[StormConfig] = None, rng=None,
                 clock: Callable[[], float] = time.monotonic):
        self.config = config or StormConfig()
        self.rng = rng or random
        self.clock = clock
        self.last_spawn = clock() - self.config.first_cloud_backdate
        self.interval = self.config.first_cloud_interval

    def ready(self, cloud_count: int) -> bool:
        """True if a cloud may spawn now."""
        if cloud_count >= self.config.max_clouds:
            return False
        return self.clock() - self.last_spawn >= self.interval

    def spawn(self, screen_width: int, screen_height: int) -> Cloud:
        """Create a cloud and re-roll the interval until the next one."""
        cloud = make_cloud(screen_width, screen_height, self.rng)
        self.last_spawn = self.clock()
        self.interval = self.rng.uniform(*self.config.cloud_interval)
        logger.debug(f"Spawned cloud width={cloud.width} layers={cloud.layer_count} "
                     f"speed={cloud.speed:+.2f} next in {self.interval:.1f}s")
        return cloud
