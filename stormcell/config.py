"""
Storm Configuration - Tunables for the storm animation.

Values are tuned for look, not physics.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from .utils.error_handling import ConfigError


@dataclass
class StormConfig:
    """Animation tunables with their defaults."""
    tick_interval: float = 0.1  # Seconds per frame

    # Clouds
    max_clouds: int = 3
    cloud_interval: Tuple[float, float] = (2.0, 5.0)  # Seconds between spawns
    first_cloud_interval: float = 0.5
    first_cloud_backdate: float = 3.0  # Pretend the last spawn was this long ago

    # Bolts
    max_bolts: int = 2
    bolt_interval: Tuple[float, float] = (1.5, 3.5)  # Seconds between strikes
    flash_duration: Tuple[float, float] = (2.0, 4.0)  # Ticks a bolt stays active
    bolt_speed: float = 15.0  # Units revealed per tick
    gate_threshold: float = 0.8  # Parent progress a child waits for

    grayscale: bool = False
    seed: Optional[int] = None

    def validate(self) -> "StormConfig":
        """Raise ConfigError if any value is unusable; returns self."""
        if self.tick_interval <= 0:
            raise ConfigError(f"tick_interval must be positive, got {self.tick_interval}")
        if self.max_clouds < 0:
            raise ConfigError(f"max_clouds must not be negative, got {self.max_clouds}")
        if self.max_bolts < 0:
            raise ConfigError(f"max_bolts must not be negative, got {self.max_bolts}")
        if self.bolt_speed <= 0:
            raise ConfigError(f"bolt_speed must be positive, got {self.bolt_speed}")
        if not 0.0 <= self.gate_threshold <= 1.0:
            raise ConfigError(f"gate_threshold must be within [0, 1], got {self.gate_threshold}")

        for name in ('cloud_interval', 'bolt_interval', 'flash_duration'):
            low, high = getattr(self, name)
            if low < 0 or high < low:
                raise ConfigError(f"{name} must be an ordered non-negative range, got ({low}, {high})")

        return self
