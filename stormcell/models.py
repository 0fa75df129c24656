"""
Storm Data Models - Data classes for clouds, bolts and bolt branches.

Geometry lives in plain floats; only the renderer turns it into cells.
"""

import math
from dataclasses import dataclass, field
from typing import List, Optional

# Parent index marking the root of a trunk
NO_PARENT = -1


@dataclass
class Point:
    """A continuous screen position (x = column, y = row)."""
    x: float
    y: float


@dataclass
class CloudLayer:
    """One horizontal slab of a cloud."""
    width: int
    offset: int  # Horizontal offset from the cloud's left edge


@dataclass
class Cloud:
    """A drifting multi-layer cloud. x is the left edge, y the top row."""
    x: float
    y: float
    width: int
    speed: float
    layers: List[CloudLayer] = field(default_factory=list)
    active: bool = True

    @property
    def layer_count(self) -> int:
        return len(self.layers)

    def is_visible_in(self, width: int, height: int) -> bool:
        """True while any part of the cloud can still overlap a width x height grid."""
        return self.x + self.width >= 0 and self.x < width and self.y < height


@dataclass
class Branch:
    """A single straight segment of a bolt."""
    start: Point
    end: Point
    progress: float = 0.0
    parent: int = NO_PARENT
    segment_order: int = 0

    @property
    def dx(self) -> float:
        return self.end.x - self.start.x

    @property
    def dy(self) -> float:
        return self.end.y - self.start.y

    @property
    def length(self) -> float:
        return math.hypot(self.dx, self.dy)

    @property
    def is_root(self) -> bool:
        return self.parent == NO_PARENT

    @property
    def is_complete(self) -> bool:
        return self.progress >= 1.0


@dataclass
class Bolt:
    """
    One lightning discharge.

    The branch list is generated once and never reshaped; only each
    branch's progress changes. cloud_index is a non-owning reference into
    the controller's cloud list and may be None.
    """
    origin: Point
    branches: List[Branch]
    flash_duration: float
    cloud_index: Optional[int] = None
    age: float = 0.0
    active: bool = True

    @property
    def is_fully_drawn(self) -> bool:
        return all(b.is_complete for b in self.branches)

    def parent_of(self, branch: Branch) -> Optional[Branch]:
        """Resolve a branch's parent, or None if the index is out of range."""
        if 0 <= branch.parent < len(self.branches):
            return self.branches[branch.parent]
        return None
