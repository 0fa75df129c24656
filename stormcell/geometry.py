"""
Storm Geometry - Fractal lightning bolt generation.

Builds a bolt as one flat list of Branch segments. Each branch names its
parent by index, so a recursively grown fork has to be renumbered before it
is spliced into the caller's list.
"""

import random
from dataclasses import replace
from typing import List

from .models import Branch, NO_PARENT, Point

# Recursion limits
MAX_DEPTH = 3
MAX_FORK_DEPTH = 2  # Forks only recurse while depth is below this

# Main trunk shape
SEGMENT_RANGE = (6, 12)  # Segment count, upper bound exclusive
JITTER = 4.0  # Full jitter span per segment, i.e. +/-2 columns

# Side branches
SIDE_BRANCH_CHANCE = 0.6
SIDE_BRANCH_MIN_ROOM = 5  # Rows that must remain below a fork point
SIDE_BRANCH_SPREAD = 1.5  # Angle factor range is +/- half of this
SIDE_BRANCH_LENGTH = (5.0, 15.0)
SIDE_BRANCH_DROP = 0.7  # Vertical share of a side branch's length
FORK_CHANCE = 0.5


def generate_fractal_lightning(origin: Point, width: int, height: int,
                               depth: int = 0, rng=None) -> List[Branch]:
    """
    Generate a lightning bolt from origin down to the bottom row.

    Args:
        origin: Where the bolt leaves the cloud
        width: Viewport columns
        height: Viewport rows
        depth: Recursion depth, 0 for the main bolt
        rng: Random source (random.Random or the random module)

    Returns:
        Branches in parent-before-child order. Parent indices are either
        NO_PARENT or point at an earlier entry of the same list.
    """
    rng = rng or random
    branches: List[Branch] = []

    if depth > MAX_DEPTH:
        return branches

    target_y = float(height - 1)
    if origin.y >= target_y:
        return branches

    segments = rng.randrange(*SEGMENT_RANGE)
    segment_length = max(1.0, (target_y - origin.y) / segments)

    x, y = origin.x, origin.y
    prev = Point(x, y)
    prev_trunk = NO_PARENT

    for i in range(segments):
        x += (rng.random() - 0.5) * JITTER
        y = min(y + segment_length, target_y)

        # Keep one column clear of either edge
        if x < 1:
            x = 1.0
        if x >= width - 1:
            x = float(width - 2)

        branches.append(Branch(start=prev, end=Point(x, y),
                               parent=prev_trunk, segment_order=i))
        trunk_index = len(branches) - 1

        if (rng.random() < SIDE_BRANCH_CHANCE and i < segments - 1
                and y < target_y - SIDE_BRANCH_MIN_ROOM):
            _add_side_branch(branches, trunk_index, width, height, depth, rng)

        prev = Point(x, y)
        prev_trunk = trunk_index

        if y >= target_y:
            break

    return branches


def _add_side_branch(branches: List[Branch], trunk_index: int, width: int,
                     height: int, depth: int, rng) -> None:
    """Fork off the end of branches[trunk_index], possibly recursing."""
    fork = branches[trunk_index]
    angle = (rng.random() - 0.5) * SIDE_BRANCH_SPREAD
    length = SIDE_BRANCH_LENGTH[0] + rng.random() * (SIDE_BRANCH_LENGTH[1] - SIDE_BRANCH_LENGTH[0])

    end = Point(fork.end.x + angle * length, fork.end.y + length * SIDE_BRANCH_DROP)
    if not (1 <= end.x < width - 1 and end.y < height):
        return

    branches.append(Branch(start=Point(fork.end.x, fork.end.y), end=end,
                           parent=trunk_index, segment_order=fork.segment_order))
    side_index = len(branches) - 1

    if depth < MAX_FORK_DEPTH and rng.random() < FORK_CHANCE:
        subtree = generate_fractal_lightning(end, width, height, depth + 1, rng)
        branches.extend(attach_subtree(subtree, side_index, len(branches)))


def attach_subtree(subtree: List[Branch], attach_index: int, offset: int) -> List[Branch]:
    """
    Renumber a locally indexed subtree for splicing into a larger list.

    Roots are re-parented onto attach_index; every other parent index is
    shifted by offset, the position the subtree will start at.
    """
    attached = []
    for branch in subtree:
        if branch.parent == NO_PARENT:
            parent = attach_index
        else:
            parent = branch.parent + offset
        attached.append(replace(branch, parent=parent))
    return attached


def is_forest(branches: List[Branch]) -> bool:
    """Check that every parent index refers to an earlier branch."""
    return all(b.parent == NO_PARENT or 0 <= b.parent < i
               for i, b in enumerate(branches))
