"""
Storm Screen Interface

Defines the character-grid surface the storm draws on, plus the input
events the polling thread reports.

Usage:
    from stormcell.screen import StormScreen

    class MyScreen(StormScreen):
        def size(self):
            return (80, 24)
        # ... implement other methods
"""

import threading
import time
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, Dict, List, Optional, Tuple, Union

# Handle curses import for Windows compatibility
try:
    import curses
    CURSES_AVAILABLE = True
except ImportError:
    curses = None
    CURSES_AVAILABLE = False

BLANK = ' '

# Escape, Ctrl-C (raw mode) and q end the animation
QUIT_KEYS = (27, 3, ord('q'), ord('Q'))


@dataclass
class ResizeEvent:
    """The terminal changed size."""
    width: int
    height: int


@dataclass
class KeyEvent:
    """A key was pressed."""
    key: int

    @property
    def is_quit(self) -> bool:
        return self.key in QUIT_KEYS


InputEvent = Union[ResizeEvent, KeyEvent]


def is_blank(glyph: Optional[str]) -> bool:
    """Empty cells read back as a space or as nothing at all."""
    return not glyph or glyph == BLANK


class StormScreen(ABC):
    """
    Abstract character grid.

    set_cell and get_cell are not required to range-check; callers must
    keep x within [0, width) and y within [0, height).
    """

    @abstractmethod
    def size(self) -> Tuple[int, int]:
        """Current (columns, rows)."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Blank the whole grid."""
        pass

    @abstractmethod
    def set_cell(self, x: int, y: int, glyph: str, style: Any) -> None:
        """Paint a single cell."""
        pass

    @abstractmethod
    def get_cell(self, x: int, y: int) -> str:
        """Glyph currently painted at a cell."""
        pass

    @abstractmethod
    def present(self) -> None:
        """Flush the painted frame to the display."""
        pass

    @abstractmethod
    def poll_event(self, timeout: float) -> Optional[InputEvent]:
        """
        Wait up to timeout seconds for input.

        Called from the input thread only. Returns None when nothing
        happened.
        """
        pass

    def sync(self) -> None:
        """Force a full repaint on the next present (after a resize)."""


class CursesScreen(StormScreen):
    """
    StormScreen backed by a curses window.

    Cells are staged in a Python-side buffer and only written to curses in
    present(), under the same lock the input thread takes for getch, so
    curses is never entered from two threads at once.
    """

    POLL_SLICE = 0.02  # Seconds between non-blocking getch attempts

    def __init__(self, stdscr):
        self.stdscr = stdscr
        self._lock = threading.Lock()
        self._cells: Dict[Tuple[int, int], Tuple[str, Any]] = {}
        self._needs_sync = False

        # Hide cursor (some terminals don't support this)
        try:
            curses.curs_set(0)
        except curses.error:
            pass

        stdscr.keypad(True)
        stdscr.nodelay(True)

    def size(self) -> Tuple[int, int]:
        with self._lock:
            height, width = self.stdscr.getmaxyx()
        return width, height

    def clear(self) -> None:
        self._cells = {}

    def set_cell(self, x: int, y: int, glyph: str, style: Any) -> None:
        self._cells[(x, y)] = (glyph, style)

    def get_cell(self, x: int, y: int) -> str:
        cell = self._cells.get((x, y))
        return cell[0] if cell else BLANK

    def sync(self) -> None:
        self._needs_sync = True

    def present(self) -> None:
        with self._lock:
            if self._needs_sync:
                self.stdscr.clear()
                self._needs_sync = False
            else:
                self.stdscr.erase()
            for (x, y), (glyph, style) in self._cells.items():
                try:
                    self.stdscr.addstr(y, x, glyph, style)
                except curses.error:
                    pass  # Writing the bottom-right cell raises after the write
            self.stdscr.refresh()

    def poll_event(self, timeout: float) -> Optional[InputEvent]:
        deadline = time.monotonic() + timeout
        while True:
            with self._lock:
                key = self.stdscr.getch()
                if key == curses.KEY_RESIZE:
                    height, width = self.stdscr.getmaxyx()
                    return ResizeEvent(width, height)
            if key != -1:
                return KeyEvent(key)
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return None
            time.sleep(min(self.POLL_SLICE, remaining))


class MemoryScreen(StormScreen):
    """
    In-memory StormScreen for headless runs and tests.

    Input is scripted with push_event(); resize() changes the grid and
    queues the matching ResizeEvent.
    """

    def __init__(self, width: int = 80, height: int = 24):
        self.width = width
        self.height = height
        self.grid: List[List[str]] = []
        self.styles: List[List[Any]] = []
        self.frames_presented = 0
        self.last_frame: List[str] = []
        self._events: Deque[InputEvent] = deque()
        self._events_lock = threading.Lock()
        self.clear()

    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    def clear(self) -> None:
        self.grid = [[BLANK] * self.width for _ in range(self.height)]
        self.styles = [[None] * self.width for _ in range(self.height)]

    def set_cell(self, x: int, y: int, glyph: str, style: Any) -> None:
        self.grid[y][x] = glyph
        self.styles[y][x] = style

    def get_cell(self, x: int, y: int) -> str:
        return self.grid[y][x]

    def present(self) -> None:
        self.frames_presented += 1
        self.last_frame = [''.join(row) for row in self.grid]

    def push_event(self, event: InputEvent) -> None:
        with self._events_lock:
            self._events.append(event)

    def resize(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.clear()
        self.push_event(ResizeEvent(width, height))

    def poll_event(self, timeout: float) -> Optional[InputEvent]:
        with self._events_lock:
            if self._events:
                return self._events.popleft()
        time.sleep(timeout)
        return None

    def text(self) -> str:
        """Current grid contents as newline-joined rows."""
        return '\n'.join(''.join(row) for row in self.grid)
