"""
Storm Terminal App - Tick loop, input thread and command line entry point.

Features:
- 100ms fixed-rate frames driving all storm state
- Background input thread feeding a bounded event queue
- Resize handling (clouds culled, bolts dropped)
- Clean exit on SIGINT/SIGTERM or a quit key
- Optional grayscale palette

Usage:
    stormcell
    stormcell --grayscale
    stormcell --seed 42 --log-file storm.log

Keyboard Shortcuts:
    [q]   Quit
    [Esc] Quit
"""

import logging
import queue
import random
import signal
import sys
import threading
import time
from typing import Callable, Dict, Optional

# Handle curses import for Windows compatibility
try:
    import curses
    CURSES_AVAILABLE = True
except ImportError:
    curses = None
    CURSES_AVAILABLE = False

from .colors import Colors
from .config import StormConfig
from .renderer import StormRenderer
from .screen import CursesScreen, InputEvent, KeyEvent, ResizeEvent, StormScreen
from .storm import Storm
from .utils.error_handling import (
    ConfigError,
    ErrorCategory,
    StormError,
    TerminalError,
    handle_error,
    safe_execute,
)

logger = logging.getLogger(__name__)


class StormApp:
    """
    Runs the storm on a screen until shutdown.

    The loop thread owns the storm. The input thread only ever touches the
    event queue, which the loop drains before every tick.
    """

    EVENT_QUEUE_SIZE = 10
    POLL_TIMEOUT = 0.05  # Seconds the input thread waits per poll

    def __init__(self, screen: StormScreen, config: Optional[StormConfig] = None,
                 styles: Optional[Dict] = None, shutdown: Optional[threading.Event] = None,
                 clock: Callable[[], float] = time.monotonic):
        self.screen = screen
        self.config = (config or StormConfig()).validate()
        self.shutdown = shutdown or threading.Event()
        self.clock = clock

        self.seed = self.config.seed if self.config.seed is not None else time.time_ns()
        self.rng = random.Random(self.seed)

        width, height = screen.size()
        self.storm = Storm(width, height, self.config, self.rng, clock)
        self.renderer = StormRenderer(styles, self.rng)
        self.events: "queue.Queue[InputEvent]" = queue.Queue(maxsize=self.EVENT_QUEUE_SIZE)
        self.frames = 0
        self._input_thread: Optional[threading.Thread] = None

    def run(self, max_frames: Optional[int] = None) -> int:
        """
        Loop until shutdown (or max_frames frames have been presented).

        Returns:
            Number of frames presented
        """
        logger.info(f"Storm starting at {self.storm.width}x{self.storm.height}, seed {self.seed}")
        self._start_input_thread()
        interval = self.config.tick_interval
        next_tick = self.clock() + interval

        try:
            while not self.shutdown.is_set():
                self._drain_events()
                if self.shutdown.is_set():
                    break

                now = self.clock()
                if now >= next_tick:
                    self._tick()
                    # Skip missed ticks instead of bursting to catch up
                    next_tick = max(next_tick + interval, now)
                    if max_frames is not None and self.frames >= max_frames:
                        break
                    continue

                try:
                    event = self.events.get(timeout=next_tick - now)
                except queue.Empty:
                    continue
                self._apply_event(event)
        except KeyboardInterrupt:
            self.shutdown.set()
        finally:
            self.stop()

        logger.info(f"Storm stopped after {self.frames} frames")
        return self.frames

    def stop(self) -> None:
        """Signal shutdown and wait briefly for the input thread."""
        self.shutdown.set()
        if self._input_thread is not None:
            self._input_thread.join(timeout=self.POLL_TIMEOUT * 4)
            self._input_thread = None
        self.storm.clouds = []
        self.storm.bolts = []

    def _tick(self) -> None:
        self.storm.tick()
        self.renderer.draw_frame(self.screen, self.storm)
        # A shutdown seen mid-frame wins; the partial frame is never shown
        if self.shutdown.is_set():
            return
        self.screen.present()
        self.frames += 1

    def _drain_events(self) -> None:
        while True:
            try:
                event = self.events.get_nowait()
            except queue.Empty:
                return
            self._apply_event(event)

    def _apply_event(self, event: InputEvent) -> None:
        if isinstance(event, ResizeEvent):
            logger.debug(f"Resize event: {event.width}x{event.height}")
            self.storm.resize(event.width, event.height)
            self.screen.sync()
        elif isinstance(event, KeyEvent) and event.is_quit:
            logger.info("Quit key pressed")
            self.shutdown.set()

    def _start_input_thread(self) -> None:
        self._input_thread = threading.Thread(target=self._poll_input,
                                              name="storm-input", daemon=True)
        self._input_thread.start()

    def _poll_input(self) -> None:
        """Input thread body: forward screen events until shutdown."""
        while not self.shutdown.is_set():
            with safe_execute("polling input", ErrorCategory.INPUT) as result:
                result.value = self.screen.poll_event(self.POLL_TIMEOUT)
            if not result.success:
                # Back off so a persistently failing poll doesn't spin
                self.shutdown.wait(self.POLL_TIMEOUT)
                continue
            if result.value is not None:
                self.post_event(result.value)

    def post_event(self, event: InputEvent) -> None:
        """Queue an event, dropping the oldest one if the queue is full."""
        while True:
            try:
                self.events.put_nowait(event)
                return
            except queue.Full:
                try:
                    dropped = self.events.get_nowait()
                    logger.debug(f"Event queue full, dropped {dropped}")
                except queue.Empty:
                    pass


def install_signal_handlers(shutdown: threading.Event) -> Dict[int, object]:
    """
    Route SIGINT/SIGTERM to the shutdown event.

    Only possible from the main thread; returns the previous handlers.
    """
    previous = {}
    if threading.current_thread() is not threading.main_thread():
        return previous
    for signum in (signal.SIGINT, signal.SIGTERM):
        previous[signum] = signal.signal(signum, lambda *_: shutdown.set())
    return previous


def restore_signal_handlers(previous: Dict[int, object]) -> None:
    for signum, handler in previous.items():
        signal.signal(signum, handler)


def run_storm(config: Optional[StormConfig] = None) -> int:
    """
    Run the storm in the current terminal.

    Args:
        config: Animation tunables

    Returns:
        Number of frames presented
    """
    if not CURSES_AVAILABLE:
        hint = " Try: pip install windows-curses" if sys.platform == 'win32' else ""
        raise TerminalError(f"curses library not available.{hint}")

    config = (config or StormConfig()).validate()
    shutdown = threading.Event()
    previous = install_signal_handlers(shutdown)

    def _main_loop(stdscr) -> int:
        screen = CursesScreen(stdscr)
        styles = Colors.init_colors(config.grayscale)
        app = StormApp(screen, config, styles=styles, shutdown=shutdown)
        return app.run()

    try:
        return curses.wrapper(_main_loop)
    except curses.error as e:
        handle_error(e, "running storm", ErrorCategory.TERMINAL)
        raise TerminalError(f"Terminal error: {e}") from e
    finally:
        restore_signal_handlers(previous)


def configure_logging(log_file: Optional[str], level: str = "INFO") -> None:
    """Log to a file if asked; curses owns the terminal otherwise."""
    if not log_file:
        return
    logging.basicConfig(
        filename=log_file,
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def build_parser():
    import argparse

    parser = argparse.ArgumentParser(
        prog="stormcell",
        description="Stormcell - drifting storm clouds and fractal lightning in the terminal",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    stormcell                       # Run with defaults
    stormcell --grayscale           # Gray palette only
    stormcell --tick 50             # Faster frames
    stormcell --seed 7 --log-file storm.log

Keyboard Shortcuts:
    q / Esc   Quit
        """
    )
    parser.add_argument("--grayscale", action="store_true",
                        help="Use grayscale colors instead of colors")
    parser.add_argument("--tick", type=int, default=100,
                        help="Frame interval in milliseconds (default: 100)")
    parser.add_argument("--seed", type=int,
                        help="Random seed for a reproducible storm")
    parser.add_argument("--max-clouds", type=int, default=3,
                        help="Maximum clouds on screen (default: 3)")
    parser.add_argument("--max-bolts", type=int, default=2,
                        help="Maximum simultaneous bolts (default: 2)")
    parser.add_argument("--log-file", type=str,
                        help="Write logs to this file")
    parser.add_argument("--log-level", type=str, default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Log level for --log-file (default: INFO)")
    return parser


def config_from_args(args) -> StormConfig:
    return StormConfig(
        tick_interval=args.tick / 1000.0,
        max_clouds=args.max_clouds,
        max_bolts=args.max_bolts,
        grayscale=args.grayscale,
        seed=args.seed,
    ).validate()


def main(argv=None) -> int:
    """CLI entry point for the stormcell command."""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_file, args.log_level)

    try:
        config = config_from_args(args)
        run_storm(config)
    except ConfigError as e:
        handle_error(e, "parsing arguments", ErrorCategory.CONFIG)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except StormError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
