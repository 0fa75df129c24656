"""
Tests for stormcell/app.py - Tick loop, input thread, signals and CLI

Tests cover:
- Frame pacing against a bounded frame count
- Quit keys and pre-set shutdown
- Resize events reaching the storm before the next frame
- Bounded event queue dropping the oldest event
- Input thread surviving a failing screen
- Seeded runs being reproducible
- Argument parsing and exit codes
"""

import signal
import threading

import pytest

import stormcell.app as app_module
from stormcell.app import (
    StormApp,
    build_parser,
    config_from_args,
    install_signal_handlers,
    main,
    restore_signal_handlers,
    run_storm,
)
from stormcell.config import StormConfig
from stormcell.screen import KeyEvent, MemoryScreen, ResizeEvent
from stormcell.utils.error_handling import ConfigError, TerminalError


def _fast_config(**kwargs):
    kwargs.setdefault('tick_interval', 0.005)
    kwargs.setdefault('seed', 7)
    return StormConfig(**kwargs)


class FailingScreen(MemoryScreen):
    """Screen whose input polling always blows up."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.polls = 0

    def poll_event(self, timeout):
        self.polls += 1
        raise RuntimeError("input device gone")


class TestTickLoop:
    """Main loop behaviour."""

    @pytest.mark.integration
    def test_runs_requested_number_of_frames(self):
        screen = MemoryScreen(60, 20)
        app = StormApp(screen, _fast_config())

        frames = app.run(max_frames=5)

        assert frames == 5
        assert screen.frames_presented == 5
        assert app.storm.frame == 5
        assert len(screen.last_frame) == 20
        assert app.shutdown.is_set()

    @pytest.mark.integration
    def test_preset_shutdown_presents_nothing(self):
        screen = MemoryScreen(60, 20)
        shutdown = threading.Event()
        shutdown.set()
        app = StormApp(screen, _fast_config(), shutdown=shutdown)

        assert app.run(max_frames=5) == 0
        assert screen.frames_presented == 0

    @pytest.mark.integration
    def test_quit_key_from_input_thread_stops_loop(self):
        screen = MemoryScreen(60, 20)
        screen.push_event(KeyEvent(ord('q')))
        app = StormApp(screen, _fast_config(tick_interval=0.01))

        frames = app.run(max_frames=500)

        assert app.shutdown.is_set()
        assert frames < 500

    @pytest.mark.integration
    def test_resize_applied_before_next_frame(self):
        screen = MemoryScreen(80, 24)
        app = StormApp(screen, _fast_config())
        screen.resize(40, 12)
        app.post_event(screen.poll_event(0))

        app.run(max_frames=1)

        assert (app.storm.width, app.storm.height) == (40, 12)
        assert len(screen.last_frame) == 12
        assert all(len(row) == 40 for row in screen.last_frame)

    @pytest.mark.integration
    def test_failing_input_does_not_stop_animation(self):
        screen = FailingScreen(60, 20)
        app = StormApp(screen, _fast_config(tick_interval=0.02))

        assert app.run(max_frames=3) == 3
        assert screen.polls >= 1

    @pytest.mark.unit
    def test_stop_releases_storm_state(self, fake_clock):
        app = StormApp(MemoryScreen(60, 20), _fast_config(), clock=fake_clock)
        app._tick()
        assert app.storm.clouds
        app.stop()
        assert app.storm.clouds == []
        assert app.storm.bolts == []


class TestEvents:
    """Event application and queueing."""

    @pytest.mark.unit
    @pytest.mark.parametrize("key", [27, 3, ord('q'), ord('Q')])
    def test_quit_keys(self, key):
        app = StormApp(MemoryScreen(), _fast_config())
        app._apply_event(KeyEvent(key))
        assert app.shutdown.is_set()

    @pytest.mark.unit
    def test_other_keys_are_ignored(self):
        app = StormApp(MemoryScreen(), _fast_config())
        app._apply_event(KeyEvent(ord('x')))
        assert not app.shutdown.is_set()

    @pytest.mark.unit
    def test_resize_event_culls_storm(self, fake_clock):
        app = StormApp(MemoryScreen(100, 30), _fast_config(), clock=fake_clock)
        app._tick()
        assert app.storm.spawn_bolt(0) is not None
        app._apply_event(ResizeEvent(50, 20))
        assert app.storm.width == 50
        assert app.storm.bolts == []

    @pytest.mark.unit
    def test_full_queue_drops_oldest(self):
        app = StormApp(MemoryScreen(), _fast_config())
        for key in range(12):
            app.post_event(KeyEvent(key))

        assert app.events.qsize() == StormApp.EVENT_QUEUE_SIZE
        assert app.events.get_nowait().key == 2


class TestDeterminism:
    """Seeded storms repeat exactly."""

    @pytest.mark.unit
    def test_same_seed_same_frames(self, clock_factory):
        frames = []
        for _ in range(2):
            clock = clock_factory()
            screen = MemoryScreen(70, 30)
            app = StormApp(screen, _fast_config(seed=123), clock=clock)
            for _ in range(250):
                clock.advance(0.1)
                app._tick()
            frames.append(list(screen.last_frame))

        assert frames[0] == frames[1]
        assert any(row.strip() for row in frames[0])


class TestSignals:
    """Signal routing to the shutdown event."""

    @pytest.mark.unit
    def test_sigterm_sets_shutdown(self):
        shutdown = threading.Event()
        previous = install_signal_handlers(shutdown)
        try:
            assert set(previous) == {signal.SIGINT, signal.SIGTERM}
            handler = signal.getsignal(signal.SIGTERM)
            handler(signal.SIGTERM, None)
            assert shutdown.is_set()
        finally:
            restore_signal_handlers(previous)

        assert signal.getsignal(signal.SIGTERM) is previous[signal.SIGTERM]

    @pytest.mark.unit
    def test_no_handlers_off_main_thread(self):
        result = {}
        thread = threading.Thread(
            target=lambda: result.update(previous=install_signal_handlers(threading.Event())))
        thread.start()
        thread.join()
        assert result['previous'] == {}


class TestConfig:
    """Configuration validation."""

    @pytest.mark.unit
    def test_defaults_are_valid(self):
        config = StormConfig().validate()
        assert config.tick_interval == 0.1
        assert config.max_clouds == 3
        assert config.max_bolts == 2

    @pytest.mark.unit
    @pytest.mark.parametrize("kwargs", [
        {'tick_interval': 0},
        {'max_clouds': -1},
        {'max_bolts': -1},
        {'bolt_speed': 0},
        {'gate_threshold': 1.5},
        {'cloud_interval': (5.0, 2.0)},
        {'flash_duration': (-1.0, 2.0)},
    ])
    def test_invalid_values_rejected(self, kwargs):
        with pytest.raises(ConfigError):
            StormConfig(**kwargs).validate()

    @pytest.mark.unit
    def test_app_validates_config(self):
        with pytest.raises(ConfigError):
            StormApp(MemoryScreen(), StormConfig(max_bolts=-1))


class TestCommandLine:
    """Argument parsing and exit codes."""

    @pytest.mark.unit
    def test_parser_defaults(self):
        config = config_from_args(build_parser().parse_args([]))
        assert config.tick_interval == pytest.approx(0.1)
        assert config.seed is None
        assert not config.grayscale

    @pytest.mark.unit
    def test_parser_options(self):
        args = build_parser().parse_args(
            ['--tick', '50', '--seed', '3', '--grayscale', '--max-clouds', '5', '--max-bolts', '1'])
        config = config_from_args(args)
        assert config.tick_interval == pytest.approx(0.05)
        assert config.seed == 3
        assert config.grayscale
        assert config.max_clouds == 5
        assert config.max_bolts == 1

    @pytest.mark.unit
    def test_bad_tick_exits_with_error(self, capsys):
        assert main(['--tick', '0']) == 1
        assert "tick_interval" in capsys.readouterr().err

    @pytest.mark.unit
    def test_missing_curses_raises(self, monkeypatch):
        monkeypatch.setattr(app_module, 'CURSES_AVAILABLE', False)
        with pytest.raises(TerminalError):
            run_storm(StormConfig())

    @pytest.mark.unit
    def test_terminal_error_exits_with_error(self, monkeypatch, capsys):
        monkeypatch.setattr(app_module, 'CURSES_AVAILABLE', False)
        assert main(['--seed', '1']) == 1
        assert "curses" in capsys.readouterr().err

    @pytest.mark.unit
    def test_clean_run_exits_zero(self, monkeypatch):
        monkeypatch.setattr(app_module, 'run_storm', lambda config: 0)
        assert main([]) == 0
