"""Tests for the command-line runner helpers."""

import json
import signal

import pytest

from looptimer.__main__ import (
    build_parser,
    config_from_args,
    export_timers,
    format_clock,
    format_state,
    import_timers,
    main,
    quit_on_interrupt,
)
from looptimer.models import ActiveTimerState, TimerConfig, TimerPhase
from looptimer.saved_timers import SavedTimers
from looptimer.settings import AppSettings

from helpers import make_config


class TestFormatting:
    def test_clock(self):
        assert format_clock(0) == "00:00"
        assert format_clock(75) == "01:15"
        assert format_clock(-3) == "00:00"

    def test_running_line(self):
        config = make_config(duration_seconds=10, repeat_count=3)
        state = ActiveTimerState(TimerPhase.RUNNING, 4, 2, 3, config)
        assert format_state(state) == "[running] 00:04  rep 2/3  60%"

    def test_paused_line_names_resume_target(self):
        config = make_config(duration_seconds=10, delay_seconds=4, infinite_repeat=True)
        state = ActiveTimerState(TimerPhase.PAUSED, 2, 5, 0, config, resume_to=TimerPhase.DELAY)
        assert format_state(state) == "[paused:delay] 00:02  rep 5/∞  50%"


class TestArguments:
    def test_defaults(self):
        args = build_parser().parse_args([])
        assert args.duration == 60
        assert args.repeat == 1
        assert args.delay == 0
        assert args.tone is None
        assert not args.infinite

    def test_rejects_unknown_tone(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--tone", "kazoo"])

    def test_config_from_args_uses_settings_defaults(self):
        args = build_parser().parse_args(["-d", "30", "-r", "4", "--delay", "5"])
        config = config_from_args(args, AppSettings(default_tone_id="chime", default_volume=0.4))
        assert config.duration_seconds == 30
        assert config.repeat_count == 4
        assert config.delay_seconds == 5
        assert config.tone_id == "chime"
        assert config.volume == pytest.approx(0.4)
        assert config.name == "Timer"

    def test_config_from_args_overrides(self):
        args = build_parser().parse_args(["--tone", "buzz", "--volume", "0.9", "--name", "Rounds"])
        config = config_from_args(args, AppSettings())
        assert config.tone_id == "buzz"
        assert config.volume == pytest.approx(0.9)
        assert config.name == "Rounds"


class TestMain:
    def test_list_tones(self, capsys):
        assert main(["--list-tones"]) == 0
        out = capsys.readouterr().out
        assert "alarm" in out
        assert "1.10s" in out

    def test_list_presets(self, qapp, settings_path, capsys):
        store = SavedTimers(AppSettings())
        store.add(make_config(name="Intervals", duration_seconds=90, repeat_count=4))
        assert main(["--list-presets"]) == 0
        out = capsys.readouterr().out
        assert "Intervals" in out
        assert "01:30" in out

    def test_unknown_preset(self, qapp, settings_path, capsys):
        assert main(["--preset", "missing"]) == 1
        assert "missing" in capsys.readouterr().err

    def test_export_prints_saved_timers(self, qapp, settings_path, capsys):
        store = SavedTimers(AppSettings())
        config = make_config(name="Laps", duration_seconds=45, repeat_count=2, tone_id="bell")
        store.add(config)
        assert main(["--export"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert [TimerConfig.from_dict(entry) for entry in data] == [config]
        assert data[0]["toneId"] == "bell"

    def test_import_adds_timers(self, qapp, settings_path, tmp_path, capsys):
        config = make_config(name="Imported", duration_seconds=20)
        path = tmp_path / "timers.json"
        path.write_text(json.dumps([config.to_dict()]), encoding="utf-8")
        assert main(["--import", str(path)]) == 0
        assert "Imported 1" in capsys.readouterr().out

        store = SavedTimers(AppSettings())
        store.load()
        assert store.find("Imported") == config

    def test_import_malformed_file(self, qapp, settings_path, tmp_path, capsys):
        path = tmp_path / "timers.json"
        path.write_text('{"not": "a list"}', encoding="utf-8")
        assert main(["--import", str(path)]) == 1
        assert "Could not import" in capsys.readouterr().err

    def test_import_missing_file(self, qapp, settings_path, tmp_path, capsys):
        assert main(["--import", str(tmp_path / "nope.json")]) == 1
        assert "Could not import" in capsys.readouterr().err


@pytest.mark.usefixtures("qapp")
class TestImportExport:
    def test_export_empty_store(self):
        assert json.loads(export_timers(SavedTimers(AppSettings()))) == []

    def test_import_replaces_same_id(self, tmp_path):
        store = SavedTimers(AppSettings())
        original = make_config(name="Old", duration_seconds=10)
        store.add(original)
        renamed = TimerConfig.from_dict({**original.to_dict(), "name": "New"})
        path = tmp_path / "timers.json"
        path.write_text(json.dumps([renamed.to_dict()]), encoding="utf-8")

        assert import_timers(store, path) == 0
        assert [t.name for t in store.timers] == ["New"]

    def test_import_respects_cap(self, tmp_path):
        store = SavedTimers(AppSettings(max_saved_timers=1))
        configs = [make_config(name=f"T{i}") for i in range(3)]
        path = tmp_path / "timers.json"
        path.write_text(json.dumps([c.to_dict() for c in configs]), encoding="utf-8")

        assert import_timers(store, path) == 1
        assert [t.name for t in store.timers] == ["T0"]

    def test_import_entry_missing_keys(self, tmp_path):
        path = tmp_path / "timers.json"
        path.write_text(json.dumps([{"name": "no id"}]), encoding="utf-8")
        with pytest.raises(ValueError):
            import_timers(SavedTimers(AppSettings()), path)


class _FakeApp:
    def __init__(self):
        self.quit_calls = 0

    def quit(self):
        self.quit_calls += 1


class TestInterrupt:
    def test_sigint_quits_event_loop(self):
        app = _FakeApp()
        previous = quit_on_interrupt(app)
        try:
            handler = signal.getsignal(signal.SIGINT)
            handler(signal.SIGINT, None)
            assert app.quit_calls == 1
        finally:
            signal.signal(signal.SIGINT, previous)

    def test_returns_previous_handler(self):
        before = signal.getsignal(signal.SIGINT)
        previous = quit_on_interrupt(_FakeApp())
        try:
            assert previous is before
        finally:
            signal.signal(signal.SIGINT, previous)
