"""CLI tests: argument handling, exit codes, stdout/stderr separation."""

import pytest
import typer

import cli.main as cli_main
from conftest import CONTINUOUS_PRESET, FakeConnection
from core.config import AppSettings


@pytest.fixture
def remote(monkeypatch):
    """Patch the transport; records the endpoints the CLI connects to."""

    state = {"connection": FakeConnection(), "endpoints": []}

    def fake_connect(endpoint, settings=None):
        state["endpoints"].append(str(endpoint))
        return state["connection"]

    monkeypatch.setattr(cli_main, "connect", fake_connect)
    monkeypatch.setattr(cli_main, "AppSettings", lambda: AppSettings(_env_file=None))
    return state


def run_cli(*args):
    with pytest.raises(SystemExit) as excinfo:
        cli_main.run(list(args))
        raise SystemExit(0)
    return excinfo.value.code


class TestUsage:
    def test_usage_errors_from_typer_are_caught(self):
        assert issubclass(typer.BadParameter, cli_main.UsageError)

    def test_bad_parameter_maps_to_usage_exit(self, remote, monkeypatch, capsys):
        def reject(value):
            raise typer.BadParameter("rejected")

        monkeypatch.setattr(cli_main, "_parse_address", reject)
        assert run_cli("start", "localhost:9999", "1000") == 64
        err = capsys.readouterr().err
        assert "rejected" in err
        assert "start <host:port> <duration_ms>" in err
        assert remote["endpoints"] == []

    def test_no_arguments(self, remote, capsys):
        assert run_cli() == 64
        err = capsys.readouterr().err
        assert "start <host:port> <duration_ms>" in err
        assert "dump <host:port> <recording_id> <filename>" in err
        assert remote["endpoints"] == []

    def test_unknown_command(self, remote, capsys):
        assert run_cli("record", "localhost:9999") == 64
        err = capsys.readouterr().err
        assert "start <host:port>" in err
        assert "dump <host:port>" in err

    @pytest.mark.parametrize("duration", ["0", "-5", "abc", "1.5"])
    def test_start_rejects_bad_duration(self, remote, capsys, duration):
        assert run_cli("start", "localhost:9999", duration) == 64
        captured = capsys.readouterr()
        assert "start <host:port> <duration_ms>" in captured.err
        assert "dump <host:port>" not in captured.err
        assert captured.out == ""
        assert remote["endpoints"] == []

    def test_start_missing_duration(self, remote):
        assert run_cli("start", "localhost:9999") == 64
        assert remote["endpoints"] == []

    def test_start_rejects_bad_address(self, remote, capsys):
        assert run_cli("start", "localhost", "1000") == 64
        assert remote["endpoints"] == []

    @pytest.mark.parametrize("recording_id", ["0", "x"])
    def test_dump_rejects_bad_id(self, remote, capsys, recording_id, tmp_path):
        assert run_cli("dump", "localhost:9999", recording_id, str(tmp_path / "out.jfr")) == 64
        assert "dump <host:port> <recording_id> <filename>" in capsys.readouterr().err
        assert remote["endpoints"] == []

    def test_dump_missing_filename(self, remote):
        assert run_cli("dump", "localhost:9999", "3") == 64


class TestStart:
    def test_prints_only_the_id_on_stdout(self, remote, capsys):
        assert run_cli("start", "localhost:9999", "30000") == 0
        captured = capsys.readouterr()
        assert captured.out.strip() == "1"
        assert "Attempting to connect to host localhost:9999" in captured.err
        assert "Started recording..." in captured.err
        assert remote["endpoints"] == ["localhost:9999"]
        assert remote["connection"].closed
        recording = remote["connection"].recordings[1]
        assert recording.options["duration"] == "30000 ms"
        assert recording.options["name"] == "My Recording"

    def test_command_name_is_case_insensitive(self, remote, capsys):
        assert run_cli("START", "localhost:9999", "1000") == 0
        assert capsys.readouterr().out.strip() == "1"

    def test_name_and_preset_options(self, remote, capsys):
        assert run_cli("start", "localhost:9999", "1000", "--name", "nightly", "--preset", "Continuous") == 0
        recording = remote["connection"].recordings[1]
        assert recording.name == "nightly"
        assert recording.settings["jdk.ExecutionSample#period"] == "20 ms"

    def test_missing_preset_warns(self, remote, capsys):
        remote["connection"] = FakeConnection(presets=[CONTINUOUS_PRESET])
        assert run_cli("start", "localhost:9999", "1000") == 0
        captured = capsys.readouterr()
        assert captured.out.strip() == "1"
        assert "Warning:" in captured.err

    def test_strict_preset_fails_without_printing_an_id(self, remote, capsys):
        remote["connection"] = FakeConnection(presets=[CONTINUOUS_PRESET])
        assert run_cli("start", "localhost:9999", "1000", "--strict-preset") == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Profiling" in captured.err
        assert remote["connection"].closed


class TestDump:
    def test_writes_file(self, remote, capsys, tmp_path):
        remote["connection"].add_recording(42, data=b"JFR\x00payload")
        out = tmp_path / "out.jfr"
        assert run_cli("dump", "localhost:9999", "42", str(out)) == 0
        assert out.read_bytes() == b"JFR\x00payload"
        err = capsys.readouterr().err
        assert "Finished recording. Saving to" in err
        assert remote["connection"].closed

    def test_unknown_recording_is_a_clear_error(self, remote, capsys, tmp_path):
        out = tmp_path / "out.jfr"
        assert run_cli("dump", "localhost:9999", "42", str(out)) == 1
        captured = capsys.readouterr()
        assert "No recording with id 42" in captured.err
        assert not out.exists()
        assert remote["connection"].closed
