from __future__ import annotations

from pathlib import Path
import sys
import threading

import pytest

from helpgpt.cli import main, parse_arguments
from helpgpt.credentials import API_KEY_ENV_VAR, CredentialStore


@pytest.fixture
def restore_process_state(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sys, "excepthook", sys.excepthook)
    monkeypatch.setattr(threading, "excepthook", threading.excepthook)
    monkeypatch.setattr(sys, "argv", list(sys.argv))
    monkeypatch.setattr(sys, "path", list(sys.path))


class TestKeyCommands:
    def test_set_key(self) -> None:
        assert main(["set-key", "sk-test-123456"]) == 0
        assert CredentialStore().get() == "sk-test-123456"

    def test_clear_key(self) -> None:
        main(["set-key", "sk-test-123456"])
        assert main(["clear-key"]) == 0
        assert CredentialStore().get() is None

    def test_status_without_key(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["status"]) == 1
        assert "No API key configured" in capsys.readouterr().out

    def test_status_masks_key(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["set-key", "sk-test-123456"])
        capsys.readouterr()

        assert main(["status"]) == 0
        out = capsys.readouterr().out
        assert "sk-test-123456" not in out
        assert "3456" in out

    def test_status_from_environment(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        monkeypatch.setenv(API_KEY_ENV_VAR, "sk-env-abcdefgh")
        assert main(["status"]) == 0
        assert f"${API_KEY_ENV_VAR}" in capsys.readouterr().out


@pytest.mark.usefixtures("restore_process_state")
class TestRun:
    def test_parse_run_arguments(self) -> None:
        args = parse_arguments(["run", "--max-frames", "5", "script.py", "-v", "x"])
        assert args.script == "script.py"
        assert args.args == ["-v", "x"]
        assert args.max_frames == 5

    def test_runs_script_with_hook(self, tmp_path: Path) -> None:
        out_file = tmp_path / "argv.txt"
        script = tmp_path / "script.py"
        script.write_text(
            "import sys\n"
            f"open({str(out_file)!r}, 'w').write(' '.join(sys.argv[1:]))\n"
        )

        assert main(["run", str(script), "a", "b"]) == 0

        assert out_file.read_text() == "a b"
        assert type(sys.excepthook.__self__).__name__ == "ErrorReporter"
        assert sys.excepthook.__self__.config.hide_frames is True

    def test_uncaught_error_propagates_to_hook(self, tmp_path: Path) -> None:
        script = tmp_path / "failing.py"
        script.write_text("raise ValueError('from script')\n")

        with pytest.raises(ValueError, match="from script"):
            main(["run", "--no-reverse", str(script)])

        config = sys.excepthook.__self__.config
        assert config.reverse_backtrace is False
        assert "helpgpt" in config.hidden_modules
