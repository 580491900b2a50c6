from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from conftest import FakeBackend, result, write_audio

import app.cli as cli
from app.cli import SIGNUP_URL, create_cli_app
from recognition import AuthenticationError

runner = CliRunner()


@pytest.fixture
def backend(monkeypatch: pytest.MonkeyPatch) -> FakeBackend:
    fake = FakeBackend()
    monkeypatch.setattr(cli, "create_backend", lambda config: fake)
    return fake


def _invoke(*args: str):
    return runner.invoke(create_cli_app(), list(args))


def test_help_lists_arguments_and_signup_url() -> None:
    outcome = _invoke("--help")

    assert outcome.exit_code == 0
    assert "INPUT_DIRECTORY" in outcome.output
    assert "SUBSCRIPTION_KEY" in outcome.output
    assert SIGNUP_URL in outcome.output


def test_missing_subscription_key_prints_full_help(tmp_path: Path) -> None:
    outcome = _invoke(str(tmp_path))

    assert outcome.exit_code == 2
    assert "SUBSCRIPTION_KEY" in outcome.output
    assert SIGNUP_URL in outcome.output


def test_run_writes_transcript(tmp_path: Path, audio_dir: Path, backend: FakeBackend) -> None:
    write_audio(audio_dir, "a.wav")
    write_audio(audio_dir, "b.wav")
    backend.script = {
        b"a.wav": ([result("hello world")], None),
        b"b.wav": ([result("goodbye")], None),
    }
    out = tmp_path / "transcript.txt"

    outcome = _invoke(str(audio_dir), "key", "--out", str(out), "--config", str(tmp_path / "none.toml"), "--sort")

    assert outcome.exit_code == 0, outcome.output
    assert str(out) in outcome.output
    assert out.read_text(encoding="utf-8") == "hello world\ngoodbye\n"


def test_options_override_config(tmp_path: Path, audio_dir: Path, backend: FakeBackend) -> None:
    write_audio(audio_dir, "a.wav")
    config_path = tmp_path / "config.toml"
    config_path.write_text('[recognition]\nlocale = "fr-fr"\nregion = "eastus"\n', encoding="utf-8")

    outcome = _invoke(
        str(audio_dir),
        "key",
        "--out",
        str(tmp_path / "t.txt"),
        "--config",
        str(config_path),
        "--region",
        "westeurope",
        "--mode",
        "short",
    )

    assert outcome.exit_code == 0, outcome.output
    locale, mode, credential = backend.calls[0]
    assert locale == "fr-fr"
    assert mode.value == "short"
    assert credential.region == "westeurope"


def test_missing_directory_exits_with_code_2(tmp_path: Path, backend: FakeBackend) -> None:
    outcome = _invoke(
        str(tmp_path / "missing"), "key", "--out", str(tmp_path / "t.txt"), "--config", str(tmp_path / "none.toml")
    )

    assert outcome.exit_code == 2
    assert "does not exist" in outcome.output


def test_invalid_config_exits_with_code_2(tmp_path: Path, audio_dir: Path, backend: FakeBackend) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text('[output]\non_error = "retry"\n', encoding="utf-8")

    outcome = _invoke(str(audio_dir), "key", "--config", str(config_path))

    assert outcome.exit_code == 2
    assert "Config error" in outcome.output


def test_recognition_failure_exits_with_code_1(tmp_path: Path, audio_dir: Path, backend: FakeBackend) -> None:
    write_audio(audio_dir, "a.wav")
    backend.script = {b"a.wav": ([], AuthenticationError("invalid subscription key"))}

    outcome = _invoke(
        str(audio_dir), "bad", "--out", str(tmp_path / "t.txt"), "--config", str(tmp_path / "none.toml")
    )

    assert outcome.exit_code == 1
    assert "invalid subscription key" in outcome.output


def test_continue_policy_reports_failed_files(tmp_path: Path, audio_dir: Path, backend: FakeBackend) -> None:
    write_audio(audio_dir, "a.wav")
    write_audio(audio_dir, "b.wav")
    backend.script = {
        b"a.wav": ([], AuthenticationError("rejected")),
        b"b.wav": ([result("still here")], None),
    }
    out = tmp_path / "t.txt"

    outcome = _invoke(
        str(audio_dir),
        "key",
        "--out",
        str(out),
        "--config",
        str(tmp_path / "none.toml"),
        "--sort",
        "--on-error",
        "continue",
    )

    assert outcome.exit_code == 1
    assert "Failed:" in outcome.output
    assert out.read_text(encoding="utf-8") == "still here\n"
