"""Configuration handling for Transcriber.

Transcriber loads an optional TOML file from OS-specific locations:

- Linux/macOS: ~/.config/transcriber/config.toml
- Windows: %APPDATA%\\transcriber\\config.toml

Every value has a default, so the two command-line arguments are enough to run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from pathlib import Path
import platform
from typing import Any

try:  # Python 3.11+
    import tomllib  # type: ignore
except ModuleNotFoundError:  # Python 3.10
    import tomli as tomllib  # type: ignore


RECOGNITION_MODES = ("short", "continuous")
ERROR_POLICIES = ("abort", "continue")


class ConfigurationError(ValueError):
    """Raised for missing or invalid configuration values."""


@dataclass(frozen=True, slots=True)
class RecognitionConfig:
    """Configuration for the speech recognition service."""

    backend: str = "azure"
    locale: str = "en-us"
    mode: str = "continuous"
    region: str = "westus"
    endpoint: str = ""


@dataclass(frozen=True, slots=True)
class OutputConfig:
    """Configuration for transcript output and the run policy."""

    path: str = ""
    sort_files: bool = False
    on_error: str = "abort"


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Top-level application configuration."""

    recognition: RecognitionConfig = field(default_factory=RecognitionConfig)
    output: OutputConfig = field(default_factory=OutputConfig)


def get_config_path() -> Path:
    """Return the default configuration file path for the current OS."""

    system = platform.system().lower()
    if system == "windows":
        appdata = os.environ.get("APPDATA")
        if appdata:
            return Path(appdata) / "transcriber" / "config.toml"

        # Reasonable fallback for unusual environments.
        return Path.home() / "AppData" / "Roaming" / "transcriber" / "config.toml"

    return Path.home() / ".config" / "transcriber" / "config.toml"


def default_output_path() -> Path:
    """Return the transcript path used when none is configured."""

    return Path.home() / "Documents" / "testspeechapi" / "apitranscript.txt"


def resolve_output_path(config: OutputConfig) -> Path:
    """Return the configured transcript path, or the per-user default."""

    if config.path:
        return Path(config.path).expanduser()
    return default_output_path()


def load_config(path: Path | None = None) -> AppConfig:
    """Load config from a TOML file, falling back to defaults if missing.

    Args:
        path: Optional explicit config path. When None, uses the OS default.

    Raises:
        ConfigurationError: If the config contains unsupported values.
    """

    config_path = path or get_config_path()
    if not config_path.exists():
        return AppConfig()

    with config_path.open("rb") as f:
        try:
            raw = tomllib.load(f)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigurationError(f"Invalid config file {config_path}: {exc}") from exc

    defaults = AppConfig()
    recognition_raw = _get_table(raw, "recognition")
    output_raw = _get_table(raw, "output")

    recognition = RecognitionConfig(
        backend=_get_str(recognition_raw, "backend", default=defaults.recognition.backend),
        locale=_get_str(recognition_raw, "locale", default=defaults.recognition.locale),
        mode=_get_choice(recognition_raw, "mode", RECOGNITION_MODES, default=defaults.recognition.mode),
        region=_get_str(recognition_raw, "region", default=defaults.recognition.region),
        endpoint=_get_str(recognition_raw, "endpoint", default="", allow_empty=True),
    )

    output = OutputConfig(
        path=_get_str(output_raw, "path", default="", allow_empty=True),
        sort_files=_get_bool(output_raw, "sort_files", default=defaults.output.sort_files),
        on_error=_get_choice(output_raw, "on_error", ERROR_POLICIES, default=defaults.output.on_error),
    )
    return AppConfig(recognition=recognition, output=output)


def _get_table(raw: dict[str, Any], key: str) -> dict[str, Any]:
    """Internal helper to get a TOML table as a dict."""

    value = raw.get(key)
    if value is None:
        return {}
    if isinstance(value, dict):
        return value
    raise ConfigurationError(f"Invalid config: [{key}] must be a table.")


def _get_str(raw: dict[str, Any], key: str, default: str, allow_empty: bool = False) -> str:
    """Internal helper to get a TOML string with a default."""

    value = raw.get(key)
    if value is None:
        return default
    if isinstance(value, str) and (allow_empty or value.strip()):
        return value.strip()
    raise ConfigurationError(f"Invalid config: {key} must be a non-empty string.")


def _get_bool(raw: dict[str, Any], key: str, default: bool) -> bool:
    """Internal helper to get a TOML boolean with a default."""

    value = raw.get(key)
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    raise ConfigurationError(f"Invalid config: {key} must be true or false.")


def _get_choice(raw: dict[str, Any], key: str, choices: tuple[str, ...], default: str) -> str:
    """Internal helper to get a TOML string restricted to `choices`."""

    value = _get_str(raw, key, default=default).lower()
    if value not in choices:
        raise ConfigurationError(f"Invalid config: {key} must be one of {list(choices)}.")
    return value
