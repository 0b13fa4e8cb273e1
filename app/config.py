# app/config.py
from __future__ import annotations
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict
import json
import logging

from app.errors import ConfigError

log = logging.getLogger(__name__)

_SETTINGS_FILE = Path("settings.json")

# Characters allowed after an uncorrected error before input freezes.
DEFAULT_FREEZE_THRESHOLD = 10


@dataclass(frozen=True)
class SessionConfig:
    freeze_threshold: int = DEFAULT_FREEZE_THRESHOLD
    lookahead: int = 3                 # insertion window, in target characters
    pause_threshold: float = 0.5       # seconds before a keystroke counts as a hesitation
    long_pause_threshold: float = 1.0
    trend_bucket_seconds: float = 10.0
    weakness_limit: int = 10
    cluster_gap: int = 10              # positions between errors of one cluster
    rhythm_break_floor: float = 0.4
    digraph_min_occurrences: int = 2   # samples before a digraph can be ranked
    slow_transition_threshold: float = 0.3

    def __post_init__(self):
        if self.freeze_threshold < 0:
            raise ConfigError("freeze_threshold must be >= 0")
        if self.lookahead < 2:
            raise ConfigError("lookahead must be >= 2")
        if self.pause_threshold <= 0 or self.long_pause_threshold < self.pause_threshold:
            raise ConfigError("pause thresholds must satisfy 0 < pause <= long pause")
        if self.trend_bucket_seconds <= 0:
            raise ConfigError("trend_bucket_seconds must be positive")
        if self.weakness_limit < 1 or self.cluster_gap < 0:
            raise ConfigError("weakness_limit must be >= 1 and cluster_gap >= 0")
        if self.digraph_min_occurrences < 1 or self.slow_transition_threshold <= 0:
            raise ConfigError("digraph_min_occurrences must be >= 1 and slow_transition_threshold positive")

    def with_overrides(self, **overrides: Any) -> "SessionConfig":
        """Return a copy with the non-None overrides applied."""
        values = {k: v for k, v in overrides.items() if v is not None}
        return _build(values, base=self)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def _build(values: Dict[str, Any], base: SessionConfig | None = None) -> SessionConfig:
    known = {f.name: f for f in fields(SessionConfig)}
    unknown = set(values) - set(known)
    if unknown:
        raise ConfigError(f"Unknown settings: {', '.join(sorted(unknown))}")
    coerced: Dict[str, Any] = {}
    for name, value in values.items():
        kind = int if known[name].type in ("int", int) else float
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigError(f"Setting {name!r} must be a number, got {value!r}")
        if kind is int and float(value) != int(value):
            raise ConfigError(f"Setting {name!r} must be an integer, got {value!r}")
        coerced[name] = kind(value)
    return replace(base or SessionConfig(), **coerced)


def load_config(path: Path | str | None = None) -> SessionConfig:
    """Load settings from a JSON object; a missing file yields the defaults."""
    cfg_path = Path(path) if path else _SETTINGS_FILE
    if not cfg_path.exists():
        if path:
            raise ConfigError(f"Settings file not found: {cfg_path}")
        return SessionConfig()
    try:
        data = json.loads(cfg_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot read settings from {cfg_path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Settings in {cfg_path} must be a JSON object")
    config = _build(data)
    log.info("Loaded settings from %s", cfg_path)
    return config


def save_config(config: SessionConfig, path: Path | str | None = None) -> Path:
    cfg_path = Path(path) if path else _SETTINGS_FILE
    cfg_path.write_text(json.dumps(config.to_dict(), indent=2), encoding="utf-8")
    return cfg_path
