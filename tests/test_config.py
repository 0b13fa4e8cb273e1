import json

import pytest

from app.config import SessionConfig, load_config, save_config
from app.errors import ConfigError


def test_defaults():
    cfg = SessionConfig()
    assert cfg.freeze_threshold == 10
    assert cfg.lookahead == 3
    assert cfg.pause_threshold == 0.5
    assert cfg.long_pause_threshold == 1.0


def test_missing_default_file_gives_defaults(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert load_config() == SessionConfig()


def test_missing_explicit_file_is_an_error(tmp_path):
    with pytest.raises(ConfigError):
        load_config(tmp_path / "missing.json")


def test_load_partial_settings(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"freeze_threshold": 5, "pause_threshold": 1}), encoding="utf-8")
    cfg = load_config(path)
    assert cfg.freeze_threshold == 5
    assert cfg.pause_threshold == 1.0
    assert isinstance(cfg.pause_threshold, float)
    assert cfg.lookahead == 3


def test_save_then_load(tmp_path):
    cfg = SessionConfig(freeze_threshold=0, trend_bucket_seconds=5.0)
    path = save_config(cfg, tmp_path / "settings.json")
    assert load_config(path) == cfg


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        "[1, 2, 3]",
        '{"colour": "blue"}',
        '{"freeze_threshold": "ten"}',
        '{"freeze_threshold": 2.5}',
        '{"freeze_threshold": true}',
        '{"freeze_threshold": -1}',
        '{"lookahead": 1}',
        '{"pause_threshold": 2.0, "long_pause_threshold": 1.0}',
        '{"digraph_min_occurrences": 0}',
        '{"slow_transition_threshold": 0}',
    ],
)
def test_bad_settings_rejected(tmp_path, content):
    path = tmp_path / "settings.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(path)


def test_invalid_config_rejected_directly():
    with pytest.raises(ConfigError):
        SessionConfig(trend_bucket_seconds=0)
