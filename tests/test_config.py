import os
import tempfile

import pytest

from apnealog.config import Config, load_config, save_config


def test_save_and_load_config_roundtrip():
    cfg = Config(data_dir="/srv/apnealog")
    cfg.dashboard.recent_sessions = 8
    cfg.api.port = 9001

    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "apnealog_config.yml")
        save_config(path, cfg)
        loaded = load_config(path)

    assert loaded.data_dir == "/srv/apnealog"
    assert loaded.dashboard.recent_sessions == 8
    assert loaded.dashboard.depth_below_surface is True
    assert loaded.api.port == 9001


def test_missing_keys_fall_back_to_defaults():
    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "partial.yml")
        with open(path, "w", encoding="utf-8") as handle:
            handle.write("log_level: debug\nstore:\n  dives_file: attempts.json\n")
        loaded = load_config(path)

    assert loaded.log_level == "DEBUG"
    assert loaded.data_dir == "data"
    assert loaded.store.sessions_file == "sessions.json"
    assert loaded.store.dives_file == "attempts.json"
    assert loaded.dashboard.recent_sessions == 5


def test_unknown_section_key_is_a_value_error():
    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "typo.yml")
        with open(path, "w", encoding="utf-8") as handle:
            handle.write("dashboard:\n  recent_session: 3\n")
        with pytest.raises(ValueError):
            load_config(path)
