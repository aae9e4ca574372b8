import os
from datetime import UTC, datetime

import pytest

from Chronoid.config import Settings, load_settings, read_toml_settings
from Chronoid.errors import ConfigurationError
from Chronoid.units import MaxSortableRate, TimestampLevel

TOML = """
[generator]
alphabet = "0123456789abcdef"
total_length = 24
epoch_start = 2020-01-01T00:00:00Z
timestamp_level = "millisecond"
max_sortable_rate = "10_per_millisecond"
exhaustion_retries = 2

[logging]
level = "debug"
console = false
to_file = true
file_path = "var/ids.jsonl"
"""


@pytest.fixture
def isolated_env(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.startswith("CHRONOID_"):
            monkeypatch.delenv(key, raising=False)
    return tmp_path


def test_defaults_without_file(isolated_env):
    s = Settings()
    assert s.total_length == 32
    assert s.timestamp_level is TimestampLevel.microsecond
    assert s.max_sortable_rate is MaxSortableRate.micro100
    assert s.epoch_start == datetime(2024, 1, 1, tzinfo=UTC)
    assert s.logging_file == "NONE"


def test_toml_source_is_picked_up(isolated_env):
    (isolated_env / "chronoid.toml").write_text(TOML)
    s = load_settings()
    assert s.alphabet == "0123456789abcdef"
    assert s.total_length == 24
    assert s.timestamp_level is TimestampLevel.millisecond
    assert s.exhaustion_retries == 2
    assert s.epoch_start == datetime(2020, 1, 1, tzinfo=UTC)


def test_logging_booleans_map_to_levels(isolated_env):
    path = isolated_env / "chronoid.toml"
    path.write_text(TOML)
    out = read_toml_settings(path)
    assert out["logging_level"] == "DEBUG"
    assert out["logging_console"] == "NONE"
    assert out["logging_file"] == "DEBUG"
    assert out["logging_file_path"] == "var/ids.jsonl"


def test_env_overrides_toml(isolated_env, monkeypatch):
    (isolated_env / "chronoid.toml").write_text(TOML)
    monkeypatch.setenv("CHRONOID_TOTAL_LENGTH", "40")
    monkeypatch.setenv("CHRONOID_TIMESTAMP_LEVEL", "second")
    s = load_settings()
    assert s.total_length == 40
    assert s.timestamp_level is TimestampLevel.second
    # Untouched keys still come from TOML
    assert s.alphabet == "0123456789abcdef"


def test_config_file_env_var(isolated_env, monkeypatch):
    other = isolated_env / "elsewhere.toml"
    other.write_text(TOML)
    monkeypatch.setenv("CHRONOID_CONFIG_FILE", str(other))
    assert load_settings().total_length == 24


def test_explicit_path_and_overrides(isolated_env, monkeypatch):
    other = isolated_env / "explicit.toml"
    other.write_text(TOML)
    monkeypatch.setenv("CHRONOID_TOTAL_LENGTH", "40")
    s = load_settings(other, alphabet=None, max_sortable_rate="1_per_second")
    # An explicit file is applied as init overrides, above the environment
    assert s.total_length == 24
    assert s.alphabet == "0123456789abcdef"
    assert s.max_sortable_rate is MaxSortableRate.second1


def test_generator_config_roundtrip(isolated_env):
    (isolated_env / "chronoid.toml").write_text(TOML)
    cfg = load_settings().generator_config()
    assert cfg.alphabet == "0123456789abcdef"
    assert cfg.total_length == 24
    assert cfg.timestamp_level is TimestampLevel.millisecond
    assert cfg.exhaustion_retries == 2
    assert cfg.epoch_end is None


def test_invalid_enum_value_rejected(isolated_env, monkeypatch):
    monkeypatch.setenv("CHRONOID_TIMESTAMP_LEVEL", "fortnight")
    with pytest.raises(ValueError):
        Settings()


def test_explicit_missing_path_rejected(isolated_env):
    # The implicit chronoid.toml may be absent, a named file may not.
    assert load_settings().total_length == 32
    with pytest.raises(ConfigurationError) as exc_info:
        load_settings(isolated_env / "missing.toml")
    assert exc_info.value.context["path"].endswith("missing.toml")
