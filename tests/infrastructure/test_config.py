"""Tests for routetrace.infrastructure.config."""

import pytest

from routetrace.core.errors import ConfigurationError
from routetrace.infrastructure.config import CONFIG_PATH_ENV, TrackerConfig, load_config


class TestTrackerConfig:

    def test_defaults(self):
        config = TrackerConfig()
        assert config.idle_timeout_ms == 1000
        assert config.final_timeout_ms == 30000
        assert config.heartbeat_interval_ms == 5000
        assert config.max_interactions == 10
        assert config.wait_for_pageload_finish_signal is False
        assert config.mark_background_span is True

    @pytest.mark.parametrize(
        "field",
        ["idle_timeout_ms", "final_timeout_ms", "heartbeat_interval_ms", "max_interactions"],
    )
    def test_non_positive_rejected(self, field):
        with pytest.raises(ConfigurationError) as exc_info:
            TrackerConfig(**{field: 0})
        assert field in str(exc_info.value)

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            TrackerConfig(idle_timeout_ms=-10)

    def test_unknown_option_rejected(self):
        with pytest.raises(ConfigurationError) as exc_info:
            TrackerConfig(idle_timeout=500)
        assert "Remove 'idle_timeout'" in str(exc_info.value)

    def test_frozen(self):
        config = TrackerConfig()
        with pytest.raises(Exception):
            config.idle_timeout_ms = 5


class TestLoadConfig:

    def test_reads_section(self, tmp_path):
        path = tmp_path / "routetrace.yaml"
        path.write_text(
            "routetrace:\n  idle_timeout_ms: 500\n  max_interactions: 4\n",
            encoding="utf-8",
        )
        config = load_config(str(path))
        assert config.idle_timeout_ms == 500
        assert config.max_interactions == 4
        assert config.final_timeout_ms == 30000

    def test_nested_section(self, tmp_path):
        path = tmp_path / "app.yaml"
        path.write_text("telemetry:\n  browser:\n    final_timeout_ms: 8000\n", encoding="utf-8")
        config = load_config(str(path), section="telemetry.browser")
        assert config.final_timeout_ms == 8000

    def test_missing_section_uses_defaults(self, tmp_path):
        path = tmp_path / "app.yaml"
        path.write_text("other: {}\n", encoding="utf-8")
        assert load_config(str(path)) == TrackerConfig()

    def test_invalid_values_raise(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("routetrace:\n  heartbeat_interval_ms: -1\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_config(str(path))

    def test_non_mapping_document_raises(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_config(str(path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "absent.yaml"))

    def test_path_from_environment(self, tmp_path, monkeypatch):
        path = tmp_path / "env.yaml"
        path.write_text("routetrace:\n  idle_timeout_ms: 250\n", encoding="utf-8")
        monkeypatch.setenv(CONFIG_PATH_ENV, str(path))
        assert load_config().idle_timeout_ms == 250

    def test_defaults_without_path(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv(CONFIG_PATH_ENV, raising=False)
        assert load_config() == TrackerConfig()
