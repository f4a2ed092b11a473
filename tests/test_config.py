"""Tests for configuration loading."""

import logging
from datetime import time
from unittest.mock import patch

from questcal.config import Config, load_config
from questcal.core.interval import ActivityWindow


class TestLoadConfig:
    def test_defaults_when_missing(self, tmp_path):
        with patch("questcal.config.CONFIG_FILE", tmp_path / "missing.conf"):
            config = load_config()
        assert config == Config()
        assert config.default_task_minutes == 60
        assert config.activity_window.is_full_day is True
        assert config.search_days == 7
        assert config.max_suggestions == 5
        assert config.conflict_tolerance_minutes == 0

    def test_reads_config_file(self, tmp_path):
        config_file = tmp_path / "questcal.conf"
        config_file.write_text(
            "# questcal settings\n"
            "DEFAULT_TASK_MINUTES=45\n"
            "ACTIVITY_WINDOW=08:00-22:00\n"
            "SEARCH_DAYS=14\n"
            "MAX_SUGGESTIONS=3\n"
            "CONFLICT_TOLERANCE_MINUTES=10\n"
            "SNAPSHOT_FILE=/tmp/snapshot.json\n"
        )
        with patch("questcal.config.CONFIG_FILE", config_file):
            config = load_config()
        assert config.default_task_minutes == 45
        assert config.activity_window == ActivityWindow(time(8, 0), time(22, 0))
        assert config.search_days == 14
        assert config.max_suggestions == 3
        assert config.conflict_tolerance_minutes == 10
        assert config.snapshot_file == "/tmp/snapshot.json"

    def test_explicit_path(self, tmp_path):
        config_file = tmp_path / "other.conf"
        config_file.write_text("SEARCH_DAYS=3\n")
        assert load_config(config_file).search_days == 3

    def test_quoted_values_and_comments(self, tmp_path):
        config_file = tmp_path / "questcal.conf"
        config_file.write_text(
            'SNAPSHOT_FILE="/data/my snapshot.json" # exported nightly\n'
            "SEARCH_DAYS=10 # two weeks of workdays\n"
            "ACTIVITY_WINDOW='09:00-17:00'\n"
        )
        config = load_config(config_file)
        assert config.snapshot_file == "/data/my snapshot.json"
        assert config.search_days == 10
        assert config.activity_window == ActivityWindow(time(9, 0), time(17, 0))

    def test_keys_are_case_insensitive(self, tmp_path):
        config_file = tmp_path / "questcal.conf"
        config_file.write_text("default_task_minutes = 30\n")
        assert load_config(config_file).default_task_minutes == 30

    def test_invalid_number_keeps_default(self, tmp_path, caplog):
        config_file = tmp_path / "questcal.conf"
        config_file.write_text("SEARCH_DAYS=many\nDEFAULT_TASK_MINUTES=0\n")
        with caplog.at_level(logging.WARNING):
            config = load_config(config_file)
        assert config.search_days == 7
        assert config.default_task_minutes == 60
        assert "SEARCH_DAYS" in caplog.text
        assert "DEFAULT_TASK_MINUTES" in caplog.text

    def test_invalid_window_keeps_default(self, tmp_path, caplog):
        config_file = tmp_path / "questcal.conf"
        config_file.write_text("ACTIVITY_WINDOW=22:00-08:00\n")
        with caplog.at_level(logging.WARNING):
            config = load_config(config_file)
        assert config.activity_window.is_full_day is True
        assert "ACTIVITY_WINDOW" in caplog.text

    def test_skips_blank_and_malformed_lines(self, tmp_path):
        config_file = tmp_path / "questcal.conf"
        config_file.write_text("\n\nnot a setting\nUNKNOWN_KEY=1\nMAX_SUGGESTIONS=8\n")
        assert load_config(config_file).max_suggestions == 8
