import logging

import pytest

from minder import config
from minder.core.errors import ValidationError
from minder.lib.log import configure_logging


def test_defaults_without_file(tmp_minder_dir):
    assert config.get_lookback_days() == 365
    assert config.get_default_period() == "7d"
    assert config.get_log_level() == "WARNING"


def test_values_read_from_yaml(tmp_minder_dir):
    config.CONFIG_PATH.write_text("lookback_days: 90\ndefault_period: 30d\nlog_level: debug\n")
    config.Config.reset()
    assert config.get_lookback_days() == 90
    assert config.get_default_period() == "30d"
    assert config.get_log_level() == "DEBUG"


def test_bad_lookback_falls_back_to_default(tmp_minder_dir):
    config.CONFIG_PATH.write_text("lookback_days: lots\n")
    config.Config.reset()
    assert config.get_lookback_days() == 365


def test_non_mapping_yaml_is_ignored(tmp_minder_dir):
    config.CONFIG_PATH.write_text("- just\n- a list\n")
    config.Config.reset()
    assert config.get_default_period() == "7d"


def test_set_value_persists(tmp_minder_dir):
    assert config.set_value("lookback_days", "30") == 30
    config.Config.reset()
    assert config.get_lookback_days() == 30
    assert "lookback_days: 30" in config.CONFIG_PATH.read_text()


@pytest.mark.parametrize(
    ("key", "raw"),
    [("lookback_days", "0"), ("lookback_days", "-3"), ("log_level", "loud"), ("colour", "red")],
)
def test_set_value_rejects_invalid(tmp_minder_dir, key, raw):
    with pytest.raises(ValidationError):
        config.set_value(key, raw)


def test_env_log_level_wins(tmp_minder_dir, monkeypatch):
    config.set_value("log_level", "info")
    monkeypatch.setenv("MINDER_LOG_LEVEL", "error")
    assert config.get_log_level() == "ERROR"


def test_configure_logging_sets_package_level(tmp_minder_dir):
    configure_logging("debug")
    assert logging.getLogger("minder").level == logging.DEBUG
    configure_logging("nonsense")
    assert logging.getLogger("minder").level == logging.WARNING
