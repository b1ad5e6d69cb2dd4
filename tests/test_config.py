# /tests/test_config.py

import json
from pathlib import Path

import pytest

from ccrm.config import AppConfig
from ccrm.core.exceptions import ConfigurationError


def test_defaults_point_at_home_data_folder():
    config = AppConfig()
    assert config.data_folder == Path.home() / "ccrm-data"
    assert config.students_path.name == "students.txt"
    assert config.courses_path.name == "courses.txt"
    assert config.top_n == 5


def test_load_reads_json_file(tmp_path):
    path = tmp_path / "ccrm.json"
    path.write_text(json.dumps({"data_folder": str(tmp_path / "data"), "top_n": 3}), encoding="utf-8")
    config = AppConfig.load(str(path))
    assert config.data_folder == tmp_path / "data"
    assert config.top_n == 3


def test_unknown_keys_are_rejected(tmp_path):
    path = tmp_path / "ccrm.json"
    path.write_text(json.dumps({"colour": "blue"}), encoding="utf-8")
    with pytest.raises(ConfigurationError):
        AppConfig.load(str(path))


def test_unreadable_file_is_a_configuration_error(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        AppConfig.load(str(path))
    with pytest.raises(ConfigurationError):
        AppConfig.load(str(tmp_path / "missing.json"))


def test_overrides_skip_none_values(tmp_path):
    config = AppConfig(data_folder=tmp_path).with_overrides(data_folder=None, log_level="DEBUG")
    assert config.data_folder == tmp_path
    assert config.log_level == "DEBUG"


def test_ensure_data_folder_creates_it(tmp_path):
    config = AppConfig(data_folder=tmp_path / "nested" / "data")
    assert config.ensure_data_folder().is_dir()


def test_top_n_must_be_positive():
    with pytest.raises(ConfigurationError):
        AppConfig(top_n=0)


@pytest.mark.parametrize("data", [
    {"top_n": "5"},
    {"top_n": True},
    {"rest_port": "8000"},
    {"log_level": 10},
    {"data_folder": 42},
])
def test_wrongly_typed_values_are_configuration_errors(tmp_path, data):
    path = tmp_path / "ccrm.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    with pytest.raises(ConfigurationError):
        AppConfig.load(str(path))


def test_log_level_must_be_a_known_name():
    assert AppConfig(log_level="debug").log_level == "debug"
    with pytest.raises(ConfigurationError):
        AppConfig().with_overrides(log_level="bogus")
