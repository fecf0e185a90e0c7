"""Tests for configuration module."""
import pytest
import yaml

from omnivoice.config import Config, get_config, load_config, reset_config
from omnivoice.utils.errors import ConfigurationError


def _write(tmp_path, data):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump(data, allow_unicode=True), encoding="utf-8")
    return str(path)


def test_config_load(temp_config_file):
    """Test basic config loading."""
    config = Config(temp_config_file)
    assert config.app_name == 'Test App'
    assert config.app_version == '0.1.0'
    assert config.debug is True
    assert config.language == 'zh-CN'


def test_config_get_nested(temp_config_file):
    """Test getting nested config values."""
    config = Config(temp_config_file)
    assert config.get('assistant.local_currency') == 'CNY'
    assert config.get('assistant.balances.ETH') == 1.5


def test_config_get_default(temp_config_file):
    """Test default values."""
    config = Config(temp_config_file)
    assert config.get('nonexistent.key', 'default') == 'default'
    assert config.get('assistant.local_currency.deeper', 'x') == 'x'


def test_config_missing_file():
    """Test error on missing config file."""
    with pytest.raises(ConfigurationError):
        Config('nonexistent.yaml')


def test_config_empty_file(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    with pytest.raises(ConfigurationError, match="Empty"):
        Config(str(path))


def test_config_invalid_yaml(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("app: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigurationError, match="Invalid YAML"):
        Config(str(path))


def test_config_requires_assistant_section(tmp_path):
    path = _write(tmp_path, {'app': {'name': 'x'}})
    with pytest.raises(ConfigurationError, match="assistant"):
        Config(path)


def test_config_rejects_negative_latency(tmp_path):
    path = _write(tmp_path, {
        'app': {'name': 'x'},
        'assistant': {'handler_latency_seconds': -1},
    })
    with pytest.raises(ConfigurationError, match="handler_latency_seconds"):
        Config(path)


def test_global_config_lifecycle(temp_config_file):
    with pytest.raises(ConfigurationError):
        get_config()

    first = load_config(temp_config_file)
    assert get_config() is first
    assert load_config(temp_config_file) is first

    reset_config()
    assert load_config(temp_config_file) is not first
