"""Pytest configuration and fixtures."""
import pytest
from pathlib import Path
import tempfile
import yaml

from omnivoice.assistant.settings import AssistantSettings
from omnivoice.config import reset_config


@pytest.fixture
def temp_config_file():
    """Create a temporary config file for testing."""
    config_data = {
        'app': {
            'name': 'Test App',
            'version': '0.1.0',
            'debug': True,
            'language': 'zh-CN',
        },
        'assistant': {
            'handler_latency_seconds': 0,
            'settlement_delay_seconds': 0.05,
            'local_currency': 'CNY',
            'auto_confirm': True,
            'history_display_limit': 5,
            'balances': {'CNY': 100.0, 'USDT': 20, 'ETH': 1.5, 'BTC': 0.1},
        },
        'logging': {
            'level': 'DEBUG',
            'format': 'text'
        }
    }

    with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False, encoding='utf-8') as f:
        yaml.dump(config_data, f, allow_unicode=True)
        config_path = f.name

    yield config_path

    Path(config_path).unlink()


@pytest.fixture(autouse=True)
def clear_global_config():
    """Reset the global config before and after each test."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def fast_settings():
    """Settings with no handler latency and a short settlement delay."""
    return AssistantSettings(handler_latency_seconds=0, settlement_delay_seconds=0.05)
