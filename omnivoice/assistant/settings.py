from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional
import logging

import yaml

from omnivoice.config import Config
from omnivoice.utils.errors import ConfigurationError
from omnivoice.utils.paths import resolve_config_path


logger = logging.getLogger(__name__)


@dataclass
class AssistantSettings:
    """Runtime knobs for the command executor and payment simulation."""

    # Simulated latency (seconds)
    handler_latency_seconds: float = 1.0
    settlement_delay_seconds: float = 8.0

    local_currency: str = "CNY"
    voice_enabled: bool = True
    auto_confirm: bool = False
    history_display_limit: int = 10

    # Mock wallet balances shown by the balance handler
    balances: Dict[str, float] = field(default_factory=lambda: {
        "CNY": 125432.50,
        "USD": 15230.80,
        "USDT": 50000,
        "ETH": 12.5,
        "BTC": 0.85,
    })
    # USD spot prices shown by the price handler
    prices: Dict[str, float] = field(default_factory=lambda: {
        "BTC": 97500,
        "ETH": 3450,
        "BNB": 310,
        "USDT": 1,
    })

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "AssistantSettings":
        """Build settings from an `assistant:` mapping, ignoring unknown keys."""
        if not data:
            return cls()
        if not isinstance(data, dict):
            raise ConfigurationError("assistant section must be a mapping")
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning(f"Ignoring unknown assistant settings: {', '.join(unknown)}")
        return cls(**{k: v for k, v in data.items() if k in known})

    @classmethod
    def from_config(cls, config: Config) -> "AssistantSettings":
        return cls.from_dict(config.get("assistant", {}))

    @classmethod
    def from_yaml(cls, config_path: str = "config.yaml") -> "AssistantSettings":
        """Load from YAML config file; falls back to defaults when absent."""
        cfg_path = resolve_config_path(config_path)
        if cfg_path.exists():
            with open(cfg_path, "r", encoding="utf-8") as f:
                full_config = yaml.safe_load(f) or {}
            return cls.from_dict(full_config.get("assistant"))
        return cls()
