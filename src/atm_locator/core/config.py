"""Configuration management for ATM Locator."""

import configparser
import os
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv


class Config:
    """Parse and manage ATM Locator configuration."""

    DEFAULT_CATALOG = {
        "path": "atms.csv",
    }

    DEFAULT_MATCHING = {
        "threshold": 0.3,
        "delimiter": "-",
    }

    DEFAULT_RANKING = {
        "limit": 5,
        "prefilter_factor": 2,
    }

    DEFAULT_ROUTING = {
        "provider": "gebeta",
        "base_url": "",
        "api_key": "",
        "timeout": 5.0,
        "profile": "driving",
    }

    # Provider -> environment variable holding its base URL
    BASE_URL_ENV = {
        "gebeta": "GEBETA_BASE_URL",
        "osrm": "OSRM_URL",
    }

    def __init__(self, config_file: Optional[str] = None, use_env: bool = True):
        """
        Initialize configuration.

        Args:
            config_file: Path to config.ini file. If None, uses defaults.
            use_env: Apply overrides from the environment (and a .env file)
        """
        self.catalog = self.DEFAULT_CATALOG.copy()
        self.matching = self.DEFAULT_MATCHING.copy()
        self.ranking = self.DEFAULT_RANKING.copy()
        self.routing = self.DEFAULT_ROUTING.copy()

        if config_file:
            self._load_config(config_file)

        if use_env:
            load_dotenv()
            self._apply_env()

    def _sections(self) -> Dict[str, Dict]:
        return {
            "catalog": self.catalog,
            "matching": self.matching,
            "ranking": self.ranking,
            "routing": self.routing,
        }

    def _load_config(self, config_file: str):
        """Load configuration from INI file."""
        config_path = Path(config_file)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_file}")

        parser = configparser.ConfigParser(inline_comment_prefixes=(";", "#"))
        parser.read(config_path)

        for name, section in self._sections().items():
            if name not in parser:
                continue
            for key, value in parser[name].items():
                default = section.get(key)
                # Keep numeric types; skip values that don't parse
                if isinstance(default, (int, float)):
                    try:
                        section[key] = type(default)(value)
                    except ValueError:
                        pass
                else:
                    section[key] = value.strip()

    def _apply_env(self):
        """Override settings from environment variables."""
        provider = os.environ.get("ATM_LOCATOR_ROUTING_PROVIDER")
        if provider:
            self.routing["provider"] = provider.strip().lower()

        base_url_env = self.BASE_URL_ENV.get(self.get_routing_provider())
        if base_url_env and os.environ.get(base_url_env):
            self.routing["base_url"] = os.environ[base_url_env].strip()

        if os.environ.get("GEBETA_API_KEY"):
            self.routing["api_key"] = os.environ["GEBETA_API_KEY"].strip()

    def get_catalog_path(self) -> str:
        """Get path to the ATM catalog CSV."""
        return self.catalog["path"]

    def get_match_threshold(self) -> float:
        """Get minimum (exclusive) similarity score for name matches."""
        return float(self.matching["threshold"])

    def get_name_delimiter(self) -> str:
        """Get delimiter separating bank prefix from neighbourhood name."""
        return self.matching["delimiter"] or "-"

    def get_result_limit(self) -> int:
        """Get number of ATMs returned per request."""
        return int(self.ranking["limit"])

    def get_prefilter_factor(self) -> int:
        """Get short-list multiplier applied before routing refinement."""
        return max(1, int(self.ranking["prefilter_factor"]))

    def get_routing_provider(self) -> str:
        """Get routing provider name (gebeta, osrm or none)."""
        return (self.routing["provider"] or "none").lower()

    def get_routing_settings(self) -> Dict:
        """Get all routing settings."""
        return dict(self.routing)
