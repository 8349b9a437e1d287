""" Connector configuration loaded from JSON, API keys from the environment """

import os, json
from dataclasses import dataclass, field
from typing import Dict, Optional

DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(__file__), 'connector_configs.json')


@dataclass
class ConnectorConfig:
    """Settings for one API connector."""
    name: str
    base_url: str
    api_key_env_var: Optional[str] = None
    timeout: float = 30.0
    max_retries: int = 0
    user_agent: str = "APIConnect/0.1.0"
    auth_type: str = "Bearer"
    default_headers: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if not self.base_url.startswith(('http://', 'https://')):
            raise ValueError(f"Base URL for {self.name} must start with http:// or https://, got {self.base_url!r}")
        if self.timeout <= 0:
            raise ValueError(f"Timeout for {self.name} must be positive")
        if self.max_retries < 0:
            raise ValueError(f"max_retries for {self.name} cannot be negative")

    def get_api_key(self, provided_key: Optional[str] = None) -> Optional[str]:
        """Get API key from provided key or environment variable.

        Returns ``None`` for connectors that need no key.
        """
        if provided_key:
            return provided_key
        if not self.api_key_env_var:
            return None

        api_key = os.getenv(self.api_key_env_var)
        if not api_key:
            raise ValueError(f"API key not found. Please provide it or set {self.api_key_env_var} environment variable.")
        return api_key


def load_connector_configs(path: Optional[str] = None) -> Dict[str, ConnectorConfig]:
    """Load connector configurations from a JSON file keyed by connector name."""
    config_file_path = path or DEFAULT_CONFIG_PATH

    try:
        with open(config_file_path, 'r', encoding='utf-8') as f: raw_configs = json.load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"Connector configuration file not found at {config_file_path}")
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in connector configuration file: {e}")

    configs = {}
    for name, config_data in raw_configs.items():
        config_data.setdefault('name', name)
        configs[name] = ConnectorConfig(**config_data)
    return configs
