"""
Simple configuration manager that loads settings from environment variables.
"""

import os
from typing import Any, Dict, Optional
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
env_path = Path('.env')
if env_path.exists():
    load_dotenv(env_path)


class ConfigManager:
    """Simple configuration manager for environment variables."""

    def __init__(self) -> None:
        self._config: Dict[str, Any] = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        return {
            # recognize.im credentials (http://www.recognize.im/user/profile)
            'client_id': os.getenv('RECOGNIZE_CLIENT_ID', ''),
            'api_key': os.getenv('RECOGNIZE_API_KEY', ''),
            'clapi_key': os.getenv('RECOGNIZE_CLAPI_KEY', ''),

            # API Configuration
            'api_host': os.getenv('RECOGNIZE_API_HOST', 'clapi.itraff.pl'),
            'api_port': int(os.getenv('RECOGNIZE_API_PORT', '80')),
            'api_timeout': int(os.getenv('API_TIMEOUT', '30')),

            # Sample server
            'server_host': os.getenv('SERVER_HOST', '127.0.0.1'),
            'server_port': int(os.getenv('SERVER_PORT', '8888')),

            # Logging
            'log_level': os.getenv('LOG_LEVEL', 'INFO').upper(),
            'log_file': os.getenv('LOG_FILE', 'logs/recognizeim.log'),
            'debug': os.getenv('DEBUG', 'false').lower() == 'true',

            # Application
            'app_version': os.getenv('APP_VERSION', '1.0.0'),
        }

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value."""
        return self._config.get(key, default)

    def get_all(self) -> Dict[str, Any]:
        """Get all configuration values."""
        return self._config.copy()

    @property
    def client_id(self) -> str:
        return self.get('client_id')

    @property
    def api_key(self) -> str:
        return self.get('api_key')

    @property
    def clapi_key(self) -> str:
        return self.get('clapi_key')

    @property
    def api_host(self) -> str:
        return self.get('api_host')

    @property
    def api_port(self) -> int:
        return self.get('api_port')

    @property
    def api_timeout(self) -> int:
        return self.get('api_timeout')

    @property
    def server_host(self) -> str:
        return self.get('server_host')

    @property
    def server_port(self) -> int:
        return self.get('server_port')

    @property
    def log_level(self) -> str:
        return self.get('log_level')

    @property
    def log_file(self) -> str:
        return self.get('log_file')

    @property
    def debug(self) -> bool:
        return self.get('debug')

    @property
    def app_version(self) -> str:
        return self.get('app_version')


# Global config instance
_config: Optional[ConfigManager] = None


def get_config() -> ConfigManager:
    """Get global configuration manager."""
    global _config
    if _config is None:
        _config = ConfigManager()
    return _config
