"""
Main Application Module

Entry point for the recognize.im sample server.
"""

import argparse
import logging
import os
import sys
from typing import Optional

from flask import Flask

from .api.client import RecognizeClient
from .config.config_manager import ConfigManager, get_config
from .config.logging_config import setup_logging
from .config.validator import validate_config
from .server.app import create_app


class SampleServerApplication:
    """Main application class for the recognize.im sample server"""

    def __init__(self) -> None:
        self.config: Optional[ConfigManager] = None
        self.logger: Optional[logging.Logger] = None
        self.client: Optional[RecognizeClient] = None
        self.app: Optional[Flask] = None

    def load_configuration(self, debug: bool = False) -> None:
        """Load application configuration"""
        try:
            if debug:
                os.environ['DEBUG'] = 'true'
                os.environ['LOG_LEVEL'] = 'DEBUG'

            if not validate_config():
                raise RuntimeError("Configuration validation failed")

            self.config = get_config()
        except (RuntimeError, ValueError) as e:
            print(f"Configuration error: {e}")
            sys.exit(1)

    def setup_logging(self) -> None:
        """Setup logging system"""
        if not self.config:
            raise RuntimeError("Configuration not loaded")

        log_config = {
            "log_level": self.config.log_level,
            "log_file": self.config.log_file,
            "debug": self.config.debug
        }
        setup_logging(log_config)
        self.logger = logging.getLogger(__name__)
        self.logger.info("Logging system initialized")

    def initialize_components(self) -> None:
        """Create the API client and the web application"""
        if not self.config:
            raise RuntimeError("Configuration not loaded")

        self.client = RecognizeClient.from_config(self.config)
        self.app = create_app(self.client)

        if self.logger:
            self.logger.info("All components initialized")

    def print_config(self) -> None:
        """Print current environment variables and configuration"""
        print("=== recognize.im Sample Server Configuration ===")
        print()

        print("Environment Variables:")
        print("-" * 40)
        env_vars = [
            'RECOGNIZE_CLIENT_ID',
            'RECOGNIZE_API_KEY',
            'RECOGNIZE_CLAPI_KEY',
            'RECOGNIZE_API_HOST',
            'RECOGNIZE_API_PORT',
            'API_TIMEOUT',
            'SERVER_HOST',
            'SERVER_PORT',
            'LOG_LEVEL',
            'LOG_FILE',
            'DEBUG',
            'APP_VERSION'
        ]

        for var in env_vars:
            value = os.getenv(var, 'NOT SET')
            # Mask sensitive values
            if var.endswith('_KEY') and value != 'NOT SET':
                value = '*' * min(len(value), 8) + '...' if len(value) > 8 else '*' * len(value)
            print(f"{var:<20} = {value}")

        print()
        print("=" * 50)

    def shutdown(self) -> None:
        """Clean shutdown"""
        if self.client:
            self.client.close()
        if self.logger:
            self.logger.info("Shutdown complete")

    def run(self, debug: bool = False, host: Optional[str] = None, port: Optional[int] = None) -> int:
        """Run the complete application"""
        try:
            self.load_configuration(debug=debug)
            self.setup_logging()
            self.initialize_components()

            host = host or self.config.server_host
            port = port or self.config.server_port
            if self.logger:
                self.logger.info(f"recognize.im sample server v{self.config.app_version} "
                                 f"listening on http://{host}:{port}")

            self.app.run(host=host, port=port, debug=self.config.debug, use_reloader=False)
            return 0

        except (RuntimeError, OSError) as e:
            print(f"Application error: {e}")
            return 1
        finally:
            self.shutdown()


def main() -> int:
    parser = argparse.ArgumentParser(description="recognize.im sample server")
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    parser.add_argument('--config', action='store_true', help='Print configuration and exit')
    parser.add_argument('--host', help='Listen address (overrides SERVER_HOST)')
    parser.add_argument('--port', type=int, help='Listen port (overrides SERVER_PORT)')
    args = parser.parse_args()

    application = SampleServerApplication()
    if args.config:
        application.print_config()
        return 0

    return application.run(debug=args.debug, host=args.host, port=args.port)


if __name__ == "__main__":
    sys.exit(main())
