"""
Configuration validator for environment variables.
"""

import os
from pathlib import Path
from typing import Dict, Any

DEFAULT_API_HOST = 'clapi.itraff.pl'


class ConfigValidator:
    """Validates configuration values."""

    @staticmethod
    def validate() -> Dict[str, Any]:
        """
        Validate configuration and return errors/warnings.

        Returns:
            Dict with 'errors' and 'warnings' lists, and 'valid' boolean
        """
        errors = []
        warnings = []

        # Credentials are required for every API call
        for var, purpose in (
            ('RECOGNIZE_CLIENT_ID', 'client identification'),
            ('RECOGNIZE_API_KEY', 'recognition request hashing'),
            ('RECOGNIZE_CLAPI_KEY', 'SOAP session authentication'),
        ):
            if not os.getenv(var, ''):
                errors.append(f"{var} not set - required for {purpose}")

        # Validate log level
        log_level = os.getenv('LOG_LEVEL', 'INFO').upper()
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if log_level not in valid_levels:
            errors.append(f"Invalid LOG_LEVEL '{log_level}'. Must be one of: {', '.join(valid_levels)}")

        # Validate integer settings
        for var, default in (
            ('RECOGNIZE_API_PORT', '80'),
            ('SERVER_PORT', '8888'),
            ('API_TIMEOUT', '30'),
        ):
            try:
                value = int(os.getenv(var, default))
                if value <= 0:
                    errors.append(f"{var} must be a positive integer")
            except ValueError:
                errors.append(f"{var} must be a valid integer")

        # Check if log directory can be created
        log_file = os.getenv('LOG_FILE', 'logs/recognizeim.log')
        log_path = Path(log_file)
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            errors.append(f"Cannot create log directory: {e}")

        # Non-default API host (warning only)
        api_host = os.getenv('RECOGNIZE_API_HOST', DEFAULT_API_HOST)
        if api_host != DEFAULT_API_HOST:
            warnings.append(f"Using non-default API host: {api_host}")

        return {
            'errors': errors,
            'warnings': warnings,
            'valid': len(errors) == 0
        }


def validate_config() -> bool:
    """Validate configuration and print results."""
    result = ConfigValidator.validate()

    if result['errors']:
        print("Configuration errors:")
        for error in result['errors']:
            print(f"  ERROR: {error}")

    if result['warnings']:
        print("Configuration warnings:")
        for warning in result['warnings']:
            print(f"  WARNING: {warning}")

    return bool(result['valid'])
