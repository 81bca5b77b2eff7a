"""Configuration management for webflow."""

import os
import logging
from typing import Dict, Any, Optional
from pathlib import Path
from dotenv import load_dotenv

from webflow.auth.models import TOKEN_AUTH_METHODS, CallbackSettings

logger = logging.getLogger(__name__)


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == '':
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def _env_float(name: str) -> Optional[float]:
    value = os.getenv(name)
    if value is None or value.strip() == '':
        return None
    return float(value)


def load_config(env_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load configuration from environment variables and return structured config.

    Args:
        env_path: Optional .env file; defaults to the one in the project root.

    Returns:
        Dict containing configuration sections for oauth, callback, and app settings.

    Raises:
        ValueError: If a configured value cannot be used.
    """
    # Load environment variables from .env file
    env_path = env_path or Path(__file__).parent.parent / '.env'
    if env_path.exists():
        load_dotenv(env_path)
        logger.info(f"Loaded configuration from {env_path}")
    else:
        logger.warning("No .env file found, using environment variables only")

    config = {
        'oauth': {
            'authorize_url': os.getenv('OAUTH_AUTHORIZE_URL', ''),
            'token_url': os.getenv('OAUTH_TOKEN_URL', ''),
            'client_id': os.getenv('OAUTH_CLIENT_ID'),
            'client_secret': os.getenv('OAUTH_CLIENT_SECRET'),
            'scope': os.getenv('OAUTH_SCOPE', ''),
            # Google-style providers only issue refresh tokens for offline access
            'access_type': os.getenv('OAUTH_ACCESS_TYPE', ''),
        },
        'callback': {
            'host': os.getenv('CALLBACK_HOST', 'localhost'),
            'port': int(os.getenv('CALLBACK_PORT', 5000)),
            'path': os.getenv('CALLBACK_PATH', '/'),
            'timeout': _env_float('OAUTH_TIMEOUT'),
            'exchange_timeout': _env_float('OAUTH_EXCHANGE_TIMEOUT') or 30,
            'verify_tls': _env_bool('OAUTH_VERIFY_TLS', True),
            'token_auth_method': os.getenv('OAUTH_TOKEN_AUTH_METHOD', 'client_secret_basic'),
            'open_browser': _env_bool('OAUTH_OPEN_BROWSER', True),
            # TLS for local HTTPS callback
            'tls_cert_path': os.getenv('TLS_CERT_PATH', ''),
            'tls_key_path': os.getenv('TLS_KEY_PATH', ''),
        },
        'app': {
            'debug': os.getenv('DEBUG', 'False').lower() == 'true',
            'log_level': os.getenv('LOG_LEVEL', 'INFO'),
            'console_output_format': os.getenv('CONSOLE_OUTPUT_FORMAT', 'table'),
        }
    }

    # Validate configuration and log warnings for missing optional values
    _validate_config(config)

    return config


def _validate_config(config: Dict[str, Any]) -> None:
    """
    Validate that required configuration values are present.

    Args:
        config: Configuration dictionary to validate.

    Raises:
        ValueError: If required configuration is missing.
    """
    oauth = config['oauth']
    callback = config['callback']
    if not oauth['client_id'] or not oauth['client_secret']:
        logger.warning("OAUTH_CLIENT_ID/SECRET not set. The provider will most likely reject the token exchange.")
    if not oauth['authorize_url'] or not oauth['token_url']:
        raise ValueError("OAUTH_AUTHORIZE_URL and OAUTH_TOKEN_URL must be set; cannot proceed.")
    if not 0 <= callback['port'] <= 65535:
        raise ValueError(f"CALLBACK_PORT out of range: {callback['port']}")
    if callback['token_auth_method'] not in TOKEN_AUTH_METHODS:
        raise ValueError(f"OAUTH_TOKEN_AUTH_METHOD must be one of {', '.join(TOKEN_AUTH_METHODS)}")
    if bool(callback['tls_cert_path']) != bool(callback['tls_key_path']):
        raise ValueError("TLS_CERT_PATH and TLS_KEY_PATH must be configured together")
    # getLevelName maps known level names to their numeric value
    if not isinstance(logging.getLevelName(config['app']['log_level'].upper()), int):
        raise ValueError(f"LOG_LEVEL is not a logging level: {config['app']['log_level']}")
    if not callback['verify_tls']:
        logger.warning("OAUTH_VERIFY_TLS is off; token endpoint certificates will not be verified.")
    logger.info("Configuration validation completed")


def build_callback_settings(config: Dict[str, Any]) -> CallbackSettings:
    """
    Build listener settings from the callback section.

    Args:
        config: Main configuration dictionary.

    Returns:
        CallbackSettings for the OAuth manager.
    """
    callback = config['callback']
    return CallbackSettings(
        host=callback['host'],
        port=callback['port'],
        path=callback['path'],
        timeout=callback['timeout'],
        exchange_timeout=callback['exchange_timeout'],
        verify_tls=callback['verify_tls'],
        token_auth_method=callback['token_auth_method'],
        tls_cert_path=callback['tls_cert_path'] or None,
        tls_key_path=callback['tls_key_path'] or None,
        open_browser=callback['open_browser'],
    )
