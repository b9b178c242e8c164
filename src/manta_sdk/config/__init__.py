"""
Configuration management for Manta Python SDK
"""

from .client_config import (
    ClientConfig,
    load_config,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_SEND_TIMEOUT,
    DEFAULT_RECEIVE_TIMEOUT,
    ENV_URL,
    ENV_USER,
    ENV_KEY,
    ENV_ATTEMPTS,
    ENV_TLS_INSECURE,
)

__all__ = [
    'ClientConfig',
    'load_config',
    'DEFAULT_CONNECT_TIMEOUT',
    'DEFAULT_SEND_TIMEOUT',
    'DEFAULT_RECEIVE_TIMEOUT',
    'ENV_URL',
    'ENV_USER',
    'ENV_KEY',
    'ENV_ATTEMPTS',
    'ENV_TLS_INSECURE',
]
