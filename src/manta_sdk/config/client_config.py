"""
Client configuration for Manta Python SDK

Provides the validated settings a MantaClient is built from, loadable from
keyword arguments, environment variables or a JSON file.
"""

import os
import re
import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from ..exceptions import ValidationError
from ..retry import DEFAULT_ATTEMPTS

DEFAULT_CONNECT_TIMEOUT = 5.0
DEFAULT_SEND_TIMEOUT = 60.0
DEFAULT_RECEIVE_TIMEOUT = 60.0
DEFAULT_POOL_MAXSIZE = 10

URL_REGEX = re.compile(r'^https?://.*[^/]$')

ENV_URL = 'MANTA_URL'
ENV_USER = 'MANTA_USER'
ENV_KEY = 'MANTA_KEY'
ENV_ATTEMPTS = 'MANTA_ATTEMPTS'
ENV_TLS_INSECURE = 'MANTA_TLS_INSECURE'

_TRUE_VALUES = ('1', 'true', 'yes', 'on')


@dataclass
class ClientConfig:
    """Configuration for a Manta service connection."""
    url: str
    user: str
    key_path: Optional[str] = None
    attempts: int = DEFAULT_ATTEMPTS
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    send_timeout: float = DEFAULT_SEND_TIMEOUT
    receive_timeout: float = DEFAULT_RECEIVE_TIMEOUT
    disable_ssl_verification: bool = False
    pool_maxsize: int = DEFAULT_POOL_MAXSIZE

    def __post_init__(self):
        """Validate client configuration."""
        if not isinstance(self.url, str) or not URL_REGEX.match(self.url):
            raise ValidationError(f"Invalid Manta URL (expected http(s)://host without trailing slash): {self.url!r}")

        if not isinstance(self.user, str) or not self.user:
            raise ValidationError("Manta user cannot be empty")

        if not isinstance(self.attempts, int) or isinstance(self.attempts, bool) or self.attempts < 1:
            raise ValidationError("Attempts must be a positive integer")

        for name in ('connect_timeout', 'send_timeout', 'receive_timeout'):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or isinstance(value, bool) or value <= 0:
                raise ValidationError(f"{name} must be a positive number")

        if not isinstance(self.pool_maxsize, int) or isinstance(self.pool_maxsize, bool) \
                or self.pool_maxsize < 1:
            raise ValidationError("pool_maxsize must be positive")

    @property
    def verify_ssl(self) -> bool:
        return not self.disable_ssl_verification

    @property
    def timeout(self) -> Tuple[float, float]:
        """
        (connect, read) timeout pair for the transport.

        The transport has no separate send timeout, so the read timeout is the
        larger of the send and receive settings.
        """
        return (self.connect_timeout, max(self.send_timeout, self.receive_timeout))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'ClientConfig':
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValidationError(f"Unknown configuration keys: {', '.join(unknown)}")
        try:
            return cls(**data)
        except TypeError as e:
            raise ValidationError(f"Incomplete configuration: {e}") from e

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> 'ClientConfig':
        """
        Build configuration from MANTA_* environment variables.

        Keyword overrides that are not None take precedence over the environment.
        """
        environ = os.environ if environ is None else environ
        data: Dict[str, Any] = {
            'url': environ.get(ENV_URL),
            'user': environ.get(ENV_USER),
            'key_path': environ.get(ENV_KEY),
        }

        if environ.get(ENV_ATTEMPTS):
            try:
                data['attempts'] = int(environ[ENV_ATTEMPTS])
            except ValueError:
                raise ValidationError(f"{ENV_ATTEMPTS} must be an integer, got {environ[ENV_ATTEMPTS]!r}")

        if environ.get(ENV_TLS_INSECURE):
            data['disable_ssl_verification'] = environ[ENV_TLS_INSECURE].strip().lower() in _TRUE_VALUES

        data.update({k: v for k, v in overrides.items() if v is not None})

        if not data.get('url'):
            raise ValidationError(f"Manta URL not configured; set {ENV_URL}")
        if not data.get('user'):
            raise ValidationError(f"Manta user not configured; set {ENV_USER}")

        return cls.from_dict(data)


def load_config(path: Union[str, Path]) -> ClientConfig:
    """
    Load configuration from a JSON file.

    Args:
        path: Path to a JSON object with ClientConfig fields

    Returns:
        ClientConfig: Validated configuration
    """
    config_path = Path(path).expanduser()
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except OSError as e:
        raise ValidationError(f"Cannot read configuration file {config_path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON in configuration file {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ValidationError("Configuration file must contain a JSON object")

    return ClientConfig.from_dict(data)
