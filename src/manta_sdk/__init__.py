"""
Manta Python SDK
Signed, retrying client for the Manta object store and job service
"""

from .version import __version__
from .crypto import (
    Credential,
    KeyAlgorithm,
    compute_fingerprint,
    load_credential,
    load_credential_file,
)
from .exceptions import (
    ErrorKind,
    MantaSDKError,
    MantaClientError,
    MantaServiceError,
    ValidationError,
    UnsupportedKeyError,
    CorruptResultError,
    ServerCommunicationError,
)
from .config import ClientConfig, load_config
from .retry import RetryPolicy, RetryExecutor, DEFAULT_ATTEMPTS
from .response import MantaResponse, ResponseInterpreter, NOT_MODIFIED
from .signing import (
    HeaderAssembler,
    HttpMethod,
    RequestOptions,
    SignatureBuilder,
    SignedHeaderSet,
    SignedUrlGenerator,
)
from .http_client import MantaClient, create_client, MAX_LIMIT

# Public API exports
__all__ = [
    '__version__',
    # Keys
    'Credential',
    'KeyAlgorithm',
    'compute_fingerprint',
    'load_credential',
    'load_credential_file',
    # Exceptions
    'ErrorKind',
    'MantaSDKError',
    'MantaClientError',
    'MantaServiceError',
    'ValidationError',
    'UnsupportedKeyError',
    'CorruptResultError',
    'ServerCommunicationError',
    # Configuration
    'ClientConfig',
    'load_config',
    # Request execution
    'RetryPolicy',
    'RetryExecutor',
    'DEFAULT_ATTEMPTS',
    'MantaResponse',
    'ResponseInterpreter',
    'NOT_MODIFIED',
    # Signing
    'HeaderAssembler',
    'HttpMethod',
    'RequestOptions',
    'SignatureBuilder',
    'SignedHeaderSet',
    'SignedUrlGenerator',
    # Client
    'MantaClient',
    'create_client',
    'MAX_LIMIT',
]
