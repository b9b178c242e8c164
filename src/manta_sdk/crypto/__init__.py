"""
Key handling for Manta Python SDK
"""

from .keys import (
    Credential,
    KeyAlgorithm,
    compute_fingerprint,
    detect_algorithm,
    load_credential,
    load_credential_file,
)

__all__ = [
    'Credential',
    'KeyAlgorithm',
    'compute_fingerprint',
    'detect_algorithm',
    'load_credential',
    'load_credential_file',
]
