"""
Manta Python SDK - Request Signing Module

HTTP Signature authorization, header assembly and pre-signed URL generation
for Manta requests.
"""

from .types import (
    HttpMethod,
    RequestOptions,
    SignedHeaderSet,
)

from .signer import (
    SIGNATURE_TEMPLATE,
    SignatureBuilder,
)

from .headers import (
    API_VERSION,
    USER_AGENT,
    HeaderAssembler,
)

from .signed_url import (
    SignedUrlGenerator,
    encode_query,
    normalize_methods,
)

from .utils import (
    base64_md5,
    coerce_timestamp,
    format_http_date,
    is_valid_origin,
)

# Public API exports
__all__ = [
    # Types
    'HttpMethod',
    'RequestOptions',
    'SignedHeaderSet',
    # Signing
    'SIGNATURE_TEMPLATE',
    'SignatureBuilder',
    # Headers
    'API_VERSION',
    'USER_AGENT',
    'HeaderAssembler',
    # Signed URLs
    'SignedUrlGenerator',
    'encode_query',
    'normalize_methods',
    # Utilities
    'base64_md5',
    'coerce_timestamp',
    'format_http_date',
    'is_valid_origin',
]
