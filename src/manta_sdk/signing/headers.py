"""
Outbound header assembly for signed Manta requests

Every request carries a Date header and an Authorization header signing
``"date: <Date>"``. Conditional, CORS and content digest headers are added
from the request options after validation; invalid values raise
``ValidationError`` before anything is sent.
"""

import ssl
import platform
from datetime import datetime
from typing import Callable, Optional, Union

from ..exceptions import ValidationError
from ..version import __version__
from .signer import SignatureBuilder
from .types import RequestOptions, SignedHeaderSet
from .utils import (
    CORS_HEADERS_REGEX,
    CORS_METHODS,
    base64_md5,
    canonicalize_header_list,
    coerce_timestamp,
    format_http_date,
    is_valid_origin,
)

USER_AGENT = (
    f"manta-python-sdk/{__version__} ({platform.system()}; {ssl.OPENSSL_VERSION}) "
    f"python/{platform.python_version()}"
)
API_VERSION = '~1.0'

_CONDITIONAL_DATES = (
    ('if_modified_since', 'If-Modified-Since'),
    ('if_unmodified_since', 'If-Unmodified-Since'),
)
_CONDITIONAL_ETAGS = (
    ('if_match', 'If-Match'),
    ('if_none_match', 'If-None-Match'),
)


class HeaderAssembler:
    """
    Builds the header set for one request.

    Args:
        signer: Signature builder holding the client credential
        clock: Returns the current time; overridable for tests
    """

    def __init__(self, signer: SignatureBuilder, clock: Optional[Callable[[], datetime]] = None):
        self.signer = signer
        self.clock = clock

    def build(
        self,
        options: Optional[RequestOptions] = None,
        body: Optional[Union[str, bytes]] = None
    ) -> SignedHeaderSet:
        """
        Build signed request headers.

        Args:
            options: Request options carrying conditional and origin values
            body: Request body; when given a Content-MD5 header is added

        Returns:
            SignedHeaderSet: Ordered headers, starting with Date and Authorization

        Raises:
            ValidationError: If an option value is malformed
        """
        options = options or RequestOptions()

        # options are validated before the request is signed
        extra = SignedHeaderSet()

        for attr, header in _CONDITIONAL_DATES:
            value = getattr(options, attr)
            if value is None:
                continue
            extra.append(header, format_http_date(coerce_timestamp(value)))

        for attr, header in _CONDITIONAL_ETAGS:
            etag = getattr(options, attr)
            if etag is None:
                continue
            if not isinstance(etag, str):
                raise ValidationError(f"{attr} must be an etag string", {"option": attr})
            extra.append(header, etag)

        if options.origin is not None:
            if not isinstance(options.origin, str) or not is_valid_origin(options.origin):
                raise ValidationError(f"Invalid origin: {options.origin!r}", {"option": "origin"})
            extra.append('Origin', options.origin)

        if body is not None:
            extra.append('Content-MD5', base64_md5(body))

        now = format_http_date(self.clock() if self.clock else None)
        headers = SignedHeaderSet([
            ('Date', now),
            ('Authorization', self.signer.sign(f"date: {now}")),
            ('User-Agent', USER_AGENT),
            ('Accept-Version', API_VERSION),
        ])
        return headers.extend(extra)

    def cors_headers(self, options: Optional[RequestOptions] = None) -> SignedHeaderSet:
        """
        Build the Access-Control-* headers stored alongside an object or directory.

        Raises:
            ValidationError: If a CORS value does not match its grammar
        """
        options = options or RequestOptions()
        headers = SignedHeaderSet()

        allow_credentials = options.access_control_allow_credentials
        if allow_credentials is not None:
            allow_credentials = str(allow_credentials).lower() if isinstance(allow_credentials, bool) \
                else str(allow_credentials)
            if allow_credentials not in ('true', 'false'):
                raise ValidationError("access_control_allow_credentials must be 'true' or 'false'")
            headers.append('Access-Control-Allow-Credentials', allow_credentials)

        allow_headers = options.access_control_allow_headers
        if allow_headers is not None:
            headers.append('Access-Control-Allow-Headers',
                           self._header_list(allow_headers, 'access_control_allow_headers'))

        allow_methods = options.access_control_allow_methods
        if allow_methods is not None:
            if not isinstance(allow_methods, str):
                raise ValidationError("access_control_allow_methods must be a string")
            unknown = [m for m in allow_methods.split(', ') if m not in CORS_METHODS]
            if unknown:
                raise ValidationError(
                    f"Unknown CORS methods: {', '.join(unknown)}",
                    {"unknown_methods": unknown}
                )
            headers.append('Access-Control-Allow-Methods', allow_methods)

        allow_origin = options.access_control_allow_origin
        if allow_origin is not None:
            if not isinstance(allow_origin, str) or \
                    not (allow_origin == '*' or is_valid_origin(allow_origin)):
                raise ValidationError(f"Invalid access_control_allow_origin: {allow_origin!r}")
            headers.append('Access-Control-Allow-Origin', allow_origin)

        expose_headers = options.access_control_expose_headers
        if expose_headers is not None:
            headers.append('Access-Control-Expose-Headers',
                           self._header_list(expose_headers, 'access_control_expose_headers'))

        max_age = options.access_control_max_age
        if max_age is not None:
            if not isinstance(max_age, int) or isinstance(max_age, bool) or max_age < 0:
                raise ValidationError("access_control_max_age must be a non-negative integer")
            headers.append('Access-Control-Max-Age', str(max_age))

        return headers

    @staticmethod
    def _header_list(value, option: str) -> str:
        if not isinstance(value, str) or not CORS_HEADERS_REGEX.fullmatch(value):
            raise ValidationError(f"{option} must be a ', ' separated list of header names")
        return canonicalize_header_list(value)
