"""
Utility functions for request signing

This module provides HTTP-date formatting, timestamp coercion, content digests
and the small grammars used to validate CORS values.
"""

import re
import base64
import hashlib
from datetime import datetime, timezone
from email.utils import format_datetime, parsedate_to_datetime
from typing import Union
from urllib.parse import quote_plus

from ..exceptions import ValidationError
from .types import Timestamp

# one or more scheme://host[:port] tokens separated by whitespace,
# e.g. "http://example.com https://example.com:8443"
CORS_ORIGIN_REGEX = re.compile(
    r'^\w+://[^\s:]+(?::\d+)?(?:\s\w+://[^\s:]+(?::\d+)?)*$'
)
CORS_HEADERS_REGEX = re.compile(r'^[\w-]+(?:, [\w-]+)*$')
CORS_METHODS = ('GET', 'POST', 'PUT', 'DELETE', 'OPTIONS')


def strict_b64encode(data: bytes) -> str:
    """Base64 encode without line breaks"""
    return base64.b64encode(data).decode('ascii')


def base64_md5(data: Union[str, bytes]) -> str:
    """
    Compute the Content-MD5 value for a body.

    Args:
        data: Body bytes; strings are UTF-8 encoded

    Returns:
        str: Base64 encoded MD5 digest
    """
    if isinstance(data, str):
        data = data.encode('utf-8')
    return strict_b64encode(hashlib.md5(data).digest())


def format_http_date(moment: datetime = None) -> str:
    """
    Format a moment as an RFC 7231 HTTP-date.

    Naive datetimes are taken to be UTC.
    """
    if moment is None:
        moment = datetime.now(timezone.utc)
    elif moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return format_datetime(moment.astimezone(timezone.utc), usegmt=True)


def coerce_timestamp(value: Timestamp) -> datetime:
    """
    Coerce a timestamp option into an aware datetime.

    Accepts datetimes, seconds since the epoch, HTTP-date strings and
    ISO 8601 strings.

    Raises:
        ValidationError: If the value cannot be interpreted as a time
    """
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)

    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value, tz=timezone.utc)

    if isinstance(value, str):
        text = value.strip()
        try:
            parsed = parsedate_to_datetime(text)
        except (TypeError, ValueError, IndexError):
            parsed = None
        if parsed is None:
            try:
                parsed = datetime.fromisoformat(text.replace('Z', '+00:00'))
            except ValueError:
                raise ValidationError(f"Unparseable timestamp: {value!r}", {"value": value})
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)

    raise ValidationError(f"Timestamp must be datetime, number or string, got {type(value).__name__}")


def to_epoch_seconds(value: Union[datetime, int, float]) -> int:
    """Convert an expiry to integer seconds since the epoch"""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return int(value.timestamp())
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return int(value)
    raise ValidationError(f"Expiry must be datetime or seconds since epoch, got {type(value).__name__}")


def escape_query_component(value) -> str:
    """Percent-encode a query key or value, spaces as '+'"""
    return quote_plus(str(value), safe='')


def is_valid_origin(origin: str) -> bool:
    """Check an origin against 'null' or the scheme://host[:port] grammar"""
    return origin == 'null' or bool(CORS_ORIGIN_REGEX.fullmatch(origin))


def canonicalize_header_list(value: str) -> str:
    """Lowercase and sort a comma-space separated header name list"""
    return ', '.join(sorted(token.lower() for token in value.split(', ')))
