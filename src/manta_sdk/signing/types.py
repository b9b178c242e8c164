"""
Type definitions for request signing and header assembly

This module provides the per-call option set and the ordered header list
produced for every signed request.
"""

from datetime import datetime
from enum import Enum
from dataclasses import dataclass, fields
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from ..exceptions import ValidationError


class HttpMethod(str, Enum):
    """HTTP methods used against Manta"""
    GET = "GET"
    HEAD = "HEAD"
    PUT = "PUT"
    POST = "POST"
    DELETE = "DELETE"
    OPTIONS = "OPTIONS"


Timestamp = Union[datetime, int, float, str]

CORS_OPTIONS = (
    'access_control_allow_credentials',
    'access_control_allow_headers',
    'access_control_allow_methods',
    'access_control_allow_origin',
    'access_control_expose_headers',
    'access_control_max_age',
)
HEAD_OPTION = 'head'


@dataclass
class RequestOptions:
    """
    Options recognised by every request.

    Attributes:
        if_modified_since: Conditional timestamp for If-Modified-Since
        if_unmodified_since: Conditional timestamp for If-Unmodified-Since
        if_match: Etag for If-Match
        if_none_match: Etag for If-None-Match
        origin: CORS request origin
        access_control_allow_credentials: CORS declaration stored with an object
        access_control_allow_headers: CORS declaration stored with an object
        access_control_allow_methods: CORS declaration stored with an object
        access_control_allow_origin: CORS declaration stored with an object
        access_control_expose_headers: CORS declaration stored with an object
        access_control_max_age: CORS declaration stored with an object
        attempts: Per-call override of the attempt budget
        head: Issue HEAD instead of GET on retrieval calls
    """
    if_modified_since: Optional[Timestamp] = None
    if_unmodified_since: Optional[Timestamp] = None
    if_match: Optional[str] = None
    if_none_match: Optional[str] = None
    origin: Optional[str] = None
    access_control_allow_credentials: Optional[Union[bool, str]] = None
    access_control_allow_headers: Optional[str] = None
    access_control_allow_methods: Optional[str] = None
    access_control_allow_origin: Optional[str] = None
    access_control_expose_headers: Optional[str] = None
    access_control_max_age: Optional[int] = None
    attempts: Optional[int] = None
    head: bool = False

    @classmethod
    def from_mapping(
        cls,
        options: Optional[Mapping[str, Any]] = None,
        unsupported: Iterable[str] = ()
    ) -> 'RequestOptions':
        """
        Build options from keyword arguments.

        Args:
            options: Option keywords
            unsupported: Option names the calling operation does not use

        Raises:
            ValidationError: If an unknown or unsupported option name is given
        """
        options = dict(options or {})
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(options) - known)
        if unknown:
            raise ValidationError(
                f"Unknown request options: {', '.join(unknown)}",
                {"unknown_options": unknown}
            )

        rejected = sorted(set(options) & set(unsupported))
        if rejected:
            raise ValidationError(
                f"Options not supported by this operation: {', '.join(rejected)}",
                {"unsupported_options": rejected}
            )
        return cls(**options)


class SignedHeaderSet:
    """
    Ordered, append-only list of request headers.

    Names may repeat; lookups are case-insensitive and return the first match.
    """

    def __init__(self, headers: Optional[List[Tuple[str, str]]] = None):
        self._headers: List[Tuple[str, str]] = []
        for name, value in headers or []:
            self.append(name, value)

    def append(self, name: str, value: str) -> 'SignedHeaderSet':
        self._headers.append((name, str(value)))
        return self

    def extend(self, headers) -> 'SignedHeaderSet':
        for name, value in headers:
            self.append(name, value)
        return self

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        lowered = name.lower()
        for header_name, value in self._headers:
            if header_name.lower() == lowered:
                return value
        return default

    def get_all(self, name: str) -> List[str]:
        lowered = name.lower()
        return [value for header_name, value in self._headers if header_name.lower() == lowered]

    def to_dict(self) -> Dict[str, str]:
        """Render for the transport; repeated names are comma-joined"""
        merged: Dict[str, str] = {}
        for name, value in self._headers:
            if name in merged:
                merged[name] = f"{merged[name]}, {value}"
            else:
                merged[name] = value
        return merged

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        return iter(list(self._headers))

    def __len__(self) -> int:
        return len(self._headers)

    def __contains__(self, name: str) -> bool:
        return self.get(name) is not None

    def __repr__(self) -> str:
        names = [name for name, _ in self._headers]
        return f"SignedHeaderSet({names})"
