"""
Pre-signed URL generation

A signed URL embeds an expiry, the key identity and a signature over the
method, host, path and sorted query string, so it can be used without further
credentials until it expires. No network access is involved.
"""

from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from ..exceptions import ValidationError
from ..paths import validate_object_path
from .signer import SignatureBuilder
from .utils import escape_query_component, to_epoch_seconds

SIGNABLE_METHODS = ('GET', 'HEAD', 'PUT', 'POST', 'DELETE', 'OPTIONS')

QueryArgs = Sequence[Tuple[str, object]]


def normalize_methods(method: Union[str, Iterable[str]]) -> str:
    """
    Normalize one method or a collection of methods for signing.

    A collection is rendered as a sorted, comma-joined list.

    Raises:
        ValidationError: If a method is not signable
    """
    if isinstance(method, str):
        methods = [method]
    else:
        try:
            methods = list(method)
        except TypeError:
            raise ValidationError(f"Invalid method: {method!r}")

    if not methods:
        raise ValidationError("At least one method is required")

    normalized = []
    for m in methods:
        name = getattr(m, 'value', m)
        if not isinstance(name, str) or name.upper() not in SIGNABLE_METHODS:
            raise ValidationError(f"Unsupported method for signed URL: {m!r}", {"method": str(m)})
        normalized.append(name.upper())

    return ','.join(sorted(set(normalized)))


def encode_query(args: QueryArgs) -> str:
    """Sort query pairs by key, then value, and percent-encode them"""
    pairs = sorted((str(key), str(value)) for key, value in args)
    return '&'.join(
        f"{escape_query_component(key)}={escape_query_component(value)}"
        for key, value in pairs
    )


def strip_scheme(url: str) -> str:
    """Return the host part of a base URL"""
    return url.rstrip('/').split('/')[-1]


class SignedUrlGenerator:
    """
    Produces time-limited URLs for unauthenticated access.

    Args:
        signer: Signature builder holding the client credential
        url: Base URL of the Manta service, e.g. ``https://us-east.manta.joyent.com``
    """

    def __init__(self, signer: SignatureBuilder, url: str):
        self.signer = signer
        self.host = strip_scheme(url)

    def canonical_string(self, method: str, path: str, encoded_query: str) -> str:
        return f"{method}\n{self.host}\n{path}\n{encoded_query}"

    def generate(
        self,
        expires: Union[datetime, int, float],
        method: Union[str, Iterable[str]],
        path: str,
        args: Optional[QueryArgs] = None
    ) -> str:
        """
        Generate a signed URL.

        Args:
            expires: Expiry as a datetime or seconds since the epoch
            method: HTTP method, or collection of methods, the URL is valid for
            path: Object path under the account's namespace
            args: Extra query (key, value) pairs; not modified

        Returns:
            str: ``host + path + "?" + query + "&signature=" + signature``

        Raises:
            ValidationError: On an invalid method, path or expiry
        """
        methods = normalize_methods(method)
        validate_object_path(path)

        query: List[Tuple[str, object]] = list(args or [])
        query.append(('expires', to_epoch_seconds(expires)))
        query.append(('algorithm', self.signer.algorithm))
        query.append(('keyId', self.signer.key_id))

        encoded_query = encode_query(query)
        signature = self.signer.sign_base64(self.canonical_string(methods, path, encoded_query))

        return f"{self.host}{path}?{encoded_query}&signature={escape_query_component(signature)}"
