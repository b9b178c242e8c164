"""
HTTP Signature authorization for Manta requests

This module renders the Authorization header value Manta expects: a signature
over a canonical string, tagged with the key path and algorithm.
"""

from typing import Union

from ..crypto.keys import Credential
from ..exceptions import ValidationError
from .utils import strict_b64encode

SIGNATURE_TEMPLATE = 'Signature keyId="{key_id}",algorithm="{algorithm}",signature="{signature}"'


class SignatureBuilder:
    """
    Signs canonical strings with a client's credential.

    Holds no mutable state, so one instance may be shared across threads.
    """

    def __init__(self, credential: Credential):
        if not isinstance(credential, Credential):
            raise ValidationError("credential must be a Credential instance")
        self.credential = credential

    @property
    def algorithm(self) -> str:
        return self.credential.algorithm.value

    @property
    def key_id(self) -> str:
        return self.credential.key_id

    def sign_base64(self, canonical: Union[str, bytes]) -> str:
        """Sign a canonical string and return the base64 signature"""
        if canonical is None:
            raise ValidationError("Canonical string cannot be None")
        return strict_b64encode(self.credential.sign(canonical))

    def sign(self, canonical: Union[str, bytes]) -> str:
        """
        Build an Authorization header value for a canonical string.

        Args:
            canonical: Exact string to sign, e.g. ``"date: <Date>"``

        Returns:
            str: ``Signature keyId="...",algorithm="...",signature="..."``
        """
        return SIGNATURE_TEMPLATE.format(
            key_id=self.key_id,
            algorithm=self.algorithm,
            signature=self.sign_base64(canonical),
        )
