"""
Private key loading for Manta Python SDK

This module turns SSH private key material into a ``Credential``: the parsed key,
its signing algorithm, and the MD5 fingerprint Manta uses to identify the key.
"""

import base64
import hashlib
from enum import Enum
from pathlib import Path
from dataclasses import dataclass
from typing import Optional, Union

from cryptography.hazmat.primitives import serialization, hashes
from cryptography.hazmat.primitives.asymmetric import dsa, padding, rsa

from ..exceptions import UnsupportedKeyError, ValidationError

RSA_KEY_MARKER = "BEGIN RSA"
DSA_KEY_MARKER = "BEGIN DSA"


class KeyAlgorithm(str, Enum):
    """Signature algorithms understood by Manta"""
    RSA_SHA1 = "rsa-sha1"
    DSA_SHA1 = "dsa-sha1"


@dataclass(frozen=True)
class Credential:
    """
    Signing identity shared by every request of one client.

    Attributes:
        private_key: Parsed RSA or DSA private key
        algorithm: Signature algorithm matching the key type
        fingerprint: Colon-separated MD5 fingerprint of the public key blob
        user: Manta account name
    """
    private_key: Union[rsa.RSAPrivateKey, dsa.DSAPrivateKey]
    algorithm: KeyAlgorithm
    fingerprint: str
    user: str

    def __post_init__(self):
        if not isinstance(self.user, str) or not self.user:
            raise ValidationError("user must be a non-empty string")

    @property
    def key_id(self) -> str:
        """Key path as it appears in keyId parameters"""
        return f"/{self.user}/keys/{self.fingerprint}"

    def sign(self, data: Union[str, bytes]) -> bytes:
        """
        Sign data with the SHA-1 digest configured for this key.

        Args:
            data: Bytes to sign; strings are UTF-8 encoded

        Returns:
            bytes: Raw signature (PKCS#1 v1.5 for RSA, DER for DSA)
        """
        if isinstance(data, str):
            data = data.encode('utf-8')

        if self.algorithm == KeyAlgorithm.RSA_SHA1:
            return self.private_key.sign(data, padding.PKCS1v15(), hashes.SHA1())
        return self.private_key.sign(data, hashes.SHA1())


def detect_algorithm(key_data: str) -> KeyAlgorithm:
    """
    Detect the key algorithm from PEM header markers.

    Raises:
        UnsupportedKeyError: If neither an RSA nor a DSA marker is present
    """
    if RSA_KEY_MARKER in key_data:
        return KeyAlgorithm.RSA_SHA1
    if DSA_KEY_MARKER in key_data:
        return KeyAlgorithm.DSA_SHA1
    raise UnsupportedKeyError("Private key must be a PEM encoded RSA or DSA key")


def compute_fingerprint(private_key) -> str:
    """
    Compute the MD5 fingerprint of a key's SSH public key blob.

    Args:
        private_key: RSA or DSA private key

    Returns:
        str: Lowercase hex digest grouped into colon-separated byte pairs
    """
    openssh = private_key.public_key().public_bytes(
        serialization.Encoding.OpenSSH,
        serialization.PublicFormat.OpenSSH
    )
    blob = base64.b64decode(openssh.split()[1])
    digest = hashlib.md5(blob).hexdigest()
    return ':'.join(digest[i:i + 2] for i in range(0, len(digest), 2))


def load_credential(
    key_data: Union[str, bytes],
    user: str,
    passphrase: Optional[Union[str, bytes]] = None
) -> Credential:
    """
    Parse private key material into a Credential.

    Args:
        key_data: PEM encoded private key, as read from an SSH key file
        user: Manta account name
        passphrase: Optional passphrase for encrypted keys

    Returns:
        Credential: Immutable signing identity

    Raises:
        UnsupportedKeyError: If the key is not an RSA or DSA key
        ValidationError: If the key cannot be parsed
    """
    if isinstance(key_data, bytes):
        key_data = key_data.decode('utf-8', errors='replace')
    if not isinstance(key_data, str):
        raise ValidationError("Private key data must be str or bytes")

    algorithm = detect_algorithm(key_data)

    if isinstance(passphrase, str):
        passphrase = passphrase.encode('utf-8')

    try:
        private_key = serialization.load_pem_private_key(key_data.encode('utf-8'), password=passphrase)
    except (ValueError, TypeError) as e:
        raise ValidationError(f"Failed to parse private key: {e}") from e

    expected = rsa.RSAPrivateKey if algorithm == KeyAlgorithm.RSA_SHA1 else dsa.DSAPrivateKey
    if not isinstance(private_key, expected):
        raise UnsupportedKeyError(f"Key markers do not match key contents ({algorithm.value})")

    return Credential(
        private_key=private_key,
        algorithm=algorithm,
        fingerprint=compute_fingerprint(private_key),
        user=user,
    )


def load_credential_file(
    key_path: Union[str, Path],
    user: str,
    passphrase: Optional[Union[str, bytes]] = None
) -> Credential:
    """Read a private key file and parse it into a Credential"""
    path = Path(key_path).expanduser()
    try:
        key_data = path.read_text(encoding='utf-8')
    except OSError as e:
        raise ValidationError(f"Cannot read private key file {path}: {e}") from e
    return load_credential(key_data, user, passphrase)
