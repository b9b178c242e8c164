"""
Shared fixtures for Manta SDK tests
"""

import base64
import hashlib
from unittest.mock import Mock

import pytest
import requests
from requests.structures import CaseInsensitiveDict
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import dsa, rsa

from manta_sdk import create_client, load_credential

MANTA_URL = "https://us-east.manta.joyent.com"
MANTA_USER = "john"


def _pem(private_key) -> str:
    return private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode('ascii')


@pytest.fixture(scope="session")
def rsa_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def dsa_key():
    return dsa.generate_private_key(key_size=2048)


@pytest.fixture(scope="session")
def rsa_pem(rsa_key):
    return _pem(rsa_key)


@pytest.fixture(scope="session")
def dsa_pem(dsa_key):
    return _pem(dsa_key)


@pytest.fixture
def credential(rsa_pem):
    return load_credential(rsa_pem, MANTA_USER)


@pytest.fixture
def session():
    return Mock(spec=requests.Session)


@pytest.fixture
def client(rsa_pem, session):
    return create_client(MANTA_URL, MANTA_USER, rsa_pem, session=session)


@pytest.fixture
def no_sleep(monkeypatch):
    """Record backoff delays instead of sleeping"""
    delays = []
    monkeypatch.setattr('manta_sdk.retry.time.sleep', delays.append)
    return delays


def content_md5(body: bytes) -> str:
    return base64.b64encode(hashlib.md5(body).digest()).decode('ascii')


def make_response(status=200, body=b'', headers=None, md5=False):
    """
    Build a requests.Response as the transport would return it.

    Args:
        status: HTTP status code
        body: Raw body; str is UTF-8 encoded
        headers: Response headers
        md5: Add a correct Content-MD5 header for the body
    """
    if isinstance(body, str):
        body = body.encode('utf-8')

    response = requests.Response()
    response.status_code = status
    response._content = body
    response.headers = CaseInsensitiveDict(headers or {})
    if md5:
        response.headers['Content-MD5'] = content_md5(body)
    return response


def error_response(status, code, message):
    return make_response(
        status,
        f'{{"code": "{code}", "message": "{message}"}}',
        {'Content-Type': 'application/json'},
    )
