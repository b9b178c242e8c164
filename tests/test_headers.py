"""
Unit tests for signed header assembly
"""

import base64
import re
from datetime import datetime, timezone

import pytest
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding

from manta_sdk import HeaderAssembler, RequestOptions, SignatureBuilder, ValidationError
from manta_sdk.signing.headers import API_VERSION, USER_AGENT

FIXED_NOW = datetime(1994, 11, 15, 8, 12, 31, tzinfo=timezone.utc)
FIXED_DATE = "Tue, 15 Nov 1994 08:12:31 GMT"

AUTHORIZATION_PATTERN = re.compile(
    r'^Signature keyId="(?P<key_id>[^"]+)",algorithm="(?P<algorithm>[^"]+)",signature="(?P<signature>[^"]+)"$'
)


@pytest.fixture
def assembler(credential):
    return HeaderAssembler(SignatureBuilder(credential), clock=lambda: FIXED_NOW)


class TestBuild:
    """Test the headers every request carries"""

    def test_single_date_and_authorization(self, assembler):
        """Exactly one Date and one Authorization header, first in order"""
        headers = assembler.build(RequestOptions(if_match='"abc"', origin="https://example.com"), b"body")

        assert len(headers.get_all('Date')) == 1
        assert len(headers.get_all('Authorization')) == 1
        names = [name for name, _ in headers]
        assert names[:2] == ['Date', 'Authorization']

    def test_date_format(self, assembler):
        """Date is an RFC 7231 HTTP-date"""
        assert assembler.build().get('Date') == FIXED_DATE

    def test_authorization_signs_date_line(self, assembler, credential, rsa_key):
        """Authorization carries a verifiable signature over 'date: <Date>'"""
        headers = assembler.build()
        match = AUTHORIZATION_PATTERN.match(headers.get('Authorization'))

        assert match is not None
        assert match.group('key_id') == f"/john/keys/{credential.fingerprint}"
        assert match.group('algorithm') == 'rsa-sha1'

        rsa_key.public_key().verify(
            base64.b64decode(match.group('signature')),
            f"date: {headers.get('Date')}".encode('utf-8'),
            padding.PKCS1v15(),
            hashes.SHA1()
        )

    def test_identification_headers(self, assembler):
        """User-Agent and Accept-Version are always present"""
        headers = assembler.build()
        assert headers.get('User-Agent') == USER_AGENT
        assert headers.get('Accept-Version') == API_VERSION == '~1.0'

    def test_default_clock(self, credential):
        """Without a clock the current time is used"""
        headers = HeaderAssembler(SignatureBuilder(credential)).build()
        assert headers.get('Date').endswith(' GMT')

    def test_content_md5(self, assembler):
        """A body adds its base64 MD5; no body adds nothing"""
        assert assembler.build(body=b"").get('Content-MD5') == "1B2M2Y8AsgTpgAmY7PhCfg=="
        assert assembler.build(body="hello").get('Content-MD5') == "XUFAKrxLKna5cZ2REBfFkg=="
        assert 'Content-MD5' not in assembler.build()


class TestConditionalHeaders:
    """Test conditional request headers"""

    def test_datetime(self, assembler):
        """Datetimes are rendered as HTTP-dates"""
        headers = assembler.build(RequestOptions(if_modified_since=FIXED_NOW))
        assert headers.get('If-Modified-Since') == FIXED_DATE

    def test_epoch_seconds(self, assembler):
        """Epoch seconds are accepted"""
        headers = assembler.build(RequestOptions(if_unmodified_since=784887151))
        assert headers.get('If-Unmodified-Since') == FIXED_DATE

    def test_string_dates(self, assembler):
        """HTTP-date and ISO 8601 strings are accepted"""
        assert assembler.build(RequestOptions(if_modified_since=FIXED_DATE)) \
            .get('If-Modified-Since') == FIXED_DATE
        assert assembler.build(RequestOptions(if_modified_since="1994-11-15T08:12:31Z")) \
            .get('If-Modified-Since') == FIXED_DATE

    def test_invalid_date(self, assembler):
        """Unparseable timestamps fail validation"""
        with pytest.raises(ValidationError):
            assembler.build(RequestOptions(if_modified_since="last tuesday"))

    def test_etags(self, assembler):
        """Etags are passed through"""
        headers = assembler.build(RequestOptions(if_match='"a"', if_none_match='"b"'))
        assert headers.get('If-Match') == '"a"'
        assert headers.get('If-None-Match') == '"b"'

    def test_invalid_etag(self, assembler):
        """Etags must be strings"""
        with pytest.raises(ValidationError):
            assembler.build(RequestOptions(if_match=42))


class TestOrigin:
    """Test the Origin option"""

    @pytest.mark.parametrize("origin", [
        "https://example.com",
        "http://example.com:8080",
        "http://a.com https://b.com",
        "null",
    ])
    def test_valid_origin(self, assembler, origin):
        """Origins matching the grammar are sent"""
        assert assembler.build(RequestOptions(origin=origin)).get('Origin') == origin

    @pytest.mark.parametrize("origin", ["not-a-url", "https://example.com\n", ""])
    def test_invalid_origin(self, assembler, origin):
        """Other origins fail validation"""
        with pytest.raises(ValidationError):
            assembler.build(RequestOptions(origin=origin))


class TestCorsHeaders:
    """Test Access-Control-* headers"""

    def test_allow_methods(self, assembler):
        """Known methods are accepted"""
        headers = assembler.cors_headers(RequestOptions(access_control_allow_methods="GET, PUT"))
        assert headers.get('Access-Control-Allow-Methods') == "GET, PUT"

    def test_unknown_method(self, assembler):
        """PATCH is not a CORS method Manta accepts"""
        with pytest.raises(ValidationError, match="PATCH"):
            assembler.cors_headers(RequestOptions(access_control_allow_methods="GET, PATCH"))

    def test_allow_headers_canonicalized(self, assembler):
        """Header lists are lowercased and sorted, so order does not matter"""
        first = assembler.cors_headers(RequestOptions(access_control_allow_headers="X-B, x-a"))
        second = assembler.cors_headers(RequestOptions(access_control_allow_headers="x-a, X-B"))

        assert first.get('Access-Control-Allow-Headers') == "x-a, x-b"
        assert second.get('Access-Control-Allow-Headers') == "x-a, x-b"

    def test_expose_headers_grammar(self, assembler):
        """Header lists must be ', ' separated"""
        with pytest.raises(ValidationError):
            assembler.cors_headers(RequestOptions(access_control_expose_headers="a,b"))

    def test_allow_credentials(self, assembler):
        """Booleans are rendered lowercase; other values must be true/false"""
        headers = assembler.cors_headers(RequestOptions(access_control_allow_credentials=True))
        assert headers.get('Access-Control-Allow-Credentials') == 'true'

        with pytest.raises(ValidationError):
            assembler.cors_headers(RequestOptions(access_control_allow_credentials="yes"))

    def test_allow_origin(self, assembler):
        """Wildcard and grammar-conforming origins are accepted"""
        headers = assembler.cors_headers(RequestOptions(access_control_allow_origin="*"))
        assert headers.get('Access-Control-Allow-Origin') == '*'

        with pytest.raises(ValidationError):
            assembler.cors_headers(RequestOptions(access_control_allow_origin="not-a-url"))

    def test_max_age(self, assembler):
        """Max age must be a non-negative integer"""
        headers = assembler.cors_headers(RequestOptions(access_control_max_age=600))
        assert headers.get('Access-Control-Max-Age') == '600'

        with pytest.raises(ValidationError):
            assembler.cors_headers(RequestOptions(access_control_max_age=-1))

    def test_no_options(self, assembler):
        """Nothing is emitted when no CORS option is set"""
        assert len(assembler.cors_headers()) == 0


class TestRequestOptions:
    """Test option parsing"""

    def test_unknown_option(self):
        """Unknown option names are rejected"""
        with pytest.raises(ValidationError, match="if_modified"):
            RequestOptions.from_mapping({'if_modified': 1})

    def test_known_options(self):
        """Known option names populate the dataclass"""
        options = RequestOptions.from_mapping({'attempts': 2, 'head': True})
        assert options.attempts == 2
        assert options.head is True
