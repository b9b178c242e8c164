"""
Response interpretation for Manta requests

Classifies a raw HTTP response as a success, a conditional no-op (304) or a
typed failure, and checks body integrity where the service supplies the means
to do so.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Collection, Dict, List, Mapping, Optional

from .exceptions import CorruptResultError, ErrorKind, MantaServiceError
from .signing.utils import base64_md5

logger = logging.getLogger(__name__)

DIRECTORY_CONTENT_TYPE = 'application/x-json-stream; type=directory'
JOB_ERROR_CONTENT_TYPE = 'application/x-json-stream; type=job-error'
JOB_LIST_CONTENT_TYPE = 'application/x-json-stream; type=job'
JSON_CONTENT_TYPE = 'application/json'
TEXT_CONTENT_TYPE = 'text/plain'

STATUS_OK = 200
STATUS_CREATED = 201
STATUS_ACCEPTED = 202
STATUS_NO_CONTENT = 204
STATUS_NOT_MODIFIED = 304
STATUS_PRECONDITION_FAILED = 412


class _NotModified:
    """Value of a request answered with 304 Not Modified"""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return 'NOT_MODIFIED'


NOT_MODIFIED = _NotModified()


@dataclass
class MantaResponse:
    """
    Result of a successful call.

    Unpacks as ``value, headers`` for convenience.

    Attributes:
        value: Parsed result, True for calls without a payload, or NOT_MODIFIED
        headers: Response headers (case-insensitive mapping)
        status_code: HTTP status
    """
    value: Any
    headers: Mapping[str, str] = field(default_factory=dict)
    status_code: int = STATUS_OK

    @property
    def not_modified(self) -> bool:
        return self.value is NOT_MODIFIED

    def __iter__(self):
        yield self.value
        yield self.headers


def response_text(response) -> str:
    """Decode a response body for diagnostics, never failing"""
    content = getattr(response, 'content', b'') or b''
    if isinstance(content, str):
        return content
    return content.decode('utf-8', errors='replace')


def split_records(body: bytes) -> List[str]:
    """Split a newline-delimited body into its non-empty lines"""
    text = body.decode('utf-8') if isinstance(body, bytes) else (body or '')
    return [line for line in text.split('\n') if line.strip()]


class ResponseInterpreter:
    """Stateless response classification and validation"""

    def map_error(self, response) -> MantaServiceError:
        """
        Map an error response to a typed error.

        The body is expected to be JSON with ``code`` and ``message`` fields. An
        unrecognised code, an unparsable body or missing fields produce
        ``UnknownError`` carrying the raw status and body.
        """
        status = response.status_code
        body = response_text(response)

        try:
            payload = json.loads(body)
        except ValueError:
            payload = None

        if isinstance(payload, dict):
            kind = ErrorKind.from_code(payload.get('code'))
            message = payload.get('message')
            if kind is not None and isinstance(message, str):
                return MantaServiceError(message, kind, status=status, body=body,
                                         details={'code': payload.get('code')})

        logger.debug(f"Unrecognised error response {status}: {body[:200]!r}")
        if status == STATUS_PRECONDITION_FAILED:
            return MantaServiceError(f"{status}: {body}", ErrorKind.PRECONDITION_FAILED,
                                     status=status, body=body)
        return MantaServiceError(f"{status}: {body}", ErrorKind.UNKNOWN_ERROR, status=status, body=body)

    def check_content_md5(self, response) -> None:
        """
        Compare the Content-MD5 header against a digest of the received body.

        Raises:
            CorruptResultError: On mismatch
        """
        sent_md5 = response.headers.get('Content-MD5')
        if sent_md5 is None:
            return
        received_md5 = base64_md5(response.content or b'')
        if sent_md5 != received_md5:
            raise CorruptResultError(
                f"Content-MD5 mismatch: header {sent_md5}, body {received_md5}",
                status=response.status_code,
                details={'sent_md5': sent_md5, 'received_md5': received_md5}
            )

    def require_content_type(self, response, expected: str) -> None:
        content_type = response.headers.get('Content-Type')
        if content_type != expected:
            raise MantaServiceError(
                f"Unexpected Content-Type {content_type!r}, expected {expected!r}",
                ErrorKind.UNKNOWN_ERROR,
                status=response.status_code,
                body=response_text(response)
            )

    def check_listing(self, records: List[str], declared: Optional[str], limit: int, status: int = None) -> None:
        """
        Check a listing against its declared Result-Set-Size and the requested limit.

        A missing or non-numeric Result-Set-Size counts as zero.

        Raises:
            CorruptResultError: If records are missing or exceed the limit
        """
        try:
            declared_size = int(declared) if declared is not None else 0
        except ValueError:
            declared_size = 0

        count = len(records)
        if (count != declared_size and count != limit) or count > limit:
            raise CorruptResultError(
                f"Listing holds {count} records, Result-Set-Size {declared}, limit {limit}",
                status=status,
                details={'records': count, 'result_set_size': declared, 'limit': limit}
            )

    def records(self, response) -> List[str]:
        """Newline-delimited records of a response body"""
        try:
            return split_records(response.content)
        except UnicodeDecodeError as e:
            raise CorruptResultError(f"Undecodable response body: {e}", status=response.status_code) from e

    def parse_json(self, response) -> Any:
        try:
            return json.loads(response.content)
        except ValueError as e:
            raise CorruptResultError(f"Malformed JSON body: {e}", status=response.status_code) from e

    def parse_json_records(self, response, records: Optional[List[str]] = None) -> List[Dict[str, Any]]:
        if records is None:
            records = self.records(response)
        try:
            return [json.loads(line) for line in records]
        except ValueError as e:
            raise CorruptResultError(f"Malformed JSON record: {e}", status=response.status_code) from e

    def interpret(
        self,
        response,
        expected: Collection[int],
        head: bool = False,
        parse: Optional[Callable[[Any], Any]] = None
    ) -> MantaResponse:
        """
        Classify a response.

        Args:
            response: Response with ``status_code``, ``headers`` and ``content``
            expected: Status codes that mean success for this call
            head: True when the request was a HEAD
            parse: Builds the result value from a successful response; the
                value is True when omitted

        Returns:
            MantaResponse: Parsed result, or NOT_MODIFIED on 304

        Raises:
            CorruptResultError: If an integrity check fails
            MantaServiceError: For any other status
        """
        status = response.status_code

        if status == STATUS_NOT_MODIFIED:
            return MantaResponse(NOT_MODIFIED, response.headers, status)

        if status not in expected:
            raise self.map_error(response)

        if not head and status != STATUS_NO_CONTENT:
            self.check_content_md5(response)

        value = True
        if parse is not None:
            value = parse(response)
        return MantaResponse(value, response.headers, status)
