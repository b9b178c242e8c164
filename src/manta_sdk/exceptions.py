"""
Exception classes for Manta Python SDK

Every failure raised by the SDK is a ``MantaSDKError``. Errors that come out of
a request carry an ``ErrorKind`` so callers can tell a local validation failure
from a specific service condition or an unknown response.
"""

from enum import Enum
from typing import Optional, Dict, Any


class ErrorKind(str, Enum):
    """Closed set of error kinds known to the client"""

    # Service error codes, as sent in the ``code`` field of an error body
    AUTHORIZATION_FAILED = "AuthorizationFailed"
    AUTH_SCHEME_NOT_ALLOWED = "AuthSchemeNotAllowed"
    BAD_REQUEST = "BadRequest"
    CHECKSUM = "Checksum"
    CONCURRENT_REQUEST = "ConcurrentRequest"
    CONTENT_LENGTH = "ContentLength"
    CONTENT_MD5_MISMATCH = "ContentMD5Mismatch"
    DIRECTORY_DOES_NOT_EXIST = "DirectoryDoesNotExist"
    DIRECTORY_EXISTS = "DirectoryExists"
    DIRECTORY_NOT_EMPTY = "DirectoryNotEmpty"
    DIRECTORY_OPERATION = "DirectoryOperation"
    ENTITY_EXISTS = "EntityExists"
    INTERNAL = "Internal"
    INVALID_ARGUMENT = "InvalidArgument"
    INVALID_AUTH_TOKEN = "InvalidAuthToken"
    INVALID_CREDENTIALS = "InvalidCredentials"
    INVALID_DURABILITY_LEVEL = "InvalidDurabilityLevel"
    INVALID_JOB = "InvalidJob"
    INVALID_KEY_ID = "InvalidKeyId"
    INVALID_LINK = "InvalidLink"
    INVALID_SIGNATURE = "InvalidSignature"
    INVALID_JOB_STATE = "InvalidJobState"
    JOB_NOT_FOUND = "JobNotFound"
    JOB_STATE = "JobState"
    KEY_DOES_NOT_EXIST = "KeyDoesNotExist"
    LINK_NOT_FOUND = "LinkNotFound"
    LINK_NOT_OBJECT = "LinkNotObject"
    LINK_REQUIRED = "LinkRequired"
    NOT_ACCEPTABLE = "NotAcceptable"
    NOT_ENOUGH_SPACE = "NotEnoughSpace"
    PARENT_NOT_DIRECTORY = "ParentNotDirectory"
    PRECONDITION_FAILED = "PreconditionFailed"
    PRE_SIGNED_REQUEST = "PreSignedRequest"
    REQUEST_ENTITY_TOO_LARGE = "RequestEntityTooLarge"
    RESOURCE_NOT_FOUND = "ResourceNotFound"
    ROOT_DIRECTORY = "RootDirectory"
    SERVICE_UNAVAILABLE = "ServiceUnavailable"
    SOURCE_OBJECT_NOT_FOUND = "SourceObjectNotFound"
    SSL_REQUIRED = "SSLRequired"
    TASK_INIT = "TaskInit"
    UPLOAD_TIMEOUT = "UploadTimeout"
    USER_DOES_NOT_EXIST = "UserDoesNotExist"
    USER_TASK_ERROR = "UserTaskError"

    # Raised by the client itself
    CORRUPT_RESULT = "CorruptResult"
    UNKNOWN_ERROR = "UnknownError"
    UNSUPPORTED_KEY = "UnsupportedKey"
    CONNECTION_REFUSED = "ConnectionRefused"
    TIMEOUT = "Timeout"

    @classmethod
    def from_code(cls, code: Any) -> Optional['ErrorKind']:
        """Look up the kind for a wire ``code`` value, or None if unrecognised"""
        if not isinstance(code, str):
            return None
        return _WIRE_CODES.get(code)


LOCAL_ERROR_KINDS = frozenset({
    ErrorKind.CORRUPT_RESULT,
    ErrorKind.UNKNOWN_ERROR,
    ErrorKind.UNSUPPORTED_KEY,
    ErrorKind.CONNECTION_REFUSED,
    ErrorKind.TIMEOUT,
})

TRANSIENT_ERROR_KINDS = frozenset({
    ErrorKind.CONNECTION_REFUSED,
    ErrorKind.TIMEOUT,
    ErrorKind.CORRUPT_RESULT,
})

_WIRE_CODES = {kind.value: kind for kind in ErrorKind if kind not in LOCAL_ERROR_KINDS}


class MantaSDKError(Exception):
    """Base exception for all Manta SDK errors"""

    def __init__(self, message: str, error_code: str = "UNKNOWN_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class MantaClientError(MantaSDKError):
    """
    Error produced while executing a request.

    Attributes:
        kind: Classified error kind
        status: HTTP status of the response, if one was received
        body: Raw response body text, if one was received
    """

    def __init__(
        self,
        message: str,
        kind: ErrorKind = ErrorKind.UNKNOWN_ERROR,
        status: Optional[int] = None,
        body: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, kind.value, details)
        self.kind = kind
        self.status = status
        self.body = body

    @property
    def transient(self) -> bool:
        """True when the failure is likely to succeed on retry"""
        return self.kind in TRANSIENT_ERROR_KINDS

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.value!r}, status={self.status!r}, message={self.message!r})"


class ValidationError(MantaClientError):
    """Raised for invalid arguments, before any network I/O"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorKind.INVALID_ARGUMENT, details=details)


class UnsupportedKeyError(MantaClientError):
    """Raised when private key material is of an unsupported type"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorKind.UNSUPPORTED_KEY, details=details)


class CorruptResultError(MantaClientError):
    """Raised when a response fails an integrity check"""

    def __init__(self, message: str, status: Optional[int] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorKind.CORRUPT_RESULT, status=status, details=details)


class MantaServiceError(MantaClientError):
    """Error reported by the service, or an unrecognised response"""
    pass


class ServerCommunicationError(MantaClientError):
    """Raised for transport failures (refused connections, timeouts, TLS)"""
    pass
