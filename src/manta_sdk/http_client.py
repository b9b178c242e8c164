"""
HTTP client for the Manta object store and job service

This module provides ``MantaClient``. Every call is signed, executed with
bounded retries on transient failures, and validated before a result is
returned. One client holds one pooled ``requests.Session`` and may be shared
between threads.
"""

import json
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import requests
from requests.adapters import HTTPAdapter

from .config import ClientConfig
from .crypto.keys import Credential, load_credential, load_credential_file
from .exceptions import ErrorKind, MantaServiceError, ServerCommunicationError, ValidationError
from .paths import validate_job_path, validate_object_path, validate_object_paths
from .response import (
    DIRECTORY_CONTENT_TYPE,
    JOB_ERROR_CONTENT_TYPE,
    JOB_LIST_CONTENT_TYPE,
    JSON_CONTENT_TYPE,
    TEXT_CONTENT_TYPE,
    STATUS_ACCEPTED,
    STATUS_CREATED,
    STATUS_NO_CONTENT,
    STATUS_OK,
    MantaResponse,
    ResponseInterpreter,
)
from .retry import RetryExecutor, RetryPolicy
from .signing import HeaderAssembler, RequestOptions, SignatureBuilder, SignedHeaderSet, SignedUrlGenerator
from .signing.types import CORS_OPTIONS, HEAD_OPTION

logger = logging.getLogger(__name__)

MAX_LIMIT = 1000
JOB_STATES = ('all', 'running', 'done')

Body = Union[str, bytes]


class MantaClient:
    """
    Client for the Manta object store and job service.

    Every operation accepts request options as keyword arguments:
    ``if_modified_since``, ``if_unmodified_since``, ``if_match``,
    ``if_none_match``, ``origin`` and ``attempts``. ``get_object``,
    ``list_directory``, ``get_job`` and ``get_job_errors`` also accept
    ``head``; ``put_object`` and ``put_directory`` also accept the
    ``access_control_*`` options. Any other option raises ``ValidationError``.

    Operations return a ``MantaResponse`` (unpackable as ``value, headers``)
    and raise ``MantaClientError`` subclasses on failure.
    """

    def __init__(
        self,
        config: ClientConfig,
        credential: Credential,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the client.

        Args:
            config: Connection settings
            credential: Signing identity
            session: Optional pre-built transport, mainly for tests
        """
        if not isinstance(config, ClientConfig):
            raise ValidationError("config must be a ClientConfig instance")
        if not isinstance(credential, Credential):
            raise ValidationError("credential must be a Credential instance")
        if credential.user != config.user:
            raise ValidationError("credential user does not match configured user")

        self.config = config
        self.credential = credential
        self.signer = SignatureBuilder(credential)
        self.headers = HeaderAssembler(self.signer)
        self.interpreter = ResponseInterpreter()
        self.retry = RetryExecutor(RetryPolicy(config.attempts))
        self.signed_urls = SignedUrlGenerator(self.signer, config.url)
        self.session = session if session is not None else self._create_session()
        self.job_base = f"/{config.user}/jobs"

        logger.info(f"Initialized Manta client for {config.url} as {config.user} "
                    f"(key {credential.fingerprint}, {credential.algorithm.value})")

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        passphrase: Optional[Union[str, bytes]] = None,
        session: Optional[requests.Session] = None
    ) -> 'MantaClient':
        """Build a client whose key is read from ``config.key_path``"""
        if not config.key_path:
            raise ValidationError("Configuration has no key_path")
        credential = load_credential_file(config.key_path, config.user, passphrase)
        return cls(config, credential, session=session)

    def _create_session(self) -> requests.Session:
        """Create a pooled HTTP session; retries are handled by the client."""
        session = requests.Session()
        adapter = HTTPAdapter(
            pool_connections=self.config.pool_maxsize,
            pool_maxsize=self.config.pool_maxsize,
            max_retries=0,
        )
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        return session

    # ------------------------------------------------------------------
    # request execution

    def _send(
        self,
        method: str,
        url: str,
        headers: SignedHeaderSet,
        data: Optional[bytes] = None,
        params: Optional[Dict[str, Any]] = None
    ):
        """
        Perform one HTTP exchange.

        Raises:
            ServerCommunicationError: On transport failures
        """
        try:
            return self.session.request(
                method,
                url,
                headers=headers.to_dict(),
                data=data,
                params=params,
                timeout=self.config.timeout,
                verify=self.config.verify_ssl,
                allow_redirects=False,
            )
        except requests.exceptions.Timeout as e:
            raise ServerCommunicationError(
                f"Request timeout after {self.config.timeout} seconds: {method} {url}",
                ErrorKind.TIMEOUT
            ) from e
        except requests.exceptions.SSLError as e:
            raise ServerCommunicationError(f"TLS error: {e}", ErrorKind.UNKNOWN_ERROR) from e
        except requests.exceptions.ConnectionError as e:
            raise ServerCommunicationError(f"Connection error: {e}", ErrorKind.CONNECTION_REFUSED) from e
        except requests.exceptions.RequestException as e:
            raise ServerCommunicationError(f"Request failed: {e}", ErrorKind.UNKNOWN_ERROR) from e

    def _request(
        self,
        method: str,
        path: str,
        options: RequestOptions,
        expected: Sequence[int],
        parse=None,
        data: Optional[Body] = None,
        params: Optional[Dict[str, Any]] = None,
        extra_headers: Iterable[Tuple[str, str]] = (),
        cors: bool = False,
        suffix: str = ''
    ) -> MantaResponse:
        """Sign, send and interpret one logical call."""
        attempts = self.retry.policy.resolve(options.attempts)

        if isinstance(data, str):
            data = data.encode('utf-8')

        headers = self.headers.build(options, data)
        if cors:
            headers.extend(self.headers.cors_headers(options))
        headers.extend(extra_headers)

        url = self.config.url + path + suffix
        head = method == 'HEAD'

        def exchange() -> MantaResponse:
            logger.debug(f"Making {method} request to {url}")
            response = self._send(method, url, headers, data, params)
            return self.interpreter.interpret(response, expected, head=head, parse=parse)

        return self.retry.run(exchange, attempts, description=f"{method} {path}{suffix}")

    @staticmethod
    def _options(options: Mapping[str, Any], cors: bool = False, head: bool = False) -> RequestOptions:
        unsupported = []
        if not cors:
            unsupported.extend(CORS_OPTIONS)
        if not head:
            unsupported.append(HEAD_OPTION)
        return RequestOptions.from_mapping(options, unsupported)

    def _require_location(self, response) -> str:
        location = response.headers.get('Location')
        if not location:
            raise MantaServiceError(
                "Job created but response has no Location header",
                ErrorKind.UNKNOWN_ERROR,
                status=response.status_code,
            )
        return location

    def _json_records(self, content_type: str, head: bool):
        def parse(response):
            self.interpreter.require_content_type(response, content_type)
            if head:
                return True
            return self.interpreter.parse_json_records(response)
        return parse

    # ------------------------------------------------------------------
    # objects and directories

    def put_object(
        self,
        obj_path: str,
        data: Body,
        content_type: Optional[str] = None,
        durability_level: Optional[int] = None,
        **options
    ) -> MantaResponse:
        """
        Upload an object, along with its Content-MD5.

        Args:
            obj_path: Path under /<user>/stor or /<user>/public
            data: Object content
            content_type: Stored Content-Type (service default is
                application/octet-stream)
            durability_level: Number of replicas to keep

        Returns:
            MantaResponse: True and the response headers
        """
        validate_object_path(obj_path)
        opts = self._options(options, cors=True)

        if data is None or not isinstance(data, (str, bytes)):
            raise ValidationError("Object data must be str or bytes")

        extra: List[Tuple[str, str]] = []
        if durability_level is not None:
            if not isinstance(durability_level, int) or isinstance(durability_level, bool) \
                    or durability_level < 1:
                raise ValidationError("durability_level must be a positive integer")
            extra.append(('Durability-Level', str(durability_level)))

        if content_type is not None:
            if not isinstance(content_type, str):
                raise ValidationError("content_type must be a string")
            extra.append(('Content-Type', content_type))

        return self._request('PUT', obj_path, opts, (STATUS_NO_CONTENT,),
                             data=data, extra_headers=extra, cors=True)

    def get_object(self, obj_path: str, **options) -> MantaResponse:
        """
        Fetch an object and check it against its Content-MD5.

        Pass ``head=True`` to issue a HEAD instead.

        Returns:
            MantaResponse: Object bytes (True for HEAD), or NOT_MODIFIED
        """
        validate_object_path(obj_path)
        opts = self._options(options, head=True)
        method = 'HEAD' if opts.head else 'GET'

        def parse(response):
            return True if opts.head else response.content

        return self._request(method, obj_path, opts, (STATUS_OK,), parse=parse)

    def delete_object(self, obj_path: str, **options) -> MantaResponse:
        """Delete an object."""
        validate_object_path(obj_path)
        return self._request('DELETE', obj_path, self._options(options), (STATUS_NO_CONTENT,))

    def put_directory(self, dir_path: str, **options) -> MantaResponse:
        """Create a directory; succeeds if it already exists."""
        validate_object_path(dir_path)
        opts = self._options(options, cors=True)
        extra = [('Content-Type', 'application/json; type=directory')]
        return self._request('PUT', dir_path, opts, (STATUS_NO_CONTENT,),
                             extra_headers=extra, cors=True)

    def list_directory(
        self,
        dir_path: str,
        limit: int = MAX_LIMIT,
        marker: Optional[str] = None,
        **options
    ) -> MantaResponse:
        """
        List a directory, sorted lexicographically.

        Args:
            dir_path: Directory path
            limit: Maximum number of entries, 1 to 1000
            marker: Entry name to start listing from

        Returns:
            MantaResponse: List of entry dicts (True for HEAD); the
            Result-Set-Size header holds the directory size
        """
        validate_object_path(dir_path)
        opts = self._options(options, head=True)

        if not isinstance(limit, int) or isinstance(limit, bool) or not 0 < limit <= MAX_LIMIT:
            raise ValidationError(f"limit must be between 1 and {MAX_LIMIT}")

        params: Dict[str, Any] = {'limit': limit}
        if marker is not None:
            if not isinstance(marker, str):
                raise ValidationError("marker must be a string")
            params['marker'] = marker

        method = 'HEAD' if opts.head else 'GET'

        def parse(response):
            self.interpreter.require_content_type(response, DIRECTORY_CONTENT_TYPE)
            if opts.head:
                return True
            records = self.interpreter.records(response)
            self.interpreter.check_listing(records, response.headers.get('Result-Set-Size'),
                                           limit, response.status_code)
            return self.interpreter.parse_json_records(response, records)

        return self._request(method, dir_path, opts, (STATUS_OK,), parse=parse, params=params)

    def delete_directory(self, dir_path: str, **options) -> MantaResponse:
        """Remove an empty directory."""
        validate_object_path(dir_path)
        return self._request('DELETE', dir_path, self._options(options), (STATUS_NO_CONTENT,))

    def put_snaplink(self, orig_path: str, link_path: str, **options) -> MantaResponse:
        """Create a snaplink at link_path pointing at the object at orig_path."""
        validate_object_path(orig_path)
        validate_object_path(link_path)
        extra = [
            ('Content-Type', 'application/json; type=link'),
            ('Location', self.config.url + orig_path),
        ]
        return self._request('PUT', link_path, self._options(options), (STATUS_NO_CONTENT,),
                             extra_headers=extra)

    # ------------------------------------------------------------------
    # jobs

    def create_job(self, job: Mapping[str, Any], **options) -> MantaResponse:
        """
        Create a job.

        Args:
            job: Job description; must contain ``phases``

        Returns:
            MantaResponse: The new job's path
        """
        if not isinstance(job, Mapping) or not job.get('phases'):
            raise ValidationError("Job description must contain phases")

        opts = self._options(options)
        extra = [('Content-Type', 'application/json; type=job')]
        return self._request('POST', self.job_base, opts, (STATUS_CREATED,),
                             parse=self._require_location, data=json.dumps(job),
                             extra_headers=extra)

    def get_job(self, job_path: str, **options) -> MantaResponse:
        """Fetch a job's status document."""
        validate_job_path(job_path)
        opts = self._options(options, head=True)
        method = 'HEAD' if opts.head else 'GET'

        def parse(response):
            self.interpreter.require_content_type(response, JSON_CONTENT_TYPE)
            if opts.head:
                return True
            return self.interpreter.parse_json(response)

        return self._request(method, job_path, opts, (STATUS_OK,), parse=parse,
                             suffix='/live/status')

    def get_job_errors(self, job_path: str, **options) -> MantaResponse:
        """Fetch the errors a job has produced so far (best effort)."""
        validate_job_path(job_path)
        opts = self._options(options, head=True)
        method = 'HEAD' if opts.head else 'GET'
        return self._request(method, job_path, opts, (STATUS_OK,),
                             parse=self._json_records(JOB_ERROR_CONTENT_TYPE, opts.head),
                             suffix='/live/err')

    def cancel_job(self, job_path: str, **options) -> MantaResponse:
        """Cancel a running job."""
        validate_job_path(job_path)
        return self._request('POST', job_path, self._options(options), (STATUS_ACCEPTED,),
                             suffix='/live/cancel')

    def add_job_keys(self, job_path: str, obj_paths: Sequence[str], **options) -> MantaResponse:
        """Add objects for a running job to process."""
        validate_job_path(job_path)
        paths = validate_object_paths(obj_paths)
        extra = [('Content-Type', TEXT_CONTENT_TYPE)]
        return self._request('POST', job_path, self._options(options), (STATUS_NO_CONTENT,),
                             data='\n'.join(paths), extra_headers=extra, suffix='/live/in')

    def end_job_input(self, job_path: str, **options) -> MantaResponse:
        """Signal that no more input will be added to a job."""
        validate_job_path(job_path)
        return self._request('POST', job_path, self._options(options), (STATUS_ACCEPTED,),
                             suffix='/live/in/end')

    def get_job_input(self, job_path: str, **options) -> MantaResponse:
        """List the objects given to a job."""
        return self._get_job_state_stream('in', job_path, options)

    def get_job_output(self, job_path: str, **options) -> MantaResponse:
        """List the objects holding a job's results."""
        return self._get_job_state_stream('out', job_path, options)

    def get_job_failures(self, job_path: str, **options) -> MantaResponse:
        """List the objects that failed processing in a job."""
        return self._get_job_state_stream('fail', job_path, options)

    def _get_job_state_stream(self, stream: str, job_path: str, options: Mapping[str, Any]) -> MantaResponse:
        if stream not in ('in', 'out', 'fail'):
            raise ValidationError(f"Unknown job stream: {stream!r}")
        validate_job_path(job_path)
        opts = self._options(options)

        def parse(response):
            self.interpreter.require_content_type(response, TEXT_CONTENT_TYPE)
            return self.interpreter.records(response)

        return self._request('GET', job_path, opts, (STATUS_OK,), parse=parse,
                             suffix=f'/live/{stream}')

    def list_jobs(self, state: str = 'all', **options) -> MantaResponse:
        """
        List jobs.

        Args:
            state: 'running', 'done' or 'all'

        Returns:
            MantaResponse: List of job summary dicts
        """
        if state not in JOB_STATES:
            raise ValidationError(f"state must be one of {', '.join(JOB_STATES)}")
        opts = self._options(options)
        params = None if state == 'all' else {'state': state}

        def parse(response):
            if not response.content:
                return []
            self.interpreter.require_content_type(response, JOB_LIST_CONTENT_TYPE)
            return self.interpreter.parse_json_records(response)

        return self._request('GET', self.job_base, opts, (STATUS_OK,), parse=parse, params=params)

    # ------------------------------------------------------------------
    # signed URLs

    def gen_signed_url(self, expires, method, path: str, args: Optional[Sequence[Tuple[str, Any]]] = None) -> str:
        """
        Generate a URL usable without credentials until ``expires``.

        Args:
            expires: datetime or seconds since the epoch
            method: 'GET', 'PUT', 'POST', 'DELETE', ... or a collection of them
            path: Object path
            args: Extra (key, value) query pairs

        Returns:
            str: ``host + path + "?" + query + "&signature=" + signature``
        """
        return self.signed_urls.generate(expires, method, path, args)

    def close(self):
        """Close the HTTP session."""
        if hasattr(self, 'session'):
            self.session.close()
            logger.debug("HTTP session closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def create_client(
    url: str,
    user: str,
    key_data: Union[str, bytes],
    passphrase: Optional[Union[str, bytes]] = None,
    session: Optional[requests.Session] = None,
    **config
) -> MantaClient:
    """
    Create a Manta client from private key material.

    Args:
        url: Manta service URL, e.g. https://us-east.manta.joyent.com
        user: Manta account name
        key_data: PEM encoded RSA or DSA private key
        passphrase: Passphrase for an encrypted key
        session: Optional transport
        **config: Further ClientConfig fields (attempts, timeouts,
            disable_ssl_verification, ...)

    Returns:
        MantaClient: Configured client
    """
    client_config = ClientConfig(url=url, user=user, **config)
    credential = load_credential(key_data, user, passphrase)
    return MantaClient(client_config, credential, session=session)
