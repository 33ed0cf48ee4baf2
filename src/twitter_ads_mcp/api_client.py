"""Twitter Ads API client: assembles, signs and executes requests."""

import re
import threading
from collections.abc import Callable
from typing import Any

from .auth import HmacSha1, OAuthParameterSource, SignatureMethod, build_signature
from .config import API_VERSION, Settings
from .exceptions import InvalidRequestError
from .models import Response, UserToken
from .request_logger import NullLogger, RequestLogger
from .session import Session
from .transport import (
    HttpMethod,
    HttpxTransport,
    RequestEnvelope,
    Transport,
    merge_missing,
)

DEFAULT_BASE_URL = "https://ads-api.twitter.com"

_VERSION_PATTERN = re.compile(r"^\d+")


def parse_version(api_version: str) -> str:
    """Extract the leading number of an API version constant.

    Args:
        api_version: Configured version, e.g. "12" or "1.1-beta".

    Returns:
        The leading digits ("1.1-beta" gives "1").

    Raises:
        InvalidRequestError: If the constant does not start with a digit.
    """
    match = _VERSION_PATTERN.match(api_version or "")
    if match is None:
        raise InvalidRequestError(
            f"API version {api_version!r} has no leading version number"
        )
    return match.group(0)


class _ComputeOnce:
    """Thread-safe cell that computes its value on first access."""

    def __init__(self, compute: Callable[[], str]) -> None:
        self._compute = compute
        self._lock = threading.Lock()
        self._value: str | None = None
        self._ready = False

    def get(self) -> str:
        if not self._ready:
            with self._lock:
                if not self._ready:
                    self._value = self._compute()
                    self._ready = True
        return self._value  # type: ignore[return-value]

    def set(self, value: str) -> None:
        with self._lock:
            self._value = value
            self._ready = True


class TwitterAdsApi:
    """Client for calling the Twitter Ads API.

    Merges caller parameters with the session's authentication parameters,
    signs each request with OAuth1 and hands it to the transport.
    """

    def __init__(
        self,
        transport: Transport,
        session: Session,
        api_version: str = API_VERSION,
        request_logger: RequestLogger | None = None,
        signature_method: SignatureMethod | None = None,
        parameter_source: OAuthParameterSource | None = None,
        *,
        default_version: str | None = None,
    ) -> None:
        """Initialize the API client.

        Args:
            transport: Transport that creates and executes requests.
            session: OAuth1 session (consumer and optional user token).
            api_version: API version constant; its leading number is used.
            request_logger: Hook called around every execution.
            signature_method: Signature algorithm, HMAC-SHA1 by default.
            parameter_source: Source of nonces and timestamps.
            default_version: Already resolved version segment; skips parsing
                ``api_version``.

        Raises:
            InvalidRequestError: If ``api_version`` has no leading number.
        """
        self._transport = transport
        self._session = session
        self.api_version = api_version
        self._request_logger: RequestLogger = request_logger or NullLogger()
        self._signature_method: SignatureMethod = signature_method or HmacSha1()
        self._parameter_source = parameter_source or OAuthParameterSource()
        self._default_version = _ComputeOnce(lambda: parse_version(self.api_version))
        if default_version is not None:
            self._default_version.set(default_version)

        # Fail at startup rather than on the first call
        self._default_version.get()

    @classmethod
    def init(
        cls,
        consumer_key: str,
        consumer_secret: str,
        oauth_token: str = "",
        oauth_token_secret: str = "",
        base_url: str = DEFAULT_BASE_URL,
        **kwargs: Any,
    ) -> "TwitterAdsApi":
        """Create a client from raw credential strings.

        The session is token-less when either token field is empty.
        """
        session = Session.from_credentials(
            consumer_key, consumer_secret, oauth_token, oauth_token_secret
        )
        return cls(HttpxTransport(base_url), session, **kwargs)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        user_token: UserToken | None = None,
        transport: Transport | None = None,
        **kwargs: Any,
    ) -> "TwitterAdsApi":
        """Create a client from application settings.

        Args:
            settings: Application settings.
            user_token: Stored user token; overrides the configured one.
            transport: Optional transport; an httpx transport by default.
        """
        session = Session.from_credentials(
            settings.consumer_key,
            settings.consumer_secret,
            settings.access_token,
            settings.access_token_secret,
        )
        if user_token is not None:
            session = session.with_token(user_token.to_token())

        transport = transport or HttpxTransport(
            settings.api_base_url, timeout=settings.request_timeout
        )
        return cls(transport, session, api_version=settings.api_version, **kwargs)

    @property
    def session(self) -> Session:
        return self._session

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def request_logger(self) -> RequestLogger:
        return self._request_logger

    @request_logger.setter
    def request_logger(self, value: RequestLogger) -> None:
        self._request_logger = value

    @property
    def signature_method(self) -> SignatureMethod:
        return self._signature_method

    @property
    def is_user_authenticated(self) -> bool:
        """Check if the session carries a user token."""
        return self._session.has_token

    @property
    def default_version(self) -> str:
        """Version segment used for relative paths, computed once."""
        return self._default_version.get()

    def get_default_version(self) -> str:
        return self.default_version

    def set_default_version(self, version: str) -> None:
        self._default_version.set(version)

    def copy_with_session(self, session: Session) -> "TwitterAdsApi":
        """Return a client bound to another session.

        The copy shares this client's transport and logger, and keeps the
        already computed default version.
        """
        return TwitterAdsApi(
            self._transport,
            session,
            api_version=self.api_version,
            request_logger=self._request_logger,
            signature_method=self._signature_method,
            parameter_source=self._parameter_source,
            default_version=self.default_version,
        )

    def prepare_request(
        self,
        path: str,
        method: str | HttpMethod = HttpMethod.GET,
        params: dict[str, Any] | None = None,
    ) -> RequestEnvelope:
        """Create a request with caller and session parameters merged.

        Caller parameters go in first; session parameters never overwrite
        a key the caller supplied.

        Args:
            path: Endpoint path.
            method: HTTP method.
            params: Caller parameters.

        Returns:
            The request envelope, not yet signed.

        Raises:
            InvalidRequestError: If the method is unsupported.
        """
        http_method = HttpMethod.parse(method)

        request = self._transport.create_request()
        request.method = http_method
        request.version = self.default_version
        request.path = path

        target = request.params
        if params:
            merge_missing(target, params)
        merge_missing(target, self._session.request_parameters())

        return request

    async def call(
        self,
        path: str,
        method: str | HttpMethod = HttpMethod.GET,
        params: dict[str, Any] | None = None,
        file_params: dict[str, bytes] | None = None,
    ) -> Response:
        """Make a signed call to the API.

        Args:
            path: Endpoint path. Relative paths are rooted under the version.
            method: HTTP method (GET, POST, PUT or DELETE).
            params: Request parameters.
            file_params: Multipart file parameters, excluded from signing.

        Returns:
            The response, whatever its status code.

        Raises:
            ConfigurationError: If the consumer credentials are empty.
            InvalidRequestError: If the method or URL is invalid.
            SigningError: If the signature cannot be computed.
            TransportError: If the transport fails to deliver the request.
        """
        self._session.require_credentials()
        request = self.prepare_request(path, method, params)

        if file_params:
            for key, value in file_params.items():
                request.file_params[key] = value

        # Protocol parameters are generated per call and replace caller values
        target = request.params
        target.update(self._parameter_source.generate(self._signature_method))
        target["oauth_signature"] = build_signature(
            self._signature_method,
            request.method.value,
            request.url,
            request.signing_params(),
            self._session.consumer,
            self._session.token,
        )

        return await self.execute_request(request)

    async def execute_request(self, request: RequestEnvelope) -> Response:
        """Execute a request, logging it before and the response after."""
        self._request_logger.log_request("debug", request)
        response = await request.execute()
        self._request_logger.log_response("debug", response)
        return response
