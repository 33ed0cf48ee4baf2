"""HTTP transport and request envelope for the Twitter Ads API."""

from enum import Enum
from typing import Any, Protocol

import httpx

from .exceptions import InvalidRequestError, TransportError
from .models import Response

USER_AGENT = "twitter-ads-mcp/0.1.0"


class HttpMethod(str, Enum):
    """HTTP verbs supported by the API."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"

    @classmethod
    def parse(cls, method: "str | HttpMethod") -> "HttpMethod":
        """Resolve a method name, case-insensitively.

        Raises:
            InvalidRequestError: If the method is not supported.
        """
        if isinstance(method, HttpMethod):
            return method
        try:
            return cls(method.upper())
        except (AttributeError, ValueError) as e:
            raise InvalidRequestError(f"Unsupported HTTP method: {method!r}") from e


class ParameterBag(str, Enum):
    """Which part of the request carries the merged parameters."""

    QUERY = "query"
    BODY = "body"


# GET sends parameters in the query string, everything else in the body
PARAMETER_BAG: dict[HttpMethod, ParameterBag] = {
    HttpMethod.GET: ParameterBag.QUERY,
    HttpMethod.POST: ParameterBag.BODY,
    HttpMethod.PUT: ParameterBag.BODY,
    HttpMethod.DELETE: ParameterBag.BODY,
}


def merge_missing(target: dict[str, str], params: dict[str, Any]) -> None:
    """Add ``params`` to ``target`` without overwriting existing keys."""
    for key, value in params.items():
        target.setdefault(key, str(value))


class RequestEnvelope:
    """Mutable representation of a request while it is being assembled.

    Created per call by a transport and discarded after execution.
    """

    def __init__(self, transport: "Transport", base_url: str) -> None:
        self._transport = transport
        self.base_url = base_url.rstrip("/")
        self.method = HttpMethod.GET
        self.path = ""
        self.version: str | None = None
        self.query_params: dict[str, str] = {}
        self.body_params: dict[str, str] = {}
        self.file_params: dict[str, bytes] = {}
        self.headers: dict[str, str] = {}

    @property
    def parameter_bag(self) -> ParameterBag:
        return PARAMETER_BAG[self.method]

    @property
    def params(self) -> dict[str, str]:
        """The parameter bag selected by the request method."""
        if self.parameter_bag is ParameterBag.QUERY:
            return self.query_params
        return self.body_params

    @property
    def url(self) -> str:
        """Absolute request URL without query string.

        Absolute paths are used as given; relative paths are rooted under
        the API version.
        """
        if self.path.startswith("/"):
            return f"{self.base_url}{self.path}"
        if self.version:
            return f"{self.base_url}/{self.version}/{self.path}"
        return f"{self.base_url}/{self.path}"

    def signing_params(self) -> list[tuple[str, str]]:
        """Query and body parameters that take part in the signature.

        File parameters are never signed.
        """
        return [*self.query_params.items(), *self.body_params.items()]

    async def execute(self) -> Response:
        """Execute this request on the transport that created it."""
        return await self._transport.execute(self)

    def __repr__(self) -> str:
        return f"<RequestEnvelope {self.method.value} {self.url}>"


class Transport(Protocol):
    """Creates request envelopes and executes them."""

    def create_request(self) -> RequestEnvelope: ...

    async def execute(self, request: RequestEnvelope) -> Response: ...


class HttpxTransport:
    """Transport backed by ``httpx.AsyncClient``.

    Supports async context manager protocol.
    """

    def __init__(
        self,
        base_url: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Initialize the transport.

        Args:
            base_url: Scheme and host of the API, e.g. https://ads-api.twitter.com
            client: Optional preconfigured HTTP client.
            timeout: Request timeout in seconds for the default client.
        """
        self._base_url = base_url
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            headers={"User-Agent": USER_AGENT},
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    def create_request(self) -> RequestEnvelope:
        return RequestEnvelope(self, self._base_url)

    async def execute(self, request: RequestEnvelope) -> Response:
        """Send the request.

        Non-2xx responses are returned as-is; interpreting them is left to
        the caller.

        Args:
            request: The assembled request.

        Returns:
            The response envelope.

        Raises:
            TransportError: If the request could not be delivered.
        """
        kwargs: dict[str, Any] = {"headers": request.headers}
        if request.query_params:
            kwargs["params"] = request.query_params
        if request.body_params:
            kwargs["data"] = request.body_params
        if request.file_params:
            kwargs["files"] = {
                name: (name, content) for name, content in request.file_params.items()
            }

        try:
            response = await self._client.request(
                request.method.value, request.url, **kwargs
            )
        except httpx.RequestError as e:
            raise TransportError(f"Request error: {str(e)}") from e

        return Response(
            status_code=response.status_code,
            headers=dict(response.headers),
            body=response.content,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "HttpxTransport":
        """Enter the async context manager."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Exit the async context manager."""
        await self.close()
