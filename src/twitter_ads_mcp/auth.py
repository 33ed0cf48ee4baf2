"""OAuth1 request signing for the Twitter Ads API (RFC 5849)."""

import base64
import hashlib
import hmac
import secrets
import time
import urllib.parse
from collections.abc import Callable, Iterable
from typing import Protocol

from .exceptions import InvalidRequestError, SigningError
from .models import Consumer, Token

OAUTH_VERSION = "1.0"

_DEFAULT_PORTS = {"http": 80, "https": 443}


def percent_encode(value: str) -> str:
    """Percent-encode a value according to RFC 3986.

    Only unreserved characters (letters, digits, ``-``, ``.``, ``_`` and
    ``~``) are left as-is; everything else is UTF-8 encoded and escaped with
    uppercase hex.

    Args:
        value: The value to encode.

    Returns:
        Percent-encoded string.
    """
    return urllib.parse.quote(str(value), safe="")


def percent_decode(value: str) -> str:
    """Reverse ``percent_encode``.

    Args:
        value: A percent-encoded string.

    Returns:
        The decoded string.
    """
    return urllib.parse.unquote(value)


def base64_url_encode(data: bytes | str) -> str:
    """Base64-encode with the URL-safe alphabet and no padding."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def normalize_parameters(params: Iterable[tuple[str, str]]) -> str:
    """Build the normalized parameter string used in the base string.

    Args:
        params: Key/value pairs. Duplicate keys are allowed.

    Returns:
        Encoded pairs sorted by key, then value, joined with ``&``.
    """
    encoded = sorted(
        (percent_encode(key), percent_encode(value)) for key, value in params
    )
    return "&".join(f"{key}={value}" for key, value in encoded)


def normalize_url(url: str) -> tuple[str, list[tuple[str, str]]]:
    """Split a request URL into its base string URI and query parameters.

    Args:
        url: The absolute request URL.

    Returns:
        The base URL (scheme, host, non-default port and path) and any
        parameters found in the query string.

    Raises:
        InvalidRequestError: If the URL has no scheme or host.
    """
    try:
        parts = urllib.parse.urlsplit(url)
        port = parts.port
    except ValueError as e:
        raise InvalidRequestError(f"Invalid request URL {url!r}: {e}") from e

    if not parts.scheme or not parts.hostname:
        raise InvalidRequestError(f"Invalid request URL {url!r}")

    scheme = parts.scheme.lower()
    netloc = parts.hostname.lower()
    if port is not None and port != _DEFAULT_PORTS.get(scheme):
        netloc = f"{netloc}:{port}"

    base_url = urllib.parse.urlunsplit((scheme, netloc, parts.path or "/", "", ""))
    query = urllib.parse.parse_qsl(parts.query, keep_blank_values=True)
    return base_url, query


def signature_base_string(
    method: str,
    url: str,
    params: Iterable[tuple[str, str]],
) -> str:
    """Create the OAuth1 signature base string.

    Args:
        method: HTTP method.
        url: The request URL. Query string parameters are signed too.
        params: All other parameters to include, excluding oauth_signature.

    Returns:
        The signature base string.
    """
    base_url, query = normalize_url(url)
    pairs = [(k, str(v)) for k, v in params if k != "oauth_signature"]

    return "&".join(
        [
            method.upper(),
            percent_encode(base_url),
            percent_encode(normalize_parameters([*query, *pairs])),
        ]
    )


def signing_key(consumer: Consumer, token: Token | None = None) -> str:
    """Create the signing key (consumer_secret&token_secret).

    For two-legged OAuth the token secret part is empty.

    Raises:
        SigningError: If the consumer secret is empty.
    """
    if not consumer.secret:
        raise SigningError("Cannot sign a request without a consumer secret")
    token_secret = token.secret if token is not None else ""
    return f"{percent_encode(consumer.secret)}&{percent_encode(token_secret)}"


class SignatureMethod(Protocol):
    """A pluggable OAuth1 signature algorithm."""

    @property
    def name(self) -> str:
        """Value sent as ``oauth_signature_method``."""
        ...

    def sign(self, base_string: str, key: str) -> str:
        """Compute the signature of ``base_string`` using ``key``."""
        ...


class HmacSha1:
    """HMAC-SHA1 signature method (RFC 5849 section 3.4.2)."""

    name = "HMAC-SHA1"

    def sign(self, base_string: str, key: str) -> str:
        """Generate a base64-encoded HMAC-SHA1 signature.

        Args:
            base_string: The signature base string.
            key: The signing key.

        Returns:
            Base64-encoded HMAC-SHA1 digest.

        Raises:
            SigningError: If the key is missing its consumer secret or the
                digest cannot be computed.
        """
        if not key or key.startswith("&"):
            raise SigningError("Cannot sign a request without a consumer secret")
        try:
            hashed = hmac.new(
                key.encode("utf-8"),
                base_string.encode("utf-8"),
                hashlib.sha1,
            )
        except (TypeError, ValueError) as e:
            raise SigningError(f"Failed to compute HMAC-SHA1 digest: {e}") from e

        return base64.b64encode(hashed.digest()).decode("utf-8")


class Plaintext:
    """PLAINTEXT signature method (RFC 5849 section 3.4.4).

    Only safe over TLS; the signature is the signing key itself.
    """

    name = "PLAINTEXT"

    def sign(self, base_string: str, key: str) -> str:
        if not key or key.startswith("&"):
            raise SigningError("Cannot sign a request without a consumer secret")
        return key


def build_signature(
    signature_method: SignatureMethod,
    method: str,
    url: str,
    params: Iterable[tuple[str, str]],
    consumer: Consumer,
    token: Token | None = None,
) -> str:
    """Sign a request with the given signature method.

    Args:
        signature_method: Algorithm used to compute the signature.
        method: HTTP method.
        url: The request URL.
        params: All parameters that participate in signing.
        consumer: Consumer credentials.
        token: Optional user token.

    Returns:
        The signature value for ``oauth_signature``.
    """
    key = signing_key(consumer, token)
    base_string = signature_base_string(method, url, params)
    return signature_method.sign(base_string, key)


def _generate_nonce() -> str:
    """Generate a random 32-character hex nonce (128 bits)."""
    return secrets.token_hex(16)


class OAuthParameterSource:
    """Produces the per-request oauth_* protocol parameters.

    The nonce factory and clock are injectable so signatures can be
    reproduced in tests.
    """

    def __init__(
        self,
        nonce_factory: Callable[[], str] = _generate_nonce,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._nonce_factory = nonce_factory
        self._clock = clock

    def nonce(self) -> str:
        return self._nonce_factory()

    def timestamp(self) -> str:
        return str(int(self._clock()))

    def generate(self, signature_method: SignatureMethod) -> dict[str, str]:
        """Return fresh oauth_* parameters for one request.

        Args:
            signature_method: The method whose name is advertised.

        Returns:
            oauth_version, oauth_nonce, oauth_timestamp and
            oauth_signature_method.
        """
        return {
            "oauth_version": OAUTH_VERSION,
            "oauth_nonce": self.nonce(),
            "oauth_timestamp": self.timestamp(),
            "oauth_signature_method": signature_method.name,
        }
