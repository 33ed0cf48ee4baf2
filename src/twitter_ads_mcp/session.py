"""OAuth1 session holding the consumer and optional user token."""

from .exceptions import ConfigurationError
from .models import Consumer, Token


class Session:
    """Aggregates the application consumer and an optional user token.

    Sessions are immutable; use ``with_token`` to act on behalf of a
    different user without re-entering the consumer credentials.
    """

    def __init__(
        self,
        consumer: Consumer,
        token: Token | None = None,
        strict: bool = False,
    ) -> None:
        """Initialize the session.

        Args:
            consumer: Application consumer credentials.
            token: Optional user token. An empty pair is treated as no token.
            strict: Validate consumer credentials immediately.

        Raises:
            ConfigurationError: If ``strict`` and the consumer is incomplete.
        """
        self._consumer = consumer
        self._token = None if token is None or token.is_empty else token
        if strict:
            self.require_credentials()

    @classmethod
    def from_credentials(
        cls,
        consumer_key: str,
        consumer_secret: str,
        oauth_token: str = "",
        oauth_token_secret: str = "",
    ) -> "Session":
        """Build a session from four strings.

        If either token field is empty the session is created token-less.
        """
        token = None
        if oauth_token and oauth_token_secret:
            token = Token(key=oauth_token, secret=oauth_token_secret)
        return cls(Consumer(key=consumer_key, secret=consumer_secret), token)

    @property
    def consumer(self) -> Consumer:
        return self._consumer

    @property
    def token(self) -> Token | None:
        return self._token

    @property
    def has_token(self) -> bool:
        return self._token is not None

    def require_credentials(self) -> None:
        """Ensure the consumer can be used for a signed call.

        Raises:
            ConfigurationError: If the consumer key or secret is empty.
        """
        if not self._consumer.key:
            raise ConfigurationError("Consumer key is empty")
        if not self._consumer.secret:
            raise ConfigurationError("Consumer secret is empty")

    def request_parameters(self) -> dict[str, str]:
        """Return the authentication parameters every request must carry."""
        params = {"oauth_consumer_key": self._consumer.key}
        if self._token is not None:
            params["oauth_token"] = self._token.key
        return params

    def with_token(self, token: Token | None) -> "Session":
        """Return a new session with the same consumer and another token."""
        return Session(self._consumer, token)

    def __repr__(self) -> str:
        return f"Session(consumer={self._consumer!r}, token={self._token!r})"
