"""Pytest fixtures for Twitter Ads MCP Server tests."""

import pytest

from twitter_ads_mcp.api_client import TwitterAdsApi
from twitter_ads_mcp.auth import OAuthParameterSource
from twitter_ads_mcp.config import Settings
from twitter_ads_mcp.models import Consumer, Response, Token
from twitter_ads_mcp.session import Session
from twitter_ads_mcp.transport import RequestEnvelope

FIXED_NONCE = "abc123"
FIXED_TIMESTAMP = 1318622958


class RecordingTransport:
    """Transport that records executed requests instead of sending them."""

    def __init__(
        self,
        base_url: str = "https://api.twitter.com",
        response: Response | None = None,
    ) -> None:
        self.base_url = base_url
        self.response = response or Response(status_code=200, body=b"{}")
        self.requests: list[RequestEnvelope] = []

    def create_request(self) -> RequestEnvelope:
        return RequestEnvelope(self, self.base_url)

    async def execute(self, request: RequestEnvelope) -> Response:
        self.requests.append(request)
        return self.response

    @property
    def last_request(self) -> RequestEnvelope:
        return self.requests[-1]


class RecordingLogger:
    """Request logger that keeps every call for inspection."""

    def __init__(self) -> None:
        self.entries: list[tuple[str, str, object]] = []

    def log_request(self, level: str, request: RequestEnvelope) -> None:
        self.entries.append(("request", level, request))

    def log_response(self, level: str, response: Response) -> None:
        self.entries.append(("response", level, response))


@pytest.fixture
def settings() -> Settings:
    """Return a Settings object with test credentials.

    Returns:
        Settings object configured with test OAuth1 credentials.
    """
    return Settings(
        consumer_key="test_consumer_key",
        consumer_secret="test_consumer_secret",
        api_base_url="https://ads-api.twitter.com",
        api_version="12",
    )


@pytest.fixture
def consumer() -> Consumer:
    return Consumer(key="ck", secret="cs")


@pytest.fixture
def token() -> Token:
    return Token(key="tk", secret="ts")


@pytest.fixture
def session(consumer: Consumer, token: Token) -> Session:
    """Session with both consumer and user token."""
    return Session(consumer, token)


@pytest.fixture
def fixed_source() -> OAuthParameterSource:
    """Parameter source with a fixed nonce and timestamp."""
    return OAuthParameterSource(
        nonce_factory=lambda: FIXED_NONCE,
        clock=lambda: FIXED_TIMESTAMP,
    )


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def api(
    transport: RecordingTransport,
    session: Session,
    fixed_source: OAuthParameterSource,
) -> TwitterAdsApi:
    """API client with recording transport and deterministic oauth params."""
    return TwitterAdsApi(transport, session, parameter_source=fixed_source)
