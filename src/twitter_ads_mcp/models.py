"""
Pydantic models for credentials and HTTP responses.
"""

from pydantic import BaseModel, ConfigDict, Field

# ============================================================================
# Credential Models
# ============================================================================


class Consumer(BaseModel):
    """The registered application's key/secret pair."""

    model_config = ConfigDict(frozen=True)

    key: str
    secret: str = Field(repr=False)


class Token(BaseModel):
    """A per-user access key/secret pair.

    An empty pair stands for "no token" (application-only calls).
    """

    model_config = ConfigDict(frozen=True)

    key: str = ""
    secret: str = Field(default="", repr=False)

    @property
    def is_empty(self) -> bool:
        """True when either half of the pair is missing."""
        return not self.key or not self.secret


class UserToken(BaseModel):
    """Model for a persisted OAuth1 user access token."""

    oauth_token: str
    oauth_token_secret: str
    created_at: float | None = None

    def to_token(self) -> Token:
        return Token(key=self.oauth_token, secret=self.oauth_token_secret)


# ============================================================================
# Response Models
# ============================================================================


class Response(BaseModel):
    """An executed HTTP response, as returned by a transport."""

    model_config = ConfigDict(frozen=True)

    status_code: int
    headers: dict[str, str] = Field(default_factory=dict)
    body: bytes = b""

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")
