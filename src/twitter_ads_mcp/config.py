"""Configuration management using pydantic-settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict

# Leading number becomes the URL version segment
API_VERSION = "12"


class Settings(BaseSettings):
    """Twitter Ads MCP Server settings."""

    model_config = SettingsConfigDict(
        env_prefix="TWITTER_ADS_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # OAuth1 consumer credentials
    consumer_key: str
    consumer_secret: str

    # Optional user access token; both halves are needed
    access_token: str = ""
    access_token_secret: str = ""

    # API endpoint
    api_base_url: str = "https://ads-api.twitter.com"
    api_version: str = API_VERSION
    request_timeout: float = 30.0

    log_level: str = "WARNING"

    # Token storage path
    token_storage_path: str = "~/.config/twitter-ads-mcp/tokens.json"


def get_settings() -> Settings:
    """Get application settings."""
    return Settings()
