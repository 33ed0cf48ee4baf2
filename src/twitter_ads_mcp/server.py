"""Twitter Ads MCP Server implementation using FastMCP."""

import json
import logging
import time
from contextlib import asynccontextmanager
from typing import Any

from mcp.server.fastmcp import FastMCP

from .api_client import TwitterAdsApi
from .config import Settings, get_settings
from .exceptions import (
    ConfigurationError,
    InvalidRequestError,
    SigningError,
    TransportError,
    TwitterAdsError,
)
from .models import Response, UserToken
from .request_logger import StdlibRequestLogger
from .token_store import DEFAULT_ACCOUNT, TokenStore
from .transport import HttpxTransport

logger = logging.getLogger(__name__)

# Module-level holders for lifespan management
_api: TwitterAdsApi | None = None
_transport: HttpxTransport | None = None
_token_store: TokenStore | None = None
_settings: Settings | None = None

# Longest response body echoed back to the MCP client
MAX_BODY_CHARS = 4000


@asynccontextmanager
async def lifespan(app: Any):
    """Lifespan context manager for the MCP server.

    Creates the transport and API client, and closes the transport on exit.
    """
    global _api, _transport, _token_store, _settings

    try:
        _settings = get_settings()
    except Exception as e:
        raise ConfigurationError(
            f"Failed to load settings. Ensure TWITTER_ADS_CONSUMER_KEY and "
            f"TWITTER_ADS_CONSUMER_SECRET environment variables are set: {e}"
        ) from e

    logging.getLogger("twitter_ads_mcp").setLevel(_settings.log_level.upper())

    _token_store = TokenStore(_settings.token_storage_path)
    _transport = HttpxTransport(
        _settings.api_base_url, timeout=_settings.request_timeout
    )

    # A stored token takes precedence over the configured one
    _api = TwitterAdsApi.from_settings(
        _settings,
        user_token=_token_store.load_active(),
        transport=_transport,
        request_logger=StdlibRequestLogger(),
    )
    _api.session.require_credentials()
    logger.info(
        "Twitter Ads client ready (version %s, user token: %s)",
        _api.default_version,
        _api.is_user_authenticated,
    )

    try:
        yield
    finally:
        if _transport:
            await _transport.close()
            _transport = None
        _api = None
        _token_store = None
        _settings = None


mcp = FastMCP("twitter-ads", lifespan=lifespan)


def _get_api() -> TwitterAdsApi:
    """Get the TwitterAdsApi from module state."""
    if _api is None:
        raise RuntimeError("TwitterAdsApi not initialized - server not running")
    return _api


def _get_token_store() -> TokenStore:
    """Get the TokenStore from module state."""
    if _token_store is None:
        raise RuntimeError("TokenStore not initialized - server not running")
    return _token_store


def _rebind_session(user_token: UserToken | None) -> None:
    """Point the module client at a session with a different user token."""
    global _api

    api = _get_api()
    token = user_token.to_token() if user_token else None
    _api = api.copy_with_session(api.session.with_token(token))


def _format_response(response: Response) -> str:
    """Render a response as text for the MCP client."""
    body = response.text
    try:
        body = json.dumps(json.loads(body), indent=2)
    except ValueError:
        pass
    if len(body) > MAX_BODY_CHARS:
        body = body[:MAX_BODY_CHARS] + "\n... (truncated)"

    return f"HTTP {response.status_code}\n\n{body}"


# ============================================================================
# API Tools
# ============================================================================


@mcp.tool()
async def api_request(
    path: str,
    method: str = "GET",
    params: dict[str, str] | None = None,
) -> str:
    """Call a Twitter Ads API endpoint with a signed OAuth1 request.

    Relative paths are placed under the configured API version, so
    "accounts" becomes "/12/accounts". Paths starting with "/" are used
    as given.

    Args:
        path: Endpoint path (e.g., "accounts" or "/12/accounts/abc1/campaigns")
        method: HTTP method: GET, POST, PUT or DELETE
        params: Request parameters (query string for GET, form body otherwise)

    Returns:
        The HTTP status and response body
    """
    try:
        api = _get_api()
        response = await api.call(path, method, params or {})
        return _format_response(response)

    except InvalidRequestError as e:
        return f"Error: invalid request: {str(e)}"
    except (ConfigurationError, SigningError) as e:
        return f"Error: authentication is misconfigured: {str(e)}"
    except TransportError as e:
        return f"Error contacting Twitter Ads API: {str(e)}"
    except Exception as e:
        return f"Unexpected error: {str(e)}"


@mcp.tool()
async def get_api_version() -> str:
    """Show which API version relative paths are sent to.

    Returns:
        The API version number
    """
    try:
        return f"Twitter Ads API version: {_get_api().default_version}"
    except Exception as e:
        return f"Error reading API version: {str(e)}"


# ============================================================================
# Authentication Tools
# ============================================================================


@mcp.tool()
async def check_auth_status() -> str:
    """Check which user account, if any, signs requests.

    Returns:
        Authentication status message
    """
    try:
        api = _get_api()

        if not api.is_user_authenticated:
            return (
                "Not connected: requests are signed with the application "
                "credentials only.\n"
                "Use connect_account to add a user access token."
            )
        account = _get_token_store().active_account() or "(from configuration)"
        return (
            f"Connected as account '{account}': requests are signed with a "
            "user access token.\n"
            f"Consumer key: {api.session.consumer.key}"
        )
    except Exception as e:
        return f"Error checking auth status: {str(e)}"


@mcp.tool()
async def connect_account(
    oauth_token: str,
    oauth_token_secret: str,
    account: str = DEFAULT_ACCOUNT,
) -> str:
    """Connect a user account by its OAuth1 access token.

    The token is stored locally under the given account name, becomes the
    active account and signs all further requests.

    Args:
        oauth_token: The user's access token
        oauth_token_secret: The user's access token secret
        account: Name to store the token under (default "default")

    Returns:
        Success or error message
    """
    if not oauth_token or not oauth_token_secret:
        return "Error: both oauth_token and oauth_token_secret are required."

    try:
        user_token = UserToken(
            oauth_token=oauth_token,
            oauth_token_secret=oauth_token_secret,
            created_at=time.time(),
        )
        _get_token_store().save_account(user_token, account)
        _rebind_session(user_token)

        return f"Success! Requests are now signed as account '{account}'."

    except TwitterAdsError as e:
        return f"Error connecting account: {str(e)}"
    except Exception as e:
        return f"Unexpected error: {str(e)}"


@mcp.tool()
async def switch_account(account: str) -> str:
    """Sign further requests as another stored account.

    Args:
        account: Name of a previously connected account

    Returns:
        Confirmation or error message
    """
    try:
        user_token = _get_token_store().activate(account)
        _rebind_session(user_token)
        return f"Requests are now signed as account '{account}'."
    except KeyError:
        return f"Error: no stored account named '{account}'."
    except Exception as e:
        return f"Error switching account: {str(e)}"


@mcp.tool()
async def list_accounts() -> str:
    """List the stored user accounts.

    Returns:
        Account names, with the active one marked
    """
    try:
        token_store = _get_token_store()
        names = token_store.list_accounts()
        if not names:
            return "No accounts stored. Use connect_account to add one."

        active = token_store.active_account()
        lines = [f"{'* ' if name == active else '  '}{name}" for name in names]
        return "Stored accounts (* = active):\n" + "\n".join(lines)
    except Exception as e:
        return f"Error listing accounts: {str(e)}"


@mcp.tool()
async def disconnect_account(account: str | None = None) -> str:
    """Remove a stored account.

    Removing the active account makes requests fall back to the
    application credentials.

    Args:
        account: Account to remove; the active account when omitted

    Returns:
        Confirmation message
    """
    try:
        token_store = _get_token_store()
        active = token_store.active_account()
        name = account or active
        if name is None or not token_store.delete_account(name):
            return "Nothing to disconnect: no such stored account."

        if name == active:
            _rebind_session(None)

        return (
            f"Disconnected: account '{name}' has been removed.\n"
            "Use connect_account to connect again."
        )

    except Exception as e:
        return f"Error disconnecting account: {str(e)}"


# ============================================================================
# Main Entry Point
# ============================================================================


def main() -> None:
    """Run the Twitter Ads MCP server."""
    logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    mcp.run()


if __name__ == "__main__":
    main()
