"""Persistence for user access tokens, one per named account."""

import json
import os
import time
from pathlib import Path
from typing import Any

from .models import UserToken

DEFAULT_ACCOUNT = "default"


class TokenStore:
    """Keeps user access tokens in an owner-only JSON file.

    Several accounts can be stored side by side; one of them is active and
    is used to build the session at startup. Layout::

        {"active": "default", "accounts": {"default": {...}}}
    """

    def __init__(self, storage_path: str) -> None:
        """Initialize the token store.

        Args:
            storage_path: Path to the token file (supports ~ expansion).
        """
        self._path = Path(os.path.expanduser(storage_path))
        if not self._path.parent.exists():
            self._path.parent.mkdir(parents=True, mode=0o700)

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, Any]:
        try:
            data = json.loads(self._path.read_text())
        except FileNotFoundError:
            return {"accounts": {}}
        except (json.JSONDecodeError, OSError):
            # unreadable file reads as empty; next save replaces it
            return {"accounts": {}}
        if not isinstance(data, dict) or not isinstance(data.get("accounts"), dict):
            return {"accounts": {}}
        return data

    def _dump(self, data: dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, mode=0o700, exist_ok=True)

        tmp = self._path.with_name(self._path.name + ".tmp")
        fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w") as f:
            json.dump(data, f, indent=2)
        os.chmod(tmp, 0o600)
        os.replace(tmp, self._path)

    def save_account(
        self,
        token: UserToken,
        account: str = DEFAULT_ACCOUNT,
        activate: bool = True,
    ) -> None:
        """Store the token for ``account``, replacing any previous one.

        Args:
            token: The user access token.
            account: Name the token is stored under.
            activate: Make this the active account.
        """
        data = self._load()
        data["accounts"][account] = {
            "oauth_token": token.oauth_token,
            "oauth_token_secret": token.oauth_token_secret,
            "created_at": token.created_at or time.time(),
        }
        if activate or "active" not in data:
            data["active"] = account
        self._dump(data)

    def load_account(self, account: str) -> UserToken | None:
        entry = self._load()["accounts"].get(account)
        return UserToken(**entry) if entry else None

    def active_account(self) -> str | None:
        """Name of the active account, if it is still stored."""
        data = self._load()
        name = data.get("active")
        return name if name in data["accounts"] else None

    def load_active(self) -> UserToken | None:
        """Token of the active account, or None when nothing is connected."""
        name = self.active_account()
        return self.load_account(name) if name else None

    def activate(self, account: str) -> UserToken:
        """Make a stored account the active one.

        Raises:
            KeyError: If no token is stored under ``account``.
        """
        data = self._load()
        if account not in data["accounts"]:
            raise KeyError(account)
        data["active"] = account
        self._dump(data)
        return UserToken(**data["accounts"][account])

    def delete_account(self, account: str) -> bool:
        """Remove an account. Returns False if it was not stored."""
        data = self._load()
        if data["accounts"].pop(account, None) is None:
            return False
        if data.get("active") == account:
            data.pop("active")
        self._dump(data)
        return True

    def list_accounts(self) -> list[str]:
        return sorted(self._load()["accounts"])
