"""Request/response logging hooks used around every API call."""

import logging
from typing import Protocol

from .models import Response
from .transport import RequestEnvelope

_REDACTED_PARAMS = frozenset({"oauth_signature"})


class RequestLogger(Protocol):
    """Receives each request before execution and each response after."""

    def log_request(self, level: str, request: RequestEnvelope) -> None: ...

    def log_response(self, level: str, response: Response) -> None: ...


class NullLogger:
    """Logger that discards everything. Used by default."""

    def log_request(self, level: str, request: RequestEnvelope) -> None:
        pass

    def log_response(self, level: str, response: Response) -> None:
        pass


def _redact(params: dict[str, str]) -> dict[str, str]:
    return {k: "***" if k in _REDACTED_PARAMS else v for k, v in params.items()}


class StdlibRequestLogger:
    """Writes requests and responses to a standard library logger."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger(__name__)

    def _level(self, level: str) -> int:
        value = logging.getLevelName(level.upper())
        return value if isinstance(value, int) else logging.DEBUG

    def log_request(self, level: str, request: RequestEnvelope) -> None:
        lvl = self._level(level)
        if not self._logger.isEnabledFor(lvl):
            return
        self._logger.log(
            lvl,
            "%s %s query=%s body=%s files=%s",
            request.method.value,
            request.url,
            _redact(request.query_params),
            _redact(request.body_params),
            sorted(request.file_params),
        )

    def log_response(self, level: str, response: Response) -> None:
        lvl = self._level(level)
        if not self._logger.isEnabledFor(lvl):
            return
        self._logger.log(
            lvl,
            "HTTP %s (%d bytes)",
            response.status_code,
            len(response.body),
        )
