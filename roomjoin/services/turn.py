"""Obtain short-lived TURN credentials and servers from the room's TURN service."""
from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Callable, Sequence, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from ..core.config import Settings
from ..schemas.room import IceServerEntry, TurnCredentials, TurnServersResponse
from .errors import ConfigError, NetworkError, ParseError
from .ice_servers import has_usable_turn_credentials, is_turn_server

logger = logging.getLogger(__name__)

TURN_CONTENT_TYPE = "application/json; charset=UTF-8"

Clock = Callable[[], int]
ModelT = TypeVar("ModelT", bound=BaseModel)


def epoch_millis() -> int:
    return int(time.time() * 1000)


@dataclass(slots=True, frozen=True)
class TurnTimeouts:
    """Connect and read timeouts for calls to the TURN service."""

    connect_ms: int = 5000
    read_ms: int = 5000

    @classmethod
    def from_settings(cls, settings: Settings) -> "TurnTimeouts":
        return cls(connect_ms=settings.turn_connect_timeout_ms, read_ms=settings.turn_read_timeout_ms)

    def as_httpx(self) -> httpx.Timeout:
        return httpx.Timeout(self.read_ms / 1000, connect=self.connect_ms / 1000)


def _decode_reply(response: httpx.Response, model: type[ModelT], what: str) -> ModelT:
    try:
        document = response.json()
    except (ValueError, RecursionError) as exc:
        raise ParseError(f"{what} response is not valid JSON ({exc})") from exc
    if not isinstance(document, dict):
        raise ParseError(f"{what} response must be a JSON object")
    try:
        return model.model_validate(document)
    except ValidationError as exc:
        missing = ", ".join(".".join(str(part) for part in error["loc"]) for error in exc.errors())
        raise ParseError(f"{what} response has missing or invalid fields: {missing}") from exc


def _ensure_ok(response: httpx.Response, url: str, what: str) -> None:
    if response.status_code != httpx.codes.OK:
        raise NetworkError(
            f"Non-200 response when requesting {what} from {url} : "
            f"{response.status_code} {response.reason_phrase}".rstrip()
        )


async def fetch_turn_credentials(
    client: httpx.AsyncClient,
    url: str,
    *,
    timeouts: TurnTimeouts | None = None,
    now_ms: Clock = epoch_millis,
    login_prefix: str = "user",
) -> TurnCredentials:
    """POST a throwaway login name to ``url`` and return the issued credentials."""

    timeouts = timeouts or TurnTimeouts()
    payload = {"loginName": f"{login_prefix}{now_ms()}"}
    logger.debug("Request TURN credentials from: %s", url)

    try:
        response = await client.post(
            url,
            content=json.dumps(payload, separators=(",", ":")).encode("utf-8"),
            headers={"Content-Type": TURN_CONTENT_TYPE},
            timeout=timeouts.as_httpx(),
        )
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise NetworkError(f"TURN credentials request to {url} failed: {exc!r}") from exc

    _ensure_ok(response, url, "TURN credentials")
    logger.debug("TURN credentials response: %s", response.status_code)
    return _decode_reply(response, TurnCredentials, "TURN credentials")


async def fetch_turn_servers(
    client: httpx.AsyncClient,
    url: str,
    *,
    timeouts: TurnTimeouts | None = None,
) -> tuple[IceServerEntry, ...]:
    """GET ``url`` and return one TURN entry per advertised URI."""

    timeouts = timeouts or TurnTimeouts()
    logger.debug("Request TURN from: %s", url)

    try:
        response = await client.get(url, timeout=timeouts.as_httpx())
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise NetworkError(f"TURN server request to {url} failed: {exc!r}") from exc

    _ensure_ok(response, url, "TURN server")
    reply: TurnServersResponse = _decode_reply(response, TurnServersResponse, "TURN server")
    return tuple(
        IceServerEntry(uri=uri, username=reply.username, password=reply.password) for uri in reply.uris
    )


def apply_turn_credentials(
    servers: Sequence[IceServerEntry],
    credentials: TurnCredentials,
) -> tuple[IceServerEntry, ...]:
    """Return a new server list with the credentials set on every TURN entry."""

    return tuple(
        IceServerEntry(uri=server.uri, username=credentials.username, password=credentials.credential)
        if is_turn_server(server)
        else server
        for server in servers
    )


async def resolve_turn_credentials(
    client: httpx.AsyncClient,
    servers: Sequence[IceServerEntry],
    turn_url: str | None,
    *,
    timeouts: TurnTimeouts | None = None,
    now_ms: Clock = epoch_millis,
    login_prefix: str = "user",
) -> tuple[IceServerEntry, ...]:
    """Make sure the TURN servers in ``servers`` carry usable credentials.

    Servers that already do are returned as-is. Otherwise credentials are
    fetched from ``turn_url``; without one, :class:`ConfigError` is raised and
    no request is made.
    """

    if has_usable_turn_credentials(servers):
        return tuple(servers)
    if turn_url is None:
        raise ConfigError("No username nor password provided for TURN server(s)")

    credentials = await fetch_turn_credentials(
        client,
        turn_url,
        timeouts=timeouts,
        now_ms=now_ms,
        login_prefix=login_prefix,
    )
    return apply_turn_credentials(servers, credentials)
