"""Turn a room join URL into the signaling parameters for that room.

One :class:`RoomParametersFetcher` drives a single join attempt: POST the room
message, decode the response, vet the ICE servers and, when the TURN servers
come without credentials, fetch short-lived ones. Every attempt ends in
exactly one outcome, either :class:`SignalingParametersReady` or
:class:`SignalingParametersError`. Cancelling the task that awaits
:meth:`RoomParametersFetcher.make_request` closes the connection and yields no
outcome at all.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol, Sequence

import httpx

from ..core.config import Settings, get_settings
from ..schemas.room import IceServerEntry, SignalingParameters
from .errors import NetworkError, SignalingError
from .ice_servers import has_turn_server, ice_servers_from_pc_config
from .room_parser import ParsedRoom, parse_room_response
from .turn import Clock, TurnTimeouts, epoch_millis, fetch_turn_servers, resolve_turn_credentials

logger = logging.getLogger(__name__)

ROOM_CONTENT_TYPE = "text/plain; charset=utf-8"


@dataclass(slots=True, frozen=True)
class SignalingParametersReady:
    params: SignalingParameters


@dataclass(slots=True, frozen=True)
class SignalingParametersError:
    description: str


RoomFetchOutcome = SignalingParametersReady | SignalingParametersError


class RoomParametersFetcherEvents(Protocol):
    """Callback pair for callers that prefer notifications over a return value."""

    def on_signaling_parameters_ready(self, params: SignalingParameters) -> None:
        ...

    def on_signaling_parameters_error(self, description: str) -> None:
        ...


def _uris(servers: Sequence[IceServerEntry]) -> list[str]:
    return [server.uri for server in servers]


class RoomParametersFetcher:
    """Resolve the signaling parameters for one room join attempt."""

    def __init__(
        self,
        room_url: str,
        room_message: str,
        events: RoomParametersFetcherEvents | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        settings: Settings | None = None,
        room_timeout: httpx.Timeout | None = None,
        turn_timeouts: TurnTimeouts | None = None,
        now_ms: Clock = epoch_millis,
    ) -> None:
        self._settings = settings or get_settings()
        self._room_url = room_url
        self._room_message = room_message
        self._events = events
        self._client = client
        self._room_timeout = room_timeout or httpx.Timeout(self._settings.room_request_timeout_ms / 1000)
        self._turn_timeouts = turn_timeouts or TurnTimeouts.from_settings(self._settings)
        self._now_ms = now_ms

    async def make_request(self) -> RoomFetchOutcome:
        """Run the join attempt and return its single outcome."""

        logger.debug("Connecting to room: %s", self._room_url)
        if self._client is not None:
            outcome = await self._attempt(self._client)
        else:
            async with httpx.AsyncClient() as client:
                outcome = await self._attempt(client)

        self._deliver(outcome)
        return outcome

    def _deliver(self, outcome: RoomFetchOutcome) -> None:
        if self._events is None:
            return
        if isinstance(outcome, SignalingParametersReady):
            self._events.on_signaling_parameters_ready(outcome.params)
        else:
            self._events.on_signaling_parameters_error(outcome.description)

    async def _attempt(self, client: httpx.AsyncClient) -> RoomFetchOutcome:
        try:
            body = await self._post_room_message(client)
        except NetworkError as exc:
            logger.error("Room connection error: %s", exc)
            return SignalingParametersError(str(exc))

        try:
            params = await self._resolve(client, body)
        except SignalingError as exc:
            logger.error("Room parameters error: %s", exc.describe())
            return SignalingParametersError(exc.describe())
        return SignalingParametersReady(params)

    async def _post_room_message(self, client: httpx.AsyncClient) -> str:
        try:
            response = await client.post(
                self._room_url,
                content=self._room_message.encode("utf-8"),
                headers={"Content-Type": ROOM_CONTENT_TYPE},
                timeout=self._room_timeout,
            )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise NetworkError(f"HTTP POST to {self._room_url} error: {exc!r}") from exc

        if response.status_code != httpx.codes.OK:
            raise NetworkError(
                f"Non-200 response to POST to URL: {self._room_url} : {response.status_code}"
            )
        return response.text

    async def _resolve(self, client: httpx.AsyncClient, body: str) -> SignalingParameters:
        logger.debug("Room response: %s", body)
        parsed = parse_room_response(body)
        configured = ice_servers_from_pc_config(parsed.pc_config)
        servers = await self._add_requested_turn_servers(client, parsed, configured)

        resolved = await resolve_turn_credentials(
            client,
            servers,
            parsed.params.turn_time_limited_ltc_url,
            timeouts=self._turn_timeouts,
            now_ms=self._now_ms,
            login_prefix=self._settings.turn_login_prefix,
        )
        if resolved != servers:
            logger.debug("ICE servers before TURN credentials: %s", _uris(servers))
            logger.debug("ICE servers after TURN credentials: %s", _uris(resolved))

        return SignalingParameters(
            room_id=parsed.params.room_id,
            client_id=parsed.params.client_id,
            wss_url=parsed.params.wss_url,
            wss_post_url=parsed.params.wss_post_url,
            is_initiator=parsed.params.is_initiator,
            ice_servers=resolved,
            offer_sdp=parsed.offer_sdp,
            ice_candidates=parsed.ice_candidates,
        )

    async def _add_requested_turn_servers(
        self,
        client: httpx.AsyncClient,
        parsed: ParsedRoom,
        servers: tuple[IceServerEntry, ...],
    ) -> tuple[IceServerEntry, ...]:
        turn_url = parsed.params.turn_url
        if not self._settings.request_turn_servers or not turn_url or has_turn_server(servers):
            return servers

        requested = await fetch_turn_servers(client, turn_url, timeouts=self._turn_timeouts)
        logger.debug("TurnServers: %s", _uris(requested))
        return servers + requested


async def fetch_signaling_parameters(
    room_url: str,
    room_message: str,
    **kwargs: Any,
) -> RoomFetchOutcome:
    """Run one join attempt without keeping the fetcher around."""

    fetcher = RoomParametersFetcher(room_url, room_message, **kwargs)
    return await fetcher.make_request()
