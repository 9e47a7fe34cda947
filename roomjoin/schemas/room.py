"""Data contracts for the room join protocol and the resolved signaling bundle."""
from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

ROOM_RESULT_SUCCESS = "SUCCESS"


class _WireModel(BaseModel):
    """Strict decoding for documents produced by the room server."""

    model_config = ConfigDict(strict=True, extra="ignore")


class RoomJoinResponse(_WireModel):
    result: str
    params: str | None = Field(default=None, description="JSON-encoded RoomParams document")


class RoomParams(_WireModel):
    room_id: str
    client_id: str
    wss_url: str
    wss_post_url: str
    is_initiator: bool
    pc_config: dict[str, Any] | str
    turn_time_limited_ltc_url: str | None = None
    turn_url: str | None = None
    messages: list[str] | str | None = None


class OfferMessage(_WireModel):
    type: Literal["offer"]
    sdp: str


class CandidateMessage(_WireModel):
    type: Literal["candidate"]
    id: str
    label: int
    candidate: str


class TurnCredentials(_WireModel):
    username: str
    credential: str


class TurnServersResponse(_WireModel):
    username: str
    password: str
    uris: list[str]


class SessionDescription(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["offer"] = "offer"
    sdp: str


class IceCandidate(BaseModel):
    model_config = ConfigDict(frozen=True)

    sdp_mid: str
    sdp_mline_index: int
    candidate: str


class IceServerEntry(BaseModel):
    """One STUN or TURN server with the credentials to use against it."""

    model_config = ConfigDict(frozen=True)

    uri: str
    username: str = ""
    password: str = ""

    @property
    def scheme(self) -> str:
        return self.uri.split(":", 1)[0]

    @property
    def has_credentials(self) -> bool:
        return bool(self.username) and bool(self.password)


class SignalingParameters(BaseModel):
    """Everything a peer needs to join a room, fully resolved."""

    model_config = ConfigDict(frozen=True)

    room_id: str
    client_id: str
    wss_url: str
    wss_post_url: str
    is_initiator: bool
    ice_servers: tuple[IceServerEntry, ...]
    offer_sdp: SessionDescription | None = None
    ice_candidates: tuple[IceCandidate, ...] | None = None
