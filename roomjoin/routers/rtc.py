"""Room join endpoint resolving signaling parameters on behalf of a client."""
from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from ..schemas.room import SignalingParameters
from ..schemas.rtc import RoomJoinError, RoomJoinRequest
from ..services import room_fetcher

router = APIRouter()


@router.post(
    "/room/join",
    response_model=SignalingParameters,
    responses={status.HTTP_502_BAD_GATEWAY: {"model": RoomJoinError}},
)
async def join_room(payload: RoomJoinRequest) -> SignalingParameters:
    """Join a room and return its resolved signaling parameters."""

    outcome = await room_fetcher.fetch_signaling_parameters(payload.room_url, payload.room_message)
    if isinstance(outcome, room_fetcher.SignalingParametersError):
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=outcome.description)
    return outcome.params
