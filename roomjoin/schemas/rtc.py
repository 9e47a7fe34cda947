"""Data contracts for RTC endpoints."""
from __future__ import annotations

from pydantic import BaseModel, Field


class RoomJoinRequest(BaseModel):
    room_url: str = Field(..., min_length=1, description="Room join URL to POST to")
    room_message: str = Field(default="", description="Body forwarded verbatim to the room server")


class RoomJoinError(BaseModel):
    detail: str = Field(..., description="Human readable failure description")
