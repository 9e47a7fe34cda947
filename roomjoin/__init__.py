"""Resolve the signaling parameters needed to join a peer-to-peer room."""
from .services.errors import ConfigError, NetworkError, ParseError, ProtocolError, SignalingError
from .services.room_fetcher import (
    RoomParametersFetcher,
    RoomParametersFetcherEvents,
    SignalingParametersError,
    SignalingParametersReady,
    fetch_signaling_parameters,
)

__all__ = [
    "ConfigError",
    "NetworkError",
    "ParseError",
    "ProtocolError",
    "RoomParametersFetcher",
    "RoomParametersFetcherEvents",
    "SignalingError",
    "SignalingParametersError",
    "SignalingParametersReady",
    "fetch_signaling_parameters",
]
