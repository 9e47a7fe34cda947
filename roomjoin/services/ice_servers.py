"""Extract ICE servers from a peer connection config and vet their credentials."""
from __future__ import annotations

import json
from typing import Any, Iterable, Mapping

from ..schemas.room import IceServerEntry
from .errors import ParseError

TURN_SCHEME = "turn"


def decode_pc_config(pc_config: Mapping[str, Any] | str) -> Mapping[str, Any]:
    """Accept ``pc_config`` as an object or as the JSON string the room sends."""

    if isinstance(pc_config, str):
        try:
            pc_config = json.loads(pc_config)
        except (json.JSONDecodeError, RecursionError) as exc:
            raise ParseError(f"pc_config is not valid JSON ({exc})") from exc
    if not isinstance(pc_config, Mapping):
        raise ParseError("pc_config must be a JSON object")
    return pc_config


def _server_urls(server: Mapping[str, Any], position: int) -> list[str]:
    urls = server.get("urls")
    if isinstance(urls, str):
        return [urls]
    if isinstance(urls, list) and urls and all(isinstance(url, str) for url in urls):
        return list(urls)
    raise ParseError(f"iceServers[{position}].urls must be a string or a list of strings")


def _optional_string(server: Mapping[str, Any], key: str, position: int) -> str:
    value = server.get(key, "")
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ParseError(f"iceServers[{position}].{key} must be a string")
    return value


def ice_servers_from_pc_config(pc_config: Mapping[str, Any] | str) -> tuple[IceServerEntry, ...]:
    """Return the configured ICE servers, one entry per URL."""

    config = decode_pc_config(pc_config)
    servers = config.get("iceServers")
    if not isinstance(servers, list):
        raise ParseError("pc_config.iceServers must be a list")

    entries: list[IceServerEntry] = []
    for position, server in enumerate(servers):
        if not isinstance(server, Mapping):
            raise ParseError(f"iceServers[{position}] must be an object")
        username = _optional_string(server, "username", position)
        password = _optional_string(server, "credential", position)
        for url in _server_urls(server, position):
            entries.append(IceServerEntry(uri=url, username=username, password=password))
    return tuple(entries)


def is_turn_server(server: IceServerEntry) -> bool:
    return server.scheme == TURN_SCHEME


def has_turn_server(servers: Iterable[IceServerEntry]) -> bool:
    return any(is_turn_server(server) for server in servers)


def has_usable_turn_credentials(servers: Iterable[IceServerEntry]) -> bool:
    """True when at least one TURN server carries a username and password."""

    return any(is_turn_server(server) and server.has_credentials for server in servers)
