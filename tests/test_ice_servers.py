"""Tests for ICE server extraction and TURN credential checks."""
from __future__ import annotations

import json

import pytest

from roomjoin.schemas.room import IceServerEntry
from roomjoin.services.errors import ParseError
from roomjoin.services.ice_servers import (
    has_turn_server,
    has_usable_turn_credentials,
    ice_servers_from_pc_config,
)


def test_ice_servers_from_pc_config_defaults_credentials():
    config = {
        "iceServers": [
            {"urls": "stun:stun.test:19302"},
            {"urls": "turn:turn.test:3478?transport=udp", "username": "u", "credential": "p"},
        ]
    }

    servers = ice_servers_from_pc_config(config)

    assert servers == (
        IceServerEntry(uri="stun:stun.test:19302", username="", password=""),
        IceServerEntry(uri="turn:turn.test:3478?transport=udp", username="u", password="p"),
    )
    assert servers[1].scheme == "turn"


def test_ice_servers_from_encoded_pc_config_expands_url_lists():
    config = json.dumps(
        {"iceServers": [{"urls": ["turn:a.test:3478", "turn:b.test:443"], "username": "u"}]}
    )

    servers = ice_servers_from_pc_config(config)

    assert [server.uri for server in servers] == ["turn:a.test:3478", "turn:b.test:443"]
    assert all(server.username == "u" and server.password == "" for server in servers)


def test_ice_servers_from_pc_config_does_not_mutate_input():
    config = {"iceServers": [{"urls": "stun:stun.test"}]}

    ice_servers_from_pc_config(config)

    assert config == {"iceServers": [{"urls": "stun:stun.test"}]}


@pytest.mark.parametrize(
    "config",
    [
        "{not json",
        "[]",
        {},
        {"iceServers": "stun:stun.test"},
        {"iceServers": ["stun:stun.test"]},
        {"iceServers": [{"username": "u"}]},
        {"iceServers": [{"urls": []}]},
        {"iceServers": [{"urls": "turn:t", "credential": 5}]},
    ],
)
def test_ice_servers_from_pc_config_rejects_malformed(config):
    with pytest.raises(ParseError):
        ice_servers_from_pc_config(config)


@pytest.mark.parametrize(
    ("servers", "expected"),
    [
        ((), False),
        ((IceServerEntry(uri="stun:s", username="u", password="p"),), False),
        ((IceServerEntry(uri="turn:t", username="u", password=""),), False),
        ((IceServerEntry(uri="turn:t", username="", password="p"),), False),
        ((IceServerEntry(uri="turns:t", username="u", password="p"),), False),
        ((IceServerEntry(uri="turn:t", username="u", password="p"),), True),
        (
            (
                IceServerEntry(uri="turn:a"),
                IceServerEntry(uri="turn:b", username="u", password="p"),
            ),
            True,
        ),
    ],
)
def test_has_usable_turn_credentials(servers, expected):
    assert has_usable_turn_credentials(servers) is expected


def test_has_turn_server():
    assert has_turn_server([IceServerEntry(uri="stun:s"), IceServerEntry(uri="turn:t")])
    assert not has_turn_server([IceServerEntry(uri="stun:s")])
