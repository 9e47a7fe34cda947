"""Shared builders for room join responses."""
from __future__ import annotations

import json
from typing import Any, Callable

import pytest

OFFER_SDP = "v=0\r\no=- 1 2 IN IP4 127.0.0.1\r\na=ice-ufrag:Ab c\r\na=ice-pwd:x y z+w\r\n"


def _params(**overrides: Any) -> dict[str, Any]:
    params: dict[str, Any] = {
        "room_id": "room-1",
        "client_id": "client-7",
        "wss_url": "wss://signal.test/ws",
        "wss_post_url": "https://signal.test",
        "is_initiator": True,
        "pc_config": json.dumps(
            {
                "iceServers": [
                    {"urls": "stun:stun.test:19302"},
                    {"urls": "turn:turn.test:3478", "username": "alice", "credential": "secret"},
                ]
            }
        ),
    }
    params.update(overrides)
    return {key: value for key, value in params.items() if value is not None}


def _messages(*messages: dict[str, Any]) -> list[str]:
    return [json.dumps(message) for message in messages]


def _body(result: str = "SUCCESS", **overrides: Any) -> str:
    return json.dumps({"result": result, "params": json.dumps(_params(**overrides))})


@pytest.fixture
def room_params() -> Callable[..., dict[str, Any]]:
    return _params


@pytest.fixture
def room_messages() -> Callable[..., list[str]]:
    return _messages


@pytest.fixture
def room_body() -> Callable[..., str]:
    return _body
