"""Decode the room join response into typed signaling data."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Mapping

from pydantic import ValidationError

from ..schemas.room import (
    ROOM_RESULT_SUCCESS,
    CandidateMessage,
    IceCandidate,
    OfferMessage,
    RoomJoinResponse,
    RoomParams,
    SessionDescription,
)
from .errors import ParseError, ProtocolError
from .ice_servers import decode_pc_config
from .sdp_repair import repair_candidate_line, repair_offer_sdp

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ParsedRoom:
    """Room parameters plus the decoded queue of remote signaling messages."""

    params: RoomParams
    pc_config: Mapping[str, Any]
    offer_sdp: SessionDescription | None = None
    ice_candidates: tuple[IceCandidate, ...] | None = None


def _validation_detail(exc: ValidationError) -> str:
    error = exc.errors()[0]
    location = ".".join(str(part) for part in error.get("loc", ())) or "document"
    return f"{location}: {error.get('msg', 'invalid value')}"


def _load_json(text: str, what: str) -> Any:
    try:
        return json.loads(text)
    except (json.JSONDecodeError, RecursionError) as exc:
        raise ParseError(f"{what} is not valid JSON ({exc})") from exc


def _decode_outer(body: str) -> RoomJoinResponse:
    document = _load_json(body, "room response")
    if not isinstance(document, dict):
        raise ParseError("room response must be a JSON object")

    result = document.get("result")
    if not isinstance(result, str):
        raise ParseError("result is missing or not a string")
    if result != ROOM_RESULT_SUCCESS:
        raise ProtocolError(result)

    try:
        return RoomJoinResponse.model_validate(document)
    except ValidationError as exc:
        raise ParseError(_validation_detail(exc)) from exc


def _decode_params(raw_params: str | None) -> RoomParams:
    if raw_params is None:
        raise ParseError("params is missing")
    document = _load_json(raw_params, "params")
    if not isinstance(document, dict):
        raise ParseError("params must be a JSON object")
    try:
        return RoomParams.model_validate(document)
    except ValidationError as exc:
        raise ParseError(_validation_detail(exc)) from exc


def _message_strings(messages: list[str] | str | None) -> list[str]:
    if messages is None:
        raise ParseError("messages is required when is_initiator is false")
    if isinstance(messages, str):
        decoded = _load_json(messages, "messages")
        if not isinstance(decoded, list) or not all(isinstance(item, str) for item in decoded):
            raise ParseError("messages must be a list of JSON-encoded strings")
        return decoded
    return messages


def _decode_messages(
    messages: list[str] | str | None,
) -> tuple[SessionDescription | None, tuple[IceCandidate, ...]]:
    """Walk the queued messages in order; the last offer wins."""

    offer_sdp: SessionDescription | None = None
    candidates: list[IceCandidate] = []

    for position, raw_message in enumerate(_message_strings(messages)):
        message = _load_json(raw_message, f"messages[{position}]")
        if not isinstance(message, dict):
            raise ParseError(f"messages[{position}] must be a JSON object")
        message_type = message.get("type")
        logger.debug("Room message #%d: %s", position, raw_message)

        try:
            if message_type == "offer":
                offer = OfferMessage.model_validate(message)
                offer_sdp = SessionDescription(sdp=repair_offer_sdp(offer.sdp))
            elif message_type == "candidate":
                candidate = CandidateMessage.model_validate(message)
                candidates.append(
                    IceCandidate(
                        sdp_mid=candidate.id,
                        sdp_mline_index=candidate.label,
                        candidate=repair_candidate_line(candidate.candidate),
                    )
                )
            else:
                logger.warning("Skipping unknown room message #%d of type %r", position, message_type)
        except ValidationError as exc:
            raise ParseError(f"messages[{position}].{_validation_detail(exc)}") from exc

    return offer_sdp, tuple(candidates)


def parse_room_response(body: str) -> ParsedRoom:
    """Decode a room join response body.

    Raises :class:`ProtocolError` for a non-SUCCESS result and
    :class:`ParseError` for anything malformed; nothing partial is returned.
    """

    response = _decode_outer(body)
    params = _decode_params(response.params)
    parsed = ParsedRoom(params=params, pc_config=decode_pc_config(params.pc_config))

    if not params.is_initiator:
        parsed.offer_sdp, parsed.ice_candidates = _decode_messages(params.messages)

    logger.debug("RoomId: %s. ClientId: %s", params.room_id, params.client_id)
    logger.debug("Initiator: %s", params.is_initiator)
    logger.debug("WSS url: %s", params.wss_url)
    logger.debug("WSS POST url: %s", params.wss_post_url)
    return parsed
