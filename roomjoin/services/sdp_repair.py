"""Repair SDP and ICE candidate text whose ``+`` characters arrived as spaces.

Some room servers deliver queued signaling messages with every ``+`` in the
ICE username fragment and password turned into a space. Both fields are
base64-like tokens, so the damage breaks ICE for the whole session. The
helpers here put the ``+`` back in exactly the affected places and leave every
other character untouched.
"""
from __future__ import annotations

import enum

SDP_LINE_SEPARATOR = "\n"
SDP_REPAIR_MARKERS = ("ufrag", "ice-pwd")

CANDIDATE_MARKER = "frag"
CANDIDATE_REPAIR_WINDOW = 4


class RepairState(enum.Enum):
    SCANNING = "scanning"
    MATCHED = "matched"
    REPAIRING = "repairing"
    DONE = "done"


def repair_offer_sdp(sdp: str) -> str:
    """Restore ``+`` in every SDP line carrying an ICE ufrag or password.

    Line order and count are preserved; no trailing separator is added.
    """

    lines = sdp.split(SDP_LINE_SEPARATOR)
    repaired = [_repair_sdp_line(line) for line in lines]
    return SDP_LINE_SEPARATOR.join(repaired)


def _repair_sdp_line(line: str) -> str:
    if any(marker in line for marker in SDP_REPAIR_MARKERS):
        return line.replace(" ", "+")
    return line


def _is_marker_end(candidate: str, index: int) -> bool:
    """Return True when ``candidate[index]`` closes the first ``frag`` marker.

    The marker is only recognised once more than three characters precede
    the closing ``g``.
    """

    width = len(CANDIDATE_MARKER)
    if index < width:
        return False
    return candidate[index - width + 1 : index + 1] == CANDIDATE_MARKER


def repair_candidate_line(candidate: str) -> str:
    """Restore ``+`` in the ufrag value of an ``a=candidate`` line.

    After the first ``frag`` marker the next character (the separator) is
    kept, then spaces inside the following four characters become ``+``.
    """

    state = RepairState.SCANNING
    repaired_count = 0
    out: list[str] = []

    for index, character in enumerate(candidate):
        if state is RepairState.SCANNING:
            out.append(character)
            if _is_marker_end(candidate, index):
                state = RepairState.MATCHED
        elif state is RepairState.MATCHED:
            out.append(character)
            state = RepairState.REPAIRING
        elif state is RepairState.REPAIRING:
            out.append("+" if character == " " else character)
            repaired_count += 1
            if repaired_count == CANDIDATE_REPAIR_WINDOW:
                state = RepairState.DONE
        else:
            out.append(character)

    return "".join(out)
