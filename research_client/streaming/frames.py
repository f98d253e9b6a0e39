"""Classification of single SSE lines."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Union

logger = logging.getLogger(__name__)

EVENT_PREFIX = "event: "
DATA_PREFIX = "data: "


@dataclass(frozen=True)
class Blank:
    pass


@dataclass(frozen=True)
class Comment:
    """Keep-alive line (``: ping``)."""

    text: str


@dataclass(frozen=True)
class EventType:
    label: str


@dataclass(frozen=True)
class Data:
    payload: str


@dataclass(frozen=True)
class Unrecognized:
    line: str


Frame = Union[Blank, Comment, EventType, Data, Unrecognized]


def classify_line(line: str) -> Frame:
    """Label one complete line of the stream.

    Blank lines are not event terminators here: data lines are dispatched
    as soon as they are read, so a blank line never clears a pending
    ``event:`` label.
    """
    if not line.strip():
        return Blank()
    if line.startswith(":"):
        return Comment(line[1:].strip())
    if line.startswith(EVENT_PREFIX):
        return EventType(line[len(EVENT_PREFIX):].strip())
    if line.startswith(DATA_PREFIX):
        return Data(line[len(DATA_PREFIX):])
    logger.warning("Unknown SSE line format: %s", line[:50])
    return Unrecognized(line)
