"""
Visitor pipeline driver.

A pass reads the input once and hands every event to an ordered list of
visitors. Each visitor either continues with the (possibly rewritten)
event(s) or stops the chain for that event with ``NEXT_NODE``.
"""

import logging
from pathlib import Path
from typing import Sequence, Union

from .errors import PlcDiffError
from .events import CurrentTag, ElementClose, ElementOpen, EndOfStream, Event
from .xml_stream import DEFAULT_CHUNK_SIZE, XmlEventReader

logger = logging.getLogger(__name__)


class Continue:
    """Let the next visitor (if any) process the given events."""

    __slots__ = ("events",)

    def __init__(self, *events: Event):
        self.events = events

    def __repr__(self) -> str:
        return f"Continue{self.events!r}"


class _NextNode:
    """Skip all remaining visitors and read in the next node."""

    def __repr__(self) -> str:
        return "NEXT_NODE"


NEXT_NODE = _NextNode()

VisitResult = Union[Continue, _NextNode]


class XmlNodeVisitor:
    """Base class for pipeline stages.

    Plain callables taking ``(event, current)`` are accepted by the driver as
    well.
    """

    def visit(self, event: Event, current: CurrentTag) -> VisitResult:
        raise NotImplementedError


def process_file(path: Union[str, Path], visitors: Sequence, chunk_size: int = DEFAULT_CHUNK_SIZE) -> int:
    """Run ``visitors`` over every event of ``path``.

    The current tag is computed from the raw event before any visitor runs:
    an open or close sets it to the element's classification, and it falls
    back to ``CurrentTag.NONE`` once every visitor has seen a close.

    Returns the number of raw events read.
    """
    handlers = [getattr(visitor, "visit", visitor) for visitor in visitors]
    current = CurrentTag.NONE
    count = 0
    for event in XmlEventReader(path, chunk_size):
        count += 1
        if isinstance(event, (ElementOpen, ElementClose)):
            current = CurrentTag.from_name(event.local_name)

        batch = (event,)
        for handler in handlers:
            forwarded = []
            for item in batch:
                try:
                    result = handler(item, current)
                except PlcDiffError as e:
                    e.context.setdefault("event", item)
                    raise
                if isinstance(result, Continue):
                    forwarded.extend(result.events)
            batch = forwarded
            if not batch:
                break

        if isinstance(event, ElementClose):
            current = CurrentTag.NONE
        if isinstance(event, EndOfStream):
            break
    logger.debug(f"Processed {count} events from {path}")
    return count
