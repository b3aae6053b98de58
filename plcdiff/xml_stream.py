"""
Forward-only XML transport.

``XmlEventReader`` turns an XML file into the event stream consumed by the
visitor pipeline; ``XmlEventWriter`` serializes (possibly rewritten) events
back to text. Element and attribute names keep the namespace prefixes used
in the source, comments and processing instructions are dropped.
"""

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Dict, Iterator, List, Optional, TextIO, Tuple, Union
from xml.sax.saxutils import escape, quoteattr

from .errors import TransportError
from .events import ElementClose, ElementOpen, EndOfStream, Event, Text

logger = logging.getLogger(__name__)

XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"
DEFAULT_CHUNK_SIZE = 64 * 1024

RawEvent = Tuple[str, Union[ET.Element, Tuple[str, str]]]


class XmlEventReader:
    """Reads an XML file in chunks and yields structural events in document order.

    The pull parser reports an element before its text is known to be
    complete, so every raw event is held back until the parser has produced
    the one after it. Text before the first child of an element is its
    ``text``; text after a child is that child's ``tail``.
    """

    def __init__(self, path: Union[str, Path], chunk_size: int = DEFAULT_CHUNK_SIZE):
        self.path = Path(path)
        self.chunk_size = chunk_size
        self._scopes: List[Dict[str, str]] = [{XML_NAMESPACE: "xml"}]
        self._pending_ns: List[Tuple[str, str]] = []

    def __iter__(self) -> Iterator[Event]:
        logger.debug(f"Reading {self.path} in chunks of {self.chunk_size} bytes")
        held: Optional[RawEvent] = None
        for raw in self._raw_events():
            if held is not None:
                yield from self._expand(held)
            held = raw
        if held is not None:
            yield from self._expand(held)
        yield EndOfStream()

    def _raw_events(self) -> Iterator[RawEvent]:
        parser = ET.XMLPullParser(events=("start-ns", "start", "end"))
        try:
            with open(self.path, "rb") as f:
                while True:
                    chunk = f.read(self.chunk_size)
                    if not chunk:
                        break
                    parser.feed(chunk)
                    yield from parser.read_events()
            parser.close()
            yield from parser.read_events()
        except ET.ParseError as e:
            raise TransportError(
                f"Malformed XML in {self.path}", position=e.position, reason=str(e)
            ) from e
        except OSError as e:
            raise TransportError(f"Failed to read {self.path}", reason=str(e)) from e

    def _expand(self, raw: RawEvent) -> Iterator[Event]:
        kind, payload = raw
        if kind == "start-ns":
            self._pending_ns.append(payload)
        elif kind == "start":
            yield self._open(payload)
            if payload.text:
                yield Text(payload.text)
        elif kind == "end":
            yield ElementClose(self._qualify(payload.tag))
            self._scopes.pop()
            if payload.tail:
                yield Text(payload.tail)
            payload.clear()

    def _open(self, element: ET.Element) -> ElementOpen:
        scope = dict(self._scopes[-1])
        attributes = []
        for prefix, uri in self._pending_ns:
            scope[uri] = prefix
            attributes.append((f"xmlns:{prefix}" if prefix else "xmlns", uri))
        self._pending_ns = []
        self._scopes.append(scope)
        attributes.extend(
            (self._qualify(name), value) for name, value in element.attrib.items()
        )
        return ElementOpen(self._qualify(element.tag), tuple(attributes))

    def _qualify(self, name: str) -> str:
        """Map ElementTree's ``{uri}local`` notation back to ``prefix:local``."""
        if not name.startswith("{"):
            return name
        uri, _, local = name[1:].partition("}")
        prefix = self._scopes[-1].get(uri)
        if prefix is None:
            raise TransportError(f"Undeclared namespace in {self.path}", namespace=uri)
        return f"{prefix}:{local}" if prefix else local


class XmlEventWriter:
    """Serializes events to a text stream."""

    def __init__(self, stream: TextIO, xml_declaration: bool = True):
        self.stream = stream
        self.xml_declaration = xml_declaration
        self._started = False

    def write_event(self, event: Event) -> None:
        if not self._started:
            self._started = True
            if self.xml_declaration:
                self.stream.write('<?xml version="1.0" encoding="utf-8"?>\n')
        if isinstance(event, ElementOpen):
            attributes = "".join(
                f" {name}={quoteattr(value)}" for name, value in event.attributes
            )
            self.stream.write(f"<{event.tag}{attributes}>")
        elif isinstance(event, ElementClose):
            self.stream.write(f"</{event.tag}>")
        elif isinstance(event, Text):
            self.stream.write(escape(event.content))
        elif isinstance(event, EndOfStream):
            self.stream.write("\n")
            self.stream.flush()
