"""
Per-event rewrites of the transform pass: subtree elision and instruction
line normalization.
"""

from typing import Iterable, List, Optional

from .events import CurrentTag, ElementClose, ElementOpen, EndOfStream, Event, Text
from .pipeline import NEXT_NODE, Continue, VisitResult, XmlNodeVisitor
from .symbols import IoNames


class SkipTag(XmlNodeVisitor):
    """Drops every element named in ``tags`` together with its whole subtree."""

    def __init__(self, tags: Iterable[str] = ("LadderElements",)):
        self.tags = frozenset(tags)
        self.elided = 0
        self._depth = 0

    def visit(self, event: Event, current: CurrentTag) -> VisitResult:
        if isinstance(event, EndOfStream):
            return Continue(event)
        if self._depth:
            if isinstance(event, ElementOpen):
                self._depth += 1
            elif isinstance(event, ElementClose):
                self._depth -= 1
            return NEXT_NODE
        if isinstance(event, ElementOpen) and event.local_name in self.tags:
            self._depth = 1
            self.elided += 1
            return NEXT_NODE
        return Continue(event)


class NormalizeInstructionLine(XmlNodeVisitor):
    """Collapses whitespace in instruction lines and appends known I/O symbols.

    Inside an ``InstructionLineEntity`` all text is normalized, joined with a
    tab and emitted as the only content of the entity; its inner markup is
    consumed. Bare ``InstructionLine`` text is normalized in place.
    """

    def __init__(self, names: Optional[IoNames] = None, symbol_column: int = 0):
        self.names = names if names is not None else IoNames()
        self.symbol_column = symbol_column
        self._in_entity = False
        self._text: List[str] = []

    def normalize_text(self, text: str) -> str:
        line = ""
        for word in text.split():
            if line:
                line += " "
            line += word
            symbol = self.names.get_symbol(word)
            if symbol is not None:
                line = line.ljust(max(len(line) + 1, self.symbol_column)) + f"[{symbol}]"
        return line

    def visit(self, event: Event, current: CurrentTag) -> VisitResult:
        if isinstance(event, ElementOpen) and current is CurrentTag.INSTRUCTION_LINE_ENTITY:
            self._in_entity = True
            return Continue(event)

        if not self._in_entity:
            if isinstance(event, Text) and current is CurrentTag.INSTRUCTION_LINE:
                return Continue(Text(self.normalize_text(event.content)))
            return Continue(event)

        if isinstance(event, ElementClose) and current is CurrentTag.INSTRUCTION_LINE_ENTITY:
            self._in_entity = False
            text = "\t".join(self._text)
            self._text = []
            if text:
                return Continue(Text(text), event)
            return Continue(event)
        if isinstance(event, Text):
            normalized = self.normalize_text(event.content)
            if normalized:
                self._text.append(normalized)
        return NEXT_NODE
