"""Collect the symbols declared for I/O addresses (``%I0.0`` -> ``START_BTN``)."""

from typing import Dict, Optional, Tuple

from .events import CurrentTag, ElementClose, ElementOpen, Event, Text, check_capacity
from .pipeline import Continue, VisitResult, XmlNodeVisitor

SYMBOL_LENGTH = 30


class IoNames(XmlNodeVisitor):
    """Pairs every ``<Address>`` with the ``<Symbol>`` that follows it in the same scope.

    An address waits for its symbol only until the element enclosing the
    address closes.
    """

    def __init__(self, max_length: int = SYMBOL_LENGTH):
        self.max_length = max_length
        self.names: Dict[str, str] = {}
        self.depth = 0
        self._current: Optional[Tuple[int, str]] = None

    def get_symbol(self, address: str) -> Optional[str]:
        return self.names.get(address)

    def __len__(self) -> int:
        return len(self.names)

    def visit(self, event: Event, current: CurrentTag) -> VisitResult:
        if isinstance(event, Text):
            if current is CurrentTag.ADDRESS:
                address = check_capacity(event.content, self.max_length, "Address")
                self._current = (self.depth, address)
            elif current is CurrentTag.SYMBOL and self._current is not None:
                symbol = check_capacity(event.content, self.max_length, "Symbol")
                self.names[self._current[1]] = symbol
                self._current = None
        elif isinstance(event, ElementOpen):
            self.depth += 1
        elif isinstance(event, ElementClose):
            if self._current is not None and self.depth < self._current[0]:
                self._current = None
            self.depth -= 1
        return Continue(event)
