"""Replace Grafcet GUIDs with small integers numbered in order of first appearance."""

from ordered_set import OrderedSet

from .events import CurrentTag, Event, Text, check_capacity
from .pipeline import Continue, VisitResult, XmlNodeVisitor

GUID_LENGTH = 36  # "8bff0fc0-0ad4-40a4-a4c7-c6a5c1df96b7"


class GuidMap:
    """Maps identifiers to 1, 2, 3, ... for the lifetime of one pass."""

    def __init__(self, max_length: int = GUID_LENGTH):
        self.max_length = max_length
        self._seen = OrderedSet()

    def get_or_insert(self, identifier: str) -> int:
        if identifier not in self._seen:
            check_capacity(identifier, self.max_length, "GUID")
        return self._seen.add(identifier) + 1

    def __len__(self) -> int:
        return len(self._seen)

    def __contains__(self, identifier: str) -> bool:
        return identifier in self._seen


class GuidVisitor(XmlNodeVisitor):
    """Rewrites the text of Id, From and To elements with their interned number."""

    def __init__(self, identifier_format: str = "[{}]", max_length: int = GUID_LENGTH):
        self.map = GuidMap(max_length)
        self.identifier_format = identifier_format

    def visit(self, event: Event, current: CurrentTag) -> VisitResult:
        if isinstance(event, Text) and current.is_reference:
            number = self.map.get_or_insert(event.content)
            event = Text(self.identifier_format.format(number))
        return Continue(event)
