"""
Name context tracking.

Keeps a stack of the ``<Name>`` values seen on the way down the document,
indexed by the depth of the element that carried them. The stack gives:

- the breadcrumb of every rung (``Main > Step1``), recorded when the rung closes;
- the display label of every Grafcet node, recorded when the node closes, in
  the same order the graph builder records node ids.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .events import CurrentTag, ElementClose, ElementOpen, Event, Text
from .pipeline import Continue, VisitResult, XmlNodeVisitor

logger = logging.getLogger(__name__)


@dataclass
class Rung:
    """Context captured when a rung closes."""
    name: str
    main_comment: str = ""


class NameTracker(XmlNodeVisitor):
    """Collects rung breadcrumbs and Grafcet node labels."""

    def __init__(self, separator: str = " > "):
        self.separator = separator
        self.rungs: List[Rung] = []
        self.names: List[Tuple[int, str]] = []
        self.node_labels: List[Optional[str]] = []
        self.depth = 0
        self._new_comment = ""
        self._node_depth: Optional[int] = None

    def push_name(self, name: str) -> None:
        """Supersede every name at this depth or deeper, then push ``name``."""
        self._discard(lambda depth: depth >= self.depth)
        self.names.append((self.depth, name))

    def breadcrumb(self) -> str:
        # The first entry is the project name
        return self.separator.join(name for _, name in self.names[1:])

    def visit(self, event: Event, current: CurrentTag) -> VisitResult:
        if isinstance(event, Text):
            if current is CurrentTag.NAME:
                self.push_name(event.content)
            elif current is CurrentTag.MAIN_COMMENT:
                self._new_comment = event.content
        elif isinstance(event, ElementOpen):
            self.depth += 1
            if current.is_grafcet_node:
                self._node_depth = self.depth
                # Names left over from the subtree of a previous sibling
                self._discard(lambda depth: depth > self.depth)
        elif isinstance(event, ElementClose):
            if current is CurrentTag.RUNG_ENTITY:
                rung = Rung(self.breadcrumb(), self._new_comment)
                self._new_comment = ""
                self.rungs.append(rung)
                logger.debug(f"Rung #{len(self.rungs)}: {rung.name}")
            elif current.is_grafcet_node:
                self.node_labels.append(self._node_label(current))
            # Names below the children of the closing element go out of scope
            self._discard(lambda depth: depth > self.depth + 1)
            self.depth -= 1
        return Continue(event)

    def _node_label(self, current: CurrentTag) -> Optional[str]:
        node_depth = self.depth if self._node_depth is None else self._node_depth
        self._node_depth = None
        if current is CurrentTag.GRAFCET_NODE_STEP:
            # A step is labelled by the first name inside its own subtree
            return next((name for depth, name in self.names if depth > node_depth), "")
        if current is CurrentTag.GRAFCET_TRANSITION:
            label = self.names[-1][1] if self.names else ""
            self._discard(lambda depth: depth > node_depth)
            return label
        # Forks and junctions are named through their neighbours
        return None

    def _discard(self, predicate) -> None:
        while self.names and predicate(self.names[-1][0]):
            self.names.pop()
