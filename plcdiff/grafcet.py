"""
Grafcet (sequential function chart) reconstruction.

Steps, transitions, OR-forks and OR-junctions are exported as sibling
elements that point at each other through ``<From>`` and ``<To>`` GUIDs.
``GrafcetTracer`` rebuilds the network during the collection pass and keeps
the order in which nodes appear, so the transform pass can walk the same
elements again with a ``GrafcetCounter`` and find the matching node.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Tuple

from .errors import InvariantError, StructuralError
from .events import CurrentTag, ElementClose, ElementOpen, Event, Text, check_capacity
from .interner import GUID_LENGTH
from .pipeline import Continue, VisitResult, XmlNodeVisitor

logger = logging.getLogger(__name__)


@dataclass
class GrafcetNode:
    id: str = ""
    kind: CurrentTag = CurrentTag.NONE
    incoming: List[str] = field(default_factory=list)
    outgoing: List[str] = field(default_factory=list)

    @property
    def is_ambiguous(self) -> bool:
        return len(self.incoming) != 1 or len(self.outgoing) != 1

    def uniq_triple(self) -> Optional[Tuple[str, str, str]]:
        """Return (from, id, to) if both links are unique."""
        if self.is_ambiguous:
            return None
        return self.incoming[0], self.id, self.outgoing[0]

    def has_hub(self) -> bool:
        """A fork or junction always has exactly one link on one side."""
        return len(self.incoming) == 1 or len(self.outgoing) == 1


class GrafcetCounter:
    """Counts Grafcet node elements as they are opened or closed."""

    def __init__(self):
        self.count = 0

    def process_current_tag(self, current: CurrentTag) -> bool:
        if current.is_grafcet_node:
            self.count += 1
            return True
        return False


class GrafcetTracer(XmlNodeVisitor):
    """Builds the Grafcet network from Id/From/To references."""

    def __init__(self, max_length: int = GUID_LENGTH):
        self.max_length = max_length
        self.nodes: Dict[str, GrafcetNode] = {}
        self.sequence: List[str] = []
        self.counter = GrafcetCounter()
        self.depth = 0
        self._new_node: Optional[Tuple[int, GrafcetNode]] = None

    def visit(self, event: Event, current: CurrentTag) -> VisitResult:
        if isinstance(event, Text):
            # References outside a node element belong to something else
            if self._new_node is not None and current.is_reference:
                self._add_reference(current, event.content)
        elif isinstance(event, ElementOpen):
            self.depth += 1
            if current.is_grafcet_node:
                if self._new_node is not None:
                    raise StructuralError(
                        "Grafcet node opened inside another node",
                        depth=self.depth, node=self._new_node[1],
                    )
                self._new_node = (self.depth, GrafcetNode(kind=current))
        elif isinstance(event, ElementClose):
            if self.counter.process_current_tag(current):
                self._finish_node()
            self.depth -= 1
        return Continue(event)

    def _add_reference(self, current: CurrentTag, text: str) -> None:
        node = self._new_node[1]
        guid = check_capacity(text, self.max_length, "GUID")
        if current is CurrentTag.ID:
            if node.id:
                raise StructuralError(
                    "Grafcet node carries more than one Id", depth=self.depth, node=node
                )
            node.id = guid
        elif current is CurrentTag.FROM:
            node.incoming.append(guid)
        else:
            node.outgoing.append(guid)

    def _finish_node(self) -> None:
        if self._new_node is None:
            raise StructuralError("Failed to generate grafcet trace", depth=self.depth)
        depth, node = self._new_node
        if depth != self.depth:
            raise StructuralError(
                "Failed to generate grafcet trace", depth=self.depth, open_depth=depth, node=node
            )
        if not node.id:
            raise StructuralError("Grafcet node without Id", depth=self.depth, node=node)
        if not node.has_hub():
            raise StructuralError(
                "Grafcet node has no unique link on either side", depth=self.depth, node=node
            )
        if node.id in self.nodes:
            raise StructuralError("Duplicate Grafcet node Id", depth=self.depth, node=node)
        self._new_node = None
        self.sequence.append(node.id)
        self.nodes[node.id] = node
        logger.debug(
            f"Grafcet node #{len(self.sequence)} {node.kind.value}: "
            f"{len(node.incoming)} in, {len(node.outgoing)} out"
        )

    def get_node(self, node_id: str) -> GrafcetNode:
        try:
            return self.nodes[node_id]
        except KeyError:
            raise StructuralError("Reference to unknown Grafcet node", id=node_id) from None

    def get_unique_link(self, node_id: str) -> str:
        """Return the neighbour on the side of ``node_id`` that has a single link.

        For a fork this is the node feeding it, for a junction the node it
        feeds. The side with several links is never disambiguated.
        """
        node = self.get_node(node_id)
        if len(node.outgoing) == 1:
            return node.outgoing[0]
        if len(node.incoming) == 1:
            return node.incoming[0]
        raise StructuralError("Grafcet node has no unique link", node=node)

    def get_current_node(self, counter: GrafcetCounter) -> GrafcetNode:
        if not 0 < counter.count <= len(self.sequence):
            raise InvariantError(
                "Grafcet node position outside the recorded sequence",
                position=counter.count, recorded=len(self.sequence),
            )
        return self.nodes[self.sequence[counter.count - 1]]

    def display_name(self, node_id: str, names: Mapping[str, str]) -> str:
        """Name of ``node_id``, walking through forks and junctions until a named node."""
        visited = set()
        current = node_id
        while current not in names:
            if current in visited:
                raise StructuralError(
                    "Cyclic Grafcet references while resolving a name",
                    start=node_id, visited=sorted(visited),
                )
            visited.add(current)
            current = self.get_unique_link(current)
        return names[current]
