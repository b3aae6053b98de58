"""Inject the collected context into the elements a reviewer looks for in a diff."""

import logging
from typing import Mapping, Sequence

from .errors import InvariantError, StructuralError
from .events import CurrentTag, ElementOpen, EndOfStream, Event
from .grafcet import GrafcetCounter, GrafcetNode, GrafcetTracer
from .names import Rung
from .pipeline import Continue, VisitResult, XmlNodeVisitor

logger = logging.getLogger(__name__)


class DiffHeader(XmlNodeVisitor):
    """Adds a context attribute to rungs and Grafcet transitions.

    Rungs get their breadcrumb (``Main > Step1``); transitions get the step
    they leave, their own name and the step they enter
    (``Start->[T1]->Stop``).
    """

    def __init__(
        self,
        rungs: Sequence[Rung],
        tracer: GrafcetTracer,
        names: Mapping[str, str],
        attribute: str = "ctx",
        edge_format: str = "{source}->[{edge}]->{target}",
    ):
        self.rungs = rungs
        self.tracer = tracer
        self.names = names
        self.attribute = attribute
        self.edge_format = edge_format
        self.counter = GrafcetCounter()
        self.current_rung = 0

    def visit(self, event: Event, current: CurrentTag) -> VisitResult:
        if isinstance(event, ElementOpen):
            if current is CurrentTag.RUNG_ENTITY:
                event = event.with_attribute(self.attribute, self._next_rung().name)
            elif self.counter.process_current_tag(current):
                node = self.tracer.get_current_node(self.counter)
                if node.kind is not current:
                    raise InvariantError(
                        "Grafcet element does not match the recorded node",
                        position=self.counter.count, expected=node.kind.value,
                    )
                if current is CurrentTag.GRAFCET_TRANSITION:
                    event = event.with_attribute(self.attribute, self.edge_label(node))
        elif isinstance(event, EndOfStream):
            self.check_consumed()
        return Continue(event)

    def edge_label(self, node: GrafcetNode) -> str:
        triple = node.uniq_triple()
        if triple is None:
            raise StructuralError("Grafcet transition without unique links", node=node)
        source, edge, target = triple
        label = self.edge_format.format(
            source=self.tracer.display_name(source, self.names),
            edge=self.names.get(edge, ""),
            target=self.tracer.display_name(target, self.names),
        )
        logger.debug(f"Transition #{self.counter.count}: {label}")
        return label

    def check_consumed(self) -> None:
        """Every recorded rung and Grafcet node must have been annotated."""
        if self.current_rung != len(self.rungs):
            raise InvariantError(
                "Fewer rungs than recorded in the collection pass",
                seen=self.current_rung, recorded=len(self.rungs),
            )
        if self.counter.count != len(self.tracer.sequence):
            raise InvariantError(
                "Fewer Grafcet nodes than recorded in the collection pass",
                seen=self.counter.count, recorded=len(self.tracer.sequence),
            )

    def _next_rung(self) -> Rung:
        if self.current_rung >= len(self.rungs):
            raise InvariantError(
                "More rungs than recorded in the collection pass", recorded=len(self.rungs)
            )
        rung = self.rungs[self.current_rung]
        self.current_rung += 1
        return rung
