"""
Structural events produced by the XML reader and consumed by node visitors.

Each event is an immutable value. A visitor that rewrites an event builds a
new one (see ``ElementOpen.with_attribute``).
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Tuple, Union

from .errors import CapacityError


class CurrentTag(Enum):
    """Classification of the innermost open element."""
    ADDRESS = "Address"
    ID = "Id"
    TO = "To"
    FROM = "From"
    GRAFCET_NODE_STEP = "GrafcetNodeStep"
    GRAFCET_OR_FORK = "GrafcetOrFork"
    GRAFCET_OR_JUNCTION = "GrafcetOrJunction"
    GRAFCET_TRANSITION = "GrafcetTransition"
    INSTRUCTION_LINE = "InstructionLine"
    INSTRUCTION_LINE_ENTITY = "InstructionLineEntity"
    MAIN_COMMENT = "MainComment"
    NAME = "Name"
    LADDER_ELEMENTS = "LadderElements"
    RUNG_ENTITY = "RungEntity"
    SYMBOL = "Symbol"
    OTHER = "Other"
    NONE = "None"

    @classmethod
    def from_name(cls, local_name: str) -> "CurrentTag":
        return _TAG_LOOKUP.get(local_name, cls.OTHER)

    @property
    def is_grafcet_node(self) -> bool:
        return self in GRAFCET_NODES

    @property
    def is_reference(self) -> bool:
        """Id, From and To carry Grafcet identifiers."""
        return self in (CurrentTag.ID, CurrentTag.FROM, CurrentTag.TO)


_TAG_LOOKUP: Dict[str, CurrentTag] = {
    tag.value: tag for tag in CurrentTag
    if tag not in (CurrentTag.OTHER, CurrentTag.NONE)
}

GRAFCET_NODES = frozenset({
    CurrentTag.GRAFCET_NODE_STEP,
    CurrentTag.GRAFCET_OR_FORK,
    CurrentTag.GRAFCET_OR_JUNCTION,
    CurrentTag.GRAFCET_TRANSITION,
})


def local_name(name: str) -> str:
    """Strip the namespace prefix from a qualified name."""
    return name.rpartition(":")[2]


@dataclass(frozen=True)
class ElementOpen:
    tag: str
    attributes: Tuple[Tuple[str, str], ...] = ()

    @property
    def local_name(self) -> str:
        return local_name(self.tag)

    def with_attribute(self, name: str, value: str) -> "ElementOpen":
        """Return a copy carrying ``name=value``, replacing an existing value."""
        kept = tuple((key, val) for key, val in self.attributes if key != name)
        return replace(self, attributes=kept + ((name, value),))


@dataclass(frozen=True)
class ElementClose:
    tag: str

    @property
    def local_name(self) -> str:
        return local_name(self.tag)


@dataclass(frozen=True)
class Text:
    content: str


@dataclass(frozen=True)
class EndOfStream:
    pass


Event = Union[ElementOpen, ElementClose, Text, EndOfStream]


def check_capacity(value: str, limit: int, kind: str) -> str:
    """Return ``value`` unchanged, or raise if its UTF-8 form exceeds ``limit`` bytes."""
    size = len(value.encode("utf-8"))
    if size > limit:
        raise CapacityError(
            f"{kind} didn't fit into {limit} bytes", value=value, length=size
        )
    return value
