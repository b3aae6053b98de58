"""
plcdiff: diff-friendly rendering of PLC project exports.

Turns a Machine Expert project export (.smbp) into XML that diffs well:
- Grafcet GUIDs are replaced with small integers in order of appearance
- Instruction lines are whitespace-normalized and annotated with I/O symbols
- Ladder diagram graphics are elided
- Rungs are annotated with their breadcrumb, transitions with the steps they link
"""

from .config import TextconvConfig, load_config
from .context import DocumentContext, export_context
from .errors import (
    CapacityError, InvariantError, PassError, PlcDiffError, StructuralError, TransportError
)
from .events import CurrentTag, ElementClose, ElementOpen, EndOfStream, Text
from .pipeline import NEXT_NODE, Continue, XmlNodeVisitor, process_file
from .textconv import collect_context, render_document, textconv

__version__ = "0.2.0"
__all__ = [
    "TextconvConfig",
    "load_config",
    "DocumentContext",
    "export_context",
    "PlcDiffError",
    "TransportError",
    "CapacityError",
    "StructuralError",
    "InvariantError",
    "PassError",
    "CurrentTag",
    "ElementOpen",
    "ElementClose",
    "Text",
    "EndOfStream",
    "Continue",
    "NEXT_NODE",
    "XmlNodeVisitor",
    "process_file",
    "collect_context",
    "render_document",
    "textconv",
]
