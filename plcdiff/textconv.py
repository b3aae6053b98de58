"""
Two-pass conversion of a project export into its diff-friendly rendering.

The first pass collects context that is only known once the whole document
has been read; the second pass reads the file again and rewrites it.
"""

import logging
from pathlib import Path
from typing import Optional, TextIO, Union

from .annotate import DiffHeader
from .config import TextconvConfig
from .context import DocumentContext
from .errors import PassError, PlcDiffError
from .interner import GuidVisitor
from .pipeline import Continue, XmlNodeVisitor, process_file
from .transforms import NormalizeInstructionLine, SkipTag
from .xml_stream import XmlEventWriter

logger = logging.getLogger(__name__)


class EventWriter(XmlNodeVisitor):
    """Final pipeline stage: writes every event it receives."""

    def __init__(self, writer: XmlEventWriter):
        self.writer = writer

    def visit(self, event, current):
        self.writer.write_event(event)
        return Continue(event)


def collect_context(path: Union[str, Path], config: Optional[TextconvConfig] = None) -> DocumentContext:
    try:
        return DocumentContext.collect(path, config)
    except PlcDiffError as e:
        raise PassError(f"Pre-processing failed: {e}") from e


def render_document(
    path: Union[str, Path],
    out: TextIO,
    context: Optional[DocumentContext] = None,
    config: Optional[TextconvConfig] = None,
) -> None:
    """Run the transform pass, writing the result to ``out``.

    Without a context only identifiers and instruction lines are rewritten.
    """
    config = config or TextconvConfig()
    tag_skipper = SkipTag(config.elide_tags)
    guid_map = GuidVisitor(config.identifier_format, config.max_identifier_length)
    inst_line_mangle = NormalizeInstructionLine(
        context.symbols if context is not None else None, config.symbol_column
    )
    writer = EventWriter(XmlEventWriter(out, config.xml_declaration))

    visitors = [
        tag_skipper,   # skip ladder diagram tags
        guid_map,      # map GUID
    ]
    if context is not None:
        visitors.append(DiffHeader(   # Generate diff headers
            context.rungs,
            context.tracer,
            context.names,
            attribute=config.context_attribute,
            edge_format=config.edge_format,
        ))
    visitors += [
        inst_line_mangle,  # Mangle instruction lines
        writer,            # write output
    ]

    try:
        process_file(path, visitors, config.chunk_size)
    except PlcDiffError as e:
        raise PassError(f"Post-processing failed: {e}") from e
    logger.info(
        f"Rendered {path}: {len(guid_map.map)} identifiers interned, "
        f"{tag_skipper.elided} subtrees elided"
    )


def textconv(
    path: Union[str, Path],
    out: TextIO,
    config: Optional[TextconvConfig] = None,
    with_context: bool = True,
) -> Optional[DocumentContext]:
    """Convert ``path`` and write the rendering to ``out``.

    Returns the collected context, or None when ``with_context`` is false.
    """
    config = config or TextconvConfig()
    context = collect_context(path, config) if with_context else None
    render_document(path, out, context, config)
    return context
