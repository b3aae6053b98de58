"""
Whole-document context gathered by the collection pass.

The transform pass reads this context but never changes it. It can also be
exported to JSON or YAML to inspect what the annotations are built from.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .config import TextconvConfig
from .errors import InvariantError
from .grafcet import GrafcetTracer
from .names import NameTracker, Rung
from .pipeline import process_file
from .symbols import IoNames
from .transforms import SkipTag

logger = logging.getLogger(__name__)


@dataclass
class DocumentContext:
    """Rung records, Grafcet network, node names and I/O symbols of one document."""
    source: str
    rungs: List[Rung] = field(default_factory=list)
    tracer: GrafcetTracer = field(default_factory=GrafcetTracer)
    names: Dict[str, str] = field(default_factory=dict)
    symbols: IoNames = field(default_factory=IoNames)

    @classmethod
    def collect(cls, path: Union[str, Path], config: Optional[TextconvConfig] = None) -> "DocumentContext":
        """Run the collection pass over ``path``."""
        config = config or TextconvConfig()
        symbols = IoNames(config.max_symbol_length)
        name_tracker = NameTracker(config.breadcrumb_separator)
        tracer = GrafcetTracer(config.max_identifier_length)
        process_file(
            path,
            [
                symbols,                     # Collect symbols for IO addresses
                SkipTag(config.elide_tags),  # Elided rungs and nodes are never rendered
                name_tracker,                # Collect context for diff headers
                tracer,                      # Rebuild the grafcet network
            ],
            config.chunk_size,
        )
        context = cls(
            source=str(path),
            rungs=name_tracker.rungs,
            tracer=tracer,
            names=name_table(tracer, name_tracker),
            symbols=symbols,
        )
        logger.info(
            f"Collected {len(context.rungs)} rungs, {len(tracer.sequence)} grafcet nodes "
            f"and {len(symbols)} symbols from {path}"
        )
        return context

    def to_dict(self) -> Dict[str, Any]:
        nodes = []
        for node_id in self.tracer.sequence:
            node = self.tracer.nodes[node_id]
            nodes.append({
                "id": node.id,
                "kind": node.kind.value,
                "name": self.names.get(node.id),
                "from": list(node.incoming),
                "to": list(node.outgoing),
            })
        return {
            "metadata": {
                "export_time": datetime.now().isoformat(),
                "source": self.source,
                "total_rungs": len(self.rungs),
                "total_grafcet_nodes": len(nodes),
                "total_symbols": len(self.symbols),
            },
            "rungs": [
                {"name": rung.name, "main_comment": rung.main_comment} for rung in self.rungs
            ],
            "grafcet": nodes,
            "symbols": dict(self.symbols.names),
        }


def name_table(tracer: GrafcetTracer, name_tracker: NameTracker) -> Dict[str, str]:
    """Pair node ids and labels; both were recorded as each node element closed."""
    if len(tracer.sequence) != len(name_tracker.node_labels):
        raise InvariantError(
            "Grafcet nodes and node labels are out of step",
            nodes=len(tracer.sequence), labels=len(name_tracker.node_labels),
        )
    names = {}
    for node_id, label in zip(tracer.sequence, name_tracker.node_labels):
        if label is not None:
            names[node_id] = label
            logger.debug(f"Grafcet node {node_id} is named '{label}'")
    return names


def export_context(context: DocumentContext, output_path: Union[str, Path], pretty_print: bool = True) -> Dict[str, Any]:
    """
    Export the collected context to JSON, or to YAML for ``.yaml``/``.yml`` paths.

    Args:
        context: Context returned by ``DocumentContext.collect``
        output_path: Path to the output file
        pretty_print: Whether to indent JSON output

    Returns:
        Dictionary containing the exported data
    """
    export_data = context.to_dict()

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', encoding='utf-8') as f:
        if output_path.suffix.lower() in ('.yaml', '.yml'):
            yaml.safe_dump(export_data, f, sort_keys=False, allow_unicode=True)
        elif pretty_print:
            json.dump(export_data, f, indent=2, default=str)
        else:
            json.dump(export_data, f, default=str)

    logger.info(f"Exported context to {output_path}")
    return export_data
