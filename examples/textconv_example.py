#!/usr/bin/env python3
"""
Example script demonstrating the two-pass conversion and the context export.
"""

import sys
import os
from pathlib import Path

# Add the parent directory to the path so we can import plcdiff
sys.path.insert(0, str(Path(__file__).parent.parent))

from plcdiff import PlcDiffError, collect_context, export_context, render_document


def main():
    """Render a project export and show what the annotations are built from."""

    smbp_file = sys.argv[1] if len(sys.argv) > 1 else str(Path(__file__).parent / "sample_project.smbp")

    if not os.path.exists(smbp_file):
        print(f"Error: File {smbp_file} not found.")
        return

    try:
        print(f"📖 Collecting context from: {smbp_file}")
        context = collect_context(smbp_file)

        print(f"✅ Collection pass completed:")
        print(f"  - Rungs: {len(context.rungs)}")
        print(f"  - Grafcet nodes: {len(context.tracer.sequence)}")
        print(f"  - I/O symbols: {len(context.symbols)}")

        print("\n📋 Rung breadcrumbs:")
        for rung in context.rungs:
            print(f"  - {rung.name}: {rung.main_comment}")

        # Example 1: Render the diff-friendly document
        print("\n📤 Example 1: Rendering the document")
        output_file = "textconv_example.txt"
        with open(output_file, 'w', encoding='utf-8') as out:
            render_document(smbp_file, out, context)
        print(f"✅ Rendering written to {output_file}")

        # Example 2: Export the collected context
        print("\n📤 Example 2: Exporting the collected context")
        context_file = "textconv_example_context.yaml"
        export_data = export_context(context, context_file)
        print(f"✅ Context exported to {context_file}")
        for node in export_data["grafcet"]:
            print(f"  - {node['kind']} {node['name'] or '(unnamed)'}: "
                  f"{len(node['from'])} in, {len(node['to'])} out")

    except PlcDiffError as e:
        print(f"❌ Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
