"""Command-line interface for plc-textconv."""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from .config import load_config
from .context import export_context
from .errors import PlcDiffError
from .textconv import textconv


@click.command()
@click.argument('input_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--output', '-o', 'output_file', type=click.Path(dir_okay=False, path_type=Path),
              help='Write the rendering to this file instead of stdout')
@click.option('--config', '-c', 'config_file', type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help='YAML configuration file')
@click.option('--export-context', 'context_file', type=click.Path(dir_okay=False, path_type=Path),
              help='Also export the collected context (JSON, or YAML for .yaml/.yml)')
@click.option('--no-context', is_flag=True,
              help='Single pass: only map GUIDs and normalize instruction lines')
@click.option('--verbose', '-v', is_flag=True, help='Verbose output')
def main(input_file: Path, output_file: Optional[Path], config_file: Optional[Path],
         context_file: Optional[Path], no_context: bool, verbose: bool):
    """Render a Machine Expert project export (.smbp) for line-oriented diffs.

    \b
    Use it as a git textconv driver:
      git config diff.smbp.textconv plc-textconv
      echo '*.smbp diff=smbp' >> .gitattributes
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG)

    if context_file and no_context:
        click.echo("❌ Error: --export-context needs the collection pass; drop --no-context", err=True)
        sys.exit(2)

    try:
        config = load_config(config_file)
        with click.open_file(str(output_file or '-'), 'w', encoding='utf-8') as out:
            context = textconv(input_file, out, config, with_context=not no_context)

        if context_file:
            export_context(context, context_file)
            click.echo(f"✅ Exported context to {context_file}", err=True)

    except PlcDiffError as e:
        click.echo(f"❌ Error: {e}", err=True)
        if verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == '__main__':
    main()
