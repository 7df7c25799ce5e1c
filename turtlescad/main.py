"""
Command-line interpreter for turtlescad: Logo turtle scripts to OpenSCAD.
"""
import logging
import sys

import click

from turtlescad.config.settings import ConfigManager
from turtlescad.logo_processor import LogoProcessor

logger = logging.getLogger(__name__)


def _setup_logging(verbose: int):
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _read_script(path: str) -> str:
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def _report_errors(processor: LogoProcessor):
    for error in processor.get_all_errors():
        click.echo(f"Line {error.line_number}:{error.char_start}: {error.message}", err=True)


verbose_option = click.option("-v", "--verbose", count=True, help="-v for info, -vv for debug output")


@click.group
def cli():
    "Logo turtle scripts to OpenSCAD"


@cli.command
@click.argument("script", type=click.Path(dir_okay=False, readable=True, exists=True))
@click.option(
    "-o",
    "--output",
    "outfile",
    type=click.Path(dir_okay=False, writable=True, readable=False),
    help="Write OpenSCAD here instead of stdout",
)
@click.option("--fn", type=click.IntRange(min=1), help="Default arc resolution")
@click.option("--indent", type=click.IntRange(min=0), help="Spaces per indent level")
@click.option("--circles/--no-circles", default=None, help="Emit circle() for full 360 degree arcs")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), help="JSON settings file")
@verbose_option
def render(script, outfile, fn, indent, circles, config_path, verbose):
    "interpret a Logo script, emit OpenSCAD"
    _setup_logging(verbose)

    config = ConfigManager.load_config(config_path) if config_path else ConfigManager.default()
    if fn is not None:
        config.arc_resolution_default = fn
    if indent is not None:
        config.indent_spaces = indent
    if circles is not None:
        config.prefer_circle_primitives = circles

    processor = LogoProcessor(config)
    ok = processor.process_logo(_read_script(script))
    _report_errors(processor)

    output = processor.get_openscad()
    if outfile:
        with open(outfile, 'w', encoding='utf-8') as f:
            f.write(output + '\n')
        logger.info("Wrote %s", outfile)
    else:
        click.echo(output)

    if not ok:
        sys.exit(1)


@cli.command
@click.argument("script", type=click.Path(dir_okay=False, readable=True, exists=True))
@verbose_option
def check(script, verbose):
    "parse and run a Logo script, report diagnostics"
    _setup_logging(verbose)

    processor = LogoProcessor()
    ok = processor.process_logo(_read_script(script))
    _report_errors(processor)
    click.echo(processor.get_summary())

    if not ok:
        sys.exit(1)


@cli.command("init-config")
@click.argument("path", type=click.Path(dir_okay=False, writable=True))
def init_config(path):
    "write the default settings as JSON"
    ConfigManager.save_config(ConfigManager.default(), path)
    click.echo(f"Wrote default configuration to {path}")


def main():
    cli()


if __name__ == "__main__":
    main()
