"""
CLI Entry Point: check, rewrite and inspect VCF files from the command line.
"""

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__
from .config import ParserConfig, WriterConfig
from .exceptions import VcfError
from .io.parser import VcfParser
from .models.metadata import MetadataKind
from .pipeline import transform_file
from .utils.logging import setup_logging, timed

app = typer.Typer(help="vcfparser: parse, validate and rewrite VCF files")

console = Console()
logger = logging.getLogger(__name__)


def _fail(error: Exception) -> None:
    console.print(f"[bold red]Error:[/bold red] {escape(str(error))}")
    raise typer.Exit(code=1) from error


@app.callback()
def main():
    """
    vcfparser: parse, validate and rewrite VCF files
    """
    pass


@app.command()
def validate(
    path: Path = typer.Argument(..., help="VCF file to check"),
    rsids_only: bool = typer.Option(
        False, "--rsids-only", help="Only keep data lines with an rsid in the ID column"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Enable verbose debug logging"),
):
    """
    Parse a whole VCF file and report what it contains.
    """
    setup_logging(verbose)
    try:
        with timed(f"Validating {path}", logger) as timer:
            with VcfParser.from_file(path, config=ParserConfig(rsids_only=rsids_only)) as parser:
                metadata = parser.parse_metadata()
                records = parser.parse()
                skipped = parser.lines_skipped
    except (VcfError, OSError) as e:
        _fail(e)

    table = Table(title=escape(path.name))
    table.add_column("Item", style="cyan")
    table.add_column("Count", justify="right")
    table.add_row("File format", metadata.file_format)
    table.add_row("Records", str(records))
    if rsids_only:
        table.add_row("Skipped (no rsid)", str(skipped))
    table.add_row("Samples", str(metadata.num_samples))
    table.add_row("INFO", str(len(metadata.info)))
    table.add_row("FILTER", str(len(metadata.filters)))
    table.add_row("FORMAT", str(len(metadata.formats)))
    table.add_row("contig", str(len(metadata.contigs)))
    table.add_row("Seconds", f"{timer.elapsed:.2f}")
    console.print(table)
    console.print(f"[bold green]{escape(str(path))} is valid.[/bold green]")


@app.command()
def rewrite(
    input: Path = typer.Argument(..., help="VCF file to read"),
    output: Path = typer.Argument(..., help="VCF file to write"),
    strict: bool = typer.Option(
        False, "--strict", help="Fail on FILTER/INFO/FORMAT keys missing from the header"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Enable verbose debug logging"),
):
    """
    Parse a VCF file and write it back out through the writer's checks.
    """
    setup_logging(verbose)
    try:
        with timed(f"Rewriting {input} to {output}", logger) as timer:
            written = transform_file(input, output, writer_config=WriterConfig(strict_consistency=strict))
    except (VcfError, OSError) as e:
        _fail(e)
    console.print(f"Wrote [bold]{written}[/bold] records to {escape(str(output))} in {timer.elapsed:.2f}s")


@app.command()
def header(
    path: Path = typer.Argument(..., help="VCF file whose header to show"),
):
    """
    Print the metadata entries of a VCF file.
    """
    try:
        with VcfParser.from_file(path) as parser:
            metadata = parser.parse_metadata()
    except (VcfError, OSError) as e:
        _fail(e)

    console.print(f"[bold]fileformat[/bold] {escape(metadata.file_format)}")
    for kind in MetadataKind:
        entries = metadata.of_kind(kind)
        if not entries:
            continue
        table = Table(title=kind.value)
        table.add_column("ID", style="cyan")
        table.add_column("Number")
        table.add_column("Type")
        table.add_column("Description")
        for id, entry in entries.items():
            table.add_row(
                escape(id),
                entry.number or "",
                entry.type.value if entry.type else "",
                escape(entry.description or ""),
            )
        console.print(table)
    for name, value in metadata.raw_properties:
        console.print(f"[bold]{escape(name)}[/bold] {escape(value)}")
    console.print(f"[bold]samples[/bold] {escape(', '.join(metadata.sample_names)) or '-'}")


@app.command()
def version():
    """
    Print the vcfparser version.
    """
    console.print(f"vcfparser {__version__}")


if __name__ == "__main__":
    app()
