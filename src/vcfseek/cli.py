"""
CLI Entry Point: Exposes vcfseek queries via command line.
"""

import asyncio
from collections.abc import Coroutine
from typing import Any

import httpx
import typer
from pydantic import ValidationError
from rich.console import Console

from . import __version__
from .errors import VcfSeekError
from .io.source import VariantSource
from .models.core import SourceConfig
from .utils.logging import setup_logging

app = typer.Typer(help="vcfseek: region queries over tabix-indexed VCF files")

console = Console()
err_console = Console(stderr=True)

_FAILURES = (VcfSeekError, OSError, ValueError, httpx.HTTPError)


@app.callback()
def main():
    """
    vcfseek: region queries over tabix-indexed VCF files
    """
    pass


def _run(coro: Coroutine[Any, Any, Any]) -> Any:
    try:
        return asyncio.run(coro)
    except _FAILURES as e:
        err_console.print(f"[bold red]Error: {e}[/bold red]")
        raise typer.Exit(code=1) from e


def _source(data: str, index: str | None, reference: str | None) -> VariantSource:
    try:
        config = SourceConfig(data=data, index=index, reference=reference)
    except ValidationError as e:
        for error in e.errors():
            err_console.print(f"[bold red]Error: {error['msg']}[/bold red]")
        raise typer.Exit(code=1) from e

    try:
        return VariantSource.from_config(config)
    except OSError as e:
        err_console.print(f"[bold red]Error: {e}[/bold red]")
        raise typer.Exit(code=1) from e


@app.command()
def version():
    """Print the vcfseek version."""
    console.print(f"vcfseek {__version__}")


@app.command()
def header(
    data: str = typer.Argument(..., help="BGZF-compressed VCF (path or URL)"),
    index: str | None = typer.Option(None, "--index", "-i", help="Tabix index (default: DATA.tbi)"),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Enable verbose debug logging"),
):
    """
    Print the VCF header lines.
    """
    setup_logging(verbose)
    source = _source(data, index, None)
    for line in _run(source.header()):
        typer.echo(line)


@app.command()
def query(
    data: str = typer.Argument(..., help="BGZF-compressed VCF (path or URL)"),
    regions: list[str] = typer.Argument(..., help="Regions as contig[:pos[-end]]"),
    index: str | None = typer.Option(None, "--index", "-i", help="Tabix index (default: DATA.tbi)"),
    reference: str | None = typer.Option(
        None, "--reference", "-r", help="Reference genome (hg19, b37, hg38); inferred by default"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Enable verbose debug logging"),
):
    """
    Print the VCF lines overlapping one or more regions.
    """
    setup_logging(verbose)
    source = _source(data, index, reference)
    for record in _run(source.query(regions)):
        typer.echo(record.line)


@app.command()
def variant(
    data: str = typer.Argument(..., help="BGZF-compressed VCF (path or URL)"),
    contig: str = typer.Argument(..., help="Contig name"),
    pos: int = typer.Argument(..., help="1-based position"),
    ref: str = typer.Argument(..., help="Reference allele"),
    alt: str = typer.Argument(..., help="Alternate allele"),
    sample: str | None = typer.Option(
        None, "--sample", "-s", help="Sample to report (default: first)"
    ),
    assume_ref: bool = typer.Option(
        False, "--assume-ref", help="Report a REF/REF genotype if the variant is absent"
    ),
    index: str | None = typer.Option(None, "--index", "-i", help="Tabix index (default: DATA.tbi)"),
    reference: str | None = typer.Option(
        None, "--reference", "-r", help="Reference genome (hg19, b37, hg38); inferred by default"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Enable verbose debug logging"),
):
    """
    Look up a single variant and print its genotype.
    """
    setup_logging(verbose)
    source = _source(data, index, reference)
    record = _run(source.variant(contig, pos, ref, alt, assume_hom_ref=assume_ref))

    if record is None:
        console.print(f"[yellow]Variant not found: {contig}:{pos}{ref}>{alt}[/yellow]")
        raise typer.Exit(code=1)

    label = "synthetic" if record.is_synthetic else "found"
    console.print(f"{record} ({label})", markup=False, highlight=False)
    genotype = record.genotype(sample)
    if genotype is not None:
        console.print(f"GT: {genotype}", markup=False, highlight=False)


if __name__ == "__main__":
    app()
