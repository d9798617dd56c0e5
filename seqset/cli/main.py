"""
seqset Command Line Interface.

Converts DSSP and GenBank files into labeled sequence datasets and
inspects saved datasets. Built with Click; progress and summaries are
rendered with Rich.

Usage:
    seqset dssp proteins.gz --no-breaks data/*.dssp
    seqset genbank out/ --unique genbank/chr1.gb.gz genbank/chr2.gb.gz
    seqset info proteins.gz
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

from .. import __version__
from ..core.dataset import DatasetError, SequenceDataset
from ..core.encoding import EncodingError
from ..core.models import AnnotationExtractorConfig, StructureExtractorConfig
from ..extractors.dssp import StructureRecordExtractor
from ..extractors.genbank import AnnotationRecordExtractor, GenbankFormatError

console = Console()

# Errors that abort a conversion run
FATAL_ERRORS = (EncodingError, GenbankFormatError, DatasetError, ValidationError, OSError)


def setup_logging(verbose: bool) -> None:
    """Route log records through Rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def output_file(output_dir: Path, input_file: Path) -> Path:
    """Dataset file for a GenBank input: same name, gzip-compressed."""
    name = input_file.name
    if not name.endswith(".gz"):
        name += ".gz"
    return output_dir / name


def print_summary(dataset: SequenceDataset, title: str) -> None:
    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Sequences", justify="right")
    table.add_column("Total length", justify="right")
    table.add_column("Observed states")
    table.add_column("Hidden states")
    table.add_row(
        str(len(dataset)),
        str(dataset.total_length),
        dataset.states.observed,
        dataset.states.hidden,
    )
    console.print(table)


def _progress() -> Progress:
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.completed}/{task.total}"),
        console=console,
    )


@click.group()
@click.version_option(version=__version__, prog_name="seqset")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.pass_context
def cli(ctx, verbose: bool, quiet: bool):
    """
    seqset: labeled sequence datasets from DSSP and GenBank records.

    \b
    • dssp: amino acids labeled with secondary structure
    • genbank: genomic DNA labeled with exon/intron states
    • info: summary of a saved dataset

    Run 'seqset COMMAND --help' for command-specific help.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    setup_logging(verbose)


@cli.command("dssp")
@click.argument("output", type=click.Path(dir_okay=False))
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--unames/--no-unames",
    default=True,
    help="Keep only proteins with unique names (default: on)"
)
@click.option(
    "--prefix/--no-prefix",
    default=False,
    help="Keep only proteins with a unique residue prefix (default: off)"
)
@click.option(
    "--prefix-length",
    type=int,
    default=10,
    help="Length of the residue prefix checked by --prefix (default: 10)"
)
@click.option(
    "--breaks/--no-breaks",
    default=False,
    help="Keep chain breaks as unknown residues (default: off)"
)
@click.pass_context
def dssp(
    ctx,
    output: str,
    files: tuple,
    unames: bool,
    prefix: bool,
    prefix_length: int,
    breaks: bool,
):
    """
    Convert DSSP files into one secondary-structure dataset.

    OUTPUT is the dataset file (gzip-compressed if it ends in .gz);
    FILES are DSSP files, read in the given order.

    \b
    Examples:
        seqset dssp proteins.gz dssp/*.dssp
        seqset dssp proteins.gz --no-unames --prefix --breaks dssp/*.dssp
    """
    quiet = ctx.obj.get("quiet")

    try:
        config = StructureExtractorConfig(
            unique_names=unames,
            unique_prefix=prefix,
            prefix_length=prefix_length,
            include_breaks=breaks,
        )
    except ValidationError as e:
        console.print(f"[red]✗ Invalid options:[/red] {e}")
        sys.exit(1)

    extractor = StructureRecordExtractor(config)

    try:
        with _progress() as progress:
            task = progress.add_task("Reading DSSP files", total=len(files))
            for path in files:
                extractor.read(path)
                progress.update(task, advance=1)

        extractor.dataset.save(output)
    except FATAL_ERRORS as e:
        console.print(f"[red]✗ Conversion failed:[/red] {e}")
        sys.exit(1)

    if not quiet:
        print_summary(extractor.dataset, f"{len(files)} DSSP file(s)")
    console.print(f"[green]✓[/green] Dataset saved to: {output}")


@cli.command("genbank")
@click.argument("output_dir", type=click.Path(file_okay=False))
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--unique/--no-unique",
    default=False,
    help="Take at most one coding sequence per gene (default: off)"
)
@click.option(
    "--unknown/--no-unknown",
    default=False,
    help="Keep genes with unknown nucleotides, encoded as N (default: off)"
)
@click.pass_context
def genbank(ctx, output_dir: str, files: tuple, unique: bool, unknown: bool):
    """
    Convert GenBank files into exon/intron datasets, one per input file.

    Each dataset is saved in OUTPUT_DIR under the input file name, with
    a .gz suffix added if missing.

    \b
    Examples:
        seqset genbank out/ genbank/elegans-i.gz genbank/elegans-ii.gz
        seqset genbank out/ --unique --unknown genbank/*.gb
    """
    quiet = ctx.obj.get("quiet")
    out_dir = Path(output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    config = AnnotationExtractorConfig(unique_genes=unique, allow_unknown_nts=unknown)

    for path in files:
        input_path = Path(path)
        console.print(f"\n[bold]Processing:[/bold] {input_path}")

        extractor = AnnotationRecordExtractor(config)
        target = output_file(out_dir, input_path)
        try:
            with console.status("Extracting coding sequences..."):
                extractor.read(input_path)
            extractor.dataset.save(target)
        except FATAL_ERRORS as e:
            console.print(f"[red]✗ Conversion of {input_path} failed:[/red] {e}")
            sys.exit(1)

        if not quiet:
            print_summary(extractor.dataset, input_path.name)
        console.print(f"[green]✓[/green] Dataset saved to: {target}")


@cli.command("info")
@click.argument("dataset_file", type=click.Path(exists=True, dir_okay=False))
def info(dataset_file: str):
    """
    Show a summary of a saved dataset.
    """
    try:
        dataset = SequenceDataset.load(dataset_file)
    except (DatasetError, OSError) as e:
        console.print(f"[red]✗ Error loading dataset:[/red] {e}")
        sys.exit(1)

    console.print(f"\n[bold]{Path(dataset_file).name}[/bold]")
    console.print(dataset.summary(), highlight=False)


def main():
    """Main entry point for CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
