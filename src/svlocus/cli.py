"""
CLI Entry Point: Exposes the svlocus functionality via command line.
"""

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from . import __version__
from .alignment.jump_aligner import JumpAligner
from .assembler import ContigAssembler
from .core.locus_graph import LocusGraph
from .io.input import ReadLoader
from .io.output import ContigWriter
from .models.core import AlignmentScores, AssemblerOptions, RefineConfig
from .pipeline import RefinePipeline
from .utils.logging import setup_logging

app = typer.Typer(help="svlocus: SV locus graph, local assembly and breakpoint alignment")

console = Console()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Enable verbose debug logging"),
    log_file: Path | None = typer.Option(None, "--log-file", help="Also write logs to this file"),
):
    """
    svlocus: SV locus graph, local assembly and breakpoint alignment
    """
    setup_logging(verbose=verbose, log_file=log_file)


@app.command()
def version():
    """Print the svlocus version."""
    console.print(f"svlocus {__version__}")


@app.command()
def align(
    query: str = typer.Argument(..., help="Query sequence"),
    ref1: str = typer.Argument(..., help="First reference segment"),
    ref2: str = typer.Argument(..., help="Second reference segment"),
    match: int = typer.Option(2, "--match", help="Match score"),
    mismatch: int = typer.Option(-4, "--mismatch", help="Mismatch score"),
    gap_open: int = typer.Option(-6, "--open", help="Gap open score"),
    gap_extend: int = typer.Option(-1, "--extend", help="Gap extend score"),
    jump_score: int = typer.Option(-25, "--jump-score", help="Score of the ref1 -> ref2 jump"),
):
    """
    Align a query against two reference segments, allowing one jump.
    """
    try:
        scores = AlignmentScores(match=match, mismatch=mismatch, open=gap_open, extend=gap_extend)
        aligner = JumpAligner(scores, jump_score=jump_score)
        result = aligner.align(query.upper(), ref1.upper(), ref2.upper())
    except Exception as e:
        console.print(f"[bold red]Error: {e}[/bold red]")
        raise typer.Exit(code=1) from e

    table = Table(title="Jump alignment")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("score", str(result.score))
    table.add_row("cigar", result.cigar)
    table.add_row("start", f"ref{2 if result.start_on_ref2 else 1}:{result.align_start}")
    if result.jump is None:
        table.add_row("jump", "none")
    else:
        table.add_row("jump", f"ref1:{result.jump.ref1_end} -> ref2:{result.jump.ref2_begin}")
        table.add_row("query offset", str(result.jump.query_offset))
    console.print(table)


@app.command()
def assemble(
    reads_file: Path = typer.Argument(..., help="FASTA/FASTQ file of reads to assemble"),
    output: Path = typer.Option(..., "--output", "-o", help="FASTA file to write contigs to"),
    word_length: int = typer.Option(37, "--word-length", "-k", help="Initial k-mer length"),
    max_word_length: int = typer.Option(65, "--max-word-length", help="Maximum k-mer length"),
    min_contig_length: int = typer.Option(15, "--min-contig-length", help="Minimum contig length"),
    min_coverage: int = typer.Option(1, "--min-coverage", help="Minimum k-mer count to extend"),
    max_error: float = typer.Option(0.2, "--max-error", help="Maximum error rate during extension"),
    min_seed_reads: int = typer.Option(2, "--min-seed-reads", help="Minimum reads to seed a contig"),
):
    """
    Assemble contigs from a cluster of reads.
    """
    try:
        if not reads_file.exists():
            raise ValueError(f"File not found: {reads_file}")
        options = AssemblerOptions(
            word_length=word_length,
            max_word_length=max_word_length,
            min_contig_length=min_contig_length,
            min_coverage=min_coverage,
            max_error=max_error,
            min_seed_reads=min_seed_reads,
        )
        reads = list(ReadLoader(reads_file))
        contigs = ContigAssembler(options).assemble_reads(reads)
        with ContigWriter(output) as writer:
            for contig in contigs:
                writer.write(contig)
    except Exception as e:
        console.print(f"[bold red]Error: {e}[/bold red]")
        raise typer.Exit(code=1) from e

    console.print(f"Assembled [bold]{len(contigs)}[/bold] contigs from {len(reads)} reads.")


@app.command()
def refine(
    reads_file: Path = typer.Option(..., "--reads", "-r", help="FASTA/FASTQ file of cluster reads"),
    reference: Path = typer.Option(..., "--fasta", "-f", help="Path to indexed reference FASTA"),
    region1: str = typer.Option(..., "--region1", help="First breakend flank (chrom:start-end)"),
    region2: str = typer.Option(..., "--region2", help="Second breakend flank (chrom:start-end)"),
    output_dir: Path = typer.Option(..., "--output-dir", "-o", help="Directory to write output files"),
    word_length: int = typer.Option(37, "--word-length", "-k", help="Initial k-mer length"),
    jump_score: int = typer.Option(-25, "--jump-score", help="Score of the ref1 -> ref2 jump"),
):
    """
    Assemble a read cluster and locate its breakpoint on two reference flanks.
    """
    try:
        config = RefineConfig(
            reads_file=reads_file,
            reference_fasta=reference,
            region1=region1,
            region2=region2,
            output_dir=output_dir,
            assembler=AssemblerOptions(word_length=word_length, max_word_length=max(65, word_length)),
            jump_score=jump_score,
        )
        RefinePipeline(config, console=console).run()
    except Exception as e:
        console.print(f"[bold red]Error: {e}[/bold red]")
        raise typer.Exit(code=1) from e


@app.command("check-graph")
def check_graph(
    graph_file: Path = typer.Argument(..., help="Locus graph archive (JSON)"),
    show_nodes: bool = typer.Option(False, "--nodes", help="Print every node"),
):
    """
    Load a locus graph archive and verify its edge relation.
    """
    graph = LocusGraph()
    try:
        graph.load(graph_file)
        graph.check_state()
    except Exception as e:
        console.print(f"[bold red]Error: {e}[/bold red]")
        raise typer.Exit(code=1) from e

    edge_count = sum(len(node.edges) for node in graph)
    console.print(
        f"Locus [bold]{graph.locus_index}[/bold]: {len(graph)} nodes, "
        f"{edge_count} edge entries. [green]OK[/green]"
    )

    if show_nodes:
        table = Table(title=f"Locus {graph.locus_index}")
        table.add_column("Node", justify="right")
        table.add_column("Interval")
        table.add_column("Count", justify="right")
        table.add_column("Edges")
        for node_index, node in enumerate(graph):
            edges = " ".join(f"{k}:{e.count}" for k, e in sorted(node.edges.items()))
            table.add_row(str(node_index), str(node.interval), str(node.count), edges)
        console.print(table)


if __name__ == "__main__":
    app()
