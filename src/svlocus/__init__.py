"""
svlocus - Structural variant locus graph, local assembly and breakpoint alignment.

This package provides the analytical core of an SV discovery engine: a locus
graph clustering linked genomic regions, a local k-mer contig assembler and an
aligner allowing one jump between two reference segments.

Example usage:
    $ svlocus refine -r reads.fq -f ref.fa --region1 chr1:1000-1500 --region2 chr5:200-700 -o out/
"""

__version__ = "0.1.0"

from .alignment.jump_aligner import JumpAligner, JumpAlignmentResult
from .assembler import ContigAssembler
from .core.locus_graph import LocusGraph
from .models.core import AlignmentScores, AssembledContig, AssemblerOptions, GenomeInterval
from .refine import BreakpointRefiner

__all__ = [
    "__version__",
    "AlignmentScores",
    "AssembledContig",
    "AssemblerOptions",
    "BreakpointRefiner",
    "ContigAssembler",
    "GenomeInterval",
    "JumpAligner",
    "JumpAlignmentResult",
    "LocusGraph",
]
