"""
I/O module for svlocus.

Provides read and reference loaders and writers for contigs and alignments.
"""

from .input import ReadLoader, ReferenceLoader, parse_region
from .output import AlignmentWriter, ContigWriter, OutputWriter

__all__ = [
    "AlignmentWriter",
    "ContigWriter",
    "OutputWriter",
    "ReadLoader",
    "ReferenceLoader",
    "parse_region",
]
