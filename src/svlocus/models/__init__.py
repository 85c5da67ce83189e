"""
Data models for svlocus.

Provides Pydantic models for genome intervals, locus graph elements,
assembly inputs/outputs and scoring configuration.
"""

from .core import (
    AlignmentScores,
    AssembledContig,
    AssemblerOptions,
    GenomeInterval,
    LocusEdge,
    LocusNode,
    RefineConfig,
    SVCandidate,
    SVCandidateData,
    SVCandidateRead,
)

__all__ = [
    "AlignmentScores",
    "AssembledContig",
    "AssemblerOptions",
    "GenomeInterval",
    "LocusEdge",
    "LocusNode",
    "RefineConfig",
    "SVCandidate",
    "SVCandidateData",
    "SVCandidateRead",
]
