"""
Alignment module for svlocus.

Provides the two-reference jump aligner and the path helpers used to read
its output.
"""

from .jump_aligner import AlignmentError, AlignState, JumpAligner, JumpAlignmentResult, JumpPoint
from .path import (
    AlignType,
    PathSegment,
    SimpleAlignment,
    apath_read_length,
    apath_ref_length,
    apath_to_cigar,
    cigar_to_apath,
    get_match_edge_segments,
    matchify_edge_segment_type,
    matchify_edge_soft_clip_ref_range,
)

__all__ = [
    "AlignmentError",
    "AlignState",
    "AlignType",
    "JumpAligner",
    "JumpAlignmentResult",
    "JumpPoint",
    "PathSegment",
    "SimpleAlignment",
    "apath_read_length",
    "apath_ref_length",
    "apath_to_cigar",
    "cigar_to_apath",
    "get_match_edge_segments",
    "matchify_edge_segment_type",
    "matchify_edge_soft_clip_ref_range",
]
