"""
Alignment paths: run-length segments of match/insert/delete/soft-clip.

A path reads 5'->3' along the query. Reference coordinates are 0-based.
"""

from dataclasses import dataclass, field
from enum import IntEnum


class AlignType(IntEnum):
    """Type of an alignment path segment."""

    NONE = 0
    MATCH = 1
    INSERT = 2
    DELETE = 3
    SOFT_CLIP = 4


CIGAR_CODES = {
    AlignType.MATCH: "M",
    AlignType.INSERT: "I",
    AlignType.DELETE: "D",
    AlignType.SOFT_CLIP: "S",
}


@dataclass
class PathSegment:
    type: AlignType = AlignType.NONE
    length: int = 0


@dataclass
class SimpleAlignment:
    """A query aligned at ``pos`` on a reference sequence."""

    pos: int = 0
    path: list[PathSegment] = field(default_factory=list)
    chromosome_id: int = 0
    is_fwd_strand: bool = True

    def __str__(self) -> str:
        strand = "+" if self.is_fwd_strand else "-"
        return f"alignment: {self.chromosome_id}:{self.pos}{strand} {apath_to_cigar(self.path)}"


def is_segment_type_read_length(segment_type: AlignType) -> bool:
    """True for segment types which consume query bases."""
    return segment_type in (AlignType.MATCH, AlignType.INSERT, AlignType.SOFT_CLIP)


def is_segment_type_ref_length(segment_type: AlignType) -> bool:
    """True for segment types which consume reference bases."""
    return segment_type in (AlignType.MATCH, AlignType.DELETE)


def apath_read_length(path: list[PathSegment]) -> int:
    return sum(ps.length for ps in path if is_segment_type_read_length(ps.type))


def apath_ref_length(path: list[PathSegment]) -> int:
    return sum(ps.length for ps in path if is_segment_type_ref_length(ps.type))


def apath_to_cigar(path: list[PathSegment]) -> str:
    """
    Render a path as a CIGAR string.

    Example:
        [MATCH 20, INSERT 2, MATCH 5] -> "20M2I5M"
    """
    return "".join(f"{ps.length}{CIGAR_CODES[ps.type]}" for ps in path if ps.type != AlignType.NONE)


def cigar_to_apath(cigar: str) -> list[PathSegment]:
    """Parse a CIGAR string limited to the M/I/D/S operations."""
    codes = {code: align_type for align_type, code in CIGAR_CODES.items()}
    path: list[PathSegment] = []
    length = ""
    for char in cigar:
        if char.isdigit():
            length += char
            continue
        if char not in codes or not length:
            raise ValueError(f"Invalid CIGAR string: {cigar}")
        path.append(PathSegment(codes[char], int(length)))
        length = ""
    if length:
        raise ValueError(f"Invalid CIGAR string: {cigar}")
    return path


def get_match_edge_segments(path: list[PathSegment]) -> tuple[int, int]:
    """
    Indexes of the first and last MATCH segments in ``path``.

    Both are ``len(path)`` when the path has no MATCH segment.
    """
    size = len(path)
    first, last = size, size
    for i, ps in enumerate(path):
        if ps.type == AlignType.MATCH:
            if first >= size:
                first = i
            last = i
    return first, last


def matchify_edge_segment_type(
    alignment: SimpleAlignment,
    segment_type: AlignType,
    is_match_leading_edge: bool = True,
    is_match_trailing_edge: bool = True,
) -> SimpleAlignment:
    """
    Convert ``segment_type`` segments to MATCH where they sit before the
    first or after the last MATCH segment.

    Converted leading segments move the alignment start back by their length.
    Adjacent MATCH segments are joined.
    """
    if not is_segment_type_read_length(segment_type):
        raise ValueError(f"Segment type {segment_type.name} does not consume query bases")

    result = SimpleAlignment(
        pos=alignment.pos,
        chromosome_id=alignment.chromosome_id,
        is_fwd_strand=alignment.is_fwd_strand,
    )

    first, last = get_match_edge_segments(alignment.path)
    for i, ps in enumerate(alignment.path):
        is_leading = i < first
        is_trailing = i > last
        is_candidate_edge = (is_match_leading_edge and is_leading) or (
            is_match_trailing_edge and is_trailing
        )
        is_edge_target = is_candidate_edge and ps.type == segment_type
        if is_edge_target and is_leading:
            result.pos -= ps.length

        if is_edge_target or ps.type == AlignType.MATCH:
            if result.path and result.path[-1].type == AlignType.MATCH:
                result.path[-1].length += ps.length
            else:
                result.path.append(PathSegment(AlignType.MATCH, ps.length))
        else:
            result.path.append(PathSegment(ps.type, ps.length))

    return result


def matchify_edge_soft_clip_ref_range(alignment: SimpleAlignment) -> tuple[int, int]:
    """
    Reference range [begin, end) the alignment would cover if its edge
    soft-clips were converted to matches.
    """
    begin = alignment.pos
    end = begin

    first, last = get_match_edge_segments(alignment.path)
    for i, ps in enumerate(alignment.path):
        is_leading = i < first
        is_trailing = i > last
        if is_leading or is_trailing:
            if is_segment_type_read_length(ps.type):
                if is_leading:
                    begin -= ps.length
                else:
                    end += ps.length
        elif is_segment_type_ref_length(ps.type):
            end += ps.length

    return begin, end
