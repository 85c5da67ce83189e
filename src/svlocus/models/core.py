"""
Core data models for svlocus.
"""

from pathlib import Path

from pydantic import BaseModel, Field, field_validator, model_validator


class GenomeInterval(BaseModel):
    """
    A 0-based, half-open interval [begin, end) on a chromosome index.

    All internal locations use the chromosome index rather than its name.
    Intervals sort by chromosome first, then by (begin, end).
    """
    chromosome_id: int = 0
    begin: int = Field(default=0, ge=0, description="0-based begin position (inclusive)")
    end: int = Field(default=0, ge=0, description="0-based end position (exclusive)")

    @model_validator(mode="after")
    def validate_interval(self) -> "GenomeInterval":
        if self.end < self.begin:
            raise ValueError(f"End position ({self.end}) must be >= begin position ({self.begin})")
        return self

    def set_range(self, begin: int, end: int) -> None:
        """Reset the range in place (node construction and merge only)."""
        if begin < 0 or end < begin:
            raise ValueError(f"Invalid range [{begin}, {end})")
        self.begin = begin
        self.end = end

    def is_intersect(self, other: "GenomeInterval") -> bool:
        """Does this intersect a second interval?"""
        if self.chromosome_id != other.chromosome_id:
            return False
        return self.begin < other.end and other.begin < self.end

    def key(self) -> tuple[int, int, int]:
        return (self.chromosome_id, self.begin, self.end)

    def __lt__(self, other: "GenomeInterval") -> bool:
        return self.key() < other.key()

    def __str__(self) -> str:
        return f"{self.chromosome_id}:{self.begin}-{self.end}"


class LocusEdge(BaseModel):
    """Evidence weight between two locus nodes."""
    count: int = Field(default=0, ge=0)

    def merge_edge(self, other: "LocusEdge") -> None:
        """Merge another edge into this one."""
        self.count += other.count


class LocusNode(BaseModel):
    """
    A contiguous genomic region of a locus and its links to other nodes.

    ``edges`` maps neighbour node index to the edge weight. The relation is
    stored at both endpoints.
    """
    count: int = Field(default=0, ge=0)
    interval: GenomeInterval = Field(default_factory=GenomeInterval)
    edges: dict[int, LocusEdge] = Field(default_factory=dict)

    def offset_copy(self, offset: int) -> "LocusNode":
        """Deep copy with every edge target shifted by ``offset``."""
        return LocusNode(
            count=self.count,
            interval=self.interval.model_copy(),
            edges={index + offset: edge.model_copy() for index, edge in self.edges.items()},
        )


class SVCandidateRead(BaseModel):
    """A read gathered as evidence for an SV candidate."""
    sequence: str
    name: str = ""
    chromosome_id: int = 0
    pos: int = Field(default=0, ge=0)


class SVCandidate(BaseModel):
    """A hypothesised SV with its two breakend regions."""
    index: int = 0
    bp1: GenomeInterval = Field(default_factory=GenomeInterval)
    bp2: GenomeInterval = Field(default_factory=GenomeInterval)


class SVCandidateData(BaseModel):
    """Reads collected per SV candidate (keyed by candidate index)."""
    reads: dict[int, list[SVCandidateRead]] = Field(default_factory=dict)

    def add_read(self, candidate_index: int, read: SVCandidateRead) -> None:
        self.reads.setdefault(candidate_index, []).append(read)

    def reads_for(self, candidate: SVCandidate) -> list[SVCandidateRead]:
        return self.reads.get(candidate.index, [])


class AssembledContig(BaseModel):
    """A contig produced by local assembly."""
    sequence: str
    supporting_read_count: int = Field(default=0, ge=0)
    seed_read_count: int = Field(default=0, ge=0)


class AssemblerOptions(BaseModel):
    """
    Settings for the local contig assembler.

    Defaults are tuned for ~30x coverage and 100bp reads.
    """
    word_length: int = Field(default=37, ge=1, description="Initial k-mer length")
    max_word_length: int = Field(default=65, ge=1)
    word_length_step: int = Field(default=2, ge=1)
    min_contig_length: int = Field(default=15, ge=1)
    min_coverage: int = Field(default=1, ge=1, description="Min. k-mer count to extend a contig")
    max_error: float = Field(default=0.2, ge=0.0, le=1.0, description="Max. error rate during extension")
    min_seed_reads: int = Field(default=2, ge=1, description="Min. reads required to seed an assembly")
    max_assembly_iterations: int = Field(default=50, ge=1)

    @model_validator(mode="after")
    def validate_word_lengths(self) -> "AssemblerOptions":
        if self.max_word_length < self.word_length:
            raise ValueError(
                f"max_word_length ({self.max_word_length}) must be >= word_length ({self.word_length})"
            )
        return self


class AlignmentScores(BaseModel):
    """
    Affine-gap scoring parameters.

    Penalties are expressed as negative numbers and added to the score.
    """
    match: int | float = 2
    mismatch: int | float = -4
    open: int | float = -6
    extend: int | float = -1


REGION_PATTERN = r"^[^:\s]+:\d+-\d+$"


class RefineConfig(BaseModel):
    """
    Configuration for refining one breakpoint from a cluster of reads.

    Regions use samtools syntax (``chrom:start-end``, 1-based inclusive).
    """
    # Input
    reads_file: Path
    reference_fasta: Path
    region1: str = Field(pattern=REGION_PATTERN, description="Flank containing the left breakend")
    region2: str = Field(pattern=REGION_PATTERN, description="Flank containing the right breakend")

    # Output
    output_dir: Path

    # Assembly and alignment
    assembler: AssemblerOptions = Field(default_factory=AssemblerOptions)
    scores: AlignmentScores = Field(default_factory=AlignmentScores)
    jump_score: int | float = -25

    @field_validator("reads_file", "reference_fasta")
    @classmethod
    def validate_file_exists(cls, v: Path) -> Path:
        if not v.exists():
            raise ValueError(f"File not found: {v}")
        return v

    @field_validator("output_dir")
    @classmethod
    def validate_output_dir(cls, v: Path) -> Path:
        if v.is_file():
            raise ValueError(f"Output path must be a directory, not a file: {v}")
        return v
