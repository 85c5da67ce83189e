"""Pytest configuration and fixtures."""

import random
import sys
import tempfile
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

# Add src directory to path so tests use local code, not installed package
project_root = Path(__file__).parent.parent
src_dir = project_root / "src"
if str(src_dir) not in sys.path:
    sys.path.insert(0, str(src_dir))


def _random_sequence(length: int, seed: int, alphabet: str = "ACGT") -> str:
    rng = random.Random(seed)
    return "".join(rng.choice(alphabet) for _ in range(length))


@pytest.fixture
def random_sequence() -> Callable[..., str]:
    """Deterministic random sequence factory: ``random_sequence(length, seed, alphabet)``."""
    return _random_sequence


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def breakpoint_flanks() -> tuple[str, str]:
    """Two 60bp flanks with disjoint alphabets, so no base of one matches the other."""
    return _random_sequence(60, seed=11, alphabet="AC"), _random_sequence(60, seed=12, alphabet="GT")


@pytest.fixture
def spanning_contig(breakpoint_flanks: tuple[str, str]) -> str:
    """Sequence joining the last 40bp of ref1 to the first 40bp of ref2."""
    ref1, ref2 = breakpoint_flanks
    return ref1[20:] + ref2[:40]


@pytest.fixture
def sample_reads_fasta(temp_dir: Path) -> tuple[Path, str]:
    """FASTA of four identical reads of one 70bp sequence."""
    sequence = _random_sequence(70, seed=3)
    path = temp_dir / "reads.fa"
    with open(path, "w") as f:
        for i in range(4):
            f.write(f">read{i}\n{sequence}\n")
    return path, sequence
