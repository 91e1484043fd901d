"""Pytest configuration and fixtures."""

import sys
import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest

# Add src directory to path so tests use local code, not installed package
project_root = Path(__file__).parent.parent
src_dir = project_root / "src"
if str(src_dir) not in sys.path:
    sys.path.insert(0, str(src_dir))


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def testdata_dir() -> Path:
    return Path(__file__).parent / "testdata"


@pytest.fixture
def sample_vcf(testdata_dir: Path) -> Path:
    """Multi-sample VCF 4.2 example with genotypes, flags and filters."""
    return testdata_dir / "example_4_2.vcf"


@pytest.fixture
def sv_vcf(testdata_dir: Path) -> Path:
    """Structural variants: symbolic ALTs and breakends."""
    return testdata_dir / "structural_variants.vcf"


@pytest.fixture
def sites_vcf(testdata_dir: Path) -> Path:
    """Sites-only VCF (no FORMAT or sample columns)."""
    return testdata_dir / "sites_only.vcf"


@pytest.fixture
def minimal_vcf(temp_dir: Path) -> Path:
    """The smallest useful VCF: one INFO entry and one data line."""
    path = temp_dir / "minimal.vcf"
    path.write_text(
        "##fileformat=VCFv4.2\n"
        '##INFO=<ID=NS,Number=1,Type=Integer,Description="Number of samples with data">\n'
        "#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\n"
        "chr1\t1\trsa\tA\tT\t0\tPASS\tNS=0\n"
    )
    return path
