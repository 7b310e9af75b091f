"""Pytest configuration and fixtures."""

import asyncio
import struct
import sys
import tempfile
import zlib
from collections.abc import Generator
from pathlib import Path

import pysam
import pytest

# Add src directory to path so tests use local code, not installed package
project_root = Path(__file__).parent.parent
src_dir = project_root / "src"
if str(src_dir) not in sys.path:
    sys.path.insert(0, str(src_dir))

HEADER_LINES = [
    "##fileformat=VCFv4.1",
    '##INFO=<ID=AC,Number=A,Type=Integer,Description="Allele count in genotypes">',
    '##INFO=<ID=AN,Number=1,Type=Integer,Description="Total number of alleles">',
    '##INFO=<ID=END,Number=1,Type=Integer,Description="End position of the variant">',
    '##FORMAT=<ID=GT,Number=1,Type=String,Description="Genotype">',
    "##contig=<ID=chr1,length=249250621>",
    "#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\tFORMAT\tsample",
]

SINGLE_RECORD = "chr1\t100\trs1\tA\tT\t100.0\tPASS\tAC=1;AN=2\tGT\t0/1"

# Positions on either side of linear index and bin tile boundaries
BOUNDARY_POSITIONS = (16384, 16385, 131072, 131073, 1048576, 1048577)

BGZF_EOF = bytes.fromhex("1f8b08040000000000ff0600424302001b0003000000000000000000")


def run(coro):
    """Drive a coroutine to completion from a synchronous test."""
    return asyncio.run(coro)


def bgzf_block(data: bytes) -> bytes:
    """Compress ``data`` (at most 64 KiB) into one BGZF block."""
    compressor = zlib.compressobj(6, zlib.DEFLATED, -15)
    cdata = compressor.compress(data) + compressor.flush()
    bsize = len(cdata) + 25
    header = struct.pack("<BBBBIBBHBBHH", 0x1F, 0x8B, 8, 4, 0, 0, 0xFF, 6, 66, 67, 2, bsize)
    footer = struct.pack("<II", zlib.crc32(data) & 0xFFFFFFFF, len(data))
    return header + cdata + footer


def bgzf_compress(data: bytes, block_size: int = 0xFF00) -> bytes:
    """Compress ``data`` into BGZF blocks followed by the EOF marker."""
    blocks = [bgzf_block(data[i : i + block_size]) for i in range(0, len(data), block_size)]
    return b"".join(blocks) + BGZF_EOF


def build_index(contigs: dict, fmt: int = 2, meta: str = "#") -> bytes:
    """
    Serialize an uncompressed tabix index.

    Args:
        contigs: name -> (bins, intervals), where bins maps a bin id to a list
            of (begin, end) virtual offsets as integers and intervals is a
            list of virtual offsets as integers.
    """
    names = b"".join(name.encode() + b"\0" for name in contigs)
    out = bytearray(b"TBI\x01")
    out += struct.pack("<8i", len(contigs), fmt, 1, 2, 0, ord(meta), 0, len(names))
    out += names
    for bins, intervals in contigs.values():
        out += struct.pack("<i", len(bins))
        for bin_id, chunks in bins.items():
            out += struct.pack("<Ii", bin_id, len(chunks))
            for begin, end in chunks:
                out += struct.pack("<QQ", begin, end)
        out += struct.pack("<i", len(intervals))
        for offset in intervals:
            out += struct.pack("<Q", offset)
    return bytes(out)


def write_tabix_vcf(path: Path, header: list[str], records: list[str]) -> Path:
    """Write a plain VCF, then bgzip and tabix it with pysam; returns the .vcf.gz path."""
    with open(path, "w") as f:
        for line in header + records:
            f.write(line + "\n")
    compressed = pysam.tabix_index(str(path), preset="vcf", force=True)
    return Path(compressed)


def multi_block_records() -> list[str]:
    """Enough chr1/chr2 records to span many BGZF blocks and index tiles."""
    genotypes = ("0/0", "0/1", "1|1", "./.", "1/0")
    positions = sorted(set(range(1000, 1_200_000, 37)) | set(BOUNDARY_POSITIONS))

    records = []
    for i, pos in enumerate(positions):
        if i % 997 == 0:
            ref, alt, info = "N", "<DEL>", f"SVTYPE=DEL;END={pos + 5000}"
        elif i % 11 == 0:
            ref, alt, info = "ACGTACGTAC", "A", "AC=1;AN=2"
        else:
            ref, alt, info = "C", "G", "AC=1;AN=2"
        gt = genotypes[i % len(genotypes)]
        records.append(f"chr1\t{pos}\tv{i}\t{ref}\t{alt}\t50\tPASS\t{info}\tGT\t{gt}")

    for i, pos in enumerate(range(500, 60_000, 53)):
        records.append(f"chr2\t{pos}\tw{i}\tT\tC,G\t30\tq10\tAC=1,1;AN=2\tGT\t1/2")
    return records


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def single_sample_vcf(temp_dir: Path) -> Path:
    """One-sample VCF whose only record is chr1:100 A>T, indexed for chr1 only."""
    return write_tabix_vcf(temp_dir / "single_sample.vcf", HEADER_LINES, [SINGLE_RECORD])


@pytest.fixture
def with_reference_vcf(temp_dir: Path) -> Path:
    """b37 VCF identified by its ##reference line."""
    header = (
        HEADER_LINES[:1]
        + ["##reference=file:///humgen/gsa-hpprojects/GATK/bundle/5974/b37/human_g1k_v37.fasta"]
        + HEADER_LINES[1:5]
        + [HEADER_LINES[-1]]
    )
    record = SINGLE_RECORD.replace("chr1", "1", 1)
    return write_tabix_vcf(temp_dir / "with_reference.vcf", header, [record])


@pytest.fixture
def with_contigs_vcf(temp_dir: Path) -> Path:
    """b37 VCF identified by its ##contig lines."""
    header = (
        HEADER_LINES[:5]
        + ["##contig=<ID=1,length=249250621>", "##contig=<ID=GL000207.1,length=4262>"]
        + [HEADER_LINES[-1]]
    )
    record = SINGLE_RECORD.replace("chr1", "1", 1)
    return write_tabix_vcf(temp_dir / "with_contigs.vcf", header, [record])


@pytest.fixture(scope="session")
def multi_block_vcf() -> Generator[Path, None, None]:
    """A VCF spanning many BGZF blocks on chr1 and chr2."""
    with tempfile.TemporaryDirectory() as tmpdir:
        header = HEADER_LINES[:5] + ["##contig=<ID=chr2,length=243199373>", HEADER_LINES[-1]]
        yield write_tabix_vcf(Path(tmpdir) / "multi_block.vcf", header, multi_block_records())


@pytest.fixture
def large_header_vcf(temp_dir: Path) -> Path:
    """A VCF whose header does not fit in the first BGZF block."""
    filler = [f"##note=<ID=N{i:05d},Description=\"{'x' * 70}\">" for i in range(1500)]
    header = HEADER_LINES[:1] + filler + HEADER_LINES[1:]
    return write_tabix_vcf(temp_dir / "large_header.vcf", header, [SINGLE_RECORD])


class MemoryReader:
    """In-memory ByteRangeReader that records every requested range."""

    def __init__(self, data: bytes, name: str = "memory"):
        self.data = data
        self._name = name
        self.requests: list[tuple[int, int | None]] = []

    def name(self) -> str:
        return self._name

    async def bytes(self, start: int = 0, length: int | None = None) -> bytes:
        self.requests.append((start, length))
        await asyncio.sleep(0)
        if length is None:
            return self.data[start:]
        if length <= 0:
            return b""
        return self.data[start : start + length]
