"""
Tabix (.tbi) index parsing.

The index is read in two passes. ``open_index`` inflates the file, decodes
the header and walks the per-contig sections only far enough to record
where each one starts and ends. The bins and linear index of a contig are
decoded on first use and memoized on its ``ContigIndex``.

Layout (little-endian), per the tabix specification::

    magic "TBI\\1", n_ref, format, col_seq, col_beg, col_end, meta, skip, l_nm
    names[l_nm]                       NUL-terminated contig names
    n_ref x {
        n_bin, n_bin x {bin: u32, n_chunk, n_chunk x {beg: u64, end: u64}},
        n_intv, n_intv x {ioff: u64}
    }
    [n_no_coor: u64]
"""

import asyncio
import logging
import struct
from dataclasses import dataclass, field
from enum import IntEnum
from functools import cached_property

from ..errors import ContigNotInIndexError, FormatError
from .bgzf import Chunk, VirtualOffset, concat_uncompressed, inflate_run

logger = logging.getLogger(__name__)

__all__ = [
    "LINEAR_INDEX_SHIFT",
    "Bin",
    "ContigIndex",
    "ParsedContig",
    "TabixFormat",
    "TabixHeader",
    "TabixIndex",
    "open_index",
    "parse_contig",
]

TABIX_MAGIC = b"TBI\x01"
LINEAR_INDEX_SHIFT = 14  # 16 KiB tiles

_HEADER = struct.Struct("<8i")
_INT32 = struct.Struct("<i")
_BIN = struct.Struct("<Ii")  # bin id, n_chunk
_CHUNK_SIZE = 16
_INTERVAL_SIZE = 8


class TabixFormat(IntEnum):
    """Preset codes stored in the ``format`` header field."""

    GENERIC = 0
    SAM = 1
    VCF = 2

    @classmethod
    def from_code(cls, code: int) -> "TabixFormat":
        # 0x10000 flags zero-based coordinates; it does not change the preset
        try:
            return cls(code & 0xFFFF)
        except ValueError:
            return cls.GENERIC


@dataclass(frozen=True)
class TabixHeader:
    n_ref: int
    format: int
    col_seq: int
    col_beg: int
    col_end: int
    meta: int
    skip: int
    names: tuple[str, ...]

    @property
    def file_format(self) -> TabixFormat:
        return TabixFormat.from_code(self.format)

    @property
    def comment_char(self) -> str:
        return chr(self.meta)


@dataclass
class Bin:
    """One bin of the hierarchical index; chunks are decoded on first access."""

    bin_id: int
    n_chunk: int
    raw: bytes = field(repr=False)

    @cached_property
    def chunks(self) -> list[Chunk]:
        return [Chunk.from_bytes(self.raw, i * _CHUNK_SIZE) for i in range(self.n_chunk)]


@dataclass
class ParsedContig:
    bins: dict[int, Bin]
    intervals: bytes = field(repr=False)

    @property
    def n_intervals(self) -> int:
        return len(self.intervals) // _INTERVAL_SIZE

    @property
    def linear_intervals(self) -> list[VirtualOffset]:
        return [self.interval(i) for i in range(self.n_intervals)]

    def interval(self, tile: int) -> VirtualOffset:
        return VirtualOffset.from_bytes(self.intervals, tile * _INTERVAL_SIZE)

    def min_offset(self, begin: int) -> VirtualOffset:
        """
        Linear index floor for a 0-based start position.

        Tiles past the end of the linear index fall back to its last entry;
        an empty linear index gives no floor.
        """
        n = self.n_intervals
        if n == 0:
            return VirtualOffset(0, 0)
        return self.interval(min(max(0, begin) >> LINEAR_INDEX_SHIFT, n - 1))


@dataclass
class ContigIndex:
    """Byte span of one contig's section, plus its write-once parse cache."""

    name: str
    start: int
    end: int
    _parsed: ParsedContig | None = field(default=None, repr=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    @property
    def is_parsed(self) -> bool:
        return self._parsed is not None

    async def load(self, buffer: bytes) -> ParsedContig:
        """Parse this contig once; concurrent callers share the single result."""
        if self._parsed is not None:
            return self._parsed
        async with self._lock:
            if self._parsed is None:
                parsed = parse_contig(buffer, self.start, self.end)
                logger.debug(
                    "Parsed index for %s: %d bins, %d intervals",
                    self.name,
                    len(parsed.bins),
                    parsed.n_intervals,
                )
                self._parsed = parsed
        return self._parsed


@dataclass
class TabixIndex:
    header: TabixHeader
    contigs: dict[str, ContigIndex]
    buffer: bytes = field(repr=False)

    def contig(self, name: str) -> ContigIndex:
        try:
            return self.contigs[name]
        except KeyError:
            raise ContigNotInIndexError(f"Unknown contig: {name}") from None

    async def parsed(self, name: str) -> ParsedContig:
        return await self.contig(name).load(self.buffer)


def _read_int32(buffer: bytes, offset: int) -> int:
    try:
        (value,) = _INT32.unpack_from(buffer, offset)
    except struct.error as e:
        raise FormatError(f"Truncated index at byte {offset}") from e
    if value < 0:
        raise FormatError(f"Negative count {value} at byte {offset}")
    return value


def _skip(buffer: bytes, offset: int, length: int) -> int:
    end = offset + length
    if end > len(buffer):
        raise FormatError(f"Index section runs past end of buffer ({end} > {len(buffer)})")
    return end


def _advance_contig(buffer: bytes, offset: int) -> int:
    """Walk one contig section by its counts, returning the offset just past it."""
    n_bin = _read_int32(buffer, offset)
    offset += _INT32.size
    for _ in range(n_bin):
        offset = _skip(buffer, offset, _BIN.size)
        n_chunk = _read_int32(buffer, offset - _INT32.size)
        offset = _skip(buffer, offset, n_chunk * _CHUNK_SIZE)
    n_intv = _read_int32(buffer, offset)
    offset += _INT32.size
    return _skip(buffer, offset, n_intv * _INTERVAL_SIZE)


def open_index(index_bytes: bytes) -> TabixIndex:
    """
    Inflate a BGZF-compressed tabix index and locate every contig section.

    Args:
        index_bytes: The complete, still compressed, ``.tbi`` file.

    Returns:
        A ``TabixIndex`` whose contigs are not yet parsed.

    Raises:
        FormatError: On a bad magic tag or any structural mismatch.
    """
    buffer = concat_uncompressed(inflate_run(index_bytes))

    if buffer[:4] != TABIX_MAGIC:
        raise FormatError("Not a tabix index (bad magic)")
    try:
        fields = _HEADER.unpack_from(buffer, 4)
    except struct.error as e:
        raise FormatError("Truncated tabix header") from e

    n_ref, fmt, col_seq, col_beg, col_end, meta, skip, l_nm = fields
    if n_ref < 0 or l_nm < 0:
        raise FormatError(f"Invalid tabix header (n_ref={n_ref}, l_nm={l_nm})")

    names_start = 4 + _HEADER.size
    names_end = _skip(buffer, names_start, l_nm)
    raw_names = buffer[names_start:names_end].rstrip(b"\0")
    names = tuple(raw_names.decode("utf-8").split("\0")) if raw_names else ()
    if len(names) != n_ref:
        raise FormatError(f"Index declares {n_ref} contigs but names {len(names)}")

    header = TabixHeader(n_ref, fmt, col_seq, col_beg, col_end, meta, skip, names)

    contigs = {}
    offset = names_end
    for name in names:
        start = offset
        offset = _advance_contig(buffer, offset)
        contigs[name] = ContigIndex(name, start, offset)

    logger.debug(
        "Opened tabix index: %d contigs, format %s, comment %r",
        n_ref,
        header.file_format.name,
        header.comment_char,
    )
    return TabixIndex(header, contigs, buffer)


def parse_contig(buffer: bytes, start: int, end: int) -> ParsedContig:
    """Decode the bins and linear index of the contig section ``buffer[start:end]``."""
    if not 0 <= start <= end <= len(buffer):
        raise FormatError(f"Contig section [{start}, {end}) outside index buffer")

    bins = {}
    offset = start
    n_bin = _read_int32(buffer, offset)
    offset += _INT32.size
    for _ in range(n_bin):
        if offset + _BIN.size > end:
            raise FormatError(f"Bin header at byte {offset} runs past contig section")
        bin_id, n_chunk = _BIN.unpack_from(buffer, offset)
        offset += _BIN.size
        if n_chunk < 0 or offset + n_chunk * _CHUNK_SIZE > end:
            raise FormatError(f"Bin {bin_id} declares {n_chunk} chunks past contig section")
        raw = buffer[offset : offset + n_chunk * _CHUNK_SIZE]
        offset += n_chunk * _CHUNK_SIZE
        bins[bin_id] = Bin(bin_id, n_chunk, raw)

    if offset + _INT32.size > end:
        raise FormatError("Linear index count runs past contig section")
    n_intv = _read_int32(buffer, offset)
    offset += _INT32.size
    if offset + n_intv * _INTERVAL_SIZE != end:
        raise FormatError(f"Linear index of {n_intv} intervals does not fill contig section")

    return ParsedContig(bins, buffer[offset:end])
