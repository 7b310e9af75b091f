"""
Region reads from a BGZF-compressed, tabix-indexed text file.

``TabixIndexedFile`` pairs a data reader with an index reader. The index is
fetched and opened on first use; every region query then resolves chunks
through the index, range-reads each chunk, inflates only the blocks it
spans and keeps the lines that truly overlap the region.
"""

import asyncio
import logging
import re
from collections.abc import Callable

from ..core.bgzf import (
    MAX_BLOCK_SIZE,
    Chunk,
    block_frame,
    concat_uncompressed,
    inflate_one,
    inflate_run,
)
from ..core.binning import chunks_for_interval
from ..core.index import TabixFormat, TabixIndex, open_index
from ..errors import FormatError, UnsupportedError
from ..utils.logging import log_call, timed
from .readers import ByteRangeReader

logger = logging.getLogger(__name__)

__all__ = [
    "OverlapPredicate",
    "TabixIndexedFile",
    "fetch_header",
    "fetch_lines",
    "generic_line_in_region",
    "overlap_predicate",
    "vcf_line_in_region",
]

OverlapPredicate = Callable[[str, str, int, int], bool]

_LINE_BREAK = re.compile(r"\r?\n")
_INFO_END = re.compile(r"(?:^|;)END=(\d+)")


def generic_line_in_region(line: str, contig: str, pos: int, end: int) -> bool:
    return True


def vcf_line_in_region(line: str, contig: str, pos: int, end: int) -> bool:
    """True if a VCF data line overlaps the 1-based inclusive region ``[pos, end]``."""
    fields = line.split("\t", 8)
    if len(fields) < 8:
        return False  # Malformed VCF line

    if fields[0] != contig:
        return False

    try:
        start = int(fields[1])
    except ValueError:
        return False
    if start > end:
        return False

    # Structural variants carry their extent in INFO/END
    found = _INFO_END.search(fields[7])
    stop = int(found.group(1)) if found else start + len(fields[3]) - 1
    return stop >= pos


_PREDICATES: dict[TabixFormat, OverlapPredicate] = {
    TabixFormat.GENERIC: generic_line_in_region,
    TabixFormat.SAM: generic_line_in_region,
    TabixFormat.VCF: vcf_line_in_region,
}


def overlap_predicate(file_format: TabixFormat) -> OverlapPredicate:
    return _PREDICATES.get(file_format, generic_line_in_region)


def _split_lines(text: str) -> list[str]:
    return _LINE_BREAK.split(text)


async def fetch_header(reader: ByteRangeReader, comment_char: str) -> list[str]:
    """
    Read the header lines, which must all sit in the first BGZF block.

    Returns every line up to and including the last one that starts with
    ``comment_char``.

    Raises:
        UnsupportedError: If the first block holds nothing but header, i.e.
            the header may continue into the next block.
    """
    buffer = await reader.bytes(0, MAX_BLOCK_SIZE)
    # The block may end part way through a multibyte character
    lines = _split_lines(inflate_one(buffer, 0).decode("utf-8", errors="replace"))
    if lines and not lines[-1]:
        lines.pop()

    last = -1
    for i, line in enumerate(lines):
        if line.startswith(comment_char):
            last = i
    if last == len(lines) - 1:
        raise UnsupportedError("Headers larger than a single BGZF block are not supported")

    return lines[: last + 1]


async def fetch_lines(
    chunk: Chunk,
    reader: ByteRangeReader,
    predicate: OverlapPredicate,
    contig: str,
    pos: int,
    end: int,
) -> list[str]:
    """
    Read, inflate and filter the lines of a single chunk.

    The compressed range starts at the chunk's first block. When the chunk
    ends part way into a block, a whole maximal block is added to the read
    so that last block arrives complete.
    """
    span = chunk.end.coffset - chunk.begin.coffset
    partial_last = chunk.end.uoffset > 0
    length = span + (MAX_BLOCK_SIZE if partial_last else 0)
    if span < 0 or length <= 0:
        return []

    buffer = await reader.bytes(chunk.begin.coffset, length)

    # Tally the decompressed size of every block before the chunk's last one
    stop = 0
    cursor = 0
    while cursor < span:
        frame = block_frame(buffer, cursor)
        stop += frame.uncompressed_size
        cursor += frame.compressed_size
    if cursor != span:
        raise FormatError(f"Chunk end {chunk.end} does not fall on a block boundary")
    stop += chunk.end.uoffset

    blocks = inflate_run(buffer, span + 1 if partial_last else span)
    data = concat_uncompressed(blocks)[chunk.begin.uoffset : stop]

    return [
        line
        for line in _split_lines(data.decode("utf-8"))
        if line and predicate(line, contig, pos, end)
    ]


class TabixIndexedFile:
    """A BGZF data file and its tabix index, both read through byte-range readers."""

    def __init__(self, data_source: ByteRangeReader, index_source: ByteRangeReader):
        self._source = data_source
        self._index_source = index_source
        self._index: TabixIndex | None = None
        self._index_error: Exception | None = None
        self._lock = asyncio.Lock()

    @property
    def source(self) -> ByteRangeReader:
        return self._source

    async def index(self) -> TabixIndex:
        """Fetch and open the index once; later calls share the result (or failure)."""
        if self._index is None:
            async with self._lock:
                if self._index_error is not None:
                    raise self._index_error
                if self._index is None:
                    try:
                        with timed(f"Loading index {self._index_source.name()}", logger):
                            buffer = await self._index_source.bytes()
                            self._index = open_index(buffer)
                    except FormatError as e:
                        self._index_error = e
                        raise
        return self._index

    async def contigs(self) -> list[str]:
        index = await self.index()
        return list(index.header.names)

    async def overlap_predicate(self) -> OverlapPredicate:
        index = await self.index()
        return overlap_predicate(index.header.file_format)

    async def chunks(self, contig: str, pos: int, end: int) -> list[Chunk]:
        """
        Chunks that may hold records of ``contig`` overlapping ``[pos, end]``.

        Raises:
            ContigNotInIndexError: If the index has no entry for ``contig``.
        """
        index = await self.index()
        parsed = await index.parsed(contig)
        return chunks_for_interval(parsed, pos, end)

    @log_call(logger)
    async def header(self) -> list[str]:
        index = await self.index()
        return await fetch_header(self._source, index.header.comment_char)

    async def records(self, contig: str, pos: int, end: int) -> list[str]:
        """
        Lines of ``contig`` overlapping the 1-based inclusive region ``[pos, end]``.

        Lines come back in chunk (virtual offset) order.
        """
        chunks = await self.chunks(contig, pos, end)
        predicate = await self.overlap_predicate()

        with timed(f"Reading {len(chunks)} chunks for {contig}:{pos}-{end}", logger):
            per_chunk = await asyncio.gather(
                *(fetch_lines(chunk, self._source, predicate, contig, pos, end) for chunk in chunks)
            )

        lines = [line for chunk_lines in per_chunk for line in chunk_lines]
        logger.debug("%s:%d-%d: %d lines", contig, pos, end, len(lines))
        return lines
