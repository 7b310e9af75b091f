"""
Region to storage range resolution.

Implements the UCSC/tabix 5-level binning scheme (bins of 512 Mb, 64 Mb,
8 Mb, 1 Mb and 128 kb, plus the root bin 0) and the chunk optimisation
that prunes chunks against the linear index and merges what remains into
a sorted, non-overlapping list of virtual offset spans.
"""

import logging
from collections.abc import Iterable

from .bgzf import Chunk, VirtualOffset
from .index import ParsedContig

logger = logging.getLogger(__name__)

__all__ = ["bins_for_region", "chunks_for_interval", "optimize_chunks"]

# (first bin id of the level, right shift giving the tile at that level)
_LEVELS = ((1, 26), (9, 23), (73, 20), (585, 17), (4681, 14))


def bins_for_region(begin: int, end: int) -> list[int]:
    """
    List every bin that may hold features overlapping ``[begin, end)``.

    Args:
        begin: 0-based inclusive start.
        end: 0-based exclusive end; must be greater than ``begin``.
    """
    last = end - 1
    bins = [0]
    for base, shift in _LEVELS:
        bins.extend(range(base + (begin >> shift), base + (last >> shift) + 1))
    return bins


def optimize_chunks(chunks: Iterable[Chunk], min_offset: VirtualOffset) -> list[Chunk]:
    """
    Drop chunks ending before ``min_offset`` and merge overlapping or adjacent ones.

    The result is sorted by begin offset and pairwise non-overlapping; a merged
    chunk keeps the largest end seen.
    """
    merged: list[Chunk] = []
    for chunk in sorted(chunks):
        if chunk.end < min_offset:
            continue
        if merged and chunk.begin <= merged[-1].end:
            last = merged[-1]
            if chunk.end > last.end:
                merged[-1] = Chunk(last.begin, chunk.end)
        else:
            merged.append(chunk)
    return merged


def chunks_for_interval(contig: ParsedContig, pos: int, end: int) -> list[Chunk]:
    """
    Resolve a 1-based, inclusive region to the chunks that must be read.

    Args:
        contig: Parsed index section of the queried contig.
        pos: 1-based inclusive start.
        end: 1-based inclusive end.
    """
    begin = max(pos - 1, 0)
    stop = max(end, begin + 1)

    candidates = []
    for bin_id in bins_for_region(begin, stop):
        found = contig.bins.get(bin_id)
        if found is not None:
            candidates.extend(found.chunks)

    chunks = optimize_chunks(candidates, contig.min_offset(begin))
    logger.debug(
        "Region %d-%d: %d candidate chunks, %d after optimisation",
        pos,
        end,
        len(candidates),
        len(chunks),
    )
    return chunks
