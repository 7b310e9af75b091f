"""
Core tabix machinery: BGZF framing, index parsing and region resolution.
"""

from .bgzf import Chunk, VirtualOffset, block_frame, inflate_one, inflate_run
from .binning import bins_for_region, chunks_for_interval, optimize_chunks
from .index import TabixFormat, TabixIndex, open_index

__all__ = [
    "Chunk",
    "TabixFormat",
    "TabixIndex",
    "VirtualOffset",
    "bins_for_region",
    "block_frame",
    "chunks_for_interval",
    "inflate_one",
    "inflate_run",
    "open_index",
    "optimize_chunks",
]
