"""
BGZF block framing and virtual file offsets.

A BGZF file is a series of gzip members, each no larger than 64 KiB, whose
"BC" extra subfield records the total block size. That lets us walk block
boundaries without inflating anything, and address any byte of the
decompressed stream with a 64-bit virtual offset:

    high 48 bits  offset of the block in the compressed file
    low 16 bits   offset inside the decompressed block
"""

import logging
import struct
import zlib
from dataclasses import dataclass
from typing import NamedTuple, Sequence

from ..errors import FormatError

logger = logging.getLogger(__name__)

__all__ = [
    "MAX_BLOCK_SIZE",
    "BlockFrame",
    "Chunk",
    "InflatedBlock",
    "VirtualOffset",
    "block_frame",
    "concat_uncompressed",
    "inflate_one",
    "inflate_run",
]

MAX_BLOCK_SIZE = 1 << 16
"""Upper bound of one compressed BGZF block, header and footer included."""

_GZIP_HEADER = struct.Struct("<BBBBIBBH")  # ID1 ID2 CM FLG MTIME XFL OS XLEN
_SUBFIELD = struct.Struct("<BBH")  # SI1 SI2 SLEN
_UINT16 = struct.Struct("<H")
_UINT32 = struct.Struct("<I")
_UINT64 = struct.Struct("<Q")

_FEXTRA = 0x04
_BC_TAG = (66, 67)  # "BC"


@dataclass(frozen=True, order=True)
class VirtualOffset:
    """Position in a BGZF file: compressed block offset, then offset in the block."""

    coffset: int
    uoffset: int

    @classmethod
    def from_int(cls, value: int) -> "VirtualOffset":
        return cls(value >> 16, value & 0xFFFF)

    @classmethod
    def from_bytes(cls, buffer: bytes, offset: int = 0) -> "VirtualOffset":
        """Decode a little-endian 64-bit virtual offset at ``offset``."""
        try:
            (value,) = _UINT64.unpack_from(buffer, offset)
        except struct.error as e:
            raise FormatError(f"Truncated virtual offset at byte {offset}") from e
        return cls.from_int(value)

    def compare(self, other: "VirtualOffset") -> int:
        """Negative, zero or positive as self sorts before, equal to or after other."""
        return (self.coffset - other.coffset) or (self.uoffset - other.uoffset)

    def __int__(self) -> int:
        return (self.coffset << 16) | self.uoffset

    def __str__(self) -> str:
        return f"{self.coffset}:{self.uoffset}"


@dataclass(frozen=True, order=True)
class Chunk:
    """Span of virtual offsets [begin, end) holding records for one bin."""

    begin: VirtualOffset
    end: VirtualOffset

    @classmethod
    def from_bytes(cls, buffer: bytes, offset: int = 0) -> "Chunk":
        return cls(
            VirtualOffset.from_bytes(buffer, offset),
            VirtualOffset.from_bytes(buffer, offset + 8),
        )


class BlockFrame(NamedTuple):
    compressed_size: int
    uncompressed_size: int


class InflatedBlock(NamedTuple):
    offset: int
    compressed_size: int
    data: bytes


def block_frame(buffer: bytes, position: int = 0) -> BlockFrame:
    """
    Read the sizes of the BGZF block starting at ``position`` without inflating it.

    Args:
        buffer: Compressed bytes.
        position: Offset of the block's gzip header within ``buffer``.

    Returns:
        The block's total compressed size and its ISIZE footer.

    Raises:
        FormatError: If the header is not gzip, carries no "BC" subfield,
            or the block runs past the end of ``buffer``.
    """
    try:
        id1, id2, cm, flg, _mtime, _xfl, _os, xlen = _GZIP_HEADER.unpack_from(buffer, position)
    except struct.error as e:
        raise FormatError(f"Truncated BGZF header at byte {position}") from e

    if (id1, id2, cm) != (0x1F, 0x8B, 8) or not flg & _FEXTRA:
        raise FormatError(f"No BGZF block at byte {position}")

    bsize = None
    cursor = position + _GZIP_HEADER.size
    extra_end = cursor + xlen
    while cursor + _SUBFIELD.size <= extra_end:
        si1, si2, slen = _SUBFIELD.unpack_from(buffer, cursor)
        cursor += _SUBFIELD.size
        if (si1, si2) == _BC_TAG and slen == 2:
            (bsize,) = _UINT16.unpack_from(buffer, cursor)
            break
        cursor += slen

    if bsize is None:
        raise FormatError(f"Unable to determine block size at byte {position}")

    compressed_size = bsize + 1
    try:
        (uncompressed_size,) = _UINT32.unpack_from(buffer, position + compressed_size - 4)
    except struct.error as e:
        raise FormatError(f"Truncated BGZF block at byte {position}") from e

    return BlockFrame(compressed_size, uncompressed_size)


def inflate_one(buffer: bytes, position: int = 0) -> bytes:
    """Decompress exactly one BGZF block starting at ``position``."""
    frame = block_frame(buffer, position)
    member = buffer[position : position + frame.compressed_size]
    try:
        data = zlib.decompress(member, wbits=31)
    except zlib.error as e:
        raise FormatError(f"Gzip error in block at byte {position}: {e}") from e

    if len(data) != frame.uncompressed_size:
        raise FormatError(
            f"Block at byte {position} inflated to {len(data)} bytes, "
            f"expected {frame.uncompressed_size}"
        )
    return data


def inflate_run(buffer: bytes, stop_before: int | None = None) -> list[InflatedBlock]:
    """
    Decompress back-to-back blocks from the start of ``buffer``.

    Stops once the next block would start at or after ``stop_before``
    (default: the end of the buffer).
    """
    limit = len(buffer) if stop_before is None else min(stop_before, len(buffer))

    blocks = []
    position = 0
    while position < limit:
        data = inflate_one(buffer, position)
        compressed_size = block_frame(buffer, position).compressed_size
        blocks.append(InflatedBlock(position, compressed_size, data))
        position += compressed_size

    logger.debug("Inflated %d BGZF blocks (%d compressed bytes)", len(blocks), position)
    return blocks


def concat_uncompressed(blocks: Sequence[InflatedBlock]) -> bytes:
    return b"".join(block.data for block in blocks)
