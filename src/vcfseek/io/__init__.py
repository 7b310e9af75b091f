"""
I/O module for vcfseek.

Provides byte-range readers, the tabix region reader and the VCF variant source.
"""

from .readers import ByteRangeReader, LocalFileReader, RemoteFileReader, open_reader
from .source import SourceState, VariantSource
from .tabix import TabixIndexedFile

__all__ = [
    "ByteRangeReader",
    "LocalFileReader",
    "RemoteFileReader",
    "SourceState",
    "TabixIndexedFile",
    "VariantSource",
    "open_reader",
]
