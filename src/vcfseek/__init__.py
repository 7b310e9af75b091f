"""
vcfseek - random-access region queries over tabix-indexed VCF files.

This package reads BGZF-compressed VCFs and their tabix indexes, locally
or over HTTP range requests, decoding only the blocks a region needs.

Example usage:
    $ vcfseek query variants.vcf.gz chr1:100-200
"""

__version__ = "0.3.0"

from .errors import (
    ConstraintError,
    ContigNotInIndexError,
    FormatError,
    UnknownContigError,
    UnsupportedError,
    VcfSeekError,
)
from .io import LocalFileReader, RemoteFileReader, TabixIndexedFile, VariantSource
from .models.core import Region, SourceConfig, VariantRecord
from .reference import ReferenceGenome, b37, hg19, hg38

__all__ = [
    "__version__",
    "ConstraintError",
    "ContigNotInIndexError",
    "FormatError",
    "LocalFileReader",
    "ReferenceGenome",
    "Region",
    "RemoteFileReader",
    "SourceConfig",
    "TabixIndexedFile",
    "UnknownContigError",
    "UnsupportedError",
    "VariantRecord",
    "VariantSource",
    "VcfSeekError",
    "b37",
    "hg19",
    "hg38",
]
