"""Exception hierarchy for vcfseek."""

__all__ = [
    "VcfSeekError",
    "FormatError",
    "UnknownContigError",
    "ContigNotInIndexError",
    "UnsupportedError",
    "ConstraintError",
]


class VcfSeekError(Exception):
    """Base class for all vcfseek errors."""


class FormatError(VcfSeekError, ValueError):
    """Malformed index, compressed block or data file header."""


class UnknownContigError(VcfSeekError, ValueError):
    """Contig name has no mapping in the reference genome."""


class ContigNotInIndexError(VcfSeekError, LookupError):
    """Contig is valid for the genome but has no entry in this index."""


class UnsupportedError(VcfSeekError, NotImplementedError):
    """Structurally valid input that is not handled yet."""


class ConstraintError(VcfSeekError, ValueError):
    """Operation is not defined for this record (e.g. multi-allelic HGVS)."""
