"""
Core data models for vcfseek.
"""

import re
from collections.abc import Sequence
from pathlib import Path

from pydantic import BaseModel, Field, field_validator, model_validator

from ..errors import ConstraintError, FormatError
from ..reference import reference_from_short_name

_NUCLEOTIDES = re.compile(r"^[ACGTN]+$", re.IGNORECASE)
_GT_SEPARATOR = re.compile(r"[/|]")
_REGION = re.compile(r"^(?P<contig>[^:]+)(?::(?P<pos>[\d,]+)(?:-(?P<end>[\d,]+))?)?$")

_FIXED_COLUMNS = 8  # CHROM POS ID REF ALT QUAL FILTER INFO


class Region(BaseModel):
    """
    A 1-based, fully closed genomic interval [pos, end].

    This matches the VCF POS convention; conversion to 0-based, half-open
    coordinates only happens when bins are resolved.
    """

    contig: str
    pos: int = Field(ge=1, description="1-based start position (inclusive)")
    end: int = Field(ge=1, description="1-based end position (inclusive)")

    @model_validator(mode="after")
    def validate_interval(self) -> "Region":
        if self.end < self.pos:
            raise ValueError(f"End position ({self.end}) must be >= start position ({self.pos})")
        return self

    def __str__(self) -> str:
        return f"{self.contig}:{self.pos}-{self.end}"


def parse_region(text: str) -> tuple[str, int | None, int | None]:
    """
    Split ``contig[:pos[-end]]`` into its parts; thousands separators are ignored.

    Raises:
        ValueError: If the text is not a region.
    """
    match = _REGION.match(text.strip())
    if match is None:
        raise ValueError(f"Invalid region: {text!r}")
    pos = match.group("pos")
    end = match.group("end")
    return (
        match.group("contig"),
        int(pos.replace(",", "")) if pos else None,
        int(end.replace(",", "")) if end else None,
    )


class VariantRecord(BaseModel):
    """
    One VCF data line with canonicalized per-sample genotypes.

    Genotypes are stored as allele strings joined by ``/``, reference allele
    first, e.g. ``0|1`` and ``1/0`` over REF=A ALT=T both become ``A/T``.
    """

    contig: str
    position: int
    ids: list[str] | None = None
    ref: str
    alt: list[str] = Field(min_length=1)
    filter: list[str] | None = None
    is_synthetic: bool = False
    genotypes: dict[str, str] = Field(default_factory=dict)
    line: str = ""

    @classmethod
    def from_line(
        cls, line: str, samples: Sequence[str] = (), is_synthetic: bool = False
    ) -> "VariantRecord":
        """
        Decode a tab-separated VCF data line.

        Args:
            line: The data line, without line terminator.
            samples: Sample names in header column order.
            is_synthetic: Whether the line was generated rather than read.

        Raises:
            FormatError: If columns are missing or POS / GT are malformed.
        """
        fields = line.split("\t")
        required = _FIXED_COLUMNS + 1 + len(samples) if samples else _FIXED_COLUMNS
        if len(fields) < required:
            raise FormatError(f"Expected at least {required} columns, found {len(fields)}")

        try:
            position = int(fields[1])
        except ValueError as e:
            raise FormatError(f"Invalid POS: {fields[1]!r}") from e

        ids = None if fields[2] == "." else fields[2].split(";")
        ref = fields[3].upper()
        # Symbolic alleles such as <DEL> are kept verbatim
        alt = [a.upper() if _NUCLEOTIDES.match(a) else a for a in fields[4].split(",")]
        filters = None if fields[6] in (".", "") else fields[6].split(";")

        genotypes = {
            sample: _decode_genotype(fields[_FIXED_COLUMNS + 1 + i], ref, alt)
            for i, sample in enumerate(samples)
        }

        return cls(
            contig=fields[0],
            position=position,
            ids=ids,
            ref=ref,
            alt=alt,
            filter=filters,
            is_synthetic=is_synthetic,
            genotypes=genotypes,
            line=line,
        )

    def is_pass_filter(self) -> bool:
        return self.filter == ["PASS"]

    def is_filtered(self) -> bool:
        return bool(self.filter) and self.filter != ["PASS"]

    def is_biallelic(self) -> bool:
        return len(self.alt) == 1

    def to_hgvs(self) -> str:
        """
        Genomic HGVS-style description, ``contig:g.<pos><ref>><alt>``.

        Raises:
            ConstraintError: For multi-allelic records.
        """
        if not self.is_biallelic():
            raise ConstraintError(
                f"HGVS description requires a single ALT allele, found {len(self.alt)}"
            )
        return f"{self.contig}:g.{self.position}{self.ref}>{self.alt[0]}"

    def genotype(self, sample: str | None = None) -> str | None:
        """Genotype of ``sample``, or of the first sample when no name is given."""
        if sample is None:
            return next(iter(self.genotypes.values()), None)
        return self.genotypes.get(sample)

    def __str__(self) -> str:
        return f"{self.contig}:{self.position}{self.ref}>{','.join(self.alt)}"


def _decode_genotype(column: str, ref: str, alt: list[str]) -> str:
    # GT must be the first FORMAT field
    gt = column.split(":", 1)[0]
    try:
        indices = sorted(_GT_SEPARATOR.split(gt), key=lambda a: -1 if a == "." else int(a))
        alleles = [_allele(index, ref, alt) for index in indices]
    except (ValueError, IndexError) as e:
        raise FormatError(f"Invalid genotype {gt!r}") from e
    return "/".join(alleles)


def _allele(index: str, ref: str, alt: list[str]) -> str:
    if index == ".":
        return "."
    n = int(index)
    if n == 0:
        return ref
    if n < 0:
        raise IndexError(n)
    return alt[n - 1]


class SourceConfig(BaseModel):
    """
    Location and access settings for a tabix-indexed VCF.
    """

    # Input
    data: str
    index: str | None = None

    # Coordinates
    reference: str | None = None

    # Remote access
    timeout: float = Field(default=60.0, gt=0)
    retries: int = Field(default=1, ge=0)

    @property
    def index_location(self) -> str:
        return self.index if self.index is not None else f"{self.data}.tbi"

    @staticmethod
    def is_remote(location: str) -> bool:
        return location.startswith(("http://", "https://"))

    @field_validator("data", "index")
    @classmethod
    def validate_file_exists(cls, v: str | None) -> str | None:
        if v is not None and not cls.is_remote(v) and not Path(v).exists():
            raise ValueError(f"File not found: {v}")
        return v

    @field_validator("reference")
    @classmethod
    def validate_reference(cls, v: str | None) -> str | None:
        if v is not None and reference_from_short_name(v) is None:
            raise ValueError(f"Unknown reference genome: {v}")
        return v
