"""
Variant queries over a tabix-indexed VCF.

``VariantSource`` validates the VCF header, extracts the sample names,
settles which reference genome the file uses and then answers region and
single-variant queries, optionally synthesizing a REF/REF record for a
variant that is absent from the file.
"""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .. import reference as ref_tables
from ..errors import ContigNotInIndexError, FormatError
from ..models.core import Region, SourceConfig, VariantRecord, parse_region
from ..reference import ReferenceGenome
from ..utils.logging import log_call, timed
from .readers import open_reader
from .tabix import TabixIndexedFile

logger = logging.getLogger(__name__)

__all__ = ["SourceState", "VariantSource"]

FILEFORMAT_PREFIX = "##fileformat=VCF"
REFERENCE_PREFIX = "##reference="
CONTIG_PREFIX = "##contig="
COLUMN_HEADER = "#CHROM"


class SourceState(str, Enum):
    """Lifecycle of a source's header parse."""

    UNOPENED = "unopened"
    HEADER_PARSING = "header_parsing"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class _Header:
    lines: list[str]
    samples: list[str]
    reference: ReferenceGenome


def _contig_ids(lines: Sequence[str]) -> list[str]:
    ids = []
    for line in lines:
        if not line.startswith(CONTIG_PREFIX):
            continue
        body = line[len(CONTIG_PREFIX) :].strip("<>")
        for item in body.split(","):
            key, _, value = item.partition("=")
            if key == "ID" and value:
                ids.append(value)
                break
    return ids


def infer_reference(lines: Sequence[str]) -> ReferenceGenome:
    """
    Pick the reference genome of a VCF from its header.

    In order: a known ``##reference=`` file name, then a unique match of the
    ``##contig`` IDs, then the default (hg19).
    """
    for line in lines:
        if line.startswith(REFERENCE_PREFIX):
            found = ref_tables.reference_from_file(line[len(REFERENCE_PREFIX) :])
            if found is not None:
                logger.info("Reference %s inferred from %s", found.short_name, line)
                return found
            break

    contigs = _contig_ids(lines)
    if contigs:
        found = ref_tables.reference_from_contigs(contigs)
        if found is not None:
            logger.info(
                "Reference %s inferred from %d contig lines", found.short_name, len(contigs)
            )
            return found

    logger.info("Could not infer reference, assuming %s", ref_tables.DEFAULT_REFERENCE.short_name)
    return ref_tables.DEFAULT_REFERENCE


class VariantSource:
    """
    Region and variant queries against a tabix-indexed VCF.

    The header is parsed once, on the first call that needs it; a failed
    parse is remembered and re-raised by every later call.
    """

    def __init__(self, source: TabixIndexedFile, reference: ReferenceGenome | None = None):
        self._source = source
        self._explicit_reference = reference
        self._state = SourceState.UNOPENED
        self._header: _Header | None = None
        self._error: Exception | None = None
        self._lock = asyncio.Lock()

    @classmethod
    def open(
        cls,
        data: str | Path,
        index: str | Path | None = None,
        reference: str | ReferenceGenome | None = None,
        timeout: float = 60.0,
        retries: int = 1,
    ) -> "VariantSource":
        """
        Build a source for a local path or URL without performing any I/O.

        Args:
            data: BGZF-compressed VCF, path or http(s) URL.
            index: Tabix index; defaults to ``data`` + ``.tbi``.
            reference: Genome or short name (``hg19``, ``b37``, ``hg38``);
                inferred from the header when omitted.
            timeout: HTTP timeout in seconds.
            retries: Retries on HTTP transport errors.
        """
        if isinstance(reference, str):
            name = reference
            reference = ref_tables.reference_from_short_name(name)
            if reference is None:
                raise ValueError(f"Unknown reference genome: {name}")

        index_location = index if index is not None else f"{data}.tbi"
        tabix = TabixIndexedFile(
            open_reader(data, timeout=timeout, retries=retries),
            open_reader(index_location, timeout=timeout, retries=retries),
        )
        return cls(tabix, reference)

    @classmethod
    def from_config(cls, config: SourceConfig) -> "VariantSource":
        return cls.open(
            config.data,
            config.index_location,
            reference=config.reference,
            timeout=config.timeout,
            retries=config.retries,
        )

    @property
    def state(self) -> SourceState:
        return self._state

    @property
    def tabix(self) -> TabixIndexedFile:
        return self._source

    async def _ready(self) -> _Header:
        if self._header is not None:
            return self._header
        async with self._lock:
            if self._error is not None:
                raise self._error
            if self._header is None:
                self._state = SourceState.HEADER_PARSING
                try:
                    with timed("Parsing VCF header", logger):
                        self._header = self._parse_header(await self._source.header())
                except Exception as e:
                    self._state = SourceState.FAILED
                    self._error = e
                    raise
                self._state = SourceState.READY
        return self._header

    def _parse_header(self, lines: list[str]) -> _Header:
        if not lines or not lines[0].startswith(FILEFORMAT_PREFIX):
            raise FormatError("Source is not a valid VCF file")

        reference = self._explicit_reference or infer_reference(lines)

        # Last line should be the column labels
        columns = lines[-1].split("\t")
        if columns[0] != COLUMN_HEADER or len(columns) < 8:
            raise FormatError("Invalid column header line (#CHROM...)")

        samples = columns[9:]
        logger.debug(
            "Header: %d lines, %d samples, reference %s",
            len(lines),
            len(samples),
            reference.short_name,
        )
        return _Header(lines, samples, reference)

    async def header(self) -> list[str]:
        return list((await self._ready()).lines)

    async def samples(self) -> list[str]:
        return list((await self._ready()).samples)

    async def reference(self) -> ReferenceGenome:
        return (await self._ready()).reference

    async def normalize_contig(self, contig: str) -> str:
        """
        Translate a contig name to this file's reference, e.g. ``1`` to ``chr1``.

        Raises:
            UnknownContigError: If the reference does not know the contig.
        """
        return (await self.reference()).normalize_contig(contig)

    async def normalize_regions(
        self, regions: str | Region | Sequence[str | Region]
    ) -> Region | list[Region]:
        """
        Normalize one region, or normalize, sort and merge a list of regions.

        A textual region is ``contig[:pos[-end]]``; ``end`` defaults to
        ``pos`` and a bare contig spans the whole contig. Lists are sorted
        by reference contig order, then position, and regions on the same
        contig that start inside the previous one are merged into it.
        """
        reference = await self.reference()
        if isinstance(regions, (str, Region)):
            return self._normalize_region(regions, reference)

        normalized = sorted(
            (self._normalize_region(region, reference) for region in regions),
            key=lambda r: (reference.contig_order(r.contig), r.pos, r.end),
        )

        merged: list[Region] = []
        for region in normalized:
            if merged:
                last = merged[-1]
                if last.contig == region.contig and last.pos <= region.pos <= last.end:
                    merged[-1] = last.model_copy(update={"end": max(last.end, region.end)})
                    continue
            merged.append(region)
        return merged

    @staticmethod
    def _normalize_region(region: str | Region, reference: ReferenceGenome) -> Region:
        if isinstance(region, Region):
            return region.model_copy(update={"contig": reference.normalize_contig(region.contig)})

        contig, pos, end = parse_region(region)
        contig = reference.normalize_contig(contig)
        if pos is None:
            return Region(contig=contig, pos=1, end=reference.contig_length(contig))
        return Region(contig=contig, pos=pos, end=pos if end is None else end)

    async def variants(self, contig: str, pos: int, end: int) -> list[VariantRecord]:
        """
        Variants overlapping the 1-based inclusive region ``[pos, end]``.

        A contig the reference knows but the index lacks gives an empty list.

        Raises:
            UnknownContigError: If the contig is unknown to the reference.
        """
        normalized = await self.normalize_contig(contig)
        samples = await self.samples()
        try:
            lines = await self._source.records(normalized, pos, end)
        except ContigNotInIndexError:
            logger.debug("Contig %s not in index, no variants", normalized)
            return []
        return [VariantRecord.from_line(line, samples) for line in lines]

    @log_call(logger)
    async def query(self, regions: str | Region | Sequence[str | Region]) -> list[VariantRecord]:
        """Variants of one or more regions, after normalizing and merging them."""
        normalized = await self.normalize_regions(regions)
        if isinstance(normalized, Region):
            normalized = [normalized]

        results = []
        for region in normalized:
            results.extend(await self.variants(region.contig, region.pos, region.end))
        return results

    async def _synth_variant(self, contig: str, pos: int, ref: str, alt: str) -> VariantRecord:
        normalized = await self.normalize_contig(contig)
        samples = await self.samples()

        line = f"{normalized}\t{pos}\t.\t{ref}\t{alt}\t.\t.\t."
        if samples:
            line += "\tGT" + "\t0/0" * len(samples)
        return VariantRecord.from_line(line, samples, is_synthetic=True)

    async def variant(
        self,
        contig: str,
        pos: int,
        ref: str,
        alt: str,
        assume_hom_ref: bool = False,
    ) -> VariantRecord | None:
        """
        The first variant overlapping ``pos`` with exactly this REF and ALT among its alleles.

        Args:
            contig: Contig name, in any naming the reference can translate.
            pos: 1-based VCF position.
            ref: Reference allele.
            alt: Alternate allele.
            assume_hom_ref: When no such variant exists, return a synthetic
                record with a REF/REF genotype for every sample instead of None.
        """
        for variant in await self.variants(contig, pos, pos):
            if variant.ref == ref and alt in variant.alt:
                return variant
        if assume_hom_ref:
            return await self._synth_variant(contig, pos, ref, alt)
        return None
