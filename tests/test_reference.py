"""Tests for reference genome tables and contig normalization."""

import pytest

from vcfseek.errors import UnknownContigError
from vcfseek.reference import (
    DEFAULT_REFERENCE,
    b37,
    hg19,
    hg38,
    reference_from_contigs,
    reference_from_file,
    reference_from_short_name,
)


class TestNormalizeContig:
    def test_hg19(self):
        assert hg19.normalize_contig("chr1") == "chr1"
        assert hg19.normalize_contig("1") == "chr1"
        assert hg19.normalize_contig("X") == "chrX"
        assert hg19.normalize_contig("MT") == "chrM"

    def test_b37(self):
        assert b37.normalize_contig("1") == "1"
        assert b37.normalize_contig("chr1") == "1"
        assert b37.normalize_contig("chr10") == "10"
        assert b37.normalize_contig("chrM") == "MT"
        assert b37.normalize_contig("GL000207.1") == "GL000207.1"

    def test_hg38(self):
        assert hg38.normalize_contig("7") == "chr7"
        assert hg38.normalize_contig("chrY") == "chrY"

    @pytest.mark.parametrize("reference", [hg19, b37, hg38])
    def test_unknown_contig(self, reference):
        with pytest.raises(UnknownContigError, match="junk"):
            reference.normalize_contig("junk")

    @pytest.mark.parametrize("name", [str(n) for n in range(1, 23)] + ["X", "Y"])
    def test_every_numbered_contig_round_trips(self, name):
        assert b37.normalize_contig(hg19.normalize_contig(name)) == name


class TestContigOrder:
    def test_compare(self):
        assert hg19.compare_contig("chr1", "chr2") < 0
        assert hg19.compare_contig("chr2", "chr10") < 0
        assert hg19.compare_contig("chrX", "chr1") > 0
        assert hg19.compare_contig("chr5", "chr5") == 0

    def test_hg19_puts_mitochondria_first(self):
        assert hg19.contigs()[0] == "chrM"
        assert hg19.compare_contig("chrM", "chr1") < 0
        assert b37.compare_contig("MT", "1") > 0

    def test_compare_unknown(self):
        with pytest.raises(UnknownContigError):
            hg19.compare_contig("chr1", "junk")

    def test_lengths(self):
        assert hg19.contig_length("chr1") == 249250621
        assert b37.contig_length("1") == 249250621
        assert hg38.contig_length("chr1") == 248956422
        with pytest.raises(UnknownContigError):
            b37.contig_length("chr1")


class TestReferenceLookup:
    def test_from_file(self):
        assert reference_from_file("/data/b37/human_g1k_v37.fasta") is b37
        assert reference_from_file("file:///humgen/gsa-hpprojects/ucsc.hg19.fasta") is hg19
        assert reference_from_file(r"C:\refs\hg19.fa") is hg19
        assert reference_from_file("/refs/Homo_sapiens_assembly38.fasta") is hg38
        assert reference_from_file("/refs/mystery.fa") is None

    def test_from_contigs(self):
        assert reference_from_contigs(["1", "2", "GL000207.1"]) is b37
        assert reference_from_contigs(["chr1", "chr1_gl000191_random"]) is hg19
        # Shared by hg19 and hg38
        assert reference_from_contigs(["chr1", "chr2"]) is None
        assert reference_from_contigs(["junk"]) is None

    def test_from_short_name(self):
        assert reference_from_short_name("hg19") is hg19
        assert reference_from_short_name("b37") is b37
        assert reference_from_short_name("hg38") is hg38
        assert reference_from_short_name("GRCh38.p2") is hg38
        assert reference_from_short_name("mm10") is None

    def test_default(self):
        assert hg19.leading_chr and hg38.leading_chr
        assert not b37.leading_chr
        assert DEFAULT_REFERENCE is hg19
