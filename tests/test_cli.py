"""Tests for CLI module."""

import logging

import pytest
from conftest import HEADER_LINES, SINGLE_RECORD, run
from typer.testing import CliRunner

from vcfseek.cli import app
from vcfseek.utils.logging import log_call, setup_logging, timed

runner = CliRunner()


def test_cli_version():
    """Test version command."""
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert "vcfseek" in result.stdout
    assert "0.3.0" in result.stdout


def test_cli_help():
    """Test help command."""
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "tabix-indexed VCF" in result.stdout
    assert "query" in result.stdout
    assert "variant" in result.stdout


def test_cli_header(single_sample_vcf):
    result = runner.invoke(app, ["header", str(single_sample_vcf)])
    assert result.exit_code == 0
    assert result.stdout.splitlines() == HEADER_LINES


def test_cli_query(single_sample_vcf):
    result = runner.invoke(app, ["query", str(single_sample_vcf), "1:1-1000"])
    assert result.exit_code == 0
    assert result.stdout.splitlines() == [SINGLE_RECORD]


def test_cli_query_explicit_index(single_sample_vcf):
    result = runner.invoke(
        app,
        ["query", str(single_sample_vcf), "chr1:100", "--index", f"{single_sample_vcf}.tbi"],
    )
    assert result.exit_code == 0
    assert result.stdout.splitlines() == [SINGLE_RECORD]


def test_cli_query_empty(single_sample_vcf):
    result = runner.invoke(app, ["query", str(single_sample_vcf), "chr1:200-300"])
    assert result.exit_code == 0
    assert result.stdout == ""


def test_cli_query_unknown_contig(single_sample_vcf):
    result = runner.invoke(app, ["query", str(single_sample_vcf), "junk:1-10"])
    assert result.exit_code == 1


def test_cli_query_invalid_region(single_sample_vcf):
    result = runner.invoke(app, ["query", str(single_sample_vcf), "chr1:abc"])
    assert result.exit_code == 1


def test_cli_missing_file(temp_dir):
    result = runner.invoke(app, ["query", str(temp_dir / "missing.vcf.gz"), "chr1"])
    assert result.exit_code == 1


def test_cli_missing_index(single_sample_vcf, temp_dir):
    result = runner.invoke(
        app, ["query", str(single_sample_vcf), "chr1", "--index", str(temp_dir / "none.tbi")]
    )
    assert result.exit_code == 1

    moved = temp_dir / "copy.vcf.gz"
    moved.write_bytes(single_sample_vcf.read_bytes())
    result = runner.invoke(app, ["query", str(moved), "chr1"])
    assert result.exit_code == 1


def test_cli_unknown_reference(single_sample_vcf):
    result = runner.invoke(app, ["query", str(single_sample_vcf), "chr1", "--reference", "mm10"])
    assert result.exit_code == 1


def test_cli_missing_required_args():
    result = runner.invoke(app, ["query"])
    assert result.exit_code != 0


def test_cli_variant_found(single_sample_vcf):
    result = runner.invoke(app, ["variant", str(single_sample_vcf), "chr1", "100", "A", "T"])
    assert result.exit_code == 0
    assert "chr1:100A>T (found)" in result.stdout
    assert "GT: A/T" in result.stdout


def test_cli_variant_not_found(single_sample_vcf):
    result = runner.invoke(app, ["variant", str(single_sample_vcf), "chr1", "100", "A", "G"])
    assert result.exit_code == 1
    assert "Variant not found" in result.stdout


def test_cli_variant_assume_ref(single_sample_vcf):
    args = ["variant", str(single_sample_vcf), "chr1", "100", "A", "G"]
    result = runner.invoke(app, args + ["--assume-ref", "-s", "sample"])
    assert result.exit_code == 0
    assert "chr1:100A>G (synthetic)" in result.stdout
    assert "GT: A/A" in result.stdout


def test_cli_large_header(large_header_vcf):
    result = runner.invoke(app, ["header", str(large_header_vcf)])
    assert result.exit_code == 1


class TestLoggingUtils:
    def test_setup_logging_levels(self):
        setup_logging(verbose=True)
        assert logging.getLogger().level == logging.DEBUG
        setup_logging(verbose=False)
        assert logging.getLogger().level == logging.WARNING

    def test_setup_logging_file(self, temp_dir):
        log_file = temp_dir / "vcfseek.log"
        setup_logging(verbose=True, log_file=str(log_file))
        logging.getLogger("vcfseek.test").debug("written to file")
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "written to file" in log_file.read_text()
        setup_logging(verbose=False)

    def test_timed(self, caplog):
        logger = logging.getLogger("vcfseek.test")
        with caplog.at_level(logging.DEBUG, logger="vcfseek.test"):
            with timed("Loading index", logger):
                pass
        assert "Starting: Loading index" in caplog.text
        assert "Completed: Loading index" in caplog.text

    def test_log_call(self, caplog):
        logger = logging.getLogger("vcfseek.test")

        @log_call(logger)
        async def double(x):
            return 2 * x

        @log_call(logger)
        async def fail():
            raise ValueError("boom")

        with caplog.at_level(logging.DEBUG, logger="vcfseek.test"):
            assert run(double(21)) == 42
            with pytest.raises(ValueError):
                run(fail())

        assert "double completed" in caplog.text
        assert "fail failed: boom" in caplog.text

    def test_log_call_rejects_plain_functions(self):
        with pytest.raises(TypeError):

            @log_call()
            def plain():
                return 1
