#!/usr/bin/env python

import os

import pytest

from ncbitaxonomy.errors import NcbiTaxonomyError, NotFound, SequenceFormatError, TaxonomyIOError, UnmappedRead
from ncbitaxonomy.filters import (
    FastaFilterConfig, FastqFilterConfig, FilterStats, UnmappedPolicy,
    filter_fasta, filter_fastq, filtered_output_name
)
from ncbitaxonomy.reports import ReportFormat


@pytest.fixture
def tagged_fasta():
    return (
        ">NP_1.1 protein A [Enterobacteriaceae]\nMKV\n"
        ">NP_2.1 protein B [Escherichia]\nMKA\n"
        ">XP_3.1 protein C [Escherichia coli]\nMKC\nLLA\n"
        ">NP_4.1 protein D [Viruses]\nMKD\n"
    )


class TestFilterFasta:
    """Test keeping the FASTA records below an ancestor."""

    def test_keeps_descendants_in_order(self, bacteria, tsv_factory, tagged_fasta):
        input_fasta = tsv_factory.create_plain("input.fasta", tagged_fasta)
        output = tsv_factory.get_path("output.fasta")
        stats = filter_fasta(bacteria, input_fasta, "Enterobacteriaceae", output=output)
        assert tsv_factory.read_plain(output) == (
            ">NP_1.1 protein A [Enterobacteriaceae]\nMKV\n"
            ">NP_2.1 protein B [Escherichia]\nMKA\n"
            ">XP_3.1 protein C [Escherichia coli]\nMKC\nLLA\n"
        )
        assert (stats.total, stats.written, stats.dropped) == (4, 3, 1)
        assert str(stats) == "3 records written out of 4 total records"

    def test_exclude_predicted(self, bacteria, tsv_factory, tagged_fasta):
        input_fasta = tsv_factory.create_plain("input.fasta", tagged_fasta)
        output = tsv_factory.get_path("output.fasta")
        config = FastaFilterConfig(exclude_predicted=True)
        stats = filter_fasta(bacteria, input_fasta, "Enterobacteriaceae", output=output, config=config)
        assert ">XP_3.1" not in tsv_factory.read_plain(output)
        assert (stats.written, stats.excluded) == (2, 1)

    def test_exclude_curated(self, bacteria, tsv_factory, tagged_fasta):
        input_fasta = tsv_factory.create_plain("input.fasta", tagged_fasta)
        output = tsv_factory.get_path("output.fasta")
        config = FastaFilterConfig(exclude_curated=True)
        stats = filter_fasta(bacteria, input_fasta, "Enterobacteriaceae", output=output, config=config)
        assert tsv_factory.read_plain(output) == ">XP_3.1 protein C [Escherichia coli]\nMKC\nLLA\n"
        assert stats.excluded == 3

    def test_unresolved_records_are_dropped(self, bacteria, tsv_factory):
        input_fasta = tsv_factory.create_plain(
            "input.fasta", ">NP_1.1 protein [Homo sapiens]\nMKV\n>NP_2.1 protein\nMKA\n"
        )
        output = tsv_factory.get_path("output.fasta")
        stats = filter_fasta(bacteria, input_fasta, "root", output=output)
        assert tsv_factory.read_plain(output) == ""
        assert stats == FilterStats(total=2, written=0, dropped=0, unresolved=2, excluded=0)

    def test_accession_table(self, bacteria, tsv_factory, tagged_fasta):
        input_fasta = tsv_factory.create_plain("input.fasta", tagged_fasta)
        output = tsv_factory.get_path("output.fasta")
        stats = filter_fasta(bacteria, input_fasta, "Viruses", output=output, accession_taxids={"NP_1": 14})
        assert tsv_factory.read_plain(output) == (
            ">NP_1.1 protein A [Enterobacteriaceae]\nMKV\n"
            ">NP_4.1 protein D [Viruses]\nMKD\n"
        )
        assert stats.written == 2

    def test_to_stdout(self, bacteria, tsv_factory, tagged_fasta, capsys):
        input_fasta = tsv_factory.create_gzip("input.fasta.gz", tagged_fasta)
        filter_fasta(bacteria, input_fasta, "Viruses")
        assert capsys.readouterr().out == ">NP_4.1 protein D [Viruses]\nMKD\n"

    def test_unknown_ancestor_creates_no_output(self, bacteria, tsv_factory, tagged_fasta):
        input_fasta = tsv_factory.create_plain("input.fasta", tagged_fasta)
        output = tsv_factory.get_path("output.fasta")
        with pytest.raises(NotFound):
            filter_fasta(bacteria, input_fasta, "Homo sapiens", output=output)
        assert not os.path.exists(output)


class TestFilteredOutputName:
    def test_names(self):
        assert filtered_output_name("/data/reads.R1.fastq.gz") == "/data/reads.filtered.R1.fastq.gz"
        assert filtered_output_name("/data/reads.fastq", "out") == "out/reads.filtered.fastq"
        assert filtered_output_name("reads") == "reads.filtered"


class TestFilterFastq:
    """Test keeping the FASTQ reads classified below an ancestor."""

    def test_single_file(self, bacteria, tsv_factory, kraken2_report, fastq_content):
        fastq = tsv_factory.create_plain("reads.fastq", fastq_content)
        report = tsv_factory.create_plain("report.kraken2", kraken2_report)
        [stats] = filter_fastq(bacteria, [fastq], 7, report)
        output = tsv_factory.read_plain(tsv_factory.get_path("reads.filtered.fastq"))
        assert output == "@r1 extra\nACGTACGT\n+\nIIIIIIII\n@r5 extra\nACGTACGT\n+\nIIIIIIII\n"
        assert (stats.total, stats.written, stats.dropped) == (5, 2, 3)

    def test_paired_files(self, bacteria, tsv_factory, kraken2_report):
        report = tsv_factory.create_plain("report.kraken2", kraken2_report)
        fastq_files = [
            tsv_factory.create_gzip(
                f"reads.R{mate}.fastq.gz",
                "".join(f"@{read_id}/{mate}\nACGT\n+\nIIII\n" for read_id in ("r1", "r2", "r3")),
            )
            for mate in (1, 2)
        ]
        all_stats = filter_fastq(bacteria, fastq_files, 6, report, output_dir=tsv_factory.get_path("out"))
        assert [stats.written for stats in all_stats] == [2, 2]
        assert tsv_factory.read_gzip(tsv_factory.get_path("out/reads.filtered.R1.fastq.gz")) == \
            "@r1/1\nACGT\n+\nIIII\n@r2/1\nACGT\n+\nIIII\n"
        assert tsv_factory.read_gzip(tsv_factory.get_path("out/reads.filtered.R2.fastq.gz")) == \
            "@r1/2\nACGT\n+\nIIII\n@r2/2\nACGT\n+\nIIII\n"

    def test_unmapped_read_fails_without_output(self, bacteria, tsv_factory, kraken2_report, fastq_content):
        first = tsv_factory.create_plain("in/a.fastq", fastq_content)
        second = tsv_factory.create_plain("in/b.fastq", fastq_content + "@r6\nACGT\n+\nIIII\n")
        report = tsv_factory.create_plain("report.kraken2", kraken2_report)
        out_dir = tsv_factory.get_path("out")
        with pytest.raises(UnmappedRead) as excinfo:
            filter_fastq(bacteria, [first, second], 7, report, output_dir=out_dir)
        assert excinfo.value.read_id == "r6"
        assert os.listdir(out_dir) == []

    def test_skip_unmapped(self, bacteria, tsv_factory, kraken2_report, fastq_content):
        fastq = tsv_factory.create_plain("reads.fastq", fastq_content + "@r6\nACGT\n+\nIIII\n")
        report = tsv_factory.create_plain("report.kraken2", kraken2_report)
        config = FastqFilterConfig(unmapped_policy=UnmappedPolicy.SKIP)
        [stats] = filter_fastq(bacteria, [fastq], 7, report, config=config)
        assert (stats.total, stats.written, stats.unresolved) == (6, 2, 1)

    def test_centrifuge_to_stdout(self, bacteria, tsv_factory, capsys):
        fastq = tsv_factory.create_plain("reads.fastq", "@r1\nACGT\n+\nIIII\n@r2\nACGT\n+\nIIII\n")
        report = tsv_factory.create_plain(
            "report.centrifuge",
            "readID\tseqID\ttaxID\tscore\t2ndBestScore\thitLength\tqueryLength\tnumMatches\n"
            "r1\tNC_1\t14\t100\t0\t100\t150\t1\n"
            "r2\tNC_2\t12\t100\t0\t100\t150\t1\n",
        )
        config = FastqFilterConfig(report_format=ReportFormat.CENTRIFUGE)
        filter_fastq(bacteria, [fastq], 12, report, config=config, to_stdout=True)
        assert capsys.readouterr().out == "@r1\nACGT\n+\nIIII\n@r2\nACGT\n+\nIIII\n"
        assert not os.path.exists(tsv_factory.get_path("reads.filtered.fastq"))

    def test_stdout_needs_single_input(self, bacteria, tsv_factory, kraken2_report, fastq_content):
        fastq = tsv_factory.create_plain("reads.fastq", fastq_content)
        report = tsv_factory.create_plain("report.kraken2", kraken2_report)
        with pytest.raises(NcbiTaxonomyError):
            filter_fastq(bacteria, [fastq, fastq], 7, report, to_stdout=True)

    def test_unknown_ancestor_before_report(self, bacteria, tsv_factory, fastq_content):
        fastq = tsv_factory.create_plain("reads.fastq", fastq_content)
        with pytest.raises(NotFound):
            filter_fastq(bacteria, [fastq], 9606, tsv_factory.get_path("missing.kraken2"))
        assert not os.path.exists(tsv_factory.get_path("reads.filtered.fastq"))


CORRUPT_GZIP = b"\x1f\x8b\x08\x00\x00\x00\x00\x00\x00\xff" + b"\xff\xff\xff\xff"


class TestUnreadableInput:
    """Undecodable or corrupt inputs are reported as taxonomy errors."""

    def test_fastq_not_text(self, bacteria, tsv_factory, kraken2_report, tmp_path):
        fastq = tmp_path / "reads.fastq"
        fastq.write_bytes(b"@r1\nAC\xffGT\n+\nIIII\n")
        report = tsv_factory.create_plain("report.kraken2", kraken2_report)
        with pytest.raises(SequenceFormatError, match="not a text file"):
            filter_fastq(bacteria, [str(fastq)], 7, report)
        assert not os.path.exists(tsv_factory.get_path("reads.filtered.fastq"))

    def test_corrupt_gzip_fasta(self, bacteria, tsv_factory, tmp_path):
        fasta = tmp_path / "input.fasta.gz"
        fasta.write_bytes(CORRUPT_GZIP)
        output = tsv_factory.get_path("output.fasta")
        with pytest.raises(TaxonomyIOError, match="error while filtering"):
            filter_fasta(bacteria, str(fasta), "Escherichia", output=output)
        assert not os.path.exists(output)

    def test_empty_fasta(self, bacteria, tsv_factory):
        input_fasta = tsv_factory.create_plain("empty.fasta", "")
        output = tsv_factory.get_path("output.fasta")
        stats = filter_fasta(bacteria, input_fasta, "Escherichia", output=output)
        assert tsv_factory.read_plain(output) == ""
        assert stats.total == 0
