"""
Stream FASTA and FASTQ files, keeping only the records whose taxon is the
chosen ancestor or lies below it.

Each run first resolves the ancestor (and reads the classification report
for FASTQ) and only then creates output files; outputs are written to
temporary files and moved into place when the whole run succeeds.
"""

import contextlib
import enum
import logging
import os
import zlib
from dataclasses import dataclass, field

from .accession import AccessionClass, AccessionResolver, classify_accession
from .errors import NcbiTaxonomyError, SequenceFormatError, TaxonomyIOError, UnmappedRead
from .reports import ClassificationReport, ReportFormat
from .seqio import open_input, output_stream, read_fasta, read_fastq


class UnmappedPolicy(enum.Enum):
    FAIL = "fail"
    SKIP = "skip"


@dataclass(frozen=True)
class FastaFilterConfig:
    exclude_curated: bool = False
    exclude_predicted: bool = False

    def excludes(self, accession_class):
        return (
            (self.exclude_curated and accession_class is AccessionClass.CURATED)
            or (self.exclude_predicted and accession_class is AccessionClass.PREDICTED)
        )


@dataclass(frozen=True)
class FastqFilterConfig:
    report_format: ReportFormat = ReportFormat.KRAKEN2
    unmapped_policy: UnmappedPolicy = UnmappedPolicy.FAIL


@dataclass
class FilterStats:
    total: int = 0
    written: int = 0
    dropped: int = 0
    unresolved: int = 0
    excluded: int = 0
    file_name: str = field(default=None, compare=False)

    def __str__(self):
        return f"{self.written} records written out of {self.total} total records"


@contextlib.contextmanager
def _reading(file_name):
    # errors raised by the decompressor and the text decoder surface while iterating
    try:
        yield
    except UnicodeDecodeError as e:
        raise SequenceFormatError(file_name, None, f"not a text file ({e})") from e
    except (OSError, EOFError, zlib.error) as e:
        if isinstance(e, NcbiTaxonomyError):
            raise
        raise TaxonomyIOError(f"error while filtering {file_name}: {e}", file_name=file_name) from e


# ------------------------------------------------------------------------------
# FASTA
def filter_fasta(taxonomy, input_fasta, ancestor, output=None, config=None, accession_taxids=None):
    """Write the records of `input_fasta` that belong below `ancestor`.

    `ancestor` is a name or taxid. Output goes to `output`, or standard
    output when it is None. Records of an excluded accession class, or whose
    taxon cannot be resolved, are dropped and counted.
    """
    config = config or FastaFilterConfig()
    descendant_filter = taxonomy.descendant_filter(ancestor)
    resolver = AccessionResolver(taxonomy, accession_taxids)
    logging.info(f"MAIN: filtering {input_fasta} for descendants of {descendant_filter.target.name}")

    stats = FilterStats(file_name=input_fasta)
    with open_input(input_fasta) as fasta_in, output_stream(output) as fasta_out, _reading(input_fasta):
        for record in read_fasta(fasta_in, input_fasta):
            stats.total += 1
            if config.excludes(classify_accession(record.id)):
                stats.excluded += 1
                continue
            node = resolver.resolve(record)
            if node is None:
                logging.debug(f"   no taxon found for {record.id}")
                stats.unresolved += 1
            elif descendant_filter.is_descendant_or_self(node):
                record.write(fasta_out)
                stats.written += 1
            else:
                stats.dropped += 1
    logging.info(f"   {stats} ({stats.excluded} excluded, {stats.unresolved} without taxon)")
    return stats


# ------------------------------------------------------------------------------
# FASTQ
def filtered_output_name(fastq_filename, output_dir=None):
    """reads.R1.fastq.gz -> <output_dir>/reads.filtered.R1.fastq.gz"""
    directory = os.path.dirname(fastq_filename) if output_dir is None else output_dir
    stem, _, extensions = os.path.basename(fastq_filename).partition(".")
    name = f"{stem}.filtered.{extensions}" if extensions else f"{stem}.filtered"
    return os.path.join(directory, name)


def _filter_fastq_records(fastq_filename, fastq_out, report, descendant_filter, unmapped_policy):
    stats = FilterStats(file_name=fastq_filename)
    with open_input(fastq_filename) as fastq_in, _reading(fastq_filename):
        for record in read_fastq(fastq_in, fastq_filename):
            stats.total += 1
            taxid = report.taxid_for(record.id)
            if taxid is None:
                if unmapped_policy is UnmappedPolicy.FAIL:
                    raise UnmappedRead(record.id, fastq_filename)
                logging.debug(f"   read {record.id} not in report, skipped")
                stats.unresolved += 1
            elif descendant_filter.accepts_taxid(taxid):
                record.write(fastq_out)
                stats.written += 1
            else:
                stats.dropped += 1
    if stats.unresolved:
        logging.warning(f"   {stats.unresolved} reads of {fastq_filename} were not in the report and were skipped")
    return stats


def filter_fastq(taxonomy, fastq_files, ancestor_taxid, report_file, output_dir=None, config=None, to_stdout=False):
    """Filter one or more FASTQ files with a classification report.

    Every input gets its own output (see filtered_output_name), in input
    order; with `to_stdout` the single input is written to standard output.
    Either all outputs are created or, if any input fails, none is.
    Returns a list of FilterStats, one per input.
    """
    config = config or FastqFilterConfig()
    descendant_filter = taxonomy.descendant_filter(ancestor_taxid)
    if to_stdout and len(fastq_files) != 1:
        raise NcbiTaxonomyError("writing to standard output needs exactly one input FASTQ file")
    report = ClassificationReport.from_file(report_file, config.report_format, accept=descendant_filter.accepts_taxid)

    if output_dir is not None and not to_stdout:
        try:
            os.makedirs(output_dir, exist_ok=True)
        except OSError as e:
            raise TaxonomyIOError(f"failed to create output dir {output_dir}: {e}", file_name=output_dir) from e

    all_stats = list()
    with contextlib.ExitStack() as outputs:
        for fastq_filename in fastq_files:
            logging.info(f"MAIN: processing {os.path.basename(fastq_filename)}")
            output = None if to_stdout else filtered_output_name(fastq_filename, output_dir)
            fastq_out = outputs.enter_context(output_stream(output))
            stats = _filter_fastq_records(fastq_filename, fastq_out, report, descendant_filter, config.unmapped_policy)
            logging.info(f"   {stats}")
            all_stats.append(stats)
    return all_stats
