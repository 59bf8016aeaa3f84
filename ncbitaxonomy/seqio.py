"""
Streaming FASTA and FASTQ records, plain or gzip compressed.

Records keep their text as read, so writing a record reproduces its input
lines.
"""

import contextlib
import gzip
import os
import shutil
import sys
import tempfile

from .errors import SequenceFormatError, TaxonomyIOError


def is_gzipped(file_name):
    return str(file_name).endswith(".gz")


def open_input(file_name):
    if file_name == "-":
        return contextlib.nullcontext(sys.stdin)
    try:
        if is_gzipped(file_name):
            return gzip.open(file_name, "rt")
        return open(file_name)
    except OSError as e:
        raise TaxonomyIOError(f"cannot open input file {file_name}: {e.strerror or e}", file_name=file_name) from e


def open_output(file_name, compress=None):
    compress = is_gzipped(file_name) if compress is None else compress
    try:
        if compress:
            return gzip.open(file_name, "wt")
        return open(file_name, "w")
    except OSError as e:
        raise TaxonomyIOError(f"cannot create output file {file_name}: {e.strerror or e}", file_name=file_name) from e


@contextlib.contextmanager
def atomic_output(file_name):
    """Write to a temporary file next to `file_name`, moved into place only
    when the block finishes without an exception."""
    directory = os.path.dirname(os.path.abspath(file_name))
    try:
        tmp_file = tempfile.NamedTemporaryFile(delete=False, dir=directory, prefix=".", suffix=".part")
    except OSError as e:
        raise TaxonomyIOError(f"cannot create output file {file_name}: {e.strerror or e}", file_name=file_name) from e
    tmp_file.close()
    os.chmod(tmp_file.name, 0o644)
    try:
        with open_output(tmp_file.name, compress=is_gzipped(file_name)) as out:
            yield out
        shutil.move(tmp_file.name, file_name)
    finally:
        if os.path.exists(tmp_file.name):
            os.remove(tmp_file.name)


def output_stream(file_name=None):
    """Standard output when no file name is given, otherwise an atomic file."""
    if file_name is None or file_name == "-":
        return contextlib.nullcontext(sys.stdout)
    return atomic_output(file_name)


class FastaRecord:
    __slots__ = ("header", "lines")

    def __init__(self, header, lines):
        self.header = header
        self.lines = lines

    @property
    def id(self):
        return self.header.split(None, 1)[0] if self.header else ""

    @property
    def description(self):
        parts = self.header.split(None, 1)
        return parts[1] if len(parts) == 2 else ""

    @property
    def sequence(self):
        return "".join(line.strip() for line in self.lines)

    def write(self, out):
        out.write(f">{self.header}\n")
        for line in self.lines:
            out.write(line if line.endswith("\n") else line + "\n")


class FastqRecord:
    __slots__ = ("header", "sequence", "plus", "quality")

    def __init__(self, header, sequence, plus, quality):
        self.header = header
        self.sequence = sequence
        self.plus = plus
        self.quality = quality

    @property
    def id(self):
        return self.header.split(None, 1)[0] if self.header else ""

    def write(self, out):
        out.write(f"@{self.header}\n{self.sequence}\n{self.plus}\n{self.quality}\n")


def read_fasta(fasta_stream, file_name="<fasta>"):
    header, lines = None, []
    for line in fasta_stream:
        if line.startswith(">"):
            if header is not None:
                yield FastaRecord(header, lines)
            header, lines = line[1:].rstrip("\r\n"), []
        elif header is None:
            if line.strip():
                raise SequenceFormatError(file_name, 1, "fasta file is expected to start with '>'")
        else:
            lines.append(line)
    if header is not None:
        yield FastaRecord(header, lines)


def read_fastq(fastq_stream, file_name="<fastq>"):
    record_no = 0
    while True:
        header = fastq_stream.readline()
        if not header:
            return
        if not header.strip():
            # tolerate blank lines at the end of the file
            continue
        record_no += 1
        sequence, plus, quality = (fastq_stream.readline() for _ in range(3))
        if not header.startswith("@"):
            raise SequenceFormatError(file_name, record_no, f"expected '@' at the start of the header, got {header[:40]!r}")
        if not quality:
            raise SequenceFormatError(file_name, record_no, "truncated record")
        if not plus.startswith("+"):
            raise SequenceFormatError(file_name, record_no, f"expected '+' separator line, got {plus[:40]!r}")
        yield FastqRecord(header[1:].rstrip("\r\n"), sequence.rstrip("\r\n"), plus.rstrip("\r\n"), quality.rstrip("\r\n"))
