"""
Classification reports (Kraken2 or Centrifuge) mapping read ids to taxids.

A read can appear more than once in a report: Kraken2 lists both mates of
a pair and Centrifuge lists every equally good hit. Each reader reduces the
rows to a single taxid per read.
"""

import csv
import enum
import logging

import pandas as pd

from .errors import ReportFormatError, TaxonomyIOError

UNCLASSIFIED_TAXID = 0
KRAKEN2_TAXID_RE = r"\(taxid (\d+)\)"


class ReportFormat(enum.Enum):
    KRAKEN2 = "kraken2"
    CENTRIFUGE = "centrifuge"


def _read_table(file_name, **kwargs):
    try:
        return pd.read_csv(
            file_name, sep="\t", dtype=str, quoting=csv.QUOTE_NONE, keep_default_na=False, compression="infer", **kwargs
        )
    except pd.errors.EmptyDataError:
        return None
    except OSError as e:
        raise TaxonomyIOError(f"cannot read classification report {file_name}: {e}", file_name=file_name) from e
    except (ValueError, pd.errors.ParserError) as e:
        raise ReportFormatError(file_name, str(e)) from e


def _parse_taxids(values, file_name):
    # kraken2 --use-names writes "Escherichia coli (taxid 562)"
    named = values.str.extract(KRAKEN2_TAXID_RE, expand=False)
    taxids = pd.to_numeric(named.fillna(values), errors="coerce")
    if taxids.isna().any():
        bad = values[taxids.isna()].iloc[0]
        raise ReportFormatError(file_name, f"cannot read a taxid from {bad!r}")
    return taxids.astype("int64")


def _accepted(taxids, accept):
    if accept is None:
        return pd.Series(True, index=taxids.index)
    verdicts = {taxid: accept(taxid) for taxid in taxids.unique().tolist()}
    return taxids.map(verdicts).astype(bool)


def read_kraken2(file_name, accept=None):
    table = _read_table(file_name, header=None, usecols=[0, 1, 2])
    if table is None:
        return dict()
    table.columns = ["status", "read_id", "taxid"]
    taxids = _parse_taxids(table["taxid"], file_name)
    table["taxid"] = taxids.where(table["status"] != "U", UNCLASSIFIED_TAXID)
    table["accepted"] = _accepted(table["taxid"], accept)
    # a read counts as rejected if any of its rows is, e.g. either mate of a pair
    table = table.sort_values("accepted", kind="stable").drop_duplicates("read_id", keep="first")
    return dict(zip(table["read_id"], table["taxid"].tolist()))


def read_centrifuge(file_name, accept=None):
    table = _read_table(file_name, header=0)
    if table is None:
        return dict()
    if len(table.columns) < 4:
        raise ReportFormatError(file_name, "expected at least 4 columns (readID, seqID, taxID, score)")
    table = table.iloc[:, [0, 2, 3]].copy()
    table.columns = ["read_id", "taxid", "score"]
    table["taxid"] = _parse_taxids(table["taxid"], file_name)
    table["score"] = pd.to_numeric(table["score"], errors="coerce")
    if table["score"].isna().any():
        raise ReportFormatError(file_name, "score column is not numeric")
    table["accepted"] = _accepted(table["taxid"], accept)
    # best score first, and on equal scores an accepted taxid first
    table = table.sort_values(["score", "accepted"], ascending=False, kind="stable")
    table = table.drop_duplicates("read_id", keep="first")
    return dict(zip(table["read_id"], table["taxid"].tolist()))


READERS = {
    ReportFormat.KRAKEN2: read_kraken2,
    ReportFormat.CENTRIFUGE: read_centrifuge,
}


class ClassificationReport:
    def __init__(self, read_taxids, file_name=None):
        self.read_taxids = read_taxids
        self.file_name = file_name

    @classmethod
    def from_file(cls, file_name, report_format, accept=None):
        """Read a report; `accept(taxid)` decides between rows of the same read."""
        logging.info(f"   reading {report_format.value} report {file_name}")
        read_taxids = READERS[report_format](file_name, accept)
        logging.info(f"   {len(read_taxids)} reads in report")
        return cls(read_taxids, file_name)

    def taxid_for(self, read_id):
        """Taxid of a read, or None if the report does not list it.

        Mate suffixes (/1, /2) are ignored when the exact id is not found.
        """
        taxid = self.read_taxids.get(read_id)
        if taxid is None and read_id[-2:] in ("/1", "/2"):
            taxid = self.read_taxids.get(read_id[:-2])
        return taxid

    def __len__(self):
        return len(self.read_taxids)

    def __contains__(self, read_id):
        return self.taxid_for(read_id) is not None
