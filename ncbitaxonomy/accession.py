"""
RefSeq accession classes and accession -> taxon resolution for FASTA records
"""

import csv
import enum
import logging
import re

import pandas as pd

from .errors import DumpFormatError, TaxonomyIOError

CURATED_PREFIXES = ("AC_", "NC_", "NG_", "NM_", "NP_", "NR_", "NT_", "NW_", "NZ_", "WP_")
PREDICTED_PREFIXES = ("XM_", "XR_", "XP_")

# organism name in square brackets, e.g. "hypothetical protein [Escherichia coli]"
ORGANISM_RE = re.compile(r"\[([^\[\]]+)\][^\[\]]*$")


class AccessionClass(enum.Enum):
    CURATED = "curated"
    PREDICTED = "predicted"
    OTHER = "other"


def classify_accession(accession):
    if accession.startswith(PREDICTED_PREFIXES):
        return AccessionClass.PREDICTED
    if accession.startswith(CURATED_PREFIXES):
        return AccessionClass.CURATED
    return AccessionClass.OTHER


def strip_version(accession):
    return accession.rsplit(".", 1)[0] if "." in accession else accession


def organism_from_description(description):
    match = ORGANISM_RE.search(description)
    return match.group(1).strip() if match else None


def read_accession2taxid(file_name):
    """Load an NCBI accession2taxid table into a dict accession -> taxid.

    Both the versioned and the unversioned accession are keys.
    """
    logging.info(f"   loading accession to taxid map ({file_name})")
    try:
        table = pd.read_csv(
            file_name, sep="\t", usecols=[0, 1, 2], header=0, dtype=str,
            quoting=csv.QUOTE_NONE, keep_default_na=False, compression="infer",
        )
    except OSError as e:
        raise TaxonomyIOError(f"cannot read {file_name}: {e}", file_name=file_name) from e
    except (ValueError, pd.errors.ParserError) as e:
        raise DumpFormatError(file_name, line=str(e)) from e
    table.columns = ["accession", "accession_version", "taxid"]
    taxids = pd.to_numeric(table["taxid"], errors="coerce")
    bad = taxids.isna()
    if bad.any():
        row = table.index[bad.to_numpy().argmax()]
        # the header is line 1
        raise DumpFormatError(file_name, int(row) + 2, repr(table.at[row, "taxid"]))
    taxids = taxids.astype("int64").tolist()
    accession_taxids = dict(zip(table["accession"], taxids))
    accession_taxids.update(zip(table["accession_version"], taxids))
    logging.info(f"   loaded {len(table)} accessions")
    return accession_taxids


class AccessionResolver:
    """Finds the taxon of a FASTA record.

    The accession table is tried first (versioned, then unversioned
    accession); otherwise the organism named in brackets at the end of the
    description is looked up by name. Returns a TaxNode or None.
    """
    def __init__(self, taxonomy, accession_taxids=None):
        self.taxonomy = taxonomy
        self.accession_taxids = accession_taxids

    def resolve(self, record):
        if self.accession_taxids is not None:
            for key in (record.id, strip_version(record.id)):
                taxon_id = self.accession_taxids.get(key)
                if taxon_id is not None and self.taxonomy.contains_id(taxon_id):
                    return self.taxonomy.store.lookup_by_id(taxon_id)
        organism = organism_from_description(record.description)
        if organism is not None and self.taxonomy.contains_name(organism):
            return self.taxonomy.store.lookup_by_name(organism)
        return None
