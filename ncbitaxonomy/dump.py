"""
Reader for the NCBI taxonomy dump files (nodes.dmp and names.dmp).

Both files use "\t|\t" between fields and end each line with "\t|". Split on
tab, the fields of interest are at the even positions.
"""

import csv
import logging

import pandas as pd

from .errors import DumpFormatError, MalformedTaxonomy, TaxonomyIOError

SCIENTIFIC_NAME = "scientific name"


def _read_dmp(file_name, columns, names):
    try:
        table = pd.read_csv(
            file_name, sep="\t", header=None, usecols=columns,
            quoting=csv.QUOTE_NONE, dtype=str, keep_default_na=False, compression="infer",
        )
    except OSError as e:
        raise TaxonomyIOError(f"cannot read {file_name}: {e}", file_name=file_name) from e
    except pd.errors.EmptyDataError:
        return pd.DataFrame(columns=names, dtype=str)
    except (ValueError, pd.errors.ParserError) as e:
        raise DumpFormatError(file_name, line=str(e)) from e
    table.columns = names
    return table


def _to_int(table, column, file_name):
    values = pd.to_numeric(table[column], errors="coerce")
    bad = values.isna()
    if bad.any():
        row = table.index[bad.to_numpy().argmax()]
        raise DumpFormatError(file_name, int(row) + 1, repr(table.at[row, column]))
    return values.astype("int64")


def read_nodes(nodes_filename):
    """Return a DataFrame with columns id, parent_id (NA for the root) and rank."""
    nodes = _read_dmp(nodes_filename, [0, 2, 4], ["id", "parent_id", "rank"])
    nodes["id"] = _to_int(nodes, "id", nodes_filename)
    nodes["parent_id"] = _to_int(nodes, "parent_id", nodes_filename)
    # the root is its own parent in nodes.dmp
    nodes["parent_id"] = nodes["parent_id"].astype("Int64").mask(nodes["parent_id"] == nodes["id"])
    return nodes


def read_names(names_filename):
    """Return a Series taxid -> scientific name.

    Where NCBI gives a unique name (e.g. "environmental samples <Bacteria>")
    that one is used, so that names identify taxa.
    """
    names = _read_dmp(names_filename, [0, 2, 4, 6], ["id", "name_txt", "unique_name", "name_class"])
    names = names[names["name_class"] == SCIENTIFIC_NAME].copy()
    names["id"] = _to_int(names, "id", names_filename)
    names["name"] = names["unique_name"].where(names["unique_name"] != "", names["name_txt"])
    return names.drop_duplicates("id", keep="first").set_index("id")["name"]


def read_ncbi_dump(nodes_filename, names_filename):
    """Yield (id, name, rank, parent_id) records from a pair of dump files."""
    logging.info(f"   reading taxonomy nodes ({nodes_filename})")
    nodes = read_nodes(nodes_filename)
    logging.info(f"   reading taxonomy names ({names_filename})")
    names = read_names(names_filename)

    nodes["name"] = nodes["id"].map(names)
    unnamed = nodes["name"].isna()
    if unnamed.any():
        taxon_id = int(nodes.loc[unnamed, "id"].iloc[0])
        raise MalformedTaxonomy(f"taxid {taxon_id} has no scientific name in {names_filename}", taxon_id=taxon_id)
    logging.info(f"   read {len(nodes)} taxonomy nodes")

    for taxon_id, name, rank, parent_id in zip(
        nodes["id"].tolist(), nodes["name"].tolist(), nodes["rank"].tolist(), nodes["parent_id"].tolist()
    ):
        yield taxon_id, name, rank or None, None if parent_id is pd.NA else parent_id
