"""Shared pytest fixtures: small taxonomies, dump files and sequence files."""

import gzip
from pathlib import Path

import pytest

from ncbitaxonomy.taxonomy import NcbiTaxonomy

# (taxid, parent taxid, rank, scientific name, unique name)
BACTERIA_TREE = [
    (1, 1, "no rank", "root", ""),
    (2, 1, "superkingdom", "Bacteria", "Bacteria <bacteria>"),
    (3, 2, "phylum", "Proteobacteria", ""),
    (4, 3, "class", "Gammaproteobacteria", ""),
    (5, 4, "order", "Enterobacterales", ""),
    (6, 5, "family", "Enterobacteriaceae", ""),
    (7, 6, "genus", "Escherichia", ""),
    (8, 7, "species", "Escherichia coli", ""),
    (9, 8, "strain", "Escherichia coli K-12", ""),
    (10, 6, "genus", "Salmonella", ""),
    (11, 10, "species", "Salmonella enterica", ""),
    (12, 1, "superkingdom", "Viruses", ""),
    (13, 2, "no rank", "environmental samples", "environmental samples <Bacteria>"),
    (14, 12, "no rank", "environmental samples", "environmental samples <Viruses>"),
]


def nodes_dmp(tree):
    return "".join(f"{taxid}\t|\t{parent}\t|\t{rank}\t|\tXX\t|\n" for taxid, parent, rank, _, _ in tree)


def names_dmp(tree):
    lines = list()
    for taxid, _, _, name, unique_name in tree:
        lines.append(f"{taxid}\t|\t{name}\t|\t{unique_name}\t|\tscientific name\t|\n")
        if taxid == 8:
            lines.append(f"{taxid}\t|\tE. coli\t|\t\t|\tsynonym\t|\n")
    return "".join(lines)


@pytest.fixture
def tsv_factory(tmp_path):
    """Factory fixture for plain and gzipped text files in the temp directory."""

    class TSVFactory:
        def __init__(self, tmp_path):
            self.tmp_path = tmp_path

        def create_plain(self, filename, content):
            file_path = self.tmp_path / filename
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_text(content)
            return str(file_path)

        def create_gzip(self, filename, content):
            file_path = self.tmp_path / filename
            file_path.parent.mkdir(parents=True, exist_ok=True)
            with gzip.open(file_path, "wt") as f:
                f.write(content)
            return str(file_path)

        def read_plain(self, filepath):
            return Path(filepath).read_text()

        def read_gzip(self, filepath):
            with gzip.open(filepath, "rt") as f:
                return f.read()

        def get_path(self, filename):
            return str(self.tmp_path / filename)

    return TSVFactory(tmp_path)


@pytest.fixture
def small_taxonomy():
    """R -> A -> B -> C and R -> D."""
    return NcbiTaxonomy.from_records([
        (1, "R", "no rank", None),
        (2, "A", "superkingdom", 1),
        (3, "B", "genus", 2),
        (4, "C", "species", 3),
        (5, "D", "superkingdom", 1),
    ])


@pytest.fixture
def dump_dir(tsv_factory):
    tsv_factory.create_plain("taxdump/nodes.dmp", nodes_dmp(BACTERIA_TREE))
    tsv_factory.create_plain("taxdump/names.dmp", names_dmp(BACTERIA_TREE))
    return tsv_factory.get_path("taxdump")


@pytest.fixture
def bacteria(dump_dir):
    return NcbiTaxonomy.from_ncbi_dir(dump_dir)


@pytest.fixture
def kraken2_report():
    return (
        "C\tr1\t8\t150\t8:116\n"
        "C\tr2\t11\t150\t11:116\n"
        "C\tr3\t14\t150\t14:116\n"
        "U\tr4\t0\t150\t0:116\n"
        "C\tr5\t7\t150\t7:116\n"
    )


@pytest.fixture
def fastq_content():
    return "".join(
        f"@{read_id} extra\nACGTACGT\n+\nIIIIIIII\n" for read_id in ("r1", "r2", "r3", "r4", "r5")
    )
