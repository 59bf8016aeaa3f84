"""
SQLite persistence of the taxonomy.

One table holds every taxon with its materialised ancestry, so lookups,
lineages and descendant sets can be answered without rebuilding the tree.
"""

import logging
import os
import sqlite3

from .ancestry import ANCESTRY_SEPARATOR, decode_ancestry, encode_ancestry
from .errors import NcbiTaxonomyError, NotFound, TaxonomyIOError
from .taxonomy import NcbiTaxonomy

ENV_DB = "NCBITAXONOMY_DB"
DEFAULT_DB_FILENAME = "taxonomy.sqlite"

SCHEMA = """
CREATE TABLE IF NOT EXISTS taxonomy (
    id INTEGER PRIMARY KEY,
    ancestry TEXT,
    name TEXT NOT NULL UNIQUE,
    rank TEXT
);
CREATE UNIQUE INDEX IF NOT EXISTS taxonomy_name_idx ON taxonomy(name);
"""

INSERT_BATCH_SIZE = 50000


def default_db_path():
    return os.environ.get(ENV_DB) or DEFAULT_DB_FILENAME


class TaxonomyDatabase:
    def __init__(self, path=None):
        self.path = path or default_db_path()
        self.conn = None

    def open(self, create=False):
        if not create and not os.path.isfile(self.path):
            raise TaxonomyIOError(f"taxonomy database {self.path} does not exist", file_name=self.path)
        try:
            self.conn = sqlite3.connect(self.path)
        except sqlite3.Error as e:
            raise TaxonomyIOError(f"cannot open taxonomy database {self.path}: {e}", file_name=self.path) from e
        return self

    def close(self):
        if self.conn is not None:
            self.conn.close()
            self.conn = None

    def __enter__(self):
        if self.conn is None:
            self.open()
        return self

    def __exit__(self, *exc_info):
        self.close()

    def _query(self, sql, params=()):
        try:
            return self.conn.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise TaxonomyIOError(f"query on {self.path} failed: {e}", file_name=self.path) from e

    # writing ------------------------------------------------------------------
    def create_schema(self):
        self.conn.executescript(SCHEMA)

    def count(self):
        return self._query("SELECT COUNT(*) FROM taxonomy")[0][0]

    def save(self, taxonomy, force=False):
        """Write every node of `taxonomy` in a single transaction.

        Refuses to add to a table that already holds taxa unless `force`, in
        which case the old rows are replaced. Nothing is written on failure.
        """
        try:
            self.create_schema()
            with self.conn:
                n_existing = self.conn.execute("SELECT COUNT(*) FROM taxonomy").fetchone()[0]
                if n_existing:
                    if not force:
                        raise NcbiTaxonomyError(
                            f"taxonomy database {self.path} already contains {n_existing} taxa (use -f to replace them)"
                        )
                    self.conn.execute("DELETE FROM taxonomy")
                batch = list()
                for node in taxonomy:
                    batch.append((node.id, encode_ancestry(node.ancestry), node.name, node.rank))
                    if len(batch) == INSERT_BATCH_SIZE:
                        self.conn.executemany("INSERT INTO taxonomy VALUES (?, ?, ?, ?)", batch)
                        batch.clear()
                if batch:
                    self.conn.executemany("INSERT INTO taxonomy VALUES (?, ?, ?, ?)", batch)
        except sqlite3.Error as e:
            raise TaxonomyIOError(f"failed to save taxonomy to {self.path}: {e}", file_name=self.path) from e
        logging.info(f"MAIN: saved {len(taxonomy)} taxa to {self.path}")

    # reading ------------------------------------------------------------------
    def _build(self, rows):
        records, paths = list(), dict()
        for taxon_id, ancestry_str, name, rank in rows:
            ancestry = decode_ancestry(ancestry_str)
            paths[taxon_id] = ancestry
            records.append((taxon_id, name, rank, ancestry[-1] if ancestry else None))
        return NcbiTaxonomy.from_records(records, ancestry=paths)

    def load(self):
        """Load the whole tree, reusing the persisted ancestry paths."""
        logging.info(f"MAIN: loading taxonomy from {self.path}")
        taxonomy = self._build(self._query("SELECT id, ancestry, name, rank FROM taxonomy"))
        logging.info(f"MAIN: taxonomy loaded - {len(taxonomy)} nodes")
        return taxonomy

    def load_lineages(self, names):
        """Load only the given taxa and their ancestors.

        The result is itself a valid (small) taxonomy, enough to answer lineage,
        common ancestor and distance queries between those taxa.
        """
        ids = set()
        for name in names:
            taxon_id, ancestry = self._row_by_name(name)
            ids.add(taxon_id)
            ids.update(ancestry)
        placeholders = ",".join("?" * len(ids))
        rows = self._query(f"SELECT id, ancestry, name, rank FROM taxonomy WHERE id IN ({placeholders})", tuple(ids))
        return self._build(rows)

    def _row_by_name(self, name):
        rows = self._query("SELECT id, ancestry FROM taxonomy WHERE name = ?", (name,))
        if not rows:
            raise NotFound(name, kind="name", suggestions=self.unique_names_for(name))
        return rows[0][0], decode_ancestry(rows[0][1])

    def unique_names_for(self, name):
        prefix = f"{name} <"
        rows = self._query(
            "SELECT name FROM taxonomy WHERE substr(name, 1, ?) = ? AND name LIKE '%>' ORDER BY name",
            (len(prefix), prefix),
        )
        return [row[0] for row in rows]

    def get_id_by_name(self, name):
        return self._row_by_name(name)[0]

    def get_name_by_id(self, taxon_id):
        rows = self._query("SELECT name FROM taxonomy WHERE id = ?", (taxon_id,))
        if not rows:
            raise NotFound(taxon_id, kind="taxid")
        return rows[0][0]

    def get_lineage(self, name):
        """Taxids from the named taxon up to the root."""
        taxon_id, ancestry = self._row_by_name(name)
        return [taxon_id] + list(reversed(ancestry))

    def descendant_ids(self, taxon_id):
        """Taxids of `taxon_id` and everything below it, by ancestry prefix."""
        rows = self._query("SELECT ancestry FROM taxonomy WHERE id = ?", (taxon_id,))
        if not rows:
            raise NotFound(taxon_id, kind="taxid")
        prefix = encode_ancestry(decode_ancestry(rows[0][0]) + (taxon_id,))
        rows = self._query(
            "SELECT id FROM taxonomy WHERE id = ? OR ancestry = ? OR ancestry LIKE ? ORDER BY id",
            (taxon_id, prefix, prefix + ANCESTRY_SEPARATOR + "%"),
        )
        return [row[0] for row in rows]


def load_taxonomy(db_path=None):
    with TaxonomyDatabase(db_path) as db:
        return db.load()


def dump_to_sqlite(taxonomy_dir, db_path=None, tax_prefix="", force=False):
    """Read NCBI dump files and save them to a SQLite database.

    The tree is fully indexed before the database is opened, so a malformed
    dump never leaves rows behind.
    """
    taxonomy = NcbiTaxonomy.from_ncbi_dir(taxonomy_dir, tax_prefix)
    db = TaxonomyDatabase(db_path).open(create=True)
    with db:
        db.save(taxonomy, force=force)
    return taxonomy
