"""
The read-only taxonomy handle: a node store whose ancestry paths have been
indexed, and the lineage queries answered from those paths.
"""

import logging
import os

from .ancestry import attach_ancestry, index_ancestry
from .descendants import DescendantFilter
from .dump import read_ncbi_dump
from .errors import NotFound, TaxonomyIOError
from .nodes import NodeStore, TaxNode

# canonical ranks (+ superkingdom) as they appear in the NCBI taxonomy database
CANONICAL_RANKS = frozenset(("superkingdom", "kingdom", "phylum", "class", "order", "family", "genus", "species"))


def _common_prefix_length(path1, path2):
    n = 0
    for id1, id2 in zip(path1, path2):
        if id1 != id2:
            break
        n += 1
    return n


class Lineage:
    """The nodes from a taxon up to the root, both included.

    Iterating walks the ancestry path backwards, so the sequence can be
    iterated as many times as needed without being stored.
    """
    def __init__(self, taxonomy, node):
        self.taxonomy = taxonomy
        self.node = node

    def __iter__(self):
        yield self.node
        for taxon_id in reversed(self.node.ancestry):
            yield self.taxonomy.store.lookup_by_id(taxon_id)

    def __len__(self):
        return self.node.depth + 1

    def ids(self):
        return [node.id for node in self]

    def names(self):
        return [node.name for node in self]


class NcbiTaxonomy:
    def __init__(self, store, ancestry=None):
        # the instance is only created once every node has its ancestry
        if ancestry is None:
            self.children = index_ancestry(store)
        else:
            self.children = attach_ancestry(store, ancestry)
        self.store = store
        self.root = next(node for node in store if node.parent_id is None)

    @classmethod
    def from_records(cls, records, ancestry=None):
        """Build a taxonomy from (id, name, rank, parent_id) records."""
        store = NodeStore()
        for taxon_id, name, rank, parent_id in records:
            store.insert(taxon_id, name, rank, parent_id)
        return cls(store, ancestry=ancestry)

    @classmethod
    def from_ncbi_files(cls, nodes_filename, names_filename):
        return cls.from_records(read_ncbi_dump(nodes_filename, names_filename))

    @classmethod
    def from_ncbi_dir(cls, taxonomy_dir, tax_prefix=""):
        nodes_path = os.path.join(taxonomy_dir, tax_prefix + "nodes.dmp")
        names_path = os.path.join(taxonomy_dir, tax_prefix + "names.dmp")
        for path in (nodes_path, names_path):
            if not os.path.isfile(path):
                raise TaxonomyIOError(
                    f"NCBI Taxonomy {os.path.basename(path)} file not found in {taxonomy_dir}", file_name=path
                )
        logging.info(f"MAIN: loading taxonomy from {taxonomy_dir}")
        taxonomy = cls.from_ncbi_files(nodes_path, names_path)
        logging.info(f"MAIN: taxonomy loaded - {len(taxonomy)} nodes")
        return taxonomy

    def __len__(self):
        return len(self.store)

    def __iter__(self):
        return iter(self.store)

    def __contains__(self, key):
        return self.contains_name(key) if isinstance(key, str) else self.contains_id(key)

    # lookups ------------------------------------------------------------------
    def node(self, key):
        """Resolve a TaxNode, taxid or name to the node held by this taxonomy."""
        if isinstance(key, TaxNode):
            key = key.id
        if isinstance(key, str):
            return self.store.lookup_by_name(key)
        return self.store.lookup_by_id(int(key))

    def contains_id(self, taxon_id):
        return self.store.contains_id(taxon_id)

    def contains_name(self, name):
        return self.store.contains_name(name)

    def get_id(self, name):
        return self.store.lookup_by_name(name).id

    def get_name(self, taxon_id):
        return self.store.lookup_by_id(taxon_id).name

    def get_rank(self, taxon_id):
        return self.store.lookup_by_id(taxon_id).rank

    def depth(self, key):
        return self.node(key).depth

    # lineage queries ----------------------------------------------------------
    def lineage_of(self, key):
        return Lineage(self, self.node(key))

    def _path(self, node, only_canonical=False):
        path = node.ancestry + (node.id,)
        if only_canonical:
            path = tuple(taxon_id for taxon_id in path if self.store.lookup_by_id(taxon_id).rank in CANONICAL_RANKS)
        return path

    def common_ancestor(self, key1, key2):
        """Lowest common ancestor of two taxa.

        The paths compared include the taxa themselves, so if one taxon is an
        ancestor of the other it is its own answer.
        """
        path1, path2 = self._path(self.node(key1)), self._path(self.node(key2))
        n_shared = _common_prefix_length(path1, path2)
        if n_shared == 0:
            return self.root
        return self.store.lookup_by_id(path1[n_shared - 1])

    def distance(self, key1, key2, only_canonical=False):
        """Number of tree edges between two taxa, through their common ancestor.

        With only_canonical, each taxon is first projected onto the canonical
        ranks of its lineage and the edges are counted between those.
        """
        path1 = self._path(self.node(key1), only_canonical)
        path2 = self._path(self.node(key2), only_canonical)
        n_shared = _common_prefix_length(path1, path2)
        return len(path1) + len(path2) - 2 * n_shared

    def get_distance_to_common_ancestor(self, name1, name2, only_canonical=False):
        common = self.common_ancestor(name1, name2)
        return self.distance(name1, name2, only_canonical), common.name

    # descendants --------------------------------------------------------------
    def descendant_filter(self, target):
        return DescendantFilter(self, target)

    def is_descendant(self, name, ancestor_name):
        if not (self.contains_name(name) and self.contains_name(ancestor_name)):
            return False
        return self.descendant_filter(ancestor_name).is_descendant_or_self(name)

    def is_descendant_taxid(self, taxon_id, ancestor_taxid):
        if not (self.contains_id(taxon_id) and self.contains_id(ancestor_taxid)):
            return False
        return self.descendant_filter(ancestor_taxid).is_descendant_or_self(taxon_id)

    def traversal(self, from_id):
        """Yield the taxids below `from_id` (itself first) in depth first pre-order."""
        start = self.store.lookup_by_id(from_id).id
        return self._walk(start)

    def _walk(self, start):
        stack = [start]
        while stack:
            taxon_id = stack.pop()
            yield taxon_id
            stack.extend(reversed(self.children.get(taxon_id, ())))
