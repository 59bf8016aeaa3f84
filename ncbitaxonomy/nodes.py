"""
Taxon nodes and the store that owns them
"""

from .errors import DuplicateId, DuplicateName, NotFound


class TaxNode:
    """A taxon, linked to its parent by id.

    `ancestry` is the tuple of ancestor ids from the root down to the parent
    and is only attached once, by the ancestry indexer.
    """
    __slots__ = ("id", "name", "rank", "parent_id", "ancestry")

    def __init__(self, taxon_id, name, rank=None, parent_id=None):
        self.id = taxon_id
        self.name = name
        self.rank = rank
        self.parent_id = parent_id
        self.ancestry = None

    @property
    def depth(self):
        return len(self.ancestry)

    def is_root(self):
        return self.parent_id is None

    def __eq__(self, other):
        return isinstance(other, TaxNode) and self.id == other.id

    def __hash__(self):
        return hash(self.id)

    def __repr__(self):
        return f"TaxNode({self.id}, {self.name!r}, rank={self.rank!r}, parent_id={self.parent_id})"


class NodeStore:
    def __init__(self):
        self.id_to_node = dict()
        self.name_to_node = dict()

    def insert(self, taxon_id, name, rank=None, parent_id=None):
        # both checks happen before either index is touched
        if taxon_id in self.id_to_node:
            raise DuplicateId(taxon_id)
        if name in self.name_to_node:
            raise DuplicateName(name, taxon_id)
        node = TaxNode(taxon_id, name, rank, parent_id)
        self.id_to_node[taxon_id] = node
        self.name_to_node[name] = node
        return node

    def lookup_by_id(self, taxon_id):
        try:
            return self.id_to_node[taxon_id]
        except KeyError:
            raise NotFound(taxon_id, kind="taxid") from None

    def lookup_by_name(self, name):
        try:
            return self.name_to_node[name]
        except KeyError:
            raise NotFound(name, kind="name", suggestions=self.unique_names_for(name)) from None

    def unique_names_for(self, name):
        """Names stored as NCBI unique names for `name`, e.g. "Bacteria <bacteria>"."""
        prefix = f"{name} <"
        return sorted(stored for stored in self.name_to_node if stored.startswith(prefix) and stored.endswith(">"))

    def contains_id(self, taxon_id):
        return taxon_id in self.id_to_node

    def contains_name(self, name):
        return name in self.name_to_node

    def __len__(self):
        return len(self.id_to_node)

    def __iter__(self):
        return iter(self.id_to_node.values())
