"""
Descendant-or-self membership against one fixed ancestor.

A node c lies below (or is) the target t exactly when the ancestry of c,
followed by c itself, starts with the ancestry of t followed by t. The prefix
is computed once, so each test is a tuple comparison of bounded length.
"""

from .errors import NotFound


class DescendantFilter:
    def __init__(self, taxonomy, target):
        # resolving the target raises NotFound before any record is looked at
        self.taxonomy = taxonomy
        self.target = taxonomy.node(target)
        self.prefix = self.target.ancestry + (self.target.id,)
        self._prefix_len = len(self.prefix)
        self._target_depth = len(self.target.ancestry)

    def _matches(self, node):
        if node.id == self.target.id:
            return True
        return (
            len(node.ancestry) >= self._prefix_len
            and node.ancestry[self._target_depth] == self.target.id
            and node.ancestry[:self._prefix_len] == self.prefix
        )

    def is_descendant_or_self(self, candidate):
        """True if `candidate` (node, taxid or name) is the target or below it."""
        return self._matches(self.taxonomy.node(candidate))

    def accepts_taxid(self, taxon_id):
        """Like is_descendant_or_self, but a taxid missing from the taxonomy
        (including 0, "unclassified") is simply not accepted."""
        try:
            node = self.taxonomy.store.lookup_by_id(taxon_id)
        except NotFound:
            return False
        return self._matches(node)

    def accepts_name(self, name):
        if not self.taxonomy.contains_name(name):
            return False
        return self._matches(self.taxonomy.store.lookup_by_name(name))

    def __contains__(self, candidate):
        return self.is_descendant_or_self(candidate)

    def __repr__(self):
        return f"DescendantFilter(target={self.target.id}, name={self.target.name!r})"
