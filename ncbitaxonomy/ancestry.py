"""
Materialised ancestry paths: every node gets the ids of its ancestors, from
the root down to its parent, computed once in a single walk of the tree.
"""

import logging
from collections import deque

import numpy as np

from .errors import MalformedTaxonomy

ANCESTRY_SEPARATOR = "/"


def encode_ancestry(ancestry):
    # the root has no ancestors and is persisted as NULL
    if not ancestry:
        return None
    return ANCESTRY_SEPARATOR.join(str(taxon_id) for taxon_id in ancestry)


def decode_ancestry(ancestry_str):
    if not ancestry_str:
        return ()
    try:
        return tuple(int(taxon_id) for taxon_id in ancestry_str.split(ANCESTRY_SEPARATOR))
    except ValueError:
        raise MalformedTaxonomy(f"cannot decode ancestry string {ancestry_str!r}") from None


def build_child_index(nodes):
    """Return a dict parent id -> list of child ids (ascending)."""
    n_nodes = len(nodes)
    if n_nodes == 0:
        return dict()
    ids = np.fromiter((node.id for node in nodes), dtype=np.int64, count=n_nodes)
    parents = np.fromiter(
        (-1 if node.parent_id is None else node.parent_id for node in nodes), dtype=np.int64, count=n_nodes
    )
    # sort by parent first, then by id within each parent
    order = np.lexsort((ids, parents))
    sorted_parents, sorted_ids = parents[order], ids[order]
    boundaries = np.flatnonzero(np.diff(sorted_parents)) + 1
    group_parents = sorted_parents[np.concatenate(([0], boundaries))].tolist()
    children = {
        parent: group.tolist()
        for parent, group in zip(group_parents, np.split(sorted_ids, boundaries))
        if parent != -1
    }
    return children


def find_root(store):
    roots = sorted(node.id for node in store if node.parent_id is None)
    if not roots:
        first = min((node.id for node in store), default=None)
        raise MalformedTaxonomy("taxonomy has no root node (every node has a parent)", taxon_id=first)
    if len(roots) > 1:
        raise MalformedTaxonomy(
            f"taxonomy has more than one root node: {', '.join(map(str, roots[:5]))}", taxon_id=roots[1]
        )
    return store.lookup_by_id(roots[0])


def _unreachable_error(store, reached):
    offending = min(node.id for node in store if node.id not in reached)
    node = store.lookup_by_id(offending)
    if not store.contains_id(node.parent_id):
        return MalformedTaxonomy(
            f"taxid {offending} points to parent taxid {node.parent_id}, which does not exist", taxon_id=offending
        )
    return MalformedTaxonomy(
        f"taxid {offending} cannot be reached from the root (its parent chain contains a cycle)", taxon_id=offending
    )


def index_ancestry(store):
    """Attach an ancestry path to every node of `store`.

    Walks the tree breadth first from the root, following child links. Nodes
    are only modified once the whole store has been reached; a node that is
    orphaned or caught in a cycle raises MalformedTaxonomy naming the smallest
    such id. Returns the child index used for the walk.
    """
    root = find_root(store)
    children = build_child_index(list(store))

    paths = {root.id: ()}
    queue = deque([root.id])
    while queue:
        parent_id = queue.popleft()
        child_path = paths[parent_id] + (parent_id,)
        for child_id in children.get(parent_id, ()):
            # siblings share the same tuple
            paths[child_id] = child_path
            queue.append(child_id)

    if len(paths) != len(store):
        raise _unreachable_error(store, paths)

    for node in store:
        node.ancestry = paths[node.id]
    logging.info(f"   ancestry indexed for {len(paths)} nodes")
    return children


def attach_ancestry(store, paths):
    """Attach persisted ancestry paths, checking them against the parent links.

    `paths` maps taxid -> ancestry tuple. For every node the path must equal
    its parent's path followed by the parent id.
    """
    find_root(store)
    for node in store:
        path = paths.get(node.id)
        if path is None:
            raise MalformedTaxonomy(f"taxid {node.id} has no ancestry", taxon_id=node.id)
        if node.parent_id is None:
            if path:
                raise MalformedTaxonomy(f"root taxid {node.id} has a non-empty ancestry", taxon_id=node.id)
            continue
        parent_path = paths.get(node.parent_id)
        if parent_path is None:
            raise MalformedTaxonomy(
                f"taxid {node.id} points to parent taxid {node.parent_id}, which does not exist", taxon_id=node.id
            )
        if path[-1:] != (node.parent_id,) or path[:-1] != parent_path:
            raise MalformedTaxonomy(f"ancestry of taxid {node.id} does not match its parent", taxon_id=node.id)

    for node in store:
        node.ancestry = paths[node.id]
    return build_child_index(list(store))
