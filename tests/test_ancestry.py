#!/usr/bin/env python

import pytest

from ncbitaxonomy.ancestry import (
    attach_ancestry, build_child_index, decode_ancestry, encode_ancestry, index_ancestry
)
from ncbitaxonomy.errors import MalformedTaxonomy
from ncbitaxonomy.nodes import NodeStore


def make_store(records):
    store = NodeStore()
    for taxon_id, name, parent_id in records:
        store.insert(taxon_id, name, None, parent_id)
    return store


TREE = [
    (1, "R", None),
    (2, "A", 1),
    (3, "B", 2),
    (4, "C", 3),
    (5, "D", 1),
]


class TestIndexAncestry:
    """Test the materialised ancestry paths."""

    def test_paths(self):
        store = make_store(TREE)
        index_ancestry(store)
        assert store.lookup_by_id(1).ancestry == ()
        assert store.lookup_by_id(2).ancestry == (1,)
        assert store.lookup_by_id(4).ancestry == (1, 2, 3)
        assert store.lookup_by_id(5).ancestry == (1,)

    def test_path_ends_with_parent(self):
        store = make_store(TREE)
        index_ancestry(store)
        for node in store:
            if node.parent_id is not None:
                parent = store.lookup_by_id(node.parent_id)
                assert node.ancestry == parent.ancestry + (parent.id,)

    def test_returns_child_index(self):
        store = make_store(TREE)
        children = index_ancestry(store)
        assert children == {1: [2, 5], 2: [3], 3: [4]}

    def test_missing_parent(self):
        store = make_store(TREE + [(6, "E", 99)])
        with pytest.raises(MalformedTaxonomy, match="does not exist") as excinfo:
            index_ancestry(store)
        assert excinfo.value.taxon_id == 6
        # nothing is attached when indexing fails
        assert all(node.ancestry is None for node in store)

    def test_cycle(self):
        store = make_store(TREE + [(6, "E", 7), (7, "F", 6)])
        with pytest.raises(MalformedTaxonomy, match="cycle") as excinfo:
            index_ancestry(store)
        assert excinfo.value.taxon_id == 6

    def test_no_root(self):
        store = make_store([(1, "A", 2), (2, "B", 1)])
        with pytest.raises(MalformedTaxonomy, match="no root"):
            index_ancestry(store)

    def test_two_roots(self):
        store = make_store([(1, "A", None), (2, "B", None)])
        with pytest.raises(MalformedTaxonomy, match="more than one root") as excinfo:
            index_ancestry(store)
        assert excinfo.value.taxon_id == 2


class TestAttachAncestry:
    def test_attach(self):
        store = make_store(TREE)
        paths = {1: (), 2: (1,), 3: (1, 2), 4: (1, 2, 3), 5: (1,)}
        children = attach_ancestry(store, paths)
        assert store.lookup_by_id(4).ancestry == (1, 2, 3)
        assert children[1] == [2, 5]

    def test_inconsistent_path(self):
        store = make_store(TREE)
        paths = {1: (), 2: (1,), 3: (1, 2), 4: (1, 5), 5: (1,)}
        with pytest.raises(MalformedTaxonomy) as excinfo:
            attach_ancestry(store, paths)
        assert excinfo.value.taxon_id == 4

    def test_missing_path(self):
        store = make_store(TREE)
        with pytest.raises(MalformedTaxonomy, match="has no ancestry"):
            attach_ancestry(store, {1: (), 2: (1,)})


class TestAncestryCodec:
    def test_encode(self):
        assert encode_ancestry((1, 2, 3)) == "1/2/3"
        assert encode_ancestry(()) is None

    def test_decode(self):
        assert decode_ancestry("1/2/3") == (1, 2, 3)
        assert decode_ancestry(None) == ()
        assert decode_ancestry("") == ()

    def test_decode_malformed(self):
        with pytest.raises(MalformedTaxonomy):
            decode_ancestry("1/x/3")


def test_build_child_index_sorts_children():
    store = make_store([(1, "R", None), (9, "A", 1), (3, "B", 1), (5, "C", 3)])
    assert build_child_index(list(store)) == {1: [3, 9], 3: [5]}
    assert build_child_index([]) == {}
