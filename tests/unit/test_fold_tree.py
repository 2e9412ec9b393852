import itertools
import sys

import pytest

from flamefold import Event
from flamefold import EventType
from flamefold import FoldTree
from flamefold import FrameNamer
from flamefold.reporters.fold import ROOT
from tests.utils import make_event


def tree_contents(tree):
    """Map each call path of the tree to its total and terminal flag."""
    return {
        path: (tree.total_of(node), tree.is_terminal(node))
        for path, node in tree.iter_nodes()
    }


class TestInsert:
    def test_empty_tree(self):
        # GIVEN
        tree = FoldTree()

        # WHEN / THEN
        assert len(tree) == 1
        assert tree.total_weight == 0
        assert tree.name_of(ROOT) is None
        assert tree.children_of(ROOT) == ()
        assert list(tree.iter_terminal_paths()) == []

    def test_prefix_sharing(self):
        # GIVEN
        tree = FoldTree()

        # WHEN
        tree.insert(["a", "b"], 5)
        tree.insert(["a", "c"], 7)

        # THEN
        a = tree.find(["a"])
        assert tree.total_of(a) == 12
        children = tree.children_of(a)
        assert [tree.name_of(child) for child in children] == ["b", "c"]
        assert [tree.total_of(child) for child in children] == [5, 7]
        assert tree.total_weight == 12

    def test_empty_path_only_increments_root(self):
        # GIVEN
        tree = FoldTree()

        # WHEN
        tree.insert([], 3)

        # THEN
        assert tree.total_weight == 3
        assert tree.children_of(ROOT) == ()
        assert tree.is_terminal(ROOT)
        assert len(tree) == 1

    def test_same_path_reuses_node(self):
        # GIVEN
        tree = FoldTree()

        # WHEN
        tree.insert(["main", "foo"], 2)
        tree.insert(["main", "foo"], 3)

        # THEN
        assert len(tree) == 3
        assert tree.total_of(tree.find(["main", "foo"])) == 5
        assert len(tree.children_of(tree.find(["main"]))) == 1
        assert tree.n_insertions == 2

    def test_zero_weight_creates_structure(self):
        # GIVEN
        tree = FoldTree()

        # WHEN
        tree.insert(["main", "idle"], 0)

        # THEN
        node = tree.find(["main", "idle"])
        assert node is not None
        assert tree.total_of(node) == 0
        assert tree.is_terminal(node)
        assert tree.total_weight == 0

    def test_same_name_at_different_depths_are_different_nodes(self):
        # GIVEN
        tree = FoldTree()

        # WHEN
        tree.insert(["a", "a"], 1)
        tree.insert(["a"], 2)

        # THEN
        assert len(tree) == 3
        assert tree.total_of(tree.find(["a"])) == 3
        assert tree.total_of(tree.find(["a", "a"])) == 1

    def test_find_unknown_path(self):
        # GIVEN
        tree = FoldTree()
        tree.insert(["a", "b"], 1)

        # WHEN / THEN
        assert tree.find(["a", "c"]) is None
        assert tree.find(["b"]) is None
        assert tree.find([]) == ROOT

    @pytest.mark.parametrize("weight", [-1, 1.5, "3", None, True])
    def test_rejects_invalid_weights(self, weight):
        # GIVEN
        tree = FoldTree()

        # WHEN / THEN
        with pytest.raises(ValueError, match="non-negative integers"):
            tree.insert(["a"], weight)
        assert len(tree) == 1
        assert tree.total_weight == 0

    def test_rejects_missing_frame_names_without_modifying_the_tree(self):
        # GIVEN
        tree = FoldTree()
        tree.insert(["a"], 1)

        # WHEN / THEN
        with pytest.raises(ValueError, match="Frame names must be strings"):
            tree.insert(["a", None, "c"], 4)
        assert tree.total_weight == 1
        assert len(tree) == 2

    def test_accepts_any_iterable_as_call_path(self):
        # GIVEN
        tree = FoldTree()

        # WHEN
        tree.insert((name for name in ["x", "y"]), 4)

        # THEN
        assert tree.total_of(tree.find(("x", "y"))) == 4


class TestWeightSemantics:
    def test_exclusive_weight_of_node_that_is_terminal_and_ancestor(self):
        # GIVEN
        tree = FoldTree()

        # WHEN
        tree.insert(["main"], 4)
        tree.insert(["main", "foo"], 6)

        # THEN
        main = tree.find(["main"])
        assert tree.total_of(main) == 10
        assert tree.exclusive_of(main) == 4
        assert list(tree.iter_terminal_paths()) == [
            (("main",), 4),
            (("main", "foo"), 6),
        ]

    def test_totals_are_never_smaller_than_children(self):
        # GIVEN
        tree = FoldTree()
        for path, weight in [
            (["a", "b", "c"], 3),
            (["a", "b"], 1),
            (["a", "d"], 9),
            (["e"], 2),
            ([], 5),
        ]:
            tree.insert(path, weight)

        # WHEN / THEN
        for _, node in tree.iter_nodes():
            children_total = sum(tree.total_of(c) for c in tree.children_of(node))
            assert tree.total_of(node) >= children_total
            assert tree.exclusive_of(node) == tree.total_of(node) - children_total

    def test_conservation(self):
        # GIVEN
        inserted = [
            (["a", "b", "c"], 3),
            (["a", "b"], 1),
            (["a", "d"], 9),
            (["e"], 2),
            ([], 5),
            (["a", "b", "c"], 7),
        ]
        tree = FoldTree()

        # WHEN
        for path, weight in inserted:
            tree.insert(path, weight)

        # THEN
        emitted = sum(weight for _, weight in tree.iter_terminal_paths())
        assert emitted == sum(weight for _, weight in inserted)
        assert tree.total_weight == emitted

    def test_commutativity(self):
        # GIVEN
        inserted = [
            (("main", "foo"), 10),
            (("main", "bar"), 20),
            (("main", "foo"), 5),
            (("main",), 1),
            ((), 2),
        ]
        trees = []

        # WHEN
        for permutation in itertools.permutations(inserted):
            tree = FoldTree()
            for path, weight in permutation:
                tree.insert(path, weight)
            trees.append(tree)

        # THEN
        expected = tree_contents(trees[0])
        assert all(tree_contents(tree) == expected for tree in trees)

    def test_iteration_order_follows_first_insertion(self):
        # GIVEN
        tree = FoldTree()

        # WHEN
        tree.insert(["main", "zzz"], 1)
        tree.insert(["other"], 1)
        tree.insert(["main", "aaa"], 1)
        tree.insert(["main", "zzz", "deep"], 1)

        # THEN
        assert [path for path, _ in tree.iter_nodes()] == [
            (),
            ("main",),
            ("main", "zzz"),
            ("main", "zzz", "deep"),
            ("main", "aaa"),
            ("other",),
        ]

    def test_node_ids_follow_the_same_order_as_paths(self):
        # GIVEN
        tree = FoldTree()
        tree.insert(["main", "zzz", "deep"], 1)
        tree.insert(["other", "x"], 1)
        tree.insert(["main", "aaa"], 1)

        # WHEN
        node_ids = list(tree.iter_node_ids())

        # THEN
        assert node_ids == [node for _, node in tree.iter_nodes()]
        assert [tree.name_of(node) for node in node_ids] == [
            None,
            "main",
            "zzz",
            "deep",
            "aaa",
            "other",
            "x",
        ]
        assert [path for path, _ in tree.iter_terminal_paths()] == [
            ("main", "zzz", "deep"),
            ("main", "aaa"),
            ("other", "x"),
        ]

    def test_deep_stacks_do_not_hit_the_recursion_limit(self):
        # GIVEN
        depth = sys.getrecursionlimit() * 2
        path = [f"frame{i}" for i in range(depth)]
        tree = FoldTree()

        # WHEN
        tree.insert(path, 1)

        # THEN
        assert list(tree.iter_terminal_paths()) == [(tuple(path), 1)]


class TestFromEvents:
    def test_aggregates_matching_events(self):
        # GIVEN
        events = [
            make_event("Foo.leaf", "Foo.main"),
            make_event("Bar.leaf", "Foo.main"),
            make_event("Foo.leaf", "Foo.main"),
            make_event("Foo.leaf", "Foo.main", type_name="jdk.JavaExceptionThrow"),
        ]

        # WHEN
        tree = FoldTree.from_events(
            events, EventType.METHOD_PROFILING_SAMPLE, FrameNamer()
        )

        # THEN
        assert list(tree.iter_terminal_paths()) == [
            (("Foo.main", "Foo.leaf"), 2),
            (("Foo.main", "Bar.leaf"), 1),
        ]
        assert tree.n_insertions == 3

    def test_skips_events_without_stack_trace(self):
        # GIVEN
        events = [
            make_event("Foo.main"),
            Event(type_name="jdk.ExecutionSample", stack_trace=None),
        ]

        # WHEN
        tree = FoldTree.from_events(
            events, EventType.METHOD_PROFILING_SAMPLE, FrameNamer()
        )

        # THEN
        assert tree.total_weight == 1
        assert tree.n_insertions == 1

    def test_uses_the_weight_of_the_event_type(self):
        # GIVEN
        events = [
            make_event("Foo.read", "Foo.main", type_name="jdk.FileRead", duration=3e6),
            make_event("Foo.write", "Foo.main", type_name="File Write", duration=5e6),
        ]

        # WHEN
        tree = FoldTree.from_events(events, EventType.IO, FrameNamer())

        # THEN
        assert tree.total_of(tree.find(["Foo.main"])) == 8
        assert tree.total_of(tree.find(["Foo.main", "Foo.write"])) == 5
