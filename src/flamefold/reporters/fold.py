"""Aggregate weighted call paths into a prefix tree.

The tree is stored as an arena: every node is an integer index into a set
of parallel lists, and a dictionary keyed by ``(parent index, frame name)``
finds the child of a node in constant time. The root is always node 0 and
has no name.
"""
import logging
from typing import Dict
from typing import Iterable
from typing import Iterator
from typing import List
from typing import Optional
from typing import Tuple

from flamefold.events import Event
from flamefold.events import EventType
from flamefold.reporters.frame_tools import CallPath
from flamefold.reporters.frame_tools import FrameNamer
from flamefold.reporters.frame_tools import build_call_path

LOGGER = logging.getLogger(__name__)

ROOT = 0
ROOT_NAME = "<root>"

NodeKey = Tuple[int, str]


class FoldTree:
    """Prefix tree of call paths, accumulating weight on every node.

    A node's total is the sum of the weights of every call path inserted
    through it or ending at it, so the root's total is the sum of all the
    inserted weights. Nodes are created the first time a path prefix is
    seen and reused afterwards; children keep their first-insertion order,
    which makes the output of a run reproducible. The totals themselves do
    not depend on the insertion order.

    The tree is not thread safe: concurrent writers must serialize their
    calls to :meth:`insert`.
    """

    def __init__(self) -> None:
        self._names: List[Optional[str]] = [None]
        self._totals: List[int] = [0]
        self._children: List[List[int]] = [[]]
        self._terminal: List[bool] = [False]
        self._node_index_by_key: Dict[NodeKey, int] = {}
        self.n_insertions = 0

    def __len__(self) -> int:
        return len(self._names)

    @property
    def total_weight(self) -> int:
        return self._totals[ROOT]

    def insert(self, call_path: Iterable[str], weight: int) -> None:
        """Add ``weight`` to every node along ``call_path``, creating nodes.

        An empty call path only adds to the root. A zero weight creates the
        nodes without changing any total.
        """
        if isinstance(weight, bool) or not isinstance(weight, int) or weight < 0:
            raise ValueError(f"Weights must be non-negative integers, got {weight!r}")
        call_path = tuple(call_path)
        for name in call_path:
            if not isinstance(name, str):
                raise ValueError(
                    f"Frame names must be strings, got {name!r} in {call_path!r}"
                )

        current = ROOT
        self._totals[ROOT] += weight
        for name in call_path:
            node_key = (current, name)
            node = self._node_index_by_key.get(node_key)
            if node is None:
                node = len(self._names)
                self._node_index_by_key[node_key] = node
                self._names.append(name)
                self._totals.append(0)
                self._children.append([])
                self._terminal.append(False)
                self._children[current].append(node)
            current = node
            self._totals[current] += weight
        self._terminal[current] = True
        self.n_insertions += 1

    def find(self, call_path: Iterable[str]) -> Optional[int]:
        node = ROOT
        for name in call_path:
            child = self._node_index_by_key.get((node, name))
            if child is None:
                return None
            node = child
        return node

    def name_of(self, node: int) -> Optional[str]:
        return self._names[node]

    def total_of(self, node: int) -> int:
        return self._totals[node]

    def children_of(self, node: int) -> Tuple[int, ...]:
        return tuple(self._children[node])

    def is_terminal(self, node: int) -> bool:
        return self._terminal[node]

    def exclusive_of(self, node: int) -> int:
        """Weight of the paths ending at ``node``, excluding its children."""
        return self._totals[node] - sum(
            self._totals[child] for child in self._children[node]
        )

    def iter_node_ids(self) -> Iterator[int]:
        """Walk the tree depth first, children in first-insertion order."""
        stack = [ROOT]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(self._children[node]))

    def _walk(self) -> Iterator[Tuple[List[str], int]]:
        # The yielded path is shared and only valid until the next step.
        path: List[str] = []
        stack = [(0, ROOT)]
        while stack:
            depth, node = stack.pop()
            if node != ROOT:
                del path[depth - 1 :]
                path.append(self._names[node])  # type: ignore
            yield path, node
            for child in reversed(self._children[node]):
                stack.append((depth + 1, child))

    def iter_nodes(self) -> Iterator[Tuple[CallPath, int]]:
        """Walk the tree like :meth:`iter_node_ids`, with the call paths.

        The root comes first, with an empty call path.
        """
        for path, node in self._walk():
            yield tuple(path), node

    def iter_terminal_paths(self) -> Iterator[Tuple[CallPath, int]]:
        """Yield every path an insertion ended at, with its exclusive weight."""
        for path, node in self._walk():
            if self._terminal[node]:
                yield tuple(path), self.exclusive_of(node)

    @classmethod
    def from_events(
        cls,
        events: Iterable[Event],
        event_type: EventType,
        namer: FrameNamer,
    ) -> "FoldTree":
        """Aggregate the events of a recording matching ``event_type``."""
        tree = cls()
        extractor = event_type.weight_extractor()
        n_without_stack_trace = 0
        for event in events:
            if not event_type.matches(event):
                continue
            if event.stack_trace is None:
                n_without_stack_trace += 1
                continue
            call_path = build_call_path(event.stack_trace, namer)
            tree.insert(call_path, extractor.get_weight(event))

        if n_without_stack_trace:
            LOGGER.info(
                "Skipped %d %s events without a stack trace",
                n_without_stack_trace,
                event_type,
            )
        LOGGER.info(
            "Aggregated %d %s events into %d nodes (total weight %d)",
            tree.n_insertions,
            event_type,
            len(tree),
            tree.total_weight,
        )
        return tree
