import json
from typing import Any
from typing import Dict
from typing import Iterable
from typing import Iterator
from typing import List
from typing import TextIO
from typing import Union

from flamefold.events import Event
from flamefold.events import EventType
from flamefold.reporters.fold import ROOT
from flamefold.reporters.fold import ROOT_NAME
from flamefold.reporters.fold import FoldTree
from flamefold.reporters.frame_tools import FrameNamer


class HierarchicalReporter:
    """Write the aggregated tree as nested JSON objects.

    Each node is written as::

        {"name": "main", "value": 0, "total": 35, "children": [...]}

    where ``value`` is the weight of the events that ended at the node and
    ``total`` also includes everything below it. Children are listed in the
    order they were first seen. The tree is walked without recursion, so
    arbitrarily deep stacks can be written.
    """

    SUFFIX = ".json"

    def __init__(self, tree: FoldTree) -> None:
        self.tree = tree

    @classmethod
    def from_events(
        cls,
        events: Iterable[Event],
        *,
        event_type: EventType,
        namer: FrameNamer,
    ) -> "HierarchicalReporter":
        return cls(FoldTree.from_events(events, event_type, namer))

    def _node_header(self, node: int) -> str:
        name = self.tree.name_of(node)
        return '{{"name":{},"value":{},"total":{},"children":['.format(
            json.dumps(ROOT_NAME if name is None else name, ensure_ascii=False),
            self.tree.exclusive_of(node),
            self.tree.total_of(node),
        )

    def iter_chunks(self) -> Iterator[str]:
        stack: List[Union[int, str]] = [ROOT]
        while stack:
            item = stack.pop()
            if isinstance(item, str):
                yield item
                continue
            yield self._node_header(item)
            stack.append("]}")
            children = self.tree.children_of(item)
            for position, child in enumerate(reversed(children), 1):
                stack.append(child)
                if position != len(children):
                    stack.append(",")

    def as_dict(self) -> Dict[str, Any]:
        nodes: Dict[int, Dict[str, Any]] = {}
        for node in self.tree.iter_node_ids():
            name = self.tree.name_of(node)
            nodes[node] = {
                "name": ROOT_NAME if name is None else name,
                "value": self.tree.exclusive_of(node),
                "total": self.tree.total_of(node),
                "children": [],
            }
        for node, data in nodes.items():
            data["children"].extend(
                nodes[child] for child in self.tree.children_of(node)
            )
        return nodes[ROOT]

    def render(self, outfile: TextIO) -> None:
        for chunk in self.iter_chunks():
            outfile.write(chunk)
        outfile.write("\n")
