from typing import Iterable
from typing import TextIO

from flamefold.events import Event
from flamefold.events import EventType
from flamefold.reporters.fold import ROOT_NAME
from flamefold.reporters.fold import FoldTree
from flamefold.reporters.frame_tools import FrameNamer


_FRAME_NAME_TRANSLATION = str.maketrans({";": "_", "\n": " ", "\r": " "})


def sanitize_frame_name(name: str) -> str:
    if name == ROOT_NAME:
        return ROOT_NAME + "_"
    return name.translate(_FRAME_NAME_TRANSLATION)


class FoldedReporter:
    """Write the folded stack format understood by flame graph renderers.

    Every call path that an event ended at is written once, as its frame
    names joined by semicolons followed by a space and the weight of the
    events that ended exactly there::

        main;foo 15
        main;bar 20

    Weights of paths that continue deeper are not repeated on their
    ancestors, so the emitted numbers add up to the total weight. Weight
    inserted with an empty call path is written on the ``<root>`` label.

    The format has no escaping, so semicolons in frame names are written
    as underscores and line breaks as spaces. A frame literally named
    ``<root>`` is written as ``<root>_`` to keep the label unambiguous.
    """

    SUFFIX = ".folded"

    def __init__(self, tree: FoldTree) -> None:
        self.tree = tree

    @classmethod
    def from_events(
        cls,
        events: Iterable[Event],
        *,
        event_type: EventType,
        namer: FrameNamer,
    ) -> "FoldedReporter":
        return cls(FoldTree.from_events(events, event_type, namer))

    def render(self, outfile: TextIO) -> None:
        for call_path, weight in self.tree.iter_terminal_paths():
            if call_path:
                stack = ";".join(sanitize_frame_name(name) for name in call_path)
            else:
                stack = ROOT_NAME
            outfile.write(f"{stack} {weight}\n")
