from ._errors import FlamefoldError
from ._errors import RecordingError
from ._errors import WeightExtractionError
from ._options import FoldOptions
from ._options import FrameNamingOptions
from ._version import __version__
from .events import Event
from .events import EventType
from .events import Frame
from .reader import RecordingReader
from .reporters.fold import FoldTree
from .reporters.folded import FoldedReporter
from .reporters.frame_tools import FrameNamer
from .reporters.frame_tools import build_call_path
from .reporters.hierarchical import HierarchicalReporter

__all__ = [
    "Event",
    "EventType",
    "FlamefoldError",
    "FoldOptions",
    "FoldTree",
    "FoldedReporter",
    "Frame",
    "FrameNamer",
    "FrameNamingOptions",
    "HierarchicalReporter",
    "RecordingError",
    "RecordingReader",
    "WeightExtractionError",
    "build_call_path",
    "__version__",
]
