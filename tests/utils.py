"""Utilities / Helpers for writing tests."""
import gzip
import json
from pathlib import Path
from typing import Any
from typing import Dict
from typing import Iterable
from typing import List
from typing import Optional
from typing import Tuple

from flamefold import Event
from flamefold import Frame

SAMPLE = "jdk.ExecutionSample"


def make_frames(*names: str) -> Tuple[Frame, ...]:
    """Build a leaf-first stack trace out of ``Class.method`` names."""
    frames = []
    for name in names:
        type_name, _, method = name.rpartition(".")
        frames.append(Frame(type_name=type_name, method=method))
    return tuple(frames)


def make_event(
    *names: str,
    type_name: str = SAMPLE,
    start_time: Optional[int] = None,
    end_time: Optional[int] = None,
    **attributes: Any,
) -> Event:
    return Event(
        type_name=type_name,
        start_time=start_time,
        end_time=end_time,
        stack_trace=make_frames(*names),
        attributes=attributes,
    )


def raw_event(
    frames: List[Dict[str, Any]], type_name: str = SAMPLE, **fields: Any
) -> Dict[str, Any]:
    return {"type": type_name, "stackTrace": frames, **fields}


def raw_frame(
    type_name: str,
    method: Optional[str],
    descriptor: Optional[str] = None,
    line: Optional[int] = None,
) -> Dict[str, Any]:
    data: Dict[str, Any] = {"type": type_name, "method": method}
    if descriptor is not None:
        data["descriptor"] = descriptor
    if line is not None:
        data["line"] = line
    return data


def write_recording(
    path: Path, events: Iterable[Dict[str, Any]], compress: bool = False
) -> Path:
    text = "".join(json.dumps(event) + "\n" for event in events)
    if compress:
        with gzip.open(path, "wt", encoding="utf-8") as f:
            f.write(text)
    else:
        path.write_text(text, encoding="utf-8")
    return path
