"""Read events from a recording.

A recording is a UTF-8 file holding one JSON object per line, optionally
compressed with gzip. Each object describes one event::

    {"type": "jdk.ExecutionSample", "startTime": 1500000000000000000,
     "stackTrace": [{"type": "com.example.Foo", "method": "bar",
                     "descriptor": "(I)V", "line": 12}]}

The stack trace lists the innermost frame first. Numeric keys other than
``type``, ``startTime``, ``endTime`` and ``stackTrace`` are kept as event
attributes (``duration``, ``tlabSize``, ``allocationSize``...). Anything
else is ignored.
"""
import gzip
import json
import logging
import os
import pathlib
from typing import IO
from typing import Any
from typing import Dict
from typing import Iterator
from typing import Optional
from typing import Tuple
from typing import Union

from ._errors import RecordingError
from .events import Event
from .events import EventType
from .events import Frame
from .events import Number

LOGGER = logging.getLogger(__name__)

GZIP_MAGIC = b"\x1f\x8b"

_RESERVED_KEYS = {"type", "startTime", "endTime", "stackTrace"}


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not a valid JSON value")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _optional(data: Dict[str, Any], key: str, kind: type) -> Any:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, kind) or isinstance(value, bool):
        raise ValueError(f"{key!r} must be of type {kind.__name__}, got {value!r}")
    return value


def parse_frame(data: Any) -> Frame:
    if not isinstance(data, dict):
        raise ValueError(f"stack frames must be objects, got {data!r}")
    type_name = data.get("type")
    if not isinstance(type_name, str):
        raise ValueError(f"stack frame without a declaring type: {data!r}")
    return Frame(
        type_name=type_name,
        method=_optional(data, "method", str),
        descriptor=_optional(data, "descriptor", str),
        line=_optional(data, "line", int),
    )


def parse_event(data: Any) -> Event:
    if not isinstance(data, dict):
        raise ValueError(f"events must be JSON objects, got {type(data).__name__}")
    type_name = data.get("type")
    if not isinstance(type_name, str):
        raise ValueError("event without a 'type'")

    raw_stack = data.get("stackTrace")
    stack_trace: Optional[Tuple[Frame, ...]] = None
    if raw_stack is not None:
        if not isinstance(raw_stack, list):
            raise ValueError(f"'stackTrace' must be a list, got {raw_stack!r}")
        stack_trace = tuple(parse_frame(frame) for frame in raw_stack)

    attributes: Dict[str, Number] = {
        key: value
        for key, value in data.items()
        if key not in _RESERVED_KEYS and _is_number(value)
    }
    return Event(
        type_name=type_name,
        start_time=_optional(data, "startTime", int),
        end_time=_optional(data, "endTime", int),
        stack_trace=stack_trace,
        attributes=attributes,
    )


def in_time_range(
    event: Event, start_time: Optional[int], end_time: Optional[int]
) -> bool:
    """Tell whether the event starts or ends within ``[start_time, end_time]``.

    Events without any timestamp cannot be placed in time and are kept.
    """
    if start_time is None and end_time is None:
        return True
    timestamps = [t for t in (event.start_time, event.end_time) if t is not None]
    if not timestamps:
        return True
    return any(
        (start_time is None or start_time <= t) and (end_time is None or t <= end_time)
        for t in timestamps
    )


class RecordingReader:
    """Lazily read the events stored in a recording file."""

    def __init__(
        self,
        path: Union[str, pathlib.Path],
        *,
        decompress: bool = False,
        start_time: Optional[int] = None,
        end_time: Optional[int] = None,
    ) -> None:
        self.path = pathlib.Path(path)
        self.decompress = decompress
        self.start_time = start_time
        self.end_time = end_time

    def _open(self) -> IO[str]:
        if self.decompress:
            return gzip.open(os.fspath(self.path), "rt", encoding="utf-8")
        return open(os.fspath(self.path), encoding="utf-8")

    def _looks_compressed(self) -> bool:
        try:
            with open(os.fspath(self.path), "rb") as f:
                return f.read(len(GZIP_MAGIC)) == GZIP_MAGIC
        except OSError:
            return False

    def _failure(self, reason: str) -> RecordingError:
        message = f"Could not load the recording {self.path}\nReason: {reason}"
        if not self.decompress and self._looks_compressed():
            message += "\nIf the recording is compressed, try the --decompress option"
        return RecordingError(message)

    def _read_events(self) -> Iterator[Event]:
        LOGGER.debug("Reading events from %s", self.path)
        lineno = 0
        try:
            with self._open() as f:
                for lineno, line in enumerate(f, 1):
                    if not line.strip():
                        continue
                    try:
                        data = json.loads(line, parse_constant=_reject_constant)
                        yield parse_event(data)
                    except ValueError as e:
                        raise self._failure(f"line {lineno}: {e}") from e
        except (OSError, UnicodeDecodeError, EOFError) as e:
            raise self._failure(str(e)) from e
        LOGGER.debug("Read %d lines from %s", lineno, self.path)

    def events(self) -> Iterator[Event]:
        """Iterate over every event within the configured time range."""
        for event in self._read_events():
            if in_time_range(event, self.start_time, self.end_time):
                yield event

    def events_of(self, event_type: EventType) -> Iterator[Event]:
        """Iterate over the events matched by ``event_type``."""
        return (event for event in self.events() if event_type.matches(event))
