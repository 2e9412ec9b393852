"""Events read from a recording, and the categories used to weigh them.

Each :class:`EventType` can be selected from the command line and matches
one or more event type names found in a recording. Each type knows how to
convert a matching event into the integer weight that makes the flame graph
most meaningful: the number of samples for CPU profiling, the number of
kibibytes for allocations, or the number of milliseconds for blocking and
I/O events.
"""
import enum
import math
from dataclasses import dataclass
from dataclasses import field
from typing import Callable
from typing import Dict
from typing import Mapping
from typing import Optional
from typing import Tuple
from typing import Union

from ._errors import WeightExtractionError

Number = Union[int, float]

NANOS_PER_MILLISECOND = 1_000_000
BYTES_PER_KIBIBYTE = 1024


@dataclass(frozen=True)
class Frame:
    """A single frame of a raw stack trace."""

    type_name: str
    method: Optional[str] = None
    descriptor: Optional[str] = None
    line: Optional[int] = None


@dataclass(frozen=True)
class Event:
    """A single event of a recording.

    ``stack_trace`` is ordered innermost frame first, as recorded. It is
    ``None`` when the event carries no stack trace at all.
    """

    type_name: str
    start_time: Optional[int] = None
    end_time: Optional[int] = None
    stack_trace: Optional[Tuple[Frame, ...]] = None
    attributes: Mapping[str, Number] = field(default_factory=dict)


Accessor = Callable[[Event], Number]


def _attribute_accessor(name: str) -> Accessor:
    def accessor(event: Event) -> Number:
        try:
            return event.attributes[name]
        except KeyError:
            raise WeightExtractionError(
                f"Event of type {event.type_name!r} has no {name!r} attribute"
            ) from None

    return accessor


def _elapsed_time(event: Event) -> Number:
    if event.start_time is None or event.end_time is None:
        raise WeightExtractionError(
            f"Event of type {event.type_name!r} has no start or end time"
        )
    return event.end_time - event.start_time


def _count_accessor(event: Event) -> Optional[Accessor]:
    return lambda event: 1


def _duration_accessor(event: Event) -> Optional[Accessor]:
    if "duration" in event.attributes:
        nanos = _attribute_accessor("duration")
    elif event.start_time is not None and event.end_time is not None:
        nanos = _elapsed_time
    else:
        return None
    return lambda event: nanos(event) // NANOS_PER_MILLISECOND


def _size_accessor(*candidates: str) -> Callable[[Event], Optional[Accessor]]:
    def resolve(event: Event) -> Optional[Accessor]:
        for name in candidates:
            if name in event.attributes:
                size = _attribute_accessor(name)
                return lambda event: size(event) // BYTES_PER_KIBIBYTE
        return None

    return resolve


class ValueField(enum.Enum):
    """How the weight of an event is computed."""

    COUNT = "count"
    DURATION = "duration"
    ALLOCATION_SIZE = "allocation size"
    TLAB_SIZE = "TLAB size"

    def resolve(self, event: Event) -> Accessor:
        """Find how to read this field from events shaped like ``event``."""
        accessor = _RESOLVERS[self](event)
        if accessor is None:
            raise WeightExtractionError(
                f"Cannot compute the {self.value} of events of type "
                f"{event.type_name!r}: the required attributes are missing"
            )
        return accessor


_RESOLVERS: Dict[ValueField, Callable[[Event], Optional[Accessor]]] = {
    ValueField.COUNT: _count_accessor,
    ValueField.DURATION: _duration_accessor,
    ValueField.ALLOCATION_SIZE: _size_accessor("tlabSize", "allocationSize"),
    ValueField.TLAB_SIZE: _size_accessor("tlabSize"),
}


class EventType(enum.Enum):
    """Types of events possibly available in a recording."""

    METHOD_PROFILING_SAMPLE = (
        "cpu",
        ValueField.COUNT,
        ("Method Profiling Sample", "jdk.ExecutionSample"),
    )
    ALLOCATION_IN_NEW_TLAB = (
        "allocation-tlab",
        ValueField.TLAB_SIZE,
        ("Allocation in new TLAB", "jdk.ObjectAllocationInNewTLAB"),
    )
    ALLOCATION_OUTSIDE_TLAB = (
        "allocation-outside-tlab",
        ValueField.ALLOCATION_SIZE,
        ("Allocation outside TLAB", "jdk.ObjectAllocationOutsideTLAB"),
    )
    JAVA_EXCEPTION = (
        "exceptions",
        ValueField.COUNT,
        ("Java Exception", "jdk.JavaExceptionThrow"),
    )
    JAVA_MONITOR_BLOCKED = (
        "monitor-blocked",
        ValueField.DURATION,
        ("Java Monitor Blocked", "jdk.JavaMonitorEnter"),
    )
    IO = (
        "io",
        ValueField.DURATION,
        (
            "File Read",
            "File Write",
            "Socket Read",
            "Socket Write",
            "jdk.FileRead",
            "jdk.FileWrite",
            "jdk.SocketRead",
            "jdk.SocketWrite",
        ),
    )

    def __init__(
        self, option: str, value_field: ValueField, event_names: Tuple[str, ...]
    ) -> None:
        self.option = option
        self.value_field = value_field
        self.event_names = frozenset(event_names)

    def __str__(self) -> str:
        return self.option

    def matches(self, event: Event) -> bool:
        return event.type_name in self.event_names

    def weight_extractor(self) -> "WeightExtractor":
        return WeightExtractor(self)

    @classmethod
    def options(cls) -> Tuple[str, ...]:
        return tuple(event_type.option for event_type in cls)

    @classmethod
    def from_option(cls, option: str) -> "EventType":
        for event_type in cls:
            if event_type.option == option:
                return event_type
        raise ValueError(f"Event type [{option}] does not exist.")


class WeightExtractor:
    """Compute the weight of events matched by a given :class:`EventType`.

    How to read the weight is decided once per event type name, from the
    first event of that name, and reused for every later event. A category
    that cannot be applied to the events it matches is a configuration
    mistake, so it fails the whole run instead of skipping events.
    """

    def __init__(self, event_type: EventType) -> None:
        self.event_type = event_type
        self._accessor_by_type_name: Dict[str, Accessor] = {}

    def get_weight(self, event: Event) -> int:
        accessor = self._accessor_by_type_name.get(event.type_name)
        if accessor is None:
            accessor = self.event_type.value_field.resolve(event)
            self._accessor_by_type_name[event.type_name] = accessor

        value = accessor(event)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise WeightExtractionError(
                f"Invalid {self.event_type.value_field.value} {value!r} "
                f"in event of type {event.type_name!r}"
            )
        if isinstance(value, float) and not math.isfinite(value):
            raise WeightExtractionError(
                f"Non-finite {self.event_type.value_field.value} {value!r} "
                f"in event of type {event.type_name!r}"
            )
        weight = int(value)
        if weight < 0:
            raise WeightExtractionError(
                f"Negative {self.event_type.value_field.value} {weight} "
                f"in event of type {event.type_name!r}"
            )
        return weight
