from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from typing import IO
from typing import Dict
from typing import Iterable
from typing import Optional

from rich import print as rprint
from rich.markup import escape
from rich.table import Column
from rich.table import Table

from flamefold.events import Event
from flamefold.events import EventType

NANOS_PER_SECOND = 1_000_000_000
NANOS_PER_MINUTE = 60 * NANOS_PER_SECOND
UNKNOWN = "<unknown>"


def duration_fmt(nanos: int) -> str:
    hours, minutes = divmod(nanos // NANOS_PER_MINUTE, 60)
    return f"{hours} h {minutes} min"


def timestamp_fmt(nanos: Optional[int], print_timestamp: bool) -> str:
    if nanos is None:
        return UNKNOWN
    seconds = nanos // NANOS_PER_SECOND
    if print_timestamp:
        return str(seconds)
    try:
        moment = datetime.fromtimestamp(seconds).astimezone()
    except (ValueError, OverflowError, OSError):
        return str(seconds)
    return moment.strftime("%B %d, %Y %H:%M:%S %Z")


@dataclass
class TimeSpan:
    """The earliest start and latest end seen over a set of events."""

    start: Optional[int] = None
    end: Optional[int] = None

    def update(self, event: Event) -> None:
        start = event.start_time if event.start_time is not None else event.end_time
        end = event.end_time if event.end_time is not None else event.start_time
        if start is not None and (self.start is None or start < self.start):
            self.start = start
        if end is not None and (self.end is None or end > self.end):
            self.end = end

    @property
    def duration(self) -> Optional[int]:
        if self.start is None or self.end is None:
            return None
        return self.end - self.start


class DetailsReporter:
    def __init__(
        self,
        *,
        event_type: EventType,
        recording_span: TimeSpan,
        event_span: TimeSpan,
        n_events_by_type: Dict[str, int],
    ) -> None:
        self.event_type = event_type
        self.recording_span = recording_span
        self.event_span = event_span
        self.n_events_by_type = n_events_by_type

    @classmethod
    def from_events(
        cls, events: Iterable[Event], *, event_type: EventType
    ) -> "DetailsReporter":
        recording_span = TimeSpan()
        event_span = TimeSpan()
        n_events_by_type: Dict[str, int] = Counter()
        for event in events:
            n_events_by_type[event.type_name] += 1
            recording_span.update(event)
            if event_type.matches(event):
                event_span.update(event)
        return cls(
            event_type=event_type,
            recording_span=recording_span,
            event_span=event_span,
            n_events_by_type=n_events_by_type,
        )

    def render(
        self, *, print_timestamp: bool = False, file: Optional[IO[str]] = None
    ) -> None:
        def line(label: str, value: str) -> None:
            rprint(f"[bold]{label:<16}[/]: {escape(value)}", file=file)

        def span_duration(span: TimeSpan) -> str:
            duration = span.duration
            return UNKNOWN if duration is None else duration_fmt(duration)

        rprint("[bold]Recording Details[/]", file=file)
        line("Start", timestamp_fmt(self.recording_span.start, print_timestamp))
        line("End", timestamp_fmt(self.recording_span.end, print_timestamp))
        line("Min Start Event", timestamp_fmt(self.event_span.start, print_timestamp))
        line("Max End Event", timestamp_fmt(self.event_span.end, print_timestamp))
        line("Duration", span_duration(self.recording_span))
        line("Events Duration", span_duration(self.event_span))

        table = Table(
            Column("Event Type"),
            Column("Count", justify="right"),
            Column("Selected", justify="center"),
        )
        for type_name, count in sorted(
            self.n_events_by_type.items(), key=lambda item: (-item[1], item[0])
        ):
            selected = type_name in self.event_type.event_names
            table.add_row(
                escape(type_name),
                str(count),
                f"[green]{self.event_type}[/]" if selected else "",
            )
        rprint(table, file=file)
