from io import StringIO

from flamefold import EventType
from flamefold.reporters.details import DetailsReporter
from flamefold.reporters.details import TimeSpan
from flamefold.reporters.details import duration_fmt
from flamefold.reporters.details import timestamp_fmt
from tests.utils import make_event

SECOND = 1_000_000_000


class TestFormatting:
    def test_duration_fmt(self):
        # GIVEN/WHEN/THEN
        assert duration_fmt(0) == "0 h 0 min"
        assert duration_fmt(59 * SECOND) == "0 h 0 min"
        assert duration_fmt(61 * 60 * SECOND) == "1 h 1 min"
        assert duration_fmt(25 * 3600 * SECOND) == "25 h 0 min"

    def test_timestamp_fmt(self):
        # GIVEN/WHEN/THEN
        assert timestamp_fmt(None, print_timestamp=True) == "<unknown>"
        assert timestamp_fmt(1500 * SECOND + 999, print_timestamp=True) == "1500"
        assert timestamp_fmt(1500 * SECOND, print_timestamp=False) != "1500"

    def test_timestamp_fmt_out_of_range_dates(self):
        # GIVEN
        nanos = 10**24

        # WHEN
        formatted = timestamp_fmt(nanos, print_timestamp=False)

        # THEN
        assert formatted == str(10**15)


class TestTimeSpan:
    def test_tracks_earliest_start_and_latest_end(self):
        # GIVEN
        span = TimeSpan()

        # WHEN
        span.update(make_event(start_time=10, end_time=20))
        span.update(make_event(start_time=5, end_time=8))
        span.update(make_event(start_time=30))
        span.update(make_event())

        # THEN
        assert span.start == 5
        assert span.end == 30
        assert span.duration == 25

    def test_empty_span(self):
        # GIVEN/WHEN/THEN
        assert TimeSpan().duration is None


class TestDetailsReporter:
    def test_render(self):
        # GIVEN
        events = [
            make_event("a.B.run", start_time=10 * SECOND),
            make_event("a.B.run", start_time=70 * SECOND),
            make_event(
                "a.B.read",
                type_name="jdk.FileRead",
                start_time=0,
                end_time=3600 * SECOND,
            ),
        ]
        reporter = DetailsReporter.from_events(
            events, event_type=EventType.METHOD_PROFILING_SAMPLE
        )
        output = StringIO()

        # WHEN
        reporter.render(print_timestamp=True, file=output)

        # THEN
        text = output.getvalue()
        assert "Recording Details" in text
        assert "Start           : 0" in text
        assert "End             : 3600" in text
        assert "Min Start Event : 10" in text
        assert "Max End Event   : 70" in text
        assert "Duration        : 1 h 0 min" in text
        assert "Events Duration : 0 h 1 min" in text
        assert "jdk.ExecutionSample" in text
        assert "jdk.FileRead" in text

    def test_counts_events_by_type(self):
        # GIVEN
        events = [
            make_event(),
            make_event(),
            make_event(type_name="jdk.FileRead"),
        ]

        # WHEN
        reporter = DetailsReporter.from_events(events, event_type=EventType.IO)

        # THEN
        assert reporter.n_events_by_type == {
            "jdk.ExecutionSample": 2,
            "jdk.FileRead": 1,
        }
        assert reporter.event_span.start is None

    def test_render_without_events(self):
        # GIVEN
        reporter = DetailsReporter.from_events([], event_type=EventType.IO)
        output = StringIO()

        # WHEN
        reporter.render(file=output)

        # THEN
        text = output.getvalue()
        assert "Start           : <unknown>" in text
        assert "Duration        : <unknown>" in text
