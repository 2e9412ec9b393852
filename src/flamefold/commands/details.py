import argparse

from flamefold.reader import RecordingReader
from flamefold.reporters.details import DetailsReporter

from .common import add_recording_arguments
from .common import validate_recording


class DetailsCommand:
    """Print details about the events in a recording"""

    def prepare_parser(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument(
            "-t",
            "--print-timestamp",
            help="Print timestamps as seconds since the epoch instead of dates",
            action="store_true",
            default=False,
        )
        add_recording_arguments(parser)

    def run(self, args: argparse.Namespace, parser: argparse.ArgumentParser) -> None:
        recording = validate_recording(args.recording)
        reader = RecordingReader(recording, decompress=args.decompress)
        reporter = DetailsReporter.from_events(reader.events(), event_type=args.event)
        reporter.render(print_timestamp=args.print_timestamp)
