import argparse
import decimal
from pathlib import Path

from flamefold._errors import FlamefoldCommandError
from flamefold.events import EventType

NANOS_PER_SECOND = 1_000_000_000


def seconds_to_nanos(value: str) -> int:
    """Convert a number of seconds given on the command line to nanoseconds."""
    try:
        return int(decimal.Decimal(value) * NANOS_PER_SECOND)
    except (decimal.InvalidOperation, ValueError, OverflowError):
        raise argparse.ArgumentTypeError(f"{value} is not a valid number of seconds")


def event_type(value: str) -> EventType:
    try:
        return EventType.from_option(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def validate_recording(recording: str) -> Path:
    """Ensure that the recording provided by the user exists."""
    recording_path = Path(recording)
    if not recording_path.exists() or not recording_path.is_file():
        raise FlamefoldCommandError(f"No such file: {recording}", exit_code=1)
    return recording_path


def add_recording_arguments(parser: argparse.ArgumentParser) -> None:
    options = ", ".join(EventType.options())
    parser.add_argument(
        "-e",
        "--event",
        help=(
            "Type of event used to generate the flame graph. "
            f"Available types: {options} (default: cpu)"
        ),
        type=event_type,
        default=EventType.METHOD_PROFILING_SAMPLE,
    )
    parser.add_argument(
        "-d",
        "--decompress",
        help="Decompress the recording with gzip before reading it",
        action="store_true",
        default=False,
    )
    parser.add_argument("recording", help="Recording of profiling events")
