import argparse
import os
import sys
from pathlib import Path
from typing import Dict
from typing import Optional
from typing import Type
from typing import Union

from rich import print as pprint

from flamefold._errors import FlamefoldCommandError
from flamefold._options import OUTPUT_TYPES
from flamefold._options import FoldOptions
from flamefold._options import FrameNamingOptions
from flamefold.reader import RecordingReader
from flamefold.reporters.folded import FoldedReporter
from flamefold.reporters.frame_tools import FrameNamer
from flamefold.reporters.hierarchical import HierarchicalReporter

from .common import add_recording_arguments
from .common import seconds_to_nanos
from .common import validate_recording

Reporter = Union[FoldedReporter, HierarchicalReporter]

REPORTERS: Dict[str, Type[Reporter]] = {
    "folded": FoldedReporter,
    "json": HierarchicalReporter,
}


class FoldCommand:
    """Convert a recording into folded stacks for flame graphs"""

    def prepare_parser(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument(
            "-o",
            "--output",
            help="Output file name (default: standard output)",
            default=None,
        )
        parser.add_argument(
            "-f",
            "--force",
            help="If the output file already exists, overwrite it",
            action="store_true",
            default=False,
        )
        parser.add_argument(
            "-ot",
            "--output-type",
            help="Output type (default: folded)",
            choices=OUTPUT_TYPES,
            default="folded",
        )
        parser.add_argument(
            "-i",
            "--ignore-line-numbers",
            help="Ignore line numbers in stack frames",
            action="store_true",
            default=False,
        )
        parser.add_argument(
            "-sn",
            "--use-simple-names",
            help="Use simple names instead of qualified names in the stack",
            action="store_true",
            default=False,
        )
        parser.add_argument(
            "-ha",
            "--hide-arguments",
            help="Hide arguments in methods",
            action="store_true",
            default=False,
        )
        parser.add_argument(
            "-rv",
            "--show-return-value",
            help="Show return value for methods in the stack",
            action="store_true",
            default=False,
        )
        parser.add_argument(
            "-st",
            "--start-timestamp",
            help="Start timestamp in seconds for filtering",
            type=seconds_to_nanos,
            default=None,
        )
        parser.add_argument(
            "-et",
            "--end-timestamp",
            help="End timestamp in seconds for filtering",
            type=seconds_to_nanos,
            default=None,
        )
        add_recording_arguments(parser)

    def validate_output(
        self, output: Optional[str], overwrite: bool
    ) -> Optional[Path]:
        if output is None:
            return None
        output_file = Path(output)
        if not overwrite and output_file.exists():
            raise FlamefoldCommandError(
                f"File already exists, will not overwrite: {output_file}",
                exit_code=1,
            )
        return output_file

    def create_reporter(self, options: FoldOptions, reader: RecordingReader) -> Reporter:
        reporter_factory = REPORTERS[options.output_type]
        reporter = reporter_factory.from_events(
            reader.events_of(options.event_type),
            event_type=options.event_type,
            namer=FrameNamer(options.naming),
        )
        if not reporter.tree.n_insertions:
            pprint(
                f":warning: [bold yellow] No {options.event_type} events with a "
                "stack trace were found in the recording [/] :warning:\n\n"
                "Check the event type given with [b]--event[/] and the time range.",
                file=sys.stderr,
            )
        return reporter

    def write_output(self, reporter: Reporter, output_file: Optional[Path]) -> None:
        if output_file is None:
            try:
                reporter.render(sys.stdout)
                sys.stdout.flush()
            except OSError as e:
                raise FlamefoldCommandError(
                    f"Failed to write to standard output\nReason: {e}", exit_code=1
                )
            return

        try:
            with open(os.fspath(output_file.expanduser()), "w", encoding="utf-8") as f:
                reporter.render(f)
        except OSError as e:
            raise FlamefoldCommandError(
                f"Failed to write {output_file}\nReason: {e}", exit_code=1
            )

    def run(self, args: argparse.Namespace, parser: argparse.ArgumentParser) -> None:
        recording = validate_recording(args.recording)
        output_file = self.validate_output(args.output, overwrite=args.force)
        try:
            options = FoldOptions(
                event_type=args.event,
                output_type=args.output_type,
                naming=FrameNamingOptions(
                    ignore_line_numbers=args.ignore_line_numbers,
                    use_simple_names=args.use_simple_names,
                    hide_arguments=args.hide_arguments,
                    show_return_value=args.show_return_value,
                ),
                start_time=args.start_timestamp,
                end_time=args.end_timestamp,
                decompress=args.decompress,
            )
        except ValueError as e:
            parser.error(str(e))

        reader = RecordingReader(
            recording,
            decompress=options.decompress,
            start_time=options.start_time,
            end_time=options.end_time,
        )
        # Nothing is written until the whole recording has been aggregated.
        reporter = self.create_reporter(options, reader)
        self.write_output(reporter, output_file)

        if output_file is not None:
            print(f"Wrote {output_file}")
