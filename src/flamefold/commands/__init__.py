import argparse
import logging
import sys
import textwrap
from typing import List
from typing import Optional

from flamefold._errors import FlamefoldCommandError
from flamefold._errors import FlamefoldError
from flamefold._version import __version__

from . import details
from . import fold
from .protocol import Command

_COMMANDS: List[Command] = [
    fold.FoldCommand(),
    details.DetailsCommand(),
]

_EXAMPLES = [
    "$ python3 -m flamefold fold -o profile.folded recording.jsonl",
    "$ python3 -m flamefold fold -e allocation-tlab -ot json recording.jsonl.gz -d",
    "$ python3 -m flamefold details recording.jsonl",
]

_DESCRIPTION = """\
Convert profiling recordings into folded stacks for flame graphs

Run `flamefold fold` on a recording and feed the result to a flame graph
renderer such as flamegraph.pl or speedscope.

    Example:

    """ + """
    """.join(
    _EXAMPLES
)

_EPILOG = textwrap.dedent(
    """\
    Please submit feedback, ideas, and bug reports by filing a new issue.
    """
)


def get_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=_DESCRIPTION,
        prog="flamefold",
        formatter_class=argparse.RawTextHelpFormatter,
        epilog=_EPILOG,
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity. Option is additive and can be specified up to 2 times",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=__version__,
        help="Displays the current version of flamefold",
    )

    subparsers = parser.add_subparsers(
        help="Mode of operation",
        dest="command",
        required=True,
    )

    for command in _COMMANDS:
        # Extract the CLI command name from the classes' names
        assert command.__class__.__name__.endswith("Command")
        name = command.__class__.__name__[: -len("Command")].lower()

        command_parser = subparsers.add_parser(
            name, help=command.__doc__, description=command.__doc__, epilog=_EPILOG
        )
        command_parser.set_defaults(entrypoint=command.run)
        command.prepare_parser(command_parser)

    return parser


def determine_logging_level_from_verbosity(
    verbose_level: int,
) -> int:  # pragma: no cover
    if verbose_level == 0:
        return logging.WARNING
    elif verbose_level == 1:
        return logging.INFO
    else:
        return logging.DEBUG


def main(args: Optional[List[str]] = None) -> int:
    if args is None:
        args = sys.argv[1:]

    parser = get_argument_parser()
    arg_values = parser.parse_args(args=args)
    logging.basicConfig(
        level=determine_logging_level_from_verbosity(arg_values.verbose),
        format="%(levelname)s(%(funcName)s): %(message)s",
    )

    try:
        arg_values.entrypoint(arg_values, parser)
    except FlamefoldCommandError as e:
        print(e, file=sys.stderr)
        return e.exit_code
    except FlamefoldError as e:
        print(e, file=sys.stderr)
        return 1
    else:
        return 0
