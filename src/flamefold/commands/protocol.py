import argparse
from typing import Protocol


class Command(Protocol):
    """A ``flamefold`` subcommand, named after its class minus ``Command``."""

    def prepare_parser(self, parser: argparse.ArgumentParser) -> None:
        """Register the subcommand's options on its own parser."""

    def run(self, args: argparse.Namespace, parser: argparse.ArgumentParser) -> None:
        """Execute the subcommand, raising FlamefoldCommandError on failure."""
