import typing
from dataclasses import dataclass
from dataclasses import field

if typing.TYPE_CHECKING:
    from .events import EventType

OUTPUT_TYPES = ("folded", "json")


@dataclass(frozen=True)
class FrameNamingOptions:
    """Control how stack frames are turned into display names.

    Args:
        ignore_line_numbers: Leave the ``:<line>`` suffix out, so that
            samples taken on different lines of the same method are merged.
        use_simple_names: Strip the package from class and type names.
        hide_arguments: Leave the parameter list out of method names.
        show_return_value: Prefix each method with its return type.
    """

    ignore_line_numbers: bool = False
    use_simple_names: bool = False
    hide_arguments: bool = False
    show_return_value: bool = False


@dataclass(frozen=True)
class FoldOptions:
    """Everything a single conversion run needs to know.

    Args:
        event_type: The category of events used to build the flame graph.
        output_type: One of ``"folded"`` or ``"json"``.
        naming: Options forwarded to the frame namer.
        start_time: Only keep events overlapping this timestamp or later
            (nanoseconds since the epoch). ``None`` means unbounded.
        end_time: Only keep events overlapping this timestamp or earlier
            (nanoseconds since the epoch). ``None`` means unbounded.
        decompress: Read the recording through gzip.
    """

    event_type: "EventType"
    output_type: str = "folded"
    naming: FrameNamingOptions = field(default_factory=FrameNamingOptions)
    start_time: typing.Optional[int] = None
    end_time: typing.Optional[int] = None
    decompress: bool = False

    def __post_init__(self) -> None:
        if self.output_type not in OUTPUT_TYPES:
            raise ValueError(
                f"Invalid output type {self.output_type!r}, "
                f"expected one of: {', '.join(OUTPUT_TYPES)}"
            )
        if (
            self.start_time is not None
            and self.end_time is not None
            and self.start_time > self.end_time
        ):
            raise ValueError("The start of the time range is after its end")
