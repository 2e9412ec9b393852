"""Tools for naming stack frames and turning stack traces into call paths."""
import functools
from typing import Dict
from typing import Iterable
from typing import List
from typing import Optional
from typing import Tuple

from flamefold._options import FrameNamingOptions
from flamefold.events import Frame

CallPath = Tuple[str, ...]

PRIMITIVE_TYPES = {
    "B": "byte",
    "C": "char",
    "D": "double",
    "F": "float",
    "I": "int",
    "J": "long",
    "S": "short",
    "Z": "boolean",
    "V": "void",
}


def _parse_field_type(descriptor: str, pos: int) -> Tuple[str, int]:
    dimensions = 0
    while descriptor[pos] == "[":
        dimensions += 1
        pos += 1

    code = descriptor[pos]
    if code == "L":
        end = descriptor.index(";", pos)
        name = descriptor[pos + 1 : end].replace("/", ".")
        if not name:
            raise ValueError(f"Empty class name in descriptor {descriptor!r}")
        pos = end + 1
    elif code in PRIMITIVE_TYPES:
        name = PRIMITIVE_TYPES[code]
        pos += 1
    else:
        raise ValueError(f"Unknown type code {code!r} in descriptor {descriptor!r}")
    return name + "[]" * dimensions, pos


@functools.lru_cache(maxsize=4096)
def parse_method_descriptor(descriptor: str) -> Tuple[Tuple[str, ...], str]:
    """Decode a JVM method descriptor into argument and return type names.

    >>> parse_method_descriptor("(I[Ljava/lang/String;)V")
    (('int', 'java.lang.String[]'), 'void')
    """
    if not descriptor.startswith("("):
        raise ValueError(f"Invalid method descriptor {descriptor!r}")
    try:
        pos = 1
        arguments: List[str] = []
        while descriptor[pos] != ")":
            argument, pos = _parse_field_type(descriptor, pos)
            arguments.append(argument)
        return_type, pos = _parse_field_type(descriptor, pos + 1)
    except IndexError:
        raise ValueError(f"Truncated method descriptor {descriptor!r}") from None
    if pos != len(descriptor):
        raise ValueError(f"Trailing data in method descriptor {descriptor!r}")
    return tuple(arguments), return_type


def simple_name(qualified_name: str) -> str:
    return qualified_name.rpartition(".")[2]


class FrameNamer:
    """Turn frames into display names according to the naming options.

    Returns ``None`` for frames that cannot be named, which the callers
    drop from the stack entirely.
    """

    def __init__(self, options: Optional[FrameNamingOptions] = None) -> None:
        self.options = options if options is not None else FrameNamingOptions()
        self._name_by_frame: Dict[Frame, Optional[str]] = {}

    def __call__(self, frame: Frame) -> Optional[str]:
        try:
            return self._name_by_frame[frame]
        except KeyError:
            name = self._name_by_frame[frame] = self._format(frame)
            return name

    def _type_name(self, name: str) -> str:
        return simple_name(name) if self.options.use_simple_names else name

    def _format(self, frame: Frame) -> Optional[str]:
        if not frame.method:
            return None

        options = self.options
        name = frame.method
        if frame.type_name:
            name = f"{self._type_name(frame.type_name)}.{name}"

        if frame.descriptor is not None:
            try:
                arguments, return_type = parse_method_descriptor(frame.descriptor)
            except ValueError:
                parameters = "(...)"
            else:
                parameters = "({})".format(
                    ", ".join(self._type_name(arg) for arg in arguments)
                )
                if options.show_return_value:
                    name = f"{self._type_name(return_type)} {name}"
            if not options.hide_arguments:
                name += parameters

        if (
            not options.ignore_line_numbers
            and frame.line is not None
            and frame.line >= 0
        ):
            name += f":{frame.line}"
        return name


def build_call_path(stack_trace: Iterable[Frame], namer: FrameNamer) -> CallPath:
    """Build the root-first call path of an innermost-first stack trace.

    Frames the namer cannot name are skipped, so the call path may be
    shorter than the stack trace, or even empty.
    """
    names = (namer(frame) for frame in reversed(tuple(stack_trace)))
    return tuple(name for name in names if name is not None)
