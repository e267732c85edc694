from typing import Iterable, Mapping, Sequence

from swayfocus.algorithm import EdgeMode, Kind, Target
from swayfocus.errors import ArgumentError

_directions = {
    "r": (False, False),
    "l": (True, False),
    "d": (False, True),
    "u": (True, True),
}


def parse_target(arg: str) -> Target:
    """
    Parses `<kind>-<direction><edge>`, fx. `split-rt` or `output-lw`
    """
    kind_name, _, mode = arg.partition("-")
    try:
        kind = Kind(kind_name)
    except ValueError:
        raise ArgumentError(f"Unknown target kind in {arg!r}") from None

    if len(mode) != 2:
        raise ArgumentError(f"Expected a direction and an edge mode in {arg!r}")

    if (direction := _directions.get(mode[0])) is None:
        raise ArgumentError(f"Unknown direction {mode[0]!r} in {arg!r}")
    backward, vertical = direction

    try:
        edge_mode = EdgeMode(mode[1])
    except ValueError:
        raise ArgumentError(f"Unknown edge mode {mode[1]!r} in {arg!r}") from None

    return Target(kind=kind, backward=backward, vertical=vertical, edge_mode=edge_mode)


def expand_aliases(
    args: Iterable[str], aliases: Mapping[str, Sequence[str]]
) -> list[str]:
    # one level only, an alias naming another alias fails to parse
    return [expanded for arg in args for expanded in aliases.get(arg, [arg])]


def parse_args(
    args: Sequence[str], aliases: Mapping[str, Sequence[str]] | None = None
) -> list[Target]:
    """Target list in priority order, raises ArgumentError if empty or malformed"""
    if not args:
        raise ArgumentError("No targets given")
    return [parse_target(arg) for arg in expand_aliases(args, aliases or {})]
