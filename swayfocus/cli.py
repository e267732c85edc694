import asyncio
import logging
import sys
from typing import Sequence

import orjson

from swayfocus import algorithm
from swayfocus.algorithm import Target
from swayfocus.args import parse_args
from swayfocus.core import SwayIPCConnection
from swayfocus.errors import (
    ArgumentError,
    NoFocusCommand,
    ParseError,
    RetrievalError,
    SwayFocusError,
)
from swayfocus.settings import load_settings
from swayfocus.tree import Node, focus_command, parse_node, preprocess

log = logging.getLogger("swayfocus")

USAGE = """\
Usage: swayfocus [--dry-run] [--tree FILE] TARGET...

Moves focus to the neighbor matching the first applicable TARGET.
A TARGET is <kind>-<direction><edge>, or an alias from settings.json:

  kind       split, group, float, workspace or output
  direction  r (right), l (left), d (down) or u (up)
  edge       s (stop), w (wrap), t (traverse) or i (inactive)

  --dry-run    print the focus command instead of running it
  --tree FILE  read the tree from a get_tree JSON dump instead of IPC

Example: swayfocus split-rt output-rs
"""


def split_options(argv: Sequence[str]) -> tuple[dict[str, str | bool], list[str]]:
    options: dict[str, str | bool] = {"dry_run": False, "tree": ""}
    targets: list[str] = []
    args = iter(argv)
    for arg in args:
        match arg:
            case "--dry-run":
                options["dry_run"] = True
            case "--tree":
                if (path := next(args, None)) is None:
                    raise ArgumentError("--tree needs a file")
                options["tree"] = path
            case _ if arg.startswith("-"):
                raise ArgumentError(f"Unknown option {arg}")
            case _:
                targets.append(arg)
    return options, targets


def read_tree(path: str) -> dict:
    try:
        with open(path, "rb") as f:
            return orjson.loads(f.read())
    except OSError as e:
        raise RetrievalError(f"Could not read {path}: {e}") from e
    except orjson.JSONDecodeError as e:
        raise ParseError(f"{path}: {e}") from e


def find_command(raw_tree: dict, targets: Sequence[Target]) -> str | None:
    """The focus command for the neighbor, None if focus should not move"""
    log.info("Pre-processing tree")
    tree: Node = preprocess(parse_node(raw_tree))

    log.info("Searching for neighbor")
    if (leaf := algorithm.neighbor(tree, targets)) is None:
        log.info("No neighbor found")
        return None

    if (cmd := focus_command(leaf)) is None:
        raise NoFocusCommand(f"No valid focus command for node {leaf.id}")
    return cmd


async def run(targets: Sequence[Target], dry_run: bool = False) -> str | None:
    ipc = SwayIPCConnection()
    try:
        log.info("Retrieving tree")
        cmd = find_command(await ipc.get_tree(), targets)
        if cmd is not None and not dry_run:
            log.info("Running focus command: %r", cmd)
            await ipc.run_command(cmd)
        return cmd
    finally:
        await ipc.close()


def main(argv: Sequence[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    if "-h" in argv or "--help" in argv:
        print(USAGE, end="")
        return 0

    try:
        settings = load_settings()
    except SwayFocusError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    level = getattr(logging, settings.log_level, None)
    logging.basicConfig(
        level=level if isinstance(level, int) else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        log.info("Parsing arguments")
        options, args = split_options(argv)
        targets = parse_args(args, settings.aliases)

        if options["tree"]:
            cmd = find_command(read_tree(str(options["tree"])), targets)
        else:
            cmd = asyncio.run(run(targets, dry_run=bool(options["dry_run"])))
    except ArgumentError as e:
        print(f"error: {e}", file=sys.stderr)
        print(USAGE, end="", file=sys.stderr)
        return 1
    except NoFocusCommand as e:
        print(f"error: no valid focus command: {e}", file=sys.stderr)
        return 1
    except SwayFocusError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    if cmd is not None and (options["dry_run"] or options["tree"]):
        print(cmd)
    return 0
