"""
Neighbor search over a preprocessed tree.

The focus path is walked from the root to the focused leaf, then scanned
bottom-up for the first ancestor whose layout matches one of the requested
targets. That ancestor picks a sibling of its focused child, either by list
index or by geometry, and the sibling is descended into a focusable leaf.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from swayfocus.tree import ContainerType, Layout, Node

log = logging.getLogger(__name__)


class Kind(Enum):
    SPLIT = "split"
    GROUP = "group"
    FLOAT = "float"
    WORKSPACE = "workspace"
    OUTPUT = "output"


class EdgeMode(Enum):
    """What to do when moving past the first or last child of a container"""

    # don't change focus
    STOP = "s"
    # focus the child at the opposite end
    WRAP = "w"
    # spill over, focus the closest descendant in the new parent
    TRAVERSE = "t"
    # spill over, focus the inactive child of the new parent
    INACTIVE = "i"


@dataclass(frozen=True)
class Target:
    kind: Kind
    backward: bool
    vertical: bool
    edge_mode: EdgeMode


def focus_path(tree: Node) -> list[Node]:
    """Ancestors of the focused leaf, root first"""
    path = []
    node = tree
    while not node.is_focused:
        log.debug("Node %d", node.id)
        path.append(node)
        if (child := node.focused_child()) is None:
            log.warning("No focused child in %d, incomplete focus path", node.id)
            break
        node = child
    return path


def match_target(node: Node, targets: Sequence[Target]) -> Optional[Target]:
    """First target that can pick among the children of `node`"""
    for target in targets:
        match target.kind:
            case Kind.OUTPUT:
                matched = node.layout is Layout.OUTPUTS
            case Kind.WORKSPACE:
                matched = node.container_type is ContainerType.OUTPUT
            case Kind.SPLIT if target.vertical:
                matched = node.layout is Layout.SPLIT_VERTICAL
            case Kind.SPLIT:
                matched = node.layout is Layout.SPLIT_HORIZONTAL
            case Kind.GROUP if target.vertical:
                matched = node.layout is Layout.STACKED
            case Kind.GROUP:
                matched = node.layout is Layout.TABBED
            case Kind.FLOAT:
                matched = node.layout is Layout.FLOATS
        if matched:
            return target
    return None


def neighbor_local(node: Node, target: Target) -> Optional[Node]:
    """
    The sibling of the focused child of `node` in the direction of `target`.
    Floats and outputs are chosen by geometry, everything else by index.
    """
    if (focus_idx := node.focus_index()) is None:
        return None

    match target.kind:
        case Kind.FLOAT:
            return _float_neighbor(node.children, focus_idx, target)
        case Kind.OUTPUT:
            return _output_neighbor(node.children, focus_idx, target)
        case Kind.SPLIT | Kind.GROUP | Kind.WORKSPACE:
            return _ordinal_neighbor(node.children, focus_idx, target)


def _ordinal_neighbor(
    children: list[Node], focus_idx: int, target: Target
) -> Optional[Node]:
    n = len(children)
    log.debug("Focused child index: %d out of %d", focus_idx, n - 1)
    idx = focus_idx + n  # offset by n so that stepping back never goes negative
    idx = idx - 1 if target.backward else idx + 1

    if target.edge_mode is EdgeMode.WRAP:
        idx %= n
    elif n <= idx < 2 * n:
        idx -= n
    else:
        log.debug("Index %d is out of bounds", idx - n)
        return None

    log.debug("Resulting index: %d", idx)
    return children[idx]


def _float_neighbor(
    children: list[Node], focus_idx: int, target: Target
) -> Optional[Node]:
    # Floats are ordered by their middle on the axis, and by id when aligned
    def key(n: Node) -> tuple[int, int]:
        return n.rect.middle(target.vertical), n.id

    focused = children[focus_idx]
    log.debug("Focused %d at %s", focused.id, key(focused))
    ahead = [n for n in children if key(n) > key(focused)]
    behind = [n for n in children if key(n) < key(focused)]
    if target.backward:
        ahead, behind = behind, ahead

    pick = max if target.backward else min
    if ahead:
        return pick(ahead, key=key)

    if target.edge_mode is EdgeMode.WRAP:
        log.debug("No neighbor, searching for wraparound target")
        # the furthest float in the opposite direction
        return pick(behind, key=key) if behind else focused
    return None


def _output_neighbor(
    children: list[Node], focus_idx: int, target: Target
) -> Optional[Node]:
    focused = children[focus_idx]
    cx, cy = focused.rect.center()

    def beyond(a: Node, b: Node) -> bool:
        """Is `b` entirely past `a` in the direction of travel"""
        (a_pos, a_dim), (b_pos, _) = (
            a.rect.component(target.vertical),
            b.rect.component(target.vertical),
        )
        return a_pos + a_dim <= b_pos

    def dist(n: Node) -> int:
        px, py = n.rect.closest_point(cx, cy)
        d = (cx - px) ** 2 + (cy - py) ** 2
        log.debug("Distance to %d: %d", n.id, d)
        return d

    def candidates(backward: bool) -> list[Node]:
        return [
            n
            for n in children
            if n.id != focused.id
            and (beyond(n, focused) if backward else beyond(focused, n))
        ]

    if nearest := candidates(target.backward):
        return min(nearest, key=lambda n: (dist(n), n.id))

    if target.edge_mode is EdgeMode.WRAP:
        log.debug("No neighbor, searching for wraparound target")
        if furthest := candidates(not target.backward):
            return max(furthest, key=lambda n: (dist(n), -n.id))
        # lets repeated wrapping across several outputs make progress
        return focused
    return None


def select_leaf(node: Node, targets: Sequence[Target]) -> Node:
    """Descends `node` to a leaf, entering containers according to the targets"""
    while True:
        log.debug("Node %d", node.id)
        target = match_target(node, targets)
        match target:
            case Target(edge_mode=EdgeMode.TRAVERSE):
                log.debug("Matched traversing %s", target.kind)
                child = _entry_child(node, target)
            case Target(edge_mode=EdgeMode.INACTIVE):
                log.debug("Matched inactive %s", target.kind)
                child = _inactive_child(node)
            case _:
                child = node.focused_child()

        if child is None:
            log.debug("Selected leaf %d", node.id)
            return node
        node = child


def _entry_child(node: Node, target: Target) -> Optional[Node]:
    """The child closest to where a traversing move comes from"""
    if not node.children:
        return None

    match target.kind:
        case Kind.FLOAT:
            # moving right enters the left-most float
            pick = max if target.backward else min
            return pick(
                node.children, key=lambda n: (n.rect.middle(target.vertical), n.id)
            )
        case Kind.OUTPUT:
            # never moves between roots, so outputs keep their own focus
            return node.focused_child()
        case Kind.SPLIT | Kind.GROUP | Kind.WORKSPACE:
            return node.children[-1] if target.backward else node.children[0]


def _inactive_child(node: Node) -> Optional[Node]:
    """The second most recently focused child, falling back to the focused one"""
    if len(node.focus_order) > 1 and (child := node.child(node.focus_order[1])):
        return child
    return node.focused_child()


def neighbor(tree: Node, targets: Sequence[Target]) -> Optional[Node]:
    """Find a leaf next to the focused one, matching one of the `targets`"""
    log.debug("Finding focus path")
    path = focus_path(tree)

    log.debug("Searching focus path bottom-up for neighbor")
    found = None
    for parent in reversed(path):
        log.debug("Parent %d", parent.id)
        if (target := match_target(parent, targets)) is None:
            continue

        log.debug("Matched %s", target)
        found = neighbor_local(parent, target)
        if found is not None:
            break
        if target.edge_mode is EdgeMode.STOP:
            log.debug("Target is stopping, forcing return")
            return None

    if found is None:
        return None

    log.debug("Found neighbor %d, selecting descendant", found.id)
    return select_leaf(found, targets)
