import logging
from dataclasses import dataclass, field, replace
from enum import Enum, IntEnum
from typing import Any, Iterator, Optional

from swayfocus.errors import ParseError
from swayfocus.swaytypes.tree import Node as RawNode

log = logging.getLogger(__name__)

SCRATCH_PREFIX = "__i3"


class ContainerType(Enum):
    ROOT = "root"
    OUTPUT = "output"
    CONTAINER = "con"
    FLOATING_CONTAINER = "floating_con"
    WORKSPACE = "workspace"
    DOCKAREA = "dockarea"


class Layout(Enum):
    SPLIT_HORIZONTAL = "splith"
    SPLIT_VERTICAL = "splitv"
    TABBED = "tabbed"
    STACKED = "stacked"
    # the three below never come from the window manager
    FLOATS = "floats"
    OUTPUTS = "outputs"
    OTHER = "other"

    @classmethod
    def from_ipc(cls, layout: str) -> "Layout":
        match layout:
            case "splith":
                return cls.SPLIT_HORIZONTAL
            case "splitv":
                return cls.SPLIT_VERTICAL
            case "tabbed":
                return cls.TABBED
            case "stacked":
                return cls.STACKED
            case _:
                return cls.OTHER


class FullscreenMode(IntEnum):
    NONE = 0
    LOCAL = 1
    GLOBAL = 2


@dataclass(frozen=True)
class Rect:
    x: int
    y: int
    width: int
    height: int

    def component(self, vertical: bool) -> tuple[int, int]:
        """(position, size) on the vertical or horizontal axis"""
        return (self.y, self.height) if vertical else (self.x, self.width)

    def middle(self, vertical: bool) -> int:
        pos, dim = self.component(vertical)
        return pos + dim // 2

    def center(self) -> tuple[int, int]:
        return self.x + self.width // 2, self.y + self.height // 2

    def closest_point(self, x: int, y: int) -> tuple[int, int]:
        return (
            min(max(x, self.x), self.x + self.width),
            min(max(y, self.y), self.y + self.height),
        )


@dataclass
class Node:
    id: int
    container_type: ContainerType
    layout: Layout
    rect: Rect
    name: Optional[str] = None
    is_focused: bool = False
    focus_order: list[int] = field(default_factory=list)
    children: list["Node"] = field(default_factory=list)
    floating_children: list["Node"] = field(default_factory=list)
    fullscreen_mode: FullscreenMode = FullscreenMode.NONE

    def child(self, id: int) -> Optional["Node"]:
        return next((c for c in self.children if c.id == id), None)

    def focus_index(self) -> Optional[int]:
        """Index into `children` of the most recently focused child"""
        if not self.focus_order:
            return None
        focus_id = self.focus_order[0]
        return next(
            (idx for idx, c in enumerate(self.children) if c.id == focus_id), None
        )

    def focused_child(self) -> Optional["Node"]:
        idx = self.focus_index()
        return None if idx is None else self.children[idx]

    def walk(self) -> Iterator["Node"]:
        """Pre-order over the node, its children and its floating children"""
        yield self
        for child in [*self.children, *self.floating_children]:
            yield from child.walk()


def focus_command(node: Node) -> Optional[str]:
    match node.container_type:
        case ContainerType.ROOT:
            return None
        case ContainerType.OUTPUT:
            return None if node.name is None else f"focus output {node.name}"
        case ContainerType.WORKSPACE:
            return None if node.name is None else f"workspace {node.name}"
        case (
            ContainerType.CONTAINER
            | ContainerType.FLOATING_CONTAINER
            | ContainerType.DOCKAREA
        ):
            return f"[con_id={node.id}] focus"


def parse_node(raw: RawNode | dict[str, Any]) -> Node:
    """
    Converts a decoded `get_tree` reply into a `Node` tree.
    Raises ParseError if a node lacks a key or holds a value of the wrong kind.
    """
    if not isinstance(raw, dict):
        raise ParseError(f"Expected a node object, got {type(raw).__name__}")

    node_id = raw.get("id", "?")
    try:
        rect = raw["rect"]
        name = raw.get("name")
        focus = raw["focus"]
        if not isinstance(focus, list) or not all(_is_int(i) for i in focus):
            raise ParseError(f"Node {node_id} has a malformed focus list")
        if name is not None and not isinstance(name, str):
            raise ParseError(f"Node {node_id} has a non-string name")
        if not _is_int(raw["id"]):
            raise ParseError(f"Node {node_id} has a non-integer id")
        if not isinstance(rect, dict):
            raise ParseError(f"Node {node_id} has a malformed rect")
        bounds = [rect["x"], rect["y"], rect["width"], rect["height"]]
        if not all(_is_int(v) for v in bounds):
            raise ParseError(f"Node {node_id} has a non-integer rect")
        if not isinstance(raw["focused"], bool):
            raise ParseError(f"Node {node_id} has a non-boolean focused flag")

        return Node(
            id=raw["id"],
            name=name,
            container_type=ContainerType(raw["type"]),
            layout=Layout.from_ipc(raw["layout"]),
            rect=Rect(*bounds),
            is_focused=raw["focused"],
            focus_order=list(focus),
            children=[parse_node(n) for n in raw["nodes"]],
            floating_children=[parse_node(n) for n in raw["floating_nodes"]],
            fullscreen_mode=FullscreenMode(raw.get("fullscreen_mode", 0)),
        )
    except KeyError as e:
        raise ParseError(f"Node {node_id} is missing key {e}") from e
    except (TypeError, ValueError) as e:
        raise ParseError(f"Node {node_id} is malformed: {e}") from e


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def preprocess(tree: Node) -> Node:
    """
    Rebuilds a parsed snapshot into the shape the neighbor search expects:

    - the root gets the `OUTPUTS` layout and loses the scratchpad output
    - a wrapper between an output and its workspaces is lifted away
    - every workspace holds one tiled and one floating sub-node under
      the `OTHER` layout
    - a fullscreen window replaces its workspace, or the whole tree if the
      fullscreen mode is global
    """
    outputs = [o for o in tree.children if not _is_scratch(o)]
    output_ids = {o.id for o in outputs}

    new_outputs = []
    for output in outputs:
        output = _lift_wrapper(output)
        workspaces = []
        for workspace in output.children:
            if workspace.container_type is not ContainerType.WORKSPACE:
                workspaces.append(_rebuild(workspace))
                continue

            workspace = _split_workspace(workspace)
            if (fullscreen := _find_fullscreen(workspace)) is not None:
                if fullscreen.fullscreen_mode is FullscreenMode.GLOBAL:
                    log.debug("Node %d is global fullscreen", fullscreen.id)
                    return fullscreen
                log.debug("Node %d is fullscreen on its workspace", fullscreen.id)
                workspace = replace(
                    fullscreen,
                    id=workspace.id,
                    container_type=workspace.container_type,
                    name=workspace.name,
                )
            workspaces.append(workspace)
        new_outputs.append(replace(output, children=workspaces, floating_children=[]))

    return replace(
        tree,
        layout=Layout.OUTPUTS,
        focus_order=[i for i in tree.focus_order if i in output_ids],
        children=new_outputs,
        floating_children=[],
    )


def _is_scratch(node: Node) -> bool:
    return node.name is not None and node.name.startswith(SCRATCH_PREFIX)


def _lift_wrapper(output: Node) -> Node:
    # i3 puts the workspaces in a `content` container between two dock areas
    content = [
        c for c in output.children if c.container_type is not ContainerType.DOCKAREA
    ]
    if len(content) != 1:
        return output

    wrapper = content[0]
    if wrapper.container_type is ContainerType.WORKSPACE or not any(
        c.container_type is ContainerType.WORKSPACE for c in wrapper.children
    ):
        return output

    log.debug("Lifting wrapper %d out of output %d", wrapper.id, output.id)
    return replace(
        output,
        focus_order=list(wrapper.focus_order),
        children=list(wrapper.children),
    )


def _rebuild(node: Node) -> Node:
    """Rebuilds a node below workspace level, dropping floating children"""
    return replace(
        node,
        children=[_rebuild(c) for c in node.children],
        floating_children=[],
    )


def _is_split(workspace: Node) -> bool:
    return (
        workspace.layout is Layout.OTHER
        and not workspace.floating_children
        and len(workspace.children) == 2
        and all(c.container_type is ContainerType.WORKSPACE for c in workspace.children)
    )


def _split_workspace(workspace: Node) -> Node:
    if _is_split(workspace):
        tiled, floats = workspace.children
        return replace(
            workspace,
            children=[
                replace(tiled, children=[_rebuild(c) for c in tiled.children]),
                replace(floats, children=[_rebuild(c) for c in floats.children]),
            ],
        )

    tiled_ids = {c.id for c in workspace.children}
    float_ids = {c.id for c in workspace.floating_children}

    tiled = Node(
        id=-2 * workspace.id,
        name=workspace.name,
        container_type=workspace.container_type,
        layout=workspace.layout,
        rect=workspace.rect,
        focus_order=[i for i in workspace.focus_order if i in tiled_ids],
        children=[_rebuild(c) for c in workspace.children],
    )
    floats = Node(
        id=-2 * workspace.id - 1,
        name=workspace.name,
        container_type=workspace.container_type,
        layout=Layout.FLOATS,
        rect=workspace.rect,
        focus_order=[i for i in workspace.focus_order if i in float_ids],
        children=[_rebuild(c) for c in workspace.floating_children],
    )

    owned = tiled_ids | float_ids
    float_first = next(
        (i in float_ids for i in workspace.focus_order if i in owned), False
    )
    return replace(
        workspace,
        layout=Layout.OTHER,
        focus_order=[floats.id, tiled.id] if float_first else [tiled.id, floats.id],
        children=[tiled, floats],
        floating_children=[],
    )


def _find_fullscreen(workspace: Node) -> Optional[Node]:
    # the workspace itself reports fullscreen_mode 1 on i3
    for sub in workspace.children:
        for child in sub.children:
            for node in child.walk():
                if node.fullscreen_mode is not FullscreenMode.NONE:
                    return node
    return None
