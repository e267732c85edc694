from typing import Literal, Optional, TypedDict

from swayfocus.swaytypes.common import Rectangle

NodeType = (
    Literal["root"]
    | Literal["output"]
    | Literal["con"]
    | Literal["floating_con"]
    | Literal["workspace"]
    | Literal["dockarea"]
)

NodeLayout = (
    Literal["splith"]
    | Literal["splitv"]
    | Literal["stacked"]
    | Literal["tabbed"]
    | Literal["dockarea"]
    | Literal["output"]
    | Literal["none"]
)


class Node(TypedDict):
    """
    The subset of a `get_tree` node that the neighbor search reads.
    Sway and i3 send many more keys, they are ignored.
    """

    id: int
    name: Optional[str]
    type: NodeType
    layout: NodeLayout
    rect: Rectangle
    focused: bool
    focus: list[int]
    nodes: list["Node"]
    floating_nodes: list["Node"]
    fullscreen_mode: Literal[0] | Literal[1] | Literal[2]


# the reply to `get_tree` is the root node
Tree = Node
