from swayfocus.algorithm import EdgeMode, Kind, Target, neighbor
from swayfocus.tree import Node, focus_command, parse_node, preprocess

__all__ = [
    "EdgeMode",
    "Kind",
    "Node",
    "Target",
    "focus_command",
    "neighbor",
    "parse_node",
    "preprocess",
]
