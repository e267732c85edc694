import pytest

from swayfocus.errors import ParseError
from swayfocus.tree import (
    ContainerType,
    FullscreenMode,
    Layout,
    Node,
    Rect,
    focus_command,
    parse_node,
    preprocess,
)
from tests.builders import (
    con,
    normalized,
    output,
    rect,
    root,
    single_workspace,
    window,
    workspace,
)


def test_parse_node_maps_ipc_fields():
    raw = con(
        5,
        window(6, focused=True, r=rect(10, 20, 30, 40)),
        type="con",
        layout="tabbed",
        floating=[window(7, floating=True)],
        focus=[6, 7],
        fullscreen=2,
    )

    node = parse_node(raw)

    assert node.id == 5
    assert node.container_type is ContainerType.CONTAINER
    assert node.layout is Layout.TABBED
    assert node.fullscreen_mode is FullscreenMode.GLOBAL
    assert node.focus_order == [6, 7]
    assert [c.id for c in node.children] == [6]
    assert node.children[0].rect == Rect(10, 20, 30, 40)
    assert node.children[0].is_focused
    assert node.children[0].layout is Layout.OTHER
    assert node.floating_children[0].container_type is ContainerType.FLOATING_CONTAINER


@pytest.mark.parametrize(
    "layout, expected",
    [
        ("splith", Layout.SPLIT_HORIZONTAL),
        ("splitv", Layout.SPLIT_VERTICAL),
        ("tabbed", Layout.TABBED),
        ("stacked", Layout.STACKED),
        ("output", Layout.OTHER),
        ("dockarea", Layout.OTHER),
        ("none", Layout.OTHER),
    ],
)
def test_layout_from_ipc(layout, expected):
    assert Layout.from_ipc(layout) is expected


def test_parse_node_ignores_extra_keys():
    raw = window(9)
    raw.update({"pid": 1234, "app_id": "foot", "visible": True, "marks": []})
    assert parse_node(raw).id == 9


@pytest.mark.parametrize(
    "broken",
    [
        {"type": "bogus"},
        {"id": "nine"},
        {"focus": "9"},
        {"rect": None},
        {"fullscreen_mode": 7},
        {"name": 12},
        {"focused": "false"},
        {"focused": 1},
        {"rect": {"x": "5", "y": 0, "width": 100, "height": 100}},
        {"rect": {"x": 0, "y": 1.7, "width": 100, "height": 100}},
        {"rect": {"x": 0, "y": 0, "width": True, "height": 100}},
    ],
)
def test_parse_node_rejects_malformed_values(broken):
    raw = window(9)
    raw.update(broken)
    with pytest.raises(ParseError):
        parse_node(raw)


def test_parse_node_rejects_missing_keys():
    raw = con(1, window(2))
    del raw["nodes"][0]["floating_nodes"]
    with pytest.raises(ParseError, match="Node 2"):
        parse_node(raw)


def test_parse_node_rejects_non_objects():
    with pytest.raises(ParseError):
        parse_node([])  # type: ignore


def test_root_gets_outputs_layout_and_loses_scratchpad():
    tree = normalized(single_workspace(window(10, focused=True)))

    assert tree.layout is Layout.OUTPUTS
    assert [o.name for o in tree.children] == ["eDP-1"]
    assert tree.focus_order == [2]


def test_workspace_is_split_into_tiled_and_floating():
    raw = single_workspace(
        window(10),
        window(11),
        layout="splitv",
        floating=[window(20, floating=True)],
        focus=[10, 20, 11],
    )

    ws = normalized(raw).children[0].children[0]

    assert ws.id == 3
    assert ws.layout is Layout.OTHER
    assert ws.floating_children == []
    tiled, floats = ws.children
    assert (tiled.id, floats.id) == (-6, -7)
    assert ws.focus_order == [-6, -7]
    assert tiled.layout is Layout.SPLIT_VERTICAL
    assert tiled.focus_order == [10, 11]
    assert [c.id for c in tiled.children] == [10, 11]
    assert floats.layout is Layout.FLOATS
    assert floats.focus_order == [20]
    assert [c.id for c in floats.children] == [20]
    assert {tiled.container_type, floats.container_type} == {ContainerType.WORKSPACE}
    assert tiled.name == floats.name == "1"


def test_workspace_focus_prefers_floats_when_a_float_was_focused_last():
    raw = single_workspace(
        window(10), floating=[window(20, floating=True)], focus=[20, 10]
    )
    ws = normalized(raw).children[0].children[0]
    assert ws.focus_order == [-7, -6]


def test_empty_workspace_focuses_tiled_part():
    ws = normalized(single_workspace()).children[0].children[0]
    assert ws.focus_order == [-6, -7]
    assert all(sub.children == [] for sub in ws.children)


def test_i3_content_wrapper_is_lifted():
    raw = root(
        con(
            2,
            con(50, type="dockarea", layout="dockarea"),
            con(
                51,
                workspace(3, "1", window(10, focused=True)),
                workspace(4, "2", window(11)),
                name="content",
                focus=[3, 4],
            ),
            con(52, type="dockarea", layout="dockarea"),
            type="output",
            layout="output",
            name="HDMI-1",
            focus=[51, 50, 52],
        )
    )

    out = normalized(raw).children[0]

    assert out.id == 2
    assert [w.id for w in out.children] == [3, 4]
    assert out.focus_order == [3, 4]


def test_output_holding_workspaces_is_not_lifted():
    raw = root(output(2, "DP-1", workspace(3, "1", window(10, focused=True))))
    out = normalized(raw).children[0]
    assert [w.id for w in out.children] == [3]


def test_nested_floating_children_are_dropped_below_workspaces():
    raw = single_workspace(con(10, window(11, focused=True), floating=[window(12)]))
    tiled = normalized(raw).children[0].children[0].children[0]
    container = tiled.children[0]
    assert container.floating_children == []
    assert [c.id for c in container.children] == [11]


def test_preprocess_is_idempotent():
    raw = root(
        output(
            2,
            "eDP-1",
            workspace(
                3,
                "1",
                con(10, window(11, focused=True), window(12), layout="tabbed"),
                floating=[window(20, floating=True)],
            ),
            workspace(4, "2"),
        ),
        output(5, "HDMI-1", workspace(6, "3", window(13)), r=rect(x=100)),
    )

    once = normalized(raw)
    twice = preprocess(once)

    assert twice == once


def test_global_fullscreen_replaces_the_whole_tree():
    raw = root(
        output(
            2,
            "eDP-1",
            workspace(3, "1", window(10)),
            workspace(
                4,
                "2",
                con(11, window(12, focused=True), window(13), fullscreen=2),
                window(14),
            ),
        ),
        output(5, "HDMI-1", workspace(6, "3", window(15)), r=rect(x=100)),
    )

    tree = normalized(raw)

    assert tree.id == 11
    assert tree.fullscreen_mode is FullscreenMode.GLOBAL
    assert [c.id for c in tree.children] == [12, 13]


def test_global_fullscreen_wins_over_earlier_local_fullscreen():
    raw = root(
        output(
            2,
            "eDP-1",
            workspace(3, "1", window(10, fullscreen=1)),
            workspace(4, "2", window(11, focused=True, fullscreen=2)),
        )
    )
    assert normalized(raw).id == 11


def test_local_fullscreen_replaces_its_workspace():
    raw = root(
        output(
            2,
            "eDP-1",
            workspace(
                3,
                "1",
                window(9),
                con(
                    10,
                    window(11, focused=True),
                    window(12),
                    layout="splitv",
                    fullscreen=1,
                ),
                floating=[window(20, floating=True)],
                focus=[10, 9, 20],
            ),
            workspace(4, "2", window(13)),
        )
    )

    out = normalized(raw).children[0]
    ws = out.children[0]

    assert ws.id == 3
    assert ws.container_type is ContainerType.WORKSPACE
    assert ws.name == "1"
    assert ws.layout is Layout.SPLIT_VERTICAL
    assert [c.id for c in ws.children] == [11, 12]
    # the other workspace is untouched
    assert [c.id for c in out.children[1].children[0].children] == [13]


def test_fullscreen_float_is_found():
    raw = single_workspace(
        window(10),
        floating=[window(20, focused=True, floating=True, fullscreen=1)],
        focus=[20, 10],
    )
    ws = normalized(raw).children[0].children[0]
    assert ws.id == 3
    assert ws.is_focused
    assert ws.children == []


@pytest.mark.parametrize(
    "node, expected",
    [
        (Node(1, ContainerType.ROOT, Layout.OUTPUTS, Rect(0, 0, 1, 1), "root"), None),
        (
            Node(2, ContainerType.OUTPUT, Layout.OTHER, Rect(0, 0, 1, 1), "DP-1"),
            "focus output DP-1",
        ),
        (Node(3, ContainerType.OUTPUT, Layout.OTHER, Rect(0, 0, 1, 1)), None),
        (
            Node(4, ContainerType.WORKSPACE, Layout.OTHER, Rect(0, 0, 1, 1), "2: web"),
            "workspace 2: web",
        ),
        (
            Node(5, ContainerType.CONTAINER, Layout.OTHER, Rect(0, 0, 1, 1)),
            "[con_id=5] focus",
        ),
        (
            Node(6, ContainerType.FLOATING_CONTAINER, Layout.OTHER, Rect(0, 0, 1, 1)),
            "[con_id=6] focus",
        ),
    ],
)
def test_focus_command(node, expected):
    assert focus_command(node) == expected
