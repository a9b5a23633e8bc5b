import pytest

from flowgen.compiler.layout import LayoutOptions, compute_ranks, layout
from flowgen.compiler.types import Edge, Node


def _nodes(*ids):
    return [Node(id=i, type="action", label=i) for i in ids]


def _positions(laid_out):
    return {n.id: (n.position.x, n.position.y) for n in laid_out}


def test_chain_is_stacked_top_to_bottom():
    options = LayoutOptions()
    result = layout(_nodes("node_1", "node_2"), [Edge("node_1", "node_2")], options)
    pos = _positions(result)

    assert pos["node_1"] == (0, 0)
    assert pos["node_2"] == (0, 180)
    assert pos["node_2"][1] - pos["node_1"][1] == options.rank_step


def test_layout_is_deterministic():
    nodes = _nodes("a", "b", "c", "d", "e")
    edges = [Edge("a", "b"), Edge("a", "c"), Edge("b", "d"), Edge("c", "d"), Edge("a", "e")]

    first = _positions(layout(nodes, edges))
    for _ in range(5):
        assert _positions(layout(nodes, edges)) == first


def test_output_keeps_input_order_and_payload():
    nodes = [
        Node(id="z", type="trigger", label="Inicio", data={"keyword": "hola"}),
        Node(id="a", type="action", label="Saludo"),
    ]

    result = layout(nodes, [Edge("z", "a")])

    assert [n.id for n in result] == ["z", "a"]
    assert result[0].config == {"keyword": "hola"}
    assert result[0].type == "trigger"


def test_branches_share_a_rank_side_by_side():
    nodes = _nodes("cond", "yes", "no")
    edges = [Edge("cond", "yes", "yes"), Edge("cond", "no", "no")]

    pos = _positions(layout(nodes, edges))

    assert pos["yes"][1] == pos["no"][1] == 180
    assert pos["yes"][0] == 0
    assert pos["no"][0] == 250 + 60
    # parent centered over the wider rank below
    assert pos["cond"][0] == (pos["yes"][0] + pos["no"][0]) / 2


def test_long_edge_does_not_pull_nodes_up():
    nodes = _nodes("a", "b", "c")
    edges = [Edge("a", "b"), Edge("b", "c"), Edge("a", "c")]

    assert compute_ranks(nodes, edges) == {"a": 0, "b": 1, "c": 2}
    pos = _positions(layout(nodes, edges))
    assert pos["c"][1] == 2 * LayoutOptions().rank_step


def test_cycles_are_laid_out():
    nodes = _nodes("start", "ask", "check")
    edges = [Edge("start", "ask"), Edge("ask", "check"), Edge("check", "ask")]

    ranks = compute_ranks(nodes, edges)

    assert ranks == {"start": 0, "ask": 1, "check": 2}
    assert len(layout(nodes, edges)) == 3


def test_self_loops_and_dangling_edges_are_ignored():
    nodes = _nodes("a", "b")
    edges = [Edge("a", "a"), Edge("a", "ghost"), Edge("a", "b")]

    assert compute_ranks(nodes, edges) == {"a": 0, "b": 1}


def test_left_to_right_direction():
    options = LayoutOptions(direction="LR")
    pos = _positions(layout(_nodes("a", "b"), [Edge("a", "b")], options))

    assert pos["a"][1] == pos["b"][1]
    assert pos["b"][0] - pos["a"][0] == options.rank_step == 350


def test_margins_shift_everything():
    options = LayoutOptions(margin_x=40, margin_y=20)
    pos = _positions(layout(_nodes("a"), [], options))

    assert pos["a"] == (40, 20)


def test_barycenter_sweeps_remove_crossing():
    # discovery order is [w, z] under [a, b]; b -> w then crosses a -> z
    nodes = _nodes("a", "b", "w", "z")
    edges = [Edge("a", "w"), Edge("a", "z"), Edge("b", "w")]

    pos = _positions(layout(nodes, edges))

    assert pos["a"][0] < pos["b"][0]
    assert pos["z"][0] < pos["w"][0]


def test_empty_graph():
    assert layout([], []) == []


def test_duplicate_ids_are_rejected():
    with pytest.raises(ValueError):
        layout(_nodes("a", "a"), [])
