"""
Layered (Sugiyama-style) layout for workflow graphs.

Phases:
1. Cycle removal   - DFS in input order, back edges reversed
2. Layering        - longest path from the sources
3. Normalization   - edges spanning several ranks get virtual nodes
4. Ordering        - alternating barycenter sweeps, fewest crossings kept
5. Coordinates     - ranks/order mapped to pixels, anchors are top-left

Guarantees:
- Deterministic: every tie is broken by input order, nothing is random
- Output order == input node order
- Rank 0 is at the top (TB) or left (LR)
"""

from collections import defaultdict, deque
from dataclasses import dataclass
from typing import Dict, List, Literal, Optional, Sequence, Tuple

from flowgen.compiler.types import Edge, Node
from flowgen.ir.flow import LayoutedNode, Position

VIRTUAL_PREFIX = "\x00virtual:"


@dataclass(frozen=True)
class LayoutOptions:
    node_width: float = 250
    node_height: float = 80
    node_spacing: float = 60    # between nodes of the same rank
    rank_spacing: float = 100   # between consecutive ranks
    margin_x: float = 0
    margin_y: float = 0
    direction: Literal["TB", "LR"] = "TB"
    sweeps: int = 8

    @property
    def rank_step(self) -> float:
        """Distance between the centers of two consecutive ranks."""
        along = self.node_height if self.direction == "TB" else self.node_width
        return along + self.rank_spacing


# ------------------------------------------------
# Phase 1: cycle removal
# ------------------------------------------------

def _remove_cycles(ids: List[str], pairs: List[Tuple[str, str]]) -> List[Tuple[str, str]]:
    successors: Dict[str, List[str]] = defaultdict(list)
    for source, target in pairs:
        successors[source].append(target)

    state: Dict[str, int] = {}   # 1 = on stack, 2 = finished
    back_edges = set()

    for root in ids:
        if root in state:
            continue
        state[root] = 1
        stack = [(root, iter(successors[root]))]
        while stack:
            node, children = stack[-1]
            child = next(children, None)
            if child is None:
                state[node] = 2
                stack.pop()
                continue
            seen = state.get(child)
            if seen == 1:
                back_edges.add((node, child))
            elif seen is None:
                state[child] = 1
                stack.append((child, iter(successors[child])))

    acyclic: List[Tuple[str, str]] = []
    emitted = set()
    for source, target in pairs:
        pair = (target, source) if (source, target) in back_edges else (source, target)
        if pair not in emitted:
            emitted.add(pair)
            acyclic.append(pair)
    return acyclic


# ------------------------------------------------
# Phase 2: layering
# ------------------------------------------------

def _assign_ranks(ids: List[str], pairs: List[Tuple[str, str]]) -> Dict[str, int]:
    successors: Dict[str, List[str]] = defaultdict(list)
    indegree = {node_id: 0 for node_id in ids}
    for source, target in pairs:
        successors[source].append(target)
        indegree[target] += 1

    rank = {node_id: 0 for node_id in ids}
    queue = deque(node_id for node_id in ids if indegree[node_id] == 0)
    while queue:
        current = queue.popleft()
        for target in successors[current]:
            rank[target] = max(rank[target], rank[current] + 1)
            indegree[target] -= 1
            if indegree[target] == 0:
                queue.append(target)
    return rank


# ------------------------------------------------
# Phase 3: normalization
# ------------------------------------------------

def _normalize(
    pairs: List[Tuple[str, str]], rank: Dict[str, int]
) -> Tuple[Dict[str, List[str]], Dict[str, List[str]]]:
    """Split long edges; returns (down, up) adjacency between adjacent ranks."""
    down: Dict[str, List[str]] = defaultdict(list)
    up: Dict[str, List[str]] = defaultdict(list)

    for source, target in pairs:
        previous = source
        for step in range(rank[source] + 1, rank[target]):
            virtual = f"{VIRTUAL_PREFIX}{source}->{target}#{step}"
            rank[virtual] = step
            down[previous].append(virtual)
            up[virtual].append(previous)
            previous = virtual
        down[previous].append(target)
        up[target].append(previous)
    return down, up


# ------------------------------------------------
# Phase 4: ordering
# ------------------------------------------------

def _initial_layers(
    ids: List[str], rank: Dict[str, int], down: Dict[str, List[str]]
) -> List[List[str]]:
    depth = max(rank.values()) + 1
    layers: List[List[str]] = [[] for _ in range(depth)]
    visited = set()

    for root in ids:
        stack = [root]
        while stack:
            current = stack.pop()
            if current in visited:
                continue
            visited.add(current)
            layers[rank[current]].append(current)
            for child in reversed(down.get(current, [])):
                if child not in visited:
                    stack.append(child)
    return layers


def _count_crossings(layers: List[List[str]], down: Dict[str, List[str]]) -> int:
    total = 0
    for upper, lower in zip(layers, layers[1:]):
        lower_pos = {n: i for i, n in enumerate(lower)}
        segments = [
            (i, lower_pos[child])
            for i, node in enumerate(upper)
            for child in down.get(node, [])
            if child in lower_pos
        ]
        for a in range(len(segments)):
            for b in range(a + 1, len(segments)):
                (u1, l1), (u2, l2) = segments[a], segments[b]
                if (u1 - u2) * (l1 - l2) < 0:
                    total += 1
    return total


def _reorder(layer: List[str], fixed: List[str], neighbors: Dict[str, List[str]]) -> List[str]:
    fixed_pos = {n: i for i, n in enumerate(fixed)}

    def barycenter(item):
        index, node = item
        positions = [fixed_pos[m] for m in neighbors.get(node, []) if m in fixed_pos]
        if not positions:
            return (float(index), index)
        return (sum(positions) / len(positions), index)

    return [node for _, node in sorted(enumerate(layer), key=barycenter)]


def _order_layers(
    layers: List[List[str]],
    down: Dict[str, List[str]],
    up: Dict[str, List[str]],
    sweeps: int,
) -> List[List[str]]:
    best = [list(layer) for layer in layers]
    best_crossings = _count_crossings(best, down)
    current = [list(layer) for layer in layers]

    for sweep in range(sweeps):
        if best_crossings == 0:
            break
        if sweep % 2 == 0:
            for i in range(1, len(current)):
                current[i] = _reorder(current[i], current[i - 1], up)
        else:
            for i in range(len(current) - 2, -1, -1):
                current[i] = _reorder(current[i], current[i + 1], down)

        crossings = _count_crossings(current, down)
        if crossings < best_crossings:
            best = [list(layer) for layer in current]
            best_crossings = crossings
    return best


# ------------------------------------------------
# Phase 5: coordinates
# ------------------------------------------------

def _assign_centers(
    layers: List[List[str]], options: LayoutOptions
) -> Dict[str, Tuple[float, float]]:
    if options.direction == "TB":
        along_size, across_size = options.node_height, options.node_width
        along_margin, across_margin = options.margin_y, options.margin_x
    else:
        along_size, across_size = options.node_width, options.node_height
        along_margin, across_margin = options.margin_x, options.margin_y

    def slot(node_id: str) -> float:
        return 0.0 if node_id.startswith(VIRTUAL_PREFIX) else across_size

    extents = [
        sum(slot(n) for n in layer) + options.node_spacing * max(len(layer) - 1, 0)
        for layer in layers
    ]
    widest = max(extents) if extents else 0.0

    centers: Dict[str, Tuple[float, float]] = {}
    for r, layer in enumerate(layers):
        along = along_margin + along_size / 2 + r * options.rank_step
        cursor = across_margin + (widest - extents[r]) / 2
        for node_id in layer:
            size = slot(node_id)
            across = cursor + size / 2
            cursor += size + options.node_spacing
            if options.direction == "TB":
                centers[node_id] = (across, along)
            else:
                centers[node_id] = (along, across)
    return centers


# ------------------------------------------------
# Main
# ------------------------------------------------

def compute_ranks(nodes: Sequence[Node], edges: Sequence[Edge]) -> Dict[str, int]:
    ids = _node_ids(nodes)
    return _assign_ranks(ids, _remove_cycles(ids, _usable_pairs(ids, edges)))


def layout(
    nodes: Sequence[Node],
    edges: Sequence[Edge],
    options: Optional[LayoutOptions] = None,
) -> List[LayoutedNode]:
    options = options or LayoutOptions()
    if not nodes:
        return []

    ids = _node_ids(nodes)
    pairs = _remove_cycles(ids, _usable_pairs(ids, edges))
    rank = _assign_ranks(ids, pairs)
    down, up = _normalize(pairs, rank)
    layers = _initial_layers(ids, rank, down)
    layers = _order_layers(layers, down, up, options.sweeps)
    centers = _assign_centers(layers, options)

    positioned = []
    for node in nodes:
        cx, cy = centers[node.id]
        positioned.append(
            LayoutedNode(
                id=node.id,
                type=node.type,
                label=node.label,
                config=dict(node.data),
                position=Position(
                    x=cx - options.node_width / 2,
                    y=cy - options.node_height / 2,
                ),
            )
        )
    return positioned


def _node_ids(nodes: Sequence[Node]) -> List[str]:
    ids = [n.id for n in nodes]
    if len(set(ids)) != len(ids):
        raise ValueError("Layout requires unique node ids")
    return ids


def _usable_pairs(ids: List[str], edges: Sequence[Edge]) -> List[Tuple[str, str]]:
    """Drop self loops, dangling and parallel edges; keep first-seen order."""
    known = set(ids)
    pairs: List[Tuple[str, str]] = []
    seen = set()
    for edge in edges:
        pair = (edge.source, edge.target)
        if edge.source == edge.target or edge.source not in known or edge.target not in known:
            continue
        if pair in seen:
            continue
        seen.add(pair)
        pairs.append(pair)
    return pairs
