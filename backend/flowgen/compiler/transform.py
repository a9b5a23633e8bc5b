from typing import List

from flowgen.compiler.types import Edge, Graph, Node
from flowgen.ir.flow import FlowEdge
from flowgen.ir.workflow import GeneratedEdge, Workflow


# -------------------------
# Workflow -> layout input
# -------------------------

def to_layout_graph(workflow: Workflow) -> Graph:
    nodes = [
        Node(
            id=node.id,
            type=node.type,
            label=node.label,
            data=node.config.as_data(),
        )
        for node in workflow.nodes
    ]
    edges = [
        Edge(
            source=edge.source,
            target=edge.target,
            handle=edge.handle or "default",
        )
        for edge in workflow.edges
    ]
    return Graph(nodes=nodes, edges=edges)


# -------------------------
# Edges -> editor edges
# -------------------------

def to_flow_edges(edges: List[GeneratedEdge]) -> List[FlowEdge]:
    return [
        FlowEdge(
            id=f"edge_{index}",
            source=edge.source,
            target=edge.target,
            source_handle=edge.handle or "default",
        )
        for index, edge in enumerate(edges, start=1)
    ]
