from typing import List, Optional, Tuple

from flowgen.compiler.layout import LayoutOptions, layout
from flowgen.compiler.transform import to_flow_edges, to_layout_graph
from flowgen.ir.flow import FlowEdge, LayoutedNode
from flowgen.ir.workflow import Workflow


def compile_workflow(
    workflow: Workflow, options: Optional[LayoutOptions] = None
) -> Tuple[List[LayoutedNode], List[FlowEdge]]:
    graph = to_layout_graph(workflow)
    nodes = layout(graph.nodes, graph.edges, options)
    return nodes, to_flow_edges(workflow.edges)
