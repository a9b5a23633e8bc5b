from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class Node:
    id: str
    type: str
    label: str
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Edge:
    source: str
    target: str
    handle: str = "default"


@dataclass
class Graph:
    nodes: List[Node] = field(default_factory=list)
    edges: List[Edge] = field(default_factory=list)
