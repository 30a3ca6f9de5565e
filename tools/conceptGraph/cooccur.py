"""
Co-occurrence accounting: counts how often vocabulary terms appear within a
sliding window of each other and assembles the pruned concept graph.
"""

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field

from terms import MAX_NODES

WINDOW = 12
MIN_EDGE_WEIGHT = 1  # edges must be strictly heavier than this
EDGES_PER_NODE = 6


# ---------------------------------------------------------------------------
# Graph model
# ---------------------------------------------------------------------------

@dataclass
class Node:
    id: int
    label: str
    count: int
    x: float = 0.0
    y: float = 0.0


@dataclass
class Edge:
    source: int  # always < target
    target: int
    weight: int


@dataclass
class ConceptGraph:
    nodes: list[Node] = field(default_factory=list)
    edges: list[Edge] = field(default_factory=list)

    def validate(self) -> None:
        """Raise ValueError if ids, endpoints or pair keys are inconsistent."""
        for i, node in enumerate(self.nodes):
            if node.id != i:
                raise ValueError(f"node at position {i} has id {node.id}")
        seen: set[tuple[int, int]] = set()
        n = len(self.nodes)
        for edge in self.edges:
            key = (edge.source, edge.target)
            if not (0 <= edge.source < edge.target < n):
                raise ValueError(f"edge {key} is out of range or not ordered")
            if key in seen:
                raise ValueError(f"duplicate edge {key}")
            seen.add(key)


# ---------------------------------------------------------------------------
# Accumulation
# ---------------------------------------------------------------------------

class CooccurrenceTable:
    """Per-term occurrence counts and windowed pair counts over vocabulary ids."""

    def __init__(self, size: int):
        self.counts: list[int] = [0] * size
        self.pairs: Counter[tuple[int, int]] = Counter()

    def __len__(self) -> int:
        return len(self.counts)

    def add_document(self, terms: list[str], index: dict[str, int], window: int = WINDOW) -> None:
        """Accumulate one document's term stream.

        Out-of-vocabulary terms are dropped before windowing, so the window
        spans `window` consecutive vocabulary hits rather than raw positions.
        """
        if window < 1:
            raise ValueError(f"window must be at least 1, got {window}")
        ids = [index[t] for t in terms if t in index]
        for i, a in enumerate(ids):
            self.counts[a] += 1
            for b in ids[i + 1:i + window]:
                if a == b:
                    continue
                self.pairs[(a, b) if a < b else (b, a)] += 1

    def merge(self, other: "CooccurrenceTable") -> None:
        if len(other) != len(self):
            raise ValueError(
                f"cannot merge tables of size {len(other)} and {len(self)}"
            )
        for i, c in enumerate(other.counts):
            self.counts[i] += c
        self.pairs.update(other.pairs)


def accumulate(
    docs: Iterable[list[str]], index: dict[str, int], window: int = WINDOW,
) -> CooccurrenceTable:
    """Build a table from all document streams."""
    table = CooccurrenceTable(len(index))
    for doc in docs:
        table.add_document(doc, index, window)
    return table


# ---------------------------------------------------------------------------
# Graph assembly
# ---------------------------------------------------------------------------

def build_graph(
    vocab: list[tuple[str, int]],
    table: CooccurrenceTable,
    min_weight: int = MIN_EDGE_WEIGHT,
    max_edges: int = MAX_NODES * EDGES_PER_NODE,
) -> ConceptGraph:
    """Assemble nodes and the strongest edges.

    Pairs seen at most min_weight times are dropped as noise; the rest are
    ordered by descending weight (ties by endpoint ids) and capped at
    max_edges.
    """
    nodes = [
        Node(id=i, label=label, count=table.counts[i] if i < len(table) else 0)
        for i, (label, _) in enumerate(vocab)
    ]

    edges = [
        Edge(source=u, target=v, weight=w)
        for (u, v), w in table.pairs.items()
        if w > min_weight
    ]
    edges.sort(key=lambda e: (-e.weight, e.source, e.target))
    del edges[max_edges:]

    return ConceptGraph(nodes=nodes, edges=edges)
