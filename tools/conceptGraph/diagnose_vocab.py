#!/usr/bin/env python3
"""Diagnostic: inspect where the vocabulary cutoff falls and what each node connects to.

Usage:
    python tools/conceptGraph/diagnose_vocab.py content/blog
    python tools/conceptGraph/diagnose_vocab.py content/blog --max-nodes 30 --margin 15
    python tools/conceptGraph/diagnose_vocab.py --graph static/graph/graph.json
"""

import argparse
import sys
from collections import Counter, defaultdict
from pathlib import Path

from cooccur import ConceptGraph
from export import read_graph_json
from graph import DEFAULT_ROOT, load_documents
from terms import MAX_NODES, count_terms, rank_terms, tokenize


def cutoff_report(freq: Counter[str], max_nodes: int = MAX_NODES, margin: int = 10) -> list[str]:
    """Ranking around the cutoff; '*' marks a count tied across the boundary."""
    ranked = rank_terms(freq)
    if not ranked:
        return ["(no terms)"]

    boundary = None
    if 0 < max_nodes < len(ranked):
        last_kept = ranked[max_nodes - 1][1]
        first_dropped = ranked[max_nodes][1]
        if last_kept == first_dropped:
            boundary = last_kept

    lines = []
    start = max(0, max_nodes - margin)
    end = min(len(ranked), max_nodes + margin)
    for rank in range(start, end):
        term, count = ranked[rank]
        if rank == max_nodes:
            lines.append("  ---- cutoff ----")
        tie = "*" if count == boundary else " "
        lines.append(f"  {rank + 1:4d}. {tie} {term} ({count})")
    if boundary is not None:
        lines.append(f"  * {sum(1 for _, c in ranked if c == boundary)} terms tie at count {boundary}")
    return lines


def strongest_partners(graph: ConceptGraph, top: int = 3) -> dict[int, list[tuple[str, int]]]:
    """For each node, its heaviest neighbours as (label, weight)."""
    partners: dict[int, list[tuple[str, int]]] = defaultdict(list)
    for e in graph.edges:
        partners[e.source].append((graph.nodes[e.target].label, e.weight))
        partners[e.target].append((graph.nodes[e.source].label, e.weight))
    return {
        node.id: sorted(partners[node.id], key=lambda p: (-p[1], p[0]))[:top]
        for node in graph.nodes
    }


def main() -> None:
    parser = argparse.ArgumentParser(description="Inspect the concept graph vocabulary.")
    parser.add_argument(
        "input", type=Path, nargs="?", default=DEFAULT_ROOT,
        help=f"Root directory of markdown posts (default: {DEFAULT_ROOT})",
    )
    parser.add_argument("--max-nodes", type=int, default=MAX_NODES)
    parser.add_argument("--margin", type=int, default=10, help="Ranks shown either side of the cutoff")
    parser.add_argument(
        "--graph", type=Path, default=None,
        help="graph.json to list strongest partners per node instead of re-ranking posts",
    )
    args = parser.parse_args()

    if args.graph:
        try:
            graph = read_graph_json(args.graph)
        except (OSError, ValueError, KeyError, TypeError) as e:
            print(f"Error: could not load {args.graph}: {e}", file=sys.stderr)
            sys.exit(1)
        print(f"=== {len(graph.nodes)} nodes, {len(graph.edges)} edges ===")
        for node_id, partners in strongest_partners(graph).items():
            node = graph.nodes[node_id]
            joined = ", ".join(f"{label} ({w})" for label, w in partners) or "(isolated)"
            print(f"  {node.label} [{node.count}]: {joined}")
        return

    docs = [tokenize(t) for t in load_documents(args.input)]
    freq = count_terms(docs)
    print(f"=== {len(freq):,} distinct terms, cutoff at {args.max_nodes} ===")
    for line in cutoff_report(freq, args.max_nodes, args.margin):
        print(line)


if __name__ == "__main__":
    main()
