#!/usr/bin/env python3
"""
Concept Grapher: reads markdown posts and produces a concept graph of their
most frequent terms: a JSON file of nodes/edges/positions and an SVG image.

Pipeline: posts → term streams → top-N vocabulary → windowed co-occurrence
counts → pruned graph → Fruchterman–Reingold layout → graph.json + graph.svg

Usage:
    python tools/conceptGraph/graph.py
    python tools/conceptGraph/graph.py content/blog -o static/graph
    python tools/conceptGraph/graph.py content/blog -o static/graph --max-nodes 50 --window 8
    python tools/conceptGraph/graph.py content/blog -o static/graph --graphml --plot

Dependencies:
    pip install numpy networkx jinja2 matplotlib
"""

import argparse
import math
import sys
from dataclasses import dataclass, field
from pathlib import Path

from cooccur import EDGES_PER_NODE, MIN_EDGE_WEIGHT, WINDOW, ConceptGraph, accumulate, build_graph
from export import plot_graph, write_graph_json, write_graphml, write_svg
from layout import HEIGHT, ITERATIONS, SEED, WIDTH, layout_graph
from minify import MARKDOWN_EXTENSIONS, gather_files, load_text
from terms import (
    MAX_NODES, MIN_TERM_LENGTH, STOPWORDS,
    count_terms, load_stopwords, select_vocabulary, tokenize, vocabulary_index,
)

DEFAULT_ROOT = Path("content/blog")
DEFAULT_OUTPUT = Path("static/graph")

JSON_NAME = "graph.json"
SVG_NAME = "graph.svg"
GRAPHML_NAME = "graph.graphml"
PNG_NAME = "graph.png"


@dataclass
class PipelineConfig:
    max_nodes: int = MAX_NODES
    min_length: int = MIN_TERM_LENGTH
    window: int = WINDOW
    min_weight: int = MIN_EDGE_WEIGHT
    edges_per_node: int = EDGES_PER_NODE
    width: float = WIDTH
    height: float = HEIGHT
    seed: int = SEED
    iterations: int = ITERATIONS
    stopwords: frozenset[str] = field(default_factory=lambda: STOPWORDS)

    @property
    def max_edges(self) -> int:
        return self.max_nodes * self.edges_per_node


# ---------------------------------------------------------------------------
# 1. Load posts
# ---------------------------------------------------------------------------

def load_documents(root: Path, extensions: set[str] = MARKDOWN_EXTENSIONS) -> list[str]:
    """Plain text of every post under root; unreadable posts become ''."""
    if not root.is_dir():
        print(f"Warning: {root} is not a directory, no posts loaded", file=sys.stderr)
        return []
    files = gather_files(root, extensions)
    print(f"Found {len(files)} posts under {root}", file=sys.stderr)
    return [load_text(p) for p in files]


# ---------------------------------------------------------------------------
# 2. Build graph
# ---------------------------------------------------------------------------

def build_concept_graph(texts: list[str], config: PipelineConfig) -> ConceptGraph:
    """Run every analytic stage and return the laid-out graph."""
    docs = [tokenize(t, config.stopwords, config.min_length) for t in texts]
    print(f"Tokenised {sum(len(d) for d in docs):,} terms", file=sys.stderr)

    freq = count_terms(docs)
    vocab = select_vocabulary(freq, config.max_nodes)
    print(
        f"Vocabulary: {len(vocab)} of {len(freq):,} distinct terms",
        file=sys.stderr,
    )

    index = vocabulary_index(vocab)
    table = accumulate(docs, index, config.window)
    graph = build_graph(vocab, table, config.min_weight, config.max_edges)
    print(
        f"Graph: {len(graph.nodes)} nodes, {len(graph.edges)} edges "
        f"({len(table.pairs):,} co-occurring pairs before pruning)",
        file=sys.stderr,
    )

    done = layout_graph(
        graph, config.width, config.height, config.seed, config.iterations,
    )
    print(f"Layout: {done} iterations", file=sys.stderr)
    return graph


# ---------------------------------------------------------------------------
# 3. Export
# ---------------------------------------------------------------------------

def write_outputs(
    graph: ConceptGraph,
    output_dir: Path,
    config: PipelineConfig,
    graphml: bool = False,
    plot: bool = False,
) -> list[Path]:
    """Write graph.json and graph.svg (plus optional extras), overwriting."""
    output_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []

    svg_path = output_dir / SVG_NAME
    write_svg(graph, svg_path, config.width, config.height)
    written.append(svg_path)

    json_path = output_dir / JSON_NAME
    write_graph_json(graph, json_path)
    written.append(json_path)

    if graphml:
        path = output_dir / GRAPHML_NAME
        write_graphml(graph, path)
        written.append(path)
    if plot:
        path = output_dir / PNG_NAME
        plot_graph(graph, path, config.width, config.height)
        written.append(path)
    return written


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def positive_int(value: str) -> int:
    n = int(value)
    if n < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return n


def positive_float(value: str) -> float:
    x = float(value)
    if not (x > 0 and math.isfinite(x)):
        raise argparse.ArgumentTypeError(f"must be a positive finite number, got {value}")
    return x


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Build a concept co-occurrence graph (JSON + SVG) from markdown posts.",
    )
    parser.add_argument(
        "input", type=Path, nargs="?", default=DEFAULT_ROOT,
        help=f"Root directory of markdown posts (default: {DEFAULT_ROOT})",
    )
    parser.add_argument(
        "-o", "--output", type=Path, default=DEFAULT_OUTPUT,
        help=f"Output directory for graph.json and graph.svg (default: {DEFAULT_OUTPUT})",
    )
    parser.add_argument(
        "--ext", nargs="*", default=None,
        help="Post extensions to read (default: .md .markdown)",
    )
    parser.add_argument(
        "--max-nodes", type=positive_int, default=MAX_NODES,
        help=f"Vocabulary size, i.e. number of graph nodes (default: {MAX_NODES})",
    )
    parser.add_argument(
        "--min-length", type=positive_int, default=MIN_TERM_LENGTH,
        help=f"Shortest word kept as a term (default: {MIN_TERM_LENGTH})",
    )
    parser.add_argument(
        "--window", type=positive_int, default=WINDOW,
        help=f"Co-occurrence window in vocabulary terms (default: {WINDOW})",
    )
    parser.add_argument(
        "--min-weight", type=int, default=MIN_EDGE_WEIGHT,
        help=f"Drop edges seen this many times or fewer (default: {MIN_EDGE_WEIGHT})",
    )
    parser.add_argument(
        "--edges-per-node", type=positive_int, default=EDGES_PER_NODE,
        help=f"Edge cap as a multiple of --max-nodes (default: {EDGES_PER_NODE})",
    )
    parser.add_argument(
        "--width", type=positive_float, default=WIDTH,
        help=f"Canvas width (default: {WIDTH:g})",
    )
    parser.add_argument(
        "--height", type=positive_float, default=HEIGHT,
        help=f"Canvas height (default: {HEIGHT:g})",
    )
    parser.add_argument(
        "--seed", type=int, default=SEED,
        help=f"Layout random seed (default: {SEED})",
    )
    parser.add_argument(
        "--iterations", type=positive_int, default=ITERATIONS,
        help=f"Maximum layout iterations (default: {ITERATIONS})",
    )
    parser.add_argument(
        "--stopwords", type=Path, default=None,
        help="File of extra stopwords, one per line",
    )
    parser.add_argument(
        "--graphml", action="store_true",
        help="Also write graph.graphml for Gephi",
    )
    parser.add_argument(
        "--plot", action="store_true",
        help="Also write a graph.png preview",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    stopwords = STOPWORDS
    if args.stopwords:
        try:
            stopwords = STOPWORDS | load_stopwords(args.stopwords)
        except (OSError, UnicodeDecodeError) as e:
            print(f"Error: could not read stopwords {args.stopwords}: {e}", file=sys.stderr)
            return 1

    config = PipelineConfig(
        max_nodes=args.max_nodes,
        min_length=args.min_length,
        window=args.window,
        min_weight=args.min_weight,
        edges_per_node=args.edges_per_node,
        width=args.width,
        height=args.height,
        seed=args.seed,
        iterations=args.iterations,
        stopwords=stopwords,
    )
    extensions = (
        {e.lower() if e.startswith(".") else f".{e.lower()}" for e in args.ext}
        if args.ext else MARKDOWN_EXTENSIONS
    )

    # 1. Load
    texts = load_documents(args.input, extensions)

    # 2. Build + layout
    graph = build_concept_graph(texts, config)

    # 3. Export
    try:
        written = write_outputs(graph, args.output, config, args.graphml, args.plot)
    except OSError as e:
        print(f"Error: could not write to {args.output}: {e}", file=sys.stderr)
        return 1

    for path in written:
        print(f"Wrote {path}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
