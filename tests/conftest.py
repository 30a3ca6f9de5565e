"""Shared fixtures: a small markdown corpus on disk and hand-built graphs."""

from pathlib import Path

import pytest

from cooccur import ConceptGraph, Edge, Node

POSTS = {
    "graphs.md": """+++
title = "Graph layout"
tags = ["secretfrontmatter"]
+++
# Graph layout

Force directed graph layout treats every graph node as a charged particle.
Graph layout algorithms move each graph node until the graph layout settles.

```python
secretcode = layout(graph)
```

A graph layout is readable when every graph node has room.
""",
    "nested/terms.md": """---
title: Term extraction
---
Term extraction finds frequent terms. Term extraction feeds the graph layout,
and the graph layout draws each graph node with term extraction labels.
""",
    "nested/deeper/notes.markdown": """Notes on [graph layout](https://example.com/layout) and
`inlinesecret` spans: graph node placement matters for graph layout.
""",
}


@pytest.fixture
def corpus_dir(tmp_path: Path) -> Path:
    """A content tree with three readable posts and a non-markdown file."""
    root = tmp_path / "content"
    for rel, text in POSTS.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    (root / "image.png").write_bytes(b"\x89PNG\r\n\x1a\n")
    return root


@pytest.fixture
def broken_post(corpus_dir: Path) -> Path:
    """A post whose bytes are not valid UTF-8."""
    path = corpus_dir / "broken.md"
    path.write_bytes(b"caf\xe9 graph layout graph node")
    return path


@pytest.fixture
def small_graph() -> ConceptGraph:
    """Three nodes, two edges, already positioned."""
    return ConceptGraph(
        nodes=[
            Node(id=0, label="graph", count=8, x=100.0, y=200.0),
            Node(id=1, label="layout", count=4, x=300.25, y=150.0),
            Node(id=2, label="<script>&", count=1, x=50.0, y=700.0),
        ],
        edges=[
            Edge(source=0, target=1, weight=5),
            Edge(source=1, target=2, weight=2),
        ],
    )
