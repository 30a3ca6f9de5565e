"""
Fruchterman–Reingold layout on a fixed canvas.

Positions are written into the graph's nodes in place. The simulation is
seeded, so an identical graph always produces the same picture.
"""

import math

import numpy as np

from cooccur import ConceptGraph

WIDTH = 1200.0
HEIGHT = 800.0
SEED = 37
ITERATIONS = 400
COOLING = 0.96
MIN_TEMPERATURE = 0.5
MIN_DISTANCE = 0.01


def ideal_edge_length(n_nodes: int, width: float, height: float) -> float:
    """k = sqrt(area / N), never below 1.0."""
    return max(math.sqrt(width * height / n_nodes), 1.0)


def repulsion(pos: np.ndarray, k: float) -> np.ndarray:
    """Displacement from every node pair pushing apart with magnitude k²/d."""
    delta = pos[:, np.newaxis, :] - pos[np.newaxis, :, :]
    dist = np.maximum(np.linalg.norm(delta, axis=2), MIN_DISTANCE)
    # Diagonal terms have delta == 0 and contribute nothing
    scale = (k * k) / (dist * dist)
    return (delta * scale[:, :, np.newaxis]).sum(axis=1)


def attraction(pos: np.ndarray, sources: np.ndarray, targets: np.ndarray, k: float) -> np.ndarray:
    """Displacement pulling edge endpoints together, same k²/d magnitude."""
    disp = np.zeros_like(pos)
    if len(sources) == 0:
        return disp
    delta = pos[sources] - pos[targets]
    dist = np.maximum(np.linalg.norm(delta, axis=1), MIN_DISTANCE)
    force = delta * ((k * k) / (dist * dist))[:, np.newaxis]
    np.subtract.at(disp, sources, force)
    np.add.at(disp, targets, force)
    return disp


def layout_graph(
    graph: ConceptGraph,
    width: float = WIDTH,
    height: float = HEIGHT,
    seed: int = SEED,
    iterations: int = ITERATIONS,
) -> int:
    """Assign x/y to every node and return the number of iterations run."""
    n = len(graph.nodes)
    if n == 0:
        return 0

    k = ideal_edge_length(n, width, height)
    rng = np.random.default_rng(seed)
    pos = rng.random((n, 2)) * np.array([width, height])
    upper = np.array([width, height])

    sources = np.array([e.source for e in graph.edges], dtype=np.intp)
    targets = np.array([e.target for e in graph.edges], dtype=np.intp)

    t = min(width, height) / 10.0
    done = 0
    for _ in range(iterations):
        disp = repulsion(pos, k) + attraction(pos, sources, targets, k)

        # Cap each axis at the current temperature, then keep nodes on canvas
        disp = np.clip(disp, -t, t)
        pos = np.clip(pos + disp, 0.0, upper)

        done += 1
        t *= COOLING
        if t < MIN_TEMPERATURE:
            break

    for node, (x, y) in zip(graph.nodes, pos.tolist()):
        node.x = x
        node.y = y
    return done
