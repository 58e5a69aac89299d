from collections import namedtuple

import numpy as np

from meshfill.logger import LOG


LoopTrace = namedtuple("LoopTrace", ["loops", "discarded"])


def flip(edge):
    return (edge[1], edge[0])


def boundary_edges(faces):
    """
    Get the directed edges used by exactly one face.

    An interior edge is traversed once in each direction by its two faces,
    so the second traversal cancels the first. What survives is the border,
    each edge oriented so its face lies to the left.
    """
    faces = np.asarray(faces, dtype=np.int64).reshape(-1, 3)
    border = set()
    for v0, v1, v2 in faces.tolist():
        for edge in ((v0, v1), (v1, v2), (v2, v0)):
            reverse = flip(edge)
            if reverse in border:
                border.remove(reverse)
            else:
                border.add(edge)
    return border


def is_closed_loop(loop):
    """ Check that every edge ends where the next one (cyclically) starts """
    return len(loop) > 0 and all(
        loop[i][1] == loop[(i + 1) % len(loop)][0] for i in range(len(loop))
    )


def _drop_chain_before(edge, remaining, incoming):
    prev_edge = incoming.get(edge[0])
    while prev_edge is not None and prev_edge in remaining:
        remaining.remove(prev_edge)
        prev_edge = incoming.get(prev_edge[0])


def _trace_loop(remaining, outgoing, incoming):
    """
    Walk one border starting from the smallest remaining edge.

    Edges are removed from remaining as they are collected. Returns an
    empty list if the walk dead-ends before coming back to its start; the
    part of that chain leading into the start edge is removed as well, so
    one open chain is dropped as a whole.
    """
    start = min(remaining)
    remaining.remove(start)
    chain = [start]

    next_edge = outgoing.get(start[1])
    while next_edge != start:
        if next_edge is None or next_edge not in remaining:
            _drop_chain_before(start, remaining, incoming)
            return []
        chain.append(next_edge)
        remaining.remove(next_edge)
        next_edge = outgoing.get(next_edge[1])

    # The walk follows the bordering faces' winding; the patch needs the opposite
    return [flip(edge) for edge in reversed(chain)]


def trace_loops(edges):
    """
    Partition a set of border edges into closed, ordered loops.

    The input is copied into a private working set and never modified.
    Open chains are dropped and counted once each in the returned
    LoopTrace.discarded.
    """
    remaining = set(edges)
    outgoing, incoming = {}, {}
    for edge in remaining:
        outgoing[edge[0]] = edge
        incoming[edge[1]] = edge

    loops = []
    discarded = 0
    while remaining:
        loop = _trace_loop(remaining, outgoing, incoming)
        if loop:
            LOG.debug("Traced border of {} edges".format(len(loop)))
            loops.append(loop)
        else:
            discarded += 1

    if discarded:
        LOG.warning("Discarded {} border chain(s) that do not close".format(discarded))
    return LoopTrace(loops, discarded)
